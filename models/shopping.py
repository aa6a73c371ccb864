"""Pydantic model for shopping price lookups"""
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class ShoppingQuery(BaseModel):
    query: str = Field(..., min_length=1, max_length=200)
    country: Optional[str] = Field(None, pattern=r"^[a-z]{2}$", description="2-letter country code, defaults to 'in'.")

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("query is required")
        return value
