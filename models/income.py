"""Pydantic models for monthly income"""
from pydantic import BaseModel, Field, model_validator
from typing import Dict, Optional, Annotated

from models.periods import Month

NonNegative = Annotated[float, Field(ge=0)]


class IncomeIn(BaseModel):
    month: Month
    total: NonNegative
    sources: Optional[Dict[str, NonNegative]] = None


class IncomeUpdate(BaseModel):
    total: Optional[NonNegative] = None
    sources: Optional[Dict[str, NonNegative]] = None

    @model_validator(mode="after")
    def require_a_field(self) -> "IncomeUpdate":
        if self.total is None and self.sources is None:
            raise ValueError("either total or sources must be provided for update")
        return self
