"""Pydantic models for spending entries"""
from uuid import uuid4
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

from models.periods import Day


class Entry(BaseModel):
    """
    A single recorded expense line, stored under its day in the user's entries document.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(default_factory=lambda: uuid4().hex)
    code: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)
    item: str
    confidence: Optional[float] = Field(default=None, ge=0, le=1)
    name: Optional[str] = None


class AddEntriesIn(BaseModel):
    date: Day
    entries: List[Entry] = Field(..., min_length=1)
