"""Pydantic models for monthly budgets and category reassignments"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, Annotated

from models.periods import Month

NonNegative = Annotated[float, Field(ge=0)]


class BudgetIn(BaseModel):
    month: Month
    total: NonNegative
    categories: Dict[str, NonNegative] = Field(default_factory=dict)


class ReassignIn(BaseModel):
    """Moves a declared amount of one entry from one category to another."""
    model_config = ConfigDict(populate_by_name=True)

    entry_id: str = Field(..., min_length=1, alias="entryId")
    from_category: str = Field(..., min_length=1, alias="fromCategory")
    to_category: str = Field(..., min_length=1, alias="toCategory")
    amount: NonNegative
