"""Pydantic models for the chat surface and the parameters of each chat intent"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Optional, Annotated

from models.periods import Day, Month, Year, PERIOD_PATTERN
from models.income import IncomeUpdate
from models.budget import ReassignIn

UNKNOWN_INTENT = "unknown"


class ChatIn(BaseModel):
    message: str = Field(..., min_length=1)


class Intent(BaseModel):
    intent: str
    parameters: Dict[str, Any] = Field(default_factory=dict)


class IntentList(BaseModel):
    intents: List[Intent] = Field(default_factory=list)


# --- Per-intent parameter schemas ---

class MonthParams(BaseModel):
    month: Month


class YearParams(BaseModel):
    year: Year

    @field_validator("year", mode="before")
    @classmethod
    def year_as_text(cls, value: Any) -> Any:
        # LLMs regularly emit the year as a bare number
        return str(value) if isinstance(value, int) else value


class SpendingParams(BaseModel):
    month: Month
    category: Optional[str] = None


class UpdateIncomeParams(IncomeUpdate):
    month: Month


class ReassignParams(ReassignIn):
    month: Month


class DeleteEntriesParams(BaseModel):
    date: Annotated[str, Field(pattern=PERIOD_PATTERN)]


class DeleteEntryParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: Day
    entry_id: str = Field(..., min_length=1, alias="entryId")
