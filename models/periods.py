"""Strict period formats shared by request models and path parameters"""
import re
from typing import Annotated
from pydantic import StringConstraints

from services.errors import InvalidPeriod

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"
DATE_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])$"
YEAR_PATTERN = r"^\d{4}$"
PERIOD_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])(-(0[1-9]|[12]\d|3[01]))?$"

Month = Annotated[str, StringConstraints(pattern=MONTH_PATTERN)]
Day = Annotated[str, StringConstraints(pattern=DATE_PATTERN)]
Year = Annotated[str, StringConstraints(pattern=YEAR_PATTERN)]


def split_date(value: str) -> tuple[str, str]:
    """'2024-05-03' -> ('2024-05', '03')"""
    if not re.match(DATE_PATTERN, value):
        raise InvalidPeriod(f"date must be in YYYY-MM-DD format, got '{value}'")
    return value[:7], value[8:]


def months_of_year(year: str, through: int = 12) -> list[str]:
    return [f"{year}-{m:02d}" for m in range(1, through + 1)]
