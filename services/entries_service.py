"""Service layer for spending entries stored as month -> day -> entries."""
import logging
import re
from typing import Any, Dict, List, Optional

from models.entry import AddEntriesIn
from models.periods import DATE_PATTERN, MONTH_PATTERN, split_date
from services.errors import InvalidPeriod, NotFound
from services.store import FinanceStore
from services.taxonomy import DEFAULT_TAXONOMY, Taxonomy

logger = logging.getLogger(__name__)


async def month_entries(store: FinanceStore, user_id: str, month: str) -> List[Dict[str, Any]]:
    """All entries of a month flattened across days, each tagged with its full date."""
    doc = await store.entries.find_one(user_id, month)
    month_data = (doc or {}).get(month) or {}
    flattened = []
    for day in sorted(month_data):
        for entry in (month_data[day] or {}).get("entries") or []:
            flattened.append({**entry, "date": f"{month}-{day}"})
    return flattened


async def monthly_expenses(store: FinanceStore, user_id: str, month: str) -> float:
    return sum(entry.get("amount") or 0 for entry in await month_entries(store, user_id, month))


async def get_entries(
    store: FinanceStore,
    user_id: str,
    months: List[str],
    categories: Optional[List[str]] = None,
    taxonomy: Taxonomy = DEFAULT_TAXONOMY,
) -> Dict[str, Any]:
    """
    Returns the entries of the requested months, optionally filtered by category.
    A parent code (e.g. 'FOD') also matches all of its children.
    """
    if not months:
        raise InvalidPeriod("at least one month parameter is required")
    invalid = [m for m in months if not re.match(MONTH_PATTERN, m)]
    if invalid:
        raise InvalidPeriod("month parameters must be in YYYY-MM format")

    wanted = None
    if categories:
        wanted = {code for category in categories for code in taxonomy.family(category)}

    logger.info(f"Fetching entries for user {user_id}, months {months}, categories {categories or 'all'}")
    result = []
    for month in months:
        for entry in await month_entries(store, user_id, month):
            if wanted is None or entry.get("code") in wanted:
                result.append(entry)
    return {"entries": result, "total": sum(e.get("amount") or 0 for e in result)}


async def add_entries(store: FinanceStore, user_id: str, payload: AddEntriesIn) -> Dict[str, Any]:
    month, day = split_date(payload.date)
    documents = [entry.model_dump(exclude_none=True) for entry in payload.entries]
    result = await store.entries.push(user_id, f"{month}.{day}.entries", documents)
    if not result.acknowledged:
        raise ConnectionError("failed to add user entries")
    logger.info(f"Added {len(documents)} entries for user {user_id} on {payload.date}")
    return {"message": "entries added", "date": payload.date, "ids": [d["id"] for d in documents]}


async def delete_entries(store: FinanceStore, user_id: str, period: str) -> Dict[str, Any]:
    """Deletes every entry of a day (YYYY-MM-DD) or of a whole month (YYYY-MM)."""
    if re.match(DATE_PATTERN, period):
        month, day = split_date(period)
        path = f"{month}.{day}"
    elif re.match(MONTH_PATTERN, period):
        path = period
    else:
        raise InvalidPeriod("date must be in YYYY-MM-DD or YYYY-MM format")

    result = await store.entries.unset(user_id, path, require=path)
    if result.matched_count == 0:
        raise NotFound(f"No entries found for {period}")
    logger.warning(f"Deleted all entries of {period} for user {user_id}")
    return {"message": "entries deleted", "date": period}


async def delete_entry(store: FinanceStore, user_id: str, date: str, entry_id: str) -> Dict[str, Any]:
    month, day = split_date(date)
    result = await store.entries.pull(user_id, f"{month}.{day}.entries", {"id": entry_id})
    if result.modified_count == 0:
        raise NotFound(f"No entry '{entry_id}' found on {date}")
    logger.info(f"Deleted entry {entry_id} on {date} for user {user_id}")
    return {"message": "entry deleted", "date": date, "id": entry_id}
