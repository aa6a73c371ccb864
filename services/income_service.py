"""Service layer for monthly income envelopes."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from models.income import IncomeIn, IncomeUpdate
from services.amounts import decimal_sum, to_decimal
from services.errors import NotFound, SourcesExceedTotal
from services.store import FinanceStore

logger = logging.getLogger(__name__)

MISCELLANEOUS_SOURCE = "miscellaneous"
DEFAULT_SOURCE = "main"


def settle_sources(total: float, sources: Dict[str, float], label: str = "sources",
                   count_remainder: bool = True) -> Dict[str, float]:
    """
    Returns sources that add up exactly to ``total``.

    ``miscellaneous`` is the reserved remainder: it is recomputed as the
    shortfall of the other sources and dropped when there is none. A stored
    remainder is not counted against a new total (``count_remainder=False``).
    """
    declared = {name: amount for name, amount in sources.items() if name != MISCELLANEOUS_SOURCE}
    declared_total = decimal_sum(declared.values())
    checked_total = decimal_sum(sources.values()) if count_remainder else declared_total
    if checked_total > to_decimal(total):
        raise SourcesExceedTotal(f"{label} total ({checked_total}) cannot exceed declared total ({total})")
    if declared_total < to_decimal(total):
        declared[MISCELLANEOUS_SOURCE] = float(to_decimal(total) - declared_total)
    return declared


async def get_all_income(store: FinanceStore, user_id: str) -> Dict[str, Any]:
    doc = await store.income.find_one(user_id, "income")
    return {"income": (doc or {}).get("income") or {}}


async def _month_income(store: FinanceStore, user_id: str, month: str) -> Optional[Dict[str, Any]]:
    doc = await store.income.find_one(user_id, f"income.{month}")
    return ((doc or {}).get("income") or {}).get(month)


async def get_income(store: FinanceStore, user_id: str, month: str) -> Dict[str, Any]:
    return {"month": month, "income": await _month_income(store, user_id, month)}


async def monthly_income_total(store: FinanceStore, user_id: str, month: str) -> float:
    income = await _month_income(store, user_id, month)
    return (income or {}).get("total") or 0


async def set_income(store: FinanceStore, user_id: str, payload: IncomeIn) -> Dict[str, Any]:
    if payload.sources is None:
        sources = {DEFAULT_SOURCE: payload.total}
    else:
        sources = settle_sources(payload.total, payload.sources)

    income = {"total": payload.total, "sources": sources, "updated_at": datetime.now(timezone.utc)}
    await store.income.set(user_id, {f"income.{payload.month}": income})
    logger.info(f"Income for {payload.month} set for user {user_id}: total={payload.total}")
    return {"message": "income for month set/updated", "month": payload.month, "income": income}


async def update_income(store: FinanceStore, user_id: str, month: str, payload: IncomeUpdate) -> Dict[str, Any]:
    """
    Updates total and/or sources of an existing month, re-deriving the
    miscellaneous remainder against whichever total is now in effect.
    """
    existing = await _month_income(store, user_id, month)
    if not existing:
        raise NotFound(f"No income record found for {month}")

    total = payload.total if payload.total is not None else existing.get("total") or 0
    if payload.sources is not None:
        sources = settle_sources(total, payload.sources)
    else:
        try:
            sources = settle_sources(total, existing.get("sources") or {}, label="existing sources",
                                     count_remainder=False)
        except SourcesExceedTotal as e:
            raise SourcesExceedTotal(f"{e}. Please update sources as well.")

    updated_at = datetime.now(timezone.utc)
    fields: Dict[str, Any] = {f"income.{month}.sources": sources, f"income.{month}.updated_at": updated_at}
    if payload.total is not None:
        fields[f"income.{month}.total"] = total
    result = await store.income.set(user_id, fields, upsert=False, require=f"income.{month}")
    if result.matched_count == 0:
        # deleted between the read and the write
        raise NotFound(f"No income record found for {month}")
    logger.info(f"Income for {month} updated for user {user_id}: total={total}")
    return {
        "message": "income for month updated successfully",
        "month": month,
        "income": {"total": total, "sources": sources, "updated_at": updated_at},
    }


async def delete_income(store: FinanceStore, user_id: str, month: str) -> Dict[str, Any]:
    path = f"income.{month}"
    result = await store.income.unset(user_id, path, require=path)
    if result.matched_count == 0:
        raise NotFound(f"No income record found for {month}")
    logger.info(f"Income for {month} deleted for user {user_id}")
    return {"message": "income record deleted successfully", "month": month}
