"""Service layer for monthly envelope budgets and their reconciliation against entries."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from models.budget import BudgetIn, ReassignIn
from services.amounts import decimal_sum, to_decimal
from services.entries_service import month_entries
from services.errors import NotFound, OverAllocated
from services.store import FinanceStore
from services.taxonomy import DEFAULT_TAXONOMY, MISCELLANEOUS, Taxonomy

logger = logging.getLogger(__name__)


def reconcile(budget: Dict[str, Any], entries: List[Dict[str, Any]], taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> Dict[str, Any]:
    """
    Computes spent-vs-allocated per budget category.

    An entry counts against its own code when the budget declares it, else
    against its parent code when the budget declares that, else against the
    miscellaneous envelope (total minus all allocations). An explicit MIS
    allocation is part of that envelope, not a category of its own.
    Negative remainders mean overspend and are reported as-is.
    """
    allocations: Dict[str, float] = {
        code: allocated for code, allocated in (budget.get("categories") or {}).items()
        if code != MISCELLANEOUS
    }
    total = budget.get("total") or 0

    spent: Dict[str, float] = {}
    miscellaneous_spent = 0
    for entry in entries:
        code = entry.get("code")
        amount = entry.get("amount") or 0
        parent = taxonomy.parent(code)
        if code in allocations:
            spent[code] = spent.get(code, 0) + amount
        elif parent is not None and parent in allocations:
            spent[parent] = spent.get(parent, 0) + amount
        else:
            miscellaneous_spent += amount

    miscellaneous_budget = total - sum(allocations.values())
    remaining = {code: allocated - spent.get(code, 0) for code, allocated in allocations.items()}
    remaining[MISCELLANEOUS] = miscellaneous_budget - miscellaneous_spent

    total_spent = sum(spent.values()) + miscellaneous_spent
    return {
        "original_budget": budget,
        "total_spent": total_spent,
        "total_remaining": total - total_spent,
        "remaining_budgets": remaining,
        "expenses_by_category": {**spent, MISCELLANEOUS: miscellaneous_spent},
    }


async def get_all_budgets(store: FinanceStore, user_id: str) -> Dict[str, Any]:
    doc = await store.budgets.find_one(user_id, "budgets")
    return {"budgets": (doc or {}).get("budgets") or {}}


async def get_budget(store: FinanceStore, user_id: str, month: str) -> Dict[str, Any]:
    doc = await store.budgets.find_one(user_id, f"budgets.{month}")
    return {"month": month, "budget": ((doc or {}).get("budgets") or {}).get(month)}


async def set_budget(store: FinanceStore, user_id: str, payload: BudgetIn, strict: bool = False) -> Dict[str, Any]:
    """Creates or wholesale replaces the budget of a month."""
    allocated = decimal_sum(payload.categories.values())
    if allocated > to_decimal(payload.total):
        if strict:
            raise OverAllocated(f"categories total ({allocated}) cannot exceed budget total ({payload.total})")
        logger.warning(
            f"Budget {payload.month} for user {user_id} allocates {allocated} of {payload.total}; "
            "miscellaneous envelope will be negative."
        )
    budget = {"total": payload.total, "categories": payload.categories}
    await store.budgets.set(user_id, {f"budgets.{payload.month}": budget})
    logger.info(f"Budget for {payload.month} set for user {user_id}")
    return {"message": "budget for month set/updated", "month": payload.month, "budget": budget}


async def delete_budget(store: FinanceStore, user_id: str, month: str) -> Dict[str, Any]:
    path = f"budgets.{month}"
    result = await store.budgets.unset(user_id, path, require=path)
    if result.matched_count == 0:
        raise NotFound(f"No budget set for {month}")
    logger.info(f"Budget for {month} deleted for user {user_id}")
    return {"message": "budget deleted successfully", "month": month}


async def remaining_budget(store: FinanceStore, user_id: str, month: str, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> Dict[str, Any]:
    budget = (await get_budget(store, user_id, month))["budget"]
    if not budget:
        raise NotFound(f"No budget set for {month}")
    entries = await month_entries(store, user_id, month)
    logger.info(f"Reconciling {len(entries)} entries against budget {month} for user {user_id}")
    return {"month": month, **reconcile(budget, entries, taxonomy)}


async def reassign_budget(store: FinanceStore, user_id: str, month: str, payload: ReassignIn) -> Dict[str, Any]:
    """Records a category move for one entry; repeating it for the same entry overwrites the record."""
    record = {
        "user_id": user_id,
        "month": month,
        "entry_id": payload.entry_id,
        "from_category": payload.from_category,
        "to_category": payload.to_category,
        "amount": payload.amount,
        "reassigned_at": datetime.now(timezone.utc),
    }
    await store.reassignments.set(user_id, record, month=month, entry_id=payload.entry_id)
    logger.info(
        f"Entry {payload.entry_id} reassigned {payload.from_category} -> {payload.to_category} in {month} for user {user_id}"
    )
    return {"message": "expense reassigned successfully", "month": month, "entry_id": payload.entry_id}
