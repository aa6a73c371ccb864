"""Conversational front-end: one question -> N intents -> concurrent operations -> one reply.

Request lifecycle:
    RECEIVED -> INTENTS_EXTRACTED -> REJECTED_NO_INTENT (400, clarification)
                                  -> DISPATCHING -> AGGREGATED -> REPLIED (200, or 400 when
                                     the whole dispatch stage failed; a reply is always produced)

Intents run concurrently and independently. A failing intent is reported
next to the successful ones; effects of successful intents are not rolled back.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Awaitable, Callable, Dict, List, Optional

from models.budget import BudgetIn
from models.chat import (
    UNKNOWN_INTENT,
    DeleteEntriesParams,
    DeleteEntryParams,
    MonthParams,
    ReassignParams,
    SpendingParams,
    UpdateIncomeParams,
    YearParams,
)
from models.entry import AddEntriesIn
from models.income import IncomeIn
from services import budget_service, entries_service, income_service, savings_service
from services.errors import UnsupportedIntent
from services.store import FinanceStore
from services.taxonomy import DEFAULT_TAXONOMY, Taxonomy

logger = logging.getLogger(__name__)

CLARIFICATION_REPLY = (
    "I don't understand that question. You can ask me about your own financial data, such as "
    "'What did I spend on groceries last month?', 'How much is my budget for this month?', "
    "or 'Show me my savings for this year.'"
)
FALLBACK_ERROR_REPLY = "I couldn't find that information. Can you try again?"

Handler = Callable[[str, Dict[str, Any]], Awaitable[Any]]


@dataclass
class ChatResult:
    status_code: int
    body: Dict[str, Any]


class ChatOrchestrator:
    def __init__(
        self,
        store: FinanceStore,
        assistant,
        taxonomy: Taxonomy = DEFAULT_TAXONOMY,
        strict_allocation: bool = False,
        today: Optional[date] = None,
    ):
        self.store = store
        self.assistant = assistant
        self.taxonomy = taxonomy
        self.strict_allocation = strict_allocation
        self.today = today
        self.handlers: Dict[str, Handler] = {
            "getSpending": self._get_spending,
            "getBudget": self._get_budget,
            "getRemainingBudget": self._get_remaining_budget,
            "getSavings": self._get_savings,
            "getYearlySavings": self._get_yearly_savings,
            "getSavingsSummary": self._get_savings_summary,
            "getIncome": self._get_income,
            "getAllIncome": self._get_all_income,
            "getAllBudgets": self._get_all_budgets,
            "addEntries": self._add_entries,
            "createBudget": self._create_budget,
            "setIncome": self._set_income,
            "updateIncome": self._update_income,
            "deleteIncome": self._delete_income,
            "reassignBudget": self._reassign_budget,
            "deleteBudget": self._delete_budget,
            "deleteEntries": self._delete_entries,
            "deleteEntry": self._delete_entry,
        }

    async def handle(self, message: str, user_id: str) -> ChatResult:
        logger.info(f"Chat request received: {message[:80]!r}")
        intents = await self.assistant.resolve_intents(message, self.today)
        logger.info(f"Extracted {len(intents)} intent(s)")

        if not intents or (len(intents) == 1 and intents[0].get("intent") == UNKNOWN_INTENT):
            return ChatResult(400, {
                "error": "No valid intent could be determined from your question",
                "reply": CLARIFICATION_REPLY,
            })

        try:
            results = await self.dispatch(user_id, intents)
            if len(results) == 1:
                data = results[0]["data"]
                reply = await self.assistant.phrase_single(message, data)
            else:
                reply = await self.assistant.phrase_multi(message, results)
                data = {
                    f"result{index}": {"intent": r["intent"]["intent"], "data": r["data"], "success": r["success"]}
                    for index, r in enumerate(results, start=1)
                }
        except Exception as e:
            logger.exception(f"Chat dispatch failed: {e}")
            reply = await self.assistant.phrase_single(message, {"error": True, "message": str(e)})
            return ChatResult(400, {
                "reply": reply or FALLBACK_ERROR_REPLY,
                "error": str(e),
                "intents": intents,
            })

        return ChatResult(200, {"reply": reply, "intents": intents, "data": data})

    async def dispatch(self, user_id: str, intents: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Runs every intent concurrently; results keep the order of ``intents``."""
        return list(await asyncio.gather(*(self._run_intent(user_id, intent) for intent in intents)))

    async def _run_intent(self, user_id: str, intent: Dict[str, Any]) -> Dict[str, Any]:
        name = intent.get("intent")
        try:
            handler = self.handlers.get(name)
            if handler is None:
                raise UnsupportedIntent(f"Unsupported intent: {name}")
            data = await handler(user_id, intent.get("parameters") or {})
        except Exception as e:
            logger.warning(f"Intent '{name}' failed: {e}")
            return {"intent": intent, "data": {"error": True, "message": str(e)}, "success": False}
        return {"intent": intent, "data": data, "success": True}

    # --- Reads ---

    async def _get_spending(self, user_id: str, params: Dict[str, Any]):
        p = SpendingParams.model_validate(params)
        categories = [p.category] if p.category else None
        return await entries_service.get_entries(self.store, user_id, [p.month], categories, self.taxonomy)

    async def _get_budget(self, user_id: str, params: Dict[str, Any]):
        return await budget_service.get_budget(self.store, user_id, MonthParams.model_validate(params).month)

    async def _get_remaining_budget(self, user_id: str, params: Dict[str, Any]):
        month = MonthParams.model_validate(params).month
        return await budget_service.remaining_budget(self.store, user_id, month, self.taxonomy)

    async def _get_savings(self, user_id: str, params: Dict[str, Any]):
        return await savings_service.monthly_savings(self.store, user_id, MonthParams.model_validate(params).month)

    async def _get_yearly_savings(self, user_id: str, params: Dict[str, Any]):
        return await savings_service.yearly_savings(self.store, user_id, YearParams.model_validate(params).year)

    async def _get_savings_summary(self, user_id: str, params: Dict[str, Any]):
        year = YearParams.model_validate(params).year
        return await savings_service.year_to_date_summary(self.store, user_id, year, self.today)

    async def _get_income(self, user_id: str, params: Dict[str, Any]):
        return await income_service.get_income(self.store, user_id, MonthParams.model_validate(params).month)

    async def _get_all_income(self, user_id: str, params: Dict[str, Any]):
        return await income_service.get_all_income(self.store, user_id)

    async def _get_all_budgets(self, user_id: str, params: Dict[str, Any]):
        return await budget_service.get_all_budgets(self.store, user_id)

    # --- Writes ---

    async def _add_entries(self, user_id: str, params: Dict[str, Any]):
        return await entries_service.add_entries(self.store, user_id, AddEntriesIn.model_validate(params))

    async def _create_budget(self, user_id: str, params: Dict[str, Any]):
        payload = BudgetIn.model_validate(params)
        return await budget_service.set_budget(self.store, user_id, payload, strict=self.strict_allocation)

    async def _set_income(self, user_id: str, params: Dict[str, Any]):
        return await income_service.set_income(self.store, user_id, IncomeIn.model_validate(params))

    async def _update_income(self, user_id: str, params: Dict[str, Any]):
        p = UpdateIncomeParams.model_validate(params)
        return await income_service.update_income(self.store, user_id, p.month, p)

    async def _delete_income(self, user_id: str, params: Dict[str, Any]):
        return await income_service.delete_income(self.store, user_id, MonthParams.model_validate(params).month)

    async def _reassign_budget(self, user_id: str, params: Dict[str, Any]):
        p = ReassignParams.model_validate(params)
        return await budget_service.reassign_budget(self.store, user_id, p.month, p)

    async def _delete_budget(self, user_id: str, params: Dict[str, Any]):
        return await budget_service.delete_budget(self.store, user_id, MonthParams.model_validate(params).month)

    async def _delete_entries(self, user_id: str, params: Dict[str, Any]):
        p = DeleteEntriesParams.model_validate(params)
        return await entries_service.delete_entries(self.store, user_id, p.date)

    async def _delete_entry(self, user_id: str, params: Dict[str, Any]):
        p = DeleteEntryParams.model_validate(params)
        return await entries_service.delete_entry(self.store, user_id, p.date, p.entry_id)
