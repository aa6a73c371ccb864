from datetime import date

import pytest

from models.budget import BudgetIn
from models.income import IncomeIn
from services import budget_service, entries_service, income_service
from services.chat_service import CLARIFICATION_REPLY, ChatOrchestrator

from conftest import FakeAssistant


def orchestrator(store, intents):
    assistant = FakeAssistant(intents)
    return ChatOrchestrator(store, assistant, today=date(2024, 3, 15)), assistant


@pytest.mark.asyncio
@pytest.mark.parametrize("intents", [[], [{"intent": "unknown", "parameters": {}}]])
async def test_no_usable_intent_is_rejected_without_dispatch(store, user_id, intents):
    chat, assistant = orchestrator(store, intents)

    result = await chat.handle("what is the weather?", user_id)

    assert result.status_code == 400
    assert result.body["reply"] == CLARIFICATION_REPLY
    assert assistant.single_calls == []
    assert assistant.multi_calls == []


@pytest.mark.asyncio
async def test_single_intent_returns_raw_data(store, user_id):
    await budget_service.set_budget(store, user_id, BudgetIn(month="2024-03", total=500, categories={"FOD": 200}))
    chat, assistant = orchestrator(store, [{"intent": "getBudget", "parameters": {"month": "2024-03"}}])

    result = await chat.handle("what's my budget?", user_id)

    assert result.status_code == 200
    assert result.body["reply"] == "single reply"
    assert result.body["data"] == {"month": "2024-03", "budget": {"total": 500, "categories": {"FOD": 200}}}
    assert assistant.single_calls == [("what's my budget?", result.body["data"])]


@pytest.mark.asyncio
async def test_partial_failure_is_isolated(store, user_id):
    await income_service.set_income(store, user_id, IncomeIn(month="2024-02", total=4000))
    chat, assistant = orchestrator(store, [
        {"intent": "getRemainingBudget", "parameters": {"month": "2024-01"}},
        {"intent": "getIncome", "parameters": {"month": "2024-02"}},
    ])

    result = await chat.handle("remaining budget in january and income in february?", user_id)

    assert result.status_code == 200
    assert result.body["reply"] == "multi reply"
    first, second = result.body["data"]["result1"], result.body["data"]["result2"]
    assert first["intent"] == "getRemainingBudget"
    assert first["success"] is False
    assert first["data"]["error"] is True
    assert "2024-01" in first["data"]["message"]
    assert second["intent"] == "getIncome"
    assert second["success"] is True
    assert second["data"]["income"]["total"] == 4000
    assert [r["success"] for r in assistant.multi_calls[0][1]] == [False, True]


@pytest.mark.asyncio
async def test_writes_are_not_rolled_back_when_a_sibling_fails(store, user_id):
    chat, _ = orchestrator(store, [
        {"intent": "addEntries", "parameters": {
            "date": "2024-03-02", "entries": [{"code": "FOD-GRO", "amount": 40, "item": "Bread"}],
        }},
        {"intent": "setIncome", "parameters": {"month": "2024-03", "total": 100, "sources": {"salary": 500}}},
    ])

    result = await chat.handle("add bread and set my income", user_id)

    assert result.body["data"]["result1"]["success"] is True
    assert result.body["data"]["result2"]["success"] is False
    spending = await entries_service.month_entries(store, user_id, "2024-03")
    assert [e["item"] for e in spending] == ["Bread"]


@pytest.mark.asyncio
async def test_unsupported_intent_fails_locally(store, user_id):
    chat, _ = orchestrator(store, [
        {"intent": "buyStocks", "parameters": {}},
        {"intent": "getSavings", "parameters": {"month": "2024-03"}},
    ])

    result = await chat.handle("buy stocks and show savings", user_id)

    assert result.status_code == 200
    assert result.body["data"]["result1"]["success"] is False
    assert "Unsupported intent" in result.body["data"]["result1"]["data"]["message"]
    assert result.body["data"]["result2"]["data"]["savings"] == 0


@pytest.mark.asyncio
async def test_single_unsupported_intent_still_gets_a_reply(store, user_id):
    chat, assistant = orchestrator(store, [{"intent": "buyStocks", "parameters": {}}])

    result = await chat.handle("buy stocks", user_id)

    assert result.status_code == 200
    assert result.body["data"]["error"] is True
    assert len(assistant.single_calls) == 1


@pytest.mark.asyncio
async def test_invalid_parameters_fail_only_that_intent(store, user_id):
    chat, _ = orchestrator(store, [
        {"intent": "getBudget", "parameters": {"month": "March"}},
        {"intent": "getYearlySavings", "parameters": {"year": 2024}},
        {"intent": "getSavingsSummary", "parameters": {"year": "2024"}},
    ])

    result = await chat.handle("a few questions", user_id)

    data = result.body["data"]
    assert [data[f"result{i}"]["success"] for i in (1, 2, 3)] == [False, True, True]
    assert data["result2"]["data"]["year"] == "2024"
    assert data["result3"]["data"]["months_covered"] == 3


@pytest.mark.asyncio
async def test_write_intents_reach_the_store(store, user_id):
    chat, _ = orchestrator(store, [
        {"intent": "createBudget", "parameters": {"month": "2024-03", "total": 900, "categories": {"HOU-RENT": 600}}},
        {"intent": "setIncome", "parameters": {"month": "2024-03", "total": 2000, "sources": {"salary": 1500}}},
        {"intent": "reassignBudget", "parameters": {
            "month": "2024-03", "entryId": "e1", "fromCategory": "MIS", "toCategory": "FOD", "amount": 10,
        }},
    ])

    result = await chat.handle("set things up", user_id)

    assert all(r["success"] for r in result.body["data"].values())
    income = (await income_service.get_income(store, user_id, "2024-03"))["income"]
    assert income["sources"] == {"salary": 1500, "miscellaneous": 500}
    budget = (await budget_service.get_budget(store, user_id, "2024-03"))["budget"]
    assert budget["categories"] == {"HOU-RENT": 600}


@pytest.mark.asyncio
async def test_dispatch_stage_failure_still_replies(store, user_id):
    chat, assistant = orchestrator(store, [
        {"intent": "getBudget", "parameters": {"month": "2024-03"}},
        {"intent": "getIncome", "parameters": {"month": "2024-03"}},
    ])

    async def broken_dispatch(user_id, intents):
        raise RuntimeError("store handle lost")

    chat.dispatch = broken_dispatch
    result = await chat.handle("budget and income", user_id)

    assert result.status_code == 400
    assert result.body["reply"] == "single reply"
    assert result.body["error"] == "store handle lost"
    assert assistant.single_calls[0][1] == {"error": True, "message": "store handle lost"}
