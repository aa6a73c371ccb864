from datetime import date

import pytest

from models.entry import AddEntriesIn
from models.income import IncomeIn
from services import entries_service, income_service, savings_service


async def spend(store, user_id, day, amount, code="FOD-GRO"):
    await entries_service.add_entries(
        store, user_id, AddEntriesIn(date=day, entries=[{"code": code, "amount": amount, "item": "thing"}])
    )


async def earn(store, user_id, month, total):
    await income_service.set_income(store, user_id, IncomeIn(month=month, total=total))


@pytest.mark.asyncio
async def test_monthly_savings_without_data_is_zero(store, user_id):
    result = await savings_service.monthly_savings(store, user_id, "2024-06")
    assert result == {
        "month": "2024-06",
        "income": 0,
        "expenses": 0,
        "savings": 0,
        "savings_rate": 0,
        "verdict": "positive savings",
    }


@pytest.mark.asyncio
async def test_monthly_savings_rate_and_verdict(store, user_id):
    await earn(store, user_id, "2024-06", 3000)
    await spend(store, user_id, "2024-06-01", 1000)
    await spend(store, user_id, "2024-06-20", 250, code="TRN-FUEL")

    result = await savings_service.monthly_savings(store, user_id, "2024-06")

    assert result["expenses"] == 1250
    assert result["savings"] == 1750
    assert result["savings_rate"] == 58.33
    assert result["verdict"] == "positive savings"


@pytest.mark.asyncio
async def test_monthly_overspend_without_income(store, user_id):
    await spend(store, user_id, "2024-07-04", 90)

    result = await savings_service.monthly_savings(store, user_id, "2024-07")

    assert result["savings"] == -90
    assert result["savings_rate"] == 0
    assert result["verdict"] == "overspent"


@pytest.mark.asyncio
async def test_yearly_savings_totals_and_insights(store, user_id):
    await earn(store, user_id, "2023-01", 1000)
    await spend(store, user_id, "2023-01-10", 400)
    await earn(store, user_id, "2023-02", 1000)
    await spend(store, user_id, "2023-02-10", 1300)
    await earn(store, user_id, "2023-05", 2000)
    await spend(store, user_id, "2023-12-31", 100)

    result = await savings_service.yearly_savings(store, user_id, "2023")

    summary = result["summary"]
    breakdown = result["monthly_breakdown"]
    assert [m["month"] for m in breakdown] == [f"2023-{m:02d}" for m in range(1, 13)]
    assert sum(m["savings"] for m in breakdown) == summary["total_savings"]
    assert summary["total_income"] == 4000
    assert summary["total_expenses"] == 1800
    assert summary["total_savings"] == 2200
    assert summary["average_savings_rate"] == 55.0
    assert summary["months_with_data"] == 4
    assert result["averages"] == {"monthly_income": 1000, "monthly_expenses": 450, "monthly_savings": 550}
    assert result["insights"]["best_savings_month"]["month"] == "2023-05"
    assert result["insights"]["worst_savings_month"]["month"] == "2023-02"
    assert result["insights"]["consistent_saver"] is False


@pytest.mark.asyncio
async def test_yearly_ties_resolve_to_earliest_month(store, user_id):
    result = await savings_service.yearly_savings(store, user_id, "2022")

    assert result["summary"]["months_with_data"] == 0
    assert result["averages"] == {"monthly_income": 0, "monthly_expenses": 0, "monthly_savings": 0}
    assert result["insights"]["best_savings_month"]["month"] == "2022-01"
    assert result["insights"]["worst_savings_month"]["month"] == "2022-01"


@pytest.mark.asyncio
async def test_consistent_saver_needs_nine_positive_months(store, user_id):
    for month in range(1, 10):
        await earn(store, user_id, f"2021-{month:02d}", 100)

    result = await savings_service.yearly_savings(store, user_id, "2021")
    assert result["insights"]["consistent_saver"] is True

    await spend(store, user_id, "2021-09-01", 100)
    result = await savings_service.yearly_savings(store, user_id, "2021")
    assert result["insights"]["consistent_saver"] is False


@pytest.mark.asyncio
async def test_year_to_date_truncates_current_year(store, user_id):
    await earn(store, user_id, "2024-01", 1000)
    await earn(store, user_id, "2024-03", 1000)
    await earn(store, user_id, "2024-04", 5000)
    await spend(store, user_id, "2024-02-02", 500)

    result = await savings_service.year_to_date_summary(store, user_id, "2024", today=date(2024, 3, 15))

    assert result == {
        "year": "2024",
        "period": "year-to-date",
        "months_covered": 3,
        "months_with_income": 2,
        "total_income": 2000,
        "total_expenses": 500,
        "total_savings": 1500,
        "savings_rate": 75.0,
        "status": "saving",
    }


@pytest.mark.asyncio
async def test_year_to_date_for_past_year_covers_all_months(store, user_id):
    await spend(store, user_id, "2020-11-11", 300)

    result = await savings_service.year_to_date_summary(store, user_id, "2020", today=date(2024, 3, 15))

    assert result["period"] == "full-year"
    assert result["months_covered"] == 12
    assert result["status"] == "overspending"
    assert result["savings_rate"] == 0
