"""Savings engine: income minus expenses per month, per year and year-to-date.

Everything here is a derived read. Missing income or entries count as zero,
so none of these functions fail for a month without data.
"""
import asyncio
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from models.periods import months_of_year
from services.entries_service import monthly_expenses
from services.income_service import monthly_income_total
from services.store import FinanceStore

logger = logging.getLogger(__name__)

CONSISTENT_SAVER_MONTHS = 9


def savings_rate(income: float, savings: float) -> float:
    return round(savings / income * 100, 2) if income > 0 else 0


async def monthly_savings(store: FinanceStore, user_id: str, month: str) -> Dict[str, Any]:
    income, expenses = await asyncio.gather(
        monthly_income_total(store, user_id, month),
        monthly_expenses(store, user_id, month),
    )
    savings = income - expenses
    return {
        "month": month,
        "income": income,
        "expenses": expenses,
        "savings": savings,
        "savings_rate": savings_rate(income, savings),
        "verdict": "positive savings" if savings >= 0 else "overspent",
    }


async def _months(store: FinanceStore, user_id: str, months: List[str]) -> List[Dict[str, Any]]:
    # gather keeps calendar order regardless of completion order
    return list(await asyncio.gather(*(monthly_savings(store, user_id, m) for m in months)))


async def yearly_savings(store: FinanceStore, user_id: str, year: str) -> Dict[str, Any]:
    breakdown = await _months(store, user_id, months_of_year(year))

    total_income = sum(m["income"] for m in breakdown)
    total_expenses = sum(m["expenses"] for m in breakdown)
    total_savings = sum(m["savings"] for m in breakdown)

    active = [m for m in breakdown if m["income"] > 0 or m["expenses"] > 0]
    avg_income = total_income / len(active) if active else 0
    avg_expenses = total_expenses / len(active) if active else 0

    logger.info(f"Yearly savings {year} for user {user_id}: {len(active)} active months, savings={total_savings}")
    return {
        "year": year,
        "summary": {
            "total_income": total_income,
            "total_expenses": total_expenses,
            "total_savings": total_savings,
            "average_savings_rate": savings_rate(total_income, total_savings),
            "months_with_data": len(active),
        },
        "averages": {
            "monthly_income": round(avg_income),
            "monthly_expenses": round(avg_expenses),
            "monthly_savings": round(avg_income - avg_expenses),
        },
        "monthly_breakdown": breakdown,
        "insights": {
            # max/min return the first of equal candidates, i.e. the earliest month
            "best_savings_month": max(breakdown, key=lambda m: m["savings"]),
            "worst_savings_month": min(breakdown, key=lambda m: m["savings"]),
            "consistent_saver": sum(1 for m in breakdown if m["savings"] > 0) >= CONSISTENT_SAVER_MONTHS,
        },
    }


async def year_to_date_summary(store: FinanceStore, user_id: str, year: str, today: Optional[date] = None) -> Dict[str, Any]:
    """Full-year totals, truncated at the current month when ``year`` is the current year."""
    today = today or date.today()
    current_year = year == str(today.year)
    months_covered = today.month if current_year else 12

    breakdown = await _months(store, user_id, months_of_year(year, through=months_covered))
    total_income = sum(m["income"] for m in breakdown)
    total_expenses = sum(m["expenses"] for m in breakdown)
    total_savings = total_income - total_expenses

    return {
        "year": year,
        "period": "year-to-date" if current_year else "full-year",
        "months_covered": months_covered,
        "months_with_income": sum(1 for m in breakdown if m["income"] > 0),
        "total_income": total_income,
        "total_expenses": total_expenses,
        "total_savings": total_savings,
        "savings_rate": savings_rate(total_income, total_savings),
        "status": "saving" if total_savings >= 0 else "overspending",
    }
