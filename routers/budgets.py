"""API routes for monthly envelope budgets"""
import logging
from typing import Annotated
from fastapi import APIRouter, HTTPException, Path

from dependencies import SettingsDep, StoreDep, UserIdDep
from models.budget import BudgetIn, ReassignIn
from models.periods import MONTH_PATTERN
from services import budget_service
from services.errors import NotFound

router = APIRouter()
logger = logging.getLogger(__name__)

MonthPath = Annotated[str, Path(pattern=MONTH_PATTERN, description="Month in YYYY-MM format.")]


@router.get("", summary="Get All Budgets")
async def get_all_budgets(store: StoreDep, user_id: UserIdDep):
    try:
        return await budget_service.get_all_budgets(store, user_id)
    except ConnectionError as ce:
        raise HTTPException(status_code=503, detail=str(ce))
    except Exception as e:
        logger.exception(f"Failed to retrieve budgets: {e}")
        raise HTTPException(status_code=500, detail="failed to retrieve budgets")


@router.post("", status_code=201, summary="Set Budget", description="Creates or replaces the budget of a month.")
async def set_budget(store: StoreDep, user_id: UserIdDep, settings: SettingsDep, payload: BudgetIn):
    try:
        return await budget_service.set_budget(store, user_id, payload, strict=settings.budget_strict_allocation)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    except ConnectionError as ce:
        raise HTTPException(status_code=503, detail=str(ce))
    except Exception as e:
        logger.exception(f"Unexpected error setting budget: {e}")
        raise HTTPException(status_code=500, detail="failed to set/update budgets")


@router.get("/{month}", summary="Get Monthly Budget")
async def get_budget(store: StoreDep, user_id: UserIdDep, month: MonthPath):
    try:
        return await budget_service.get_budget(store, user_id, month)
    except ConnectionError as ce:
        raise HTTPException(status_code=503, detail=str(ce))
    except Exception as e:
        logger.exception(f"Failed to retrieve budget for {month}: {e}")
        raise HTTPException(status_code=500, detail="failed to retrieve budget")


@router.get("/{month}/remaining", summary="Get Remaining Budget",
            description="Spent versus allocated per category, with unallocated spend in the MIS envelope.")
async def get_remaining_budget(store: StoreDep, user_id: UserIdDep, month: MonthPath):
    try:
        return await budget_service.remaining_budget(store, user_id, month)
    except NotFound as nf:
        raise HTTPException(status_code=404, detail=str(nf))
    except ConnectionError as ce:
        raise HTTPException(status_code=503, detail=str(ce))
    except Exception as e:
        logger.exception(f"Failed to calculate remaining budget for {month}: {e}")
        raise HTTPException(status_code=500, detail="failed to calculate remaining budget")


@router.post("/{month}/reassign", status_code=201, summary="Reassign Expense")
async def reassign_budget(store: StoreDep, user_id: UserIdDep, month: MonthPath, payload: ReassignIn):
    try:
        return await budget_service.reassign_budget(store, user_id, month, payload)
    except ConnectionError as ce:
        raise HTTPException(status_code=503, detail=str(ce))
    except Exception as e:
        logger.exception(f"Failed to reassign expense: {e}")
        raise HTTPException(status_code=500, detail="failed to reassign expense")


@router.delete("/{month}", summary="Delete Monthly Budget")
async def delete_budget(store: StoreDep, user_id: UserIdDep, month: MonthPath):
    try:
        return await budget_service.delete_budget(store, user_id, month)
    except NotFound as nf:
        raise HTTPException(status_code=404, detail=str(nf))
    except ConnectionError as ce:
        raise HTTPException(status_code=503, detail=str(ce))
    except Exception as e:
        logger.exception(f"Failed to delete budget for {month}: {e}")
        raise HTTPException(status_code=500, detail="failed to delete budget")
