"""API routes for monthly income"""
import logging
from typing import Annotated
from fastapi import APIRouter, HTTPException, Path

from dependencies import StoreDep, UserIdDep
from models.income import IncomeIn, IncomeUpdate
from models.periods import MONTH_PATTERN
from services import income_service
from services.errors import NotFound

router = APIRouter()
logger = logging.getLogger(__name__)

MonthPath = Annotated[str, Path(pattern=MONTH_PATTERN, description="Month in YYYY-MM format.")]


@router.get("", summary="Get All Income Records")
async def get_all_income(store: StoreDep, user_id: UserIdDep):
    try:
        return await income_service.get_all_income(store, user_id)
    except ConnectionError as ce:
        raise HTTPException(status_code=503, detail=str(ce))
    except Exception as e:
        logger.exception(f"Failed to retrieve income records: {e}")
        raise HTTPException(status_code=500, detail="failed to retrieve income")


@router.post("", status_code=201, summary="Set Monthly Income",
             description="Replaces the income of a month; a shortfall of sources becomes 'miscellaneous'.")
async def set_income(store: StoreDep, user_id: UserIdDep, payload: IncomeIn):
    try:
        return await income_service.set_income(store, user_id, payload)
    except ValueError as ve:
        logger.warning(f"Income rejected for {payload.month}: {ve}")
        raise HTTPException(status_code=400, detail=str(ve))
    except ConnectionError as ce:
        raise HTTPException(status_code=503, detail=str(ce))
    except Exception as e:
        logger.exception(f"Failed to set/update income: {e}")
        raise HTTPException(status_code=500, detail="failed to set/update income")


@router.get("/{month}", summary="Get Monthly Income")
async def get_income(store: StoreDep, user_id: UserIdDep, month: MonthPath):
    try:
        return await income_service.get_income(store, user_id, month)
    except ConnectionError as ce:
        raise HTTPException(status_code=503, detail=str(ce))
    except Exception as e:
        logger.exception(f"Failed to retrieve income for {month}: {e}")
        raise HTTPException(status_code=500, detail="failed to retrieve monthly income")


@router.put("/{month}", summary="Update Monthly Income")
async def update_income(store: StoreDep, user_id: UserIdDep, month: MonthPath, payload: IncomeUpdate):
    try:
        return await income_service.update_income(store, user_id, month, payload)
    except NotFound as nf:
        raise HTTPException(status_code=404, detail=str(nf))
    except ValueError as ve:
        logger.warning(f"Income update rejected for {month}: {ve}")
        raise HTTPException(status_code=400, detail=str(ve))
    except ConnectionError as ce:
        raise HTTPException(status_code=503, detail=str(ce))
    except Exception as e:
        logger.exception(f"Failed to update monthly income: {e}")
        raise HTTPException(status_code=500, detail="failed to update monthly income")


@router.delete("/{month}", summary="Delete Monthly Income")
async def delete_income(store: StoreDep, user_id: UserIdDep, month: MonthPath):
    try:
        return await income_service.delete_income(store, user_id, month)
    except NotFound as nf:
        raise HTTPException(status_code=404, detail=str(nf))
    except ConnectionError as ce:
        raise HTTPException(status_code=503, detail=str(ce))
    except Exception as e:
        logger.exception(f"Failed to delete income for {month}: {e}")
        raise HTTPException(status_code=500, detail="failed to delete income record")
