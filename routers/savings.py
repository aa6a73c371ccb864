"""API routes for derived savings figures"""
import logging
from typing import Annotated
from fastapi import APIRouter, HTTPException, Path

from dependencies import StoreDep, UserIdDep
from models.periods import MONTH_PATTERN, YEAR_PATTERN
from services import savings_service

router = APIRouter()
logger = logging.getLogger(__name__)

MonthPath = Annotated[str, Path(pattern=MONTH_PATTERN, description="Month in YYYY-MM format.")]
YearPath = Annotated[str, Path(pattern=YEAR_PATTERN, description="Year in YYYY format.")]


@router.get("/summary/{year}", summary="Savings Summary",
            description="Year-to-date when the year is the current one, otherwise the full year.")
async def get_savings_summary(store: StoreDep, user_id: UserIdDep, year: YearPath):
    try:
        return await savings_service.year_to_date_summary(store, user_id, year)
    except ConnectionError as ce:
        raise HTTPException(status_code=503, detail=str(ce))
    except Exception as e:
        logger.exception(f"Failed to compute savings summary for {year}: {e}")
        raise HTTPException(status_code=500, detail="failed to compute savings summary")


@router.get("/{month}/monthly", summary="Monthly Savings")
async def get_monthly_savings(store: StoreDep, user_id: UserIdDep, month: MonthPath):
    try:
        return await savings_service.monthly_savings(store, user_id, month)
    except ConnectionError as ce:
        raise HTTPException(status_code=503, detail=str(ce))
    except Exception as e:
        logger.exception(f"Failed to compute monthly savings for {month}: {e}")
        raise HTTPException(status_code=500, detail="failed to compute monthly savings")


@router.get("/{year}/yearly", summary="Yearly Savings")
async def get_yearly_savings(store: StoreDep, user_id: UserIdDep, year: YearPath):
    try:
        return await savings_service.yearly_savings(store, user_id, year)
    except ConnectionError as ce:
        raise HTTPException(status_code=503, detail=str(ce))
    except Exception as e:
        logger.exception(f"Failed to compute yearly savings for {year}: {e}")
        raise HTTPException(status_code=500, detail="failed to compute yearly savings")
