"""API routes for spending entries"""
import logging
from typing import Annotated, List, Optional
from fastapi import APIRouter, HTTPException, Path, Query

from dependencies import StoreDep, UserIdDep
from models.entry import AddEntriesIn
from models.periods import DATE_PATTERN, PERIOD_PATTERN
from services import entries_service
from services.errors import NotFound

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", summary="Get Entries", description="Entries of one or more months, optionally filtered by category code.")
async def get_entries(
    store: StoreDep,
    user_id: UserIdDep,
    month: Annotated[List[str], Query(description="One or more months in YYYY-MM format.")],
    category: Annotated[Optional[List[str]], Query(description="Category codes; a parent code matches its children.")] = None,
):
    try:
        return await entries_service.get_entries(store, user_id, month, category)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    except ConnectionError as ce:
        raise HTTPException(status_code=503, detail=str(ce))
    except Exception as e:
        logger.exception(f"Unexpected error retrieving entries: {e}")
        raise HTTPException(status_code=500, detail="failed to retrieve user entries")


@router.post("/add-user-entries", status_code=201, summary="Add Entries")
async def add_entries(store: StoreDep, user_id: UserIdDep, payload: AddEntriesIn):
    try:
        return await entries_service.add_entries(store, user_id, payload)
    except ConnectionError as ce:
        raise HTTPException(status_code=503, detail=str(ce))
    except Exception as e:
        logger.exception(f"Unexpected error adding entries: {e}")
        raise HTTPException(status_code=500, detail="failed to add user entries")


@router.delete("/{period}", summary="Delete Entries of a Day or Month")
async def delete_entries(
    store: StoreDep,
    user_id: UserIdDep,
    period: Annotated[str, Path(pattern=PERIOD_PATTERN)],
):
    try:
        return await entries_service.delete_entries(store, user_id, period)
    except NotFound as nf:
        raise HTTPException(status_code=404, detail=str(nf))
    except ConnectionError as ce:
        raise HTTPException(status_code=503, detail=str(ce))
    except Exception as e:
        logger.exception(f"Unexpected error deleting entries for {period}: {e}")
        raise HTTPException(status_code=500, detail="failed to delete entries")


@router.delete("/{date}/{entry_id}", summary="Delete One Entry")
async def delete_entry(
    store: StoreDep,
    user_id: UserIdDep,
    date: Annotated[str, Path(pattern=DATE_PATTERN)],
    entry_id: str,
):
    try:
        return await entries_service.delete_entry(store, user_id, date, entry_id)
    except NotFound as nf:
        raise HTTPException(status_code=404, detail=str(nf))
    except ConnectionError as ce:
        raise HTTPException(status_code=503, detail=str(ce))
    except Exception as e:
        logger.exception(f"Unexpected error deleting entry {entry_id}: {e}")
        raise HTTPException(status_code=500, detail="failed to delete entry")
