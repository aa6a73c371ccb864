"""API routes for shopping price comparison"""
import logging
from fastapi import APIRouter, HTTPException

from dependencies import ShoppingDep, UserIdDep
from models.shopping import ShoppingQuery
from services import shopping_service
from services.errors import NotFound

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/stores", summary="Allowed Stores", description="Stores whose offers are returned, by category.")
async def get_stores(user_id: UserIdDep):
    return shopping_service.list_stores()


async def _offers(shopping, payload: ShoppingQuery, cheapest: bool):
    try:
        return await shopping_service.find_offers(shopping, payload, cheapest=cheapest)
    except NotFound as nf:
        raise HTTPException(status_code=404, detail=str(nf))
    except ConnectionError as ce:
        raise HTTPException(status_code=502, detail=str(ce))
    except Exception as e:
        logger.exception(f"Failed to search offers for '{payload.query}': {e}")
        raise HTTPException(status_code=500, detail="failed to search for offers")


@router.post("/search", summary="Relevant Offers", description="Top 5 offers in listing order.")
async def search_offers(shopping: ShoppingDep, user_id: UserIdDep, payload: ShoppingQuery):
    return await _offers(shopping, payload, cheapest=False)


@router.post("/cheapest", summary="Cheapest Offers", description="Top 5 offers sorted by price.")
async def cheapest_offers(shopping: ShoppingDep, user_id: UserIdDep, payload: ShoppingQuery):
    return await _offers(shopping, payload, cheapest=True)
