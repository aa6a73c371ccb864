"""API router wiring every resource under one prefix"""
import time
from fastapi import APIRouter

from routers import budgets, chat, entries, income, receipts, savings, shopping

router = APIRouter()

router.include_router(entries.router, prefix="/entries", tags=["entries"])
router.include_router(budgets.router, prefix="/budgets", tags=["budgets"])
router.include_router(income.router, prefix="/income", tags=["income"])
router.include_router(savings.router, prefix="/savings", tags=["savings"])
router.include_router(chat.router, prefix="/chat", tags=["chat"])
router.include_router(receipts.router, prefix="/receipts", tags=["receipts"])
router.include_router(shopping.router, prefix="/shopping", tags=["shopping"])


@router.get("/health", summary="Health Check")
async def health():
    return {"status": "ok", "timestamp": int(time.time() * 1000)}
