"""API route for the conversational interface"""
import logging
from fastapi import APIRouter, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from config import get_settings
from dependencies import AssistantDep, SettingsDep, StoreDep, UserIdDep, limiter
from models.chat import ChatIn
from services.chat_service import ChatOrchestrator

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", summary="Chat", description="Answers a natural-language question about the user's finances.")
@limiter.limit(get_settings().chat_rate_limit)
async def chat(
    request: Request,
    body: ChatIn,
    store: StoreDep,
    assistant: AssistantDep,
    user_id: UserIdDep,
    settings: SettingsDep,
):
    orchestrator = ChatOrchestrator(store, assistant, strict_allocation=settings.budget_strict_allocation)
    try:
        result = await orchestrator.handle(body.message, user_id)
    except Exception as e:
        logger.exception(f"Chat processing failed: {e}")
        return JSONResponse(status_code=500, content={
            "error": "Failed to process chat request",
            "message": str(e),
            "reply": "I'm having trouble processing requests right now. Please try again later.",
        })
    return JSONResponse(status_code=result.status_code, content=jsonable_encoder(result.body))
