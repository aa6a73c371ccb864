"""FastAPI dependencies: connected collaborators, current user and the rate limiter."""
import logging
from typing import Annotated, Optional

import jwt
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from slowapi import Limiter
from slowapi.util import get_remote_address

from config import Settings, get_settings
from services.store import FinanceStore
from utils.llm import AgentAssistant
from utils.shopping import ShoppingClient
from utils.vision import VisionClient

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
bearer_scheme = HTTPBearer(auto_error=False)


def get_store(request: Request) -> FinanceStore:
    """The store connected during application start-up."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        logger.error("Finance store not found in application state. Check MongoDB connection.")
        raise HTTPException(status_code=503, detail="Database service not available.")
    return store


def get_assistant(request: Request) -> AgentAssistant:
    assistant = getattr(request.app.state, "assistant", None)
    if assistant is None:
        raise HTTPException(status_code=503, detail="Assistant service not available.")
    return assistant


def get_vision(request: Request) -> VisionClient:
    vision = getattr(request.app.state, "vision", None)
    if vision is None:
        raise HTTPException(status_code=503, detail="OCR service not available.")
    return vision


def get_shopping(request: Request) -> ShoppingClient:
    shopping = getattr(request.app.state, "shopping", None)
    if shopping is None:
        raise HTTPException(status_code=503, detail="Shopping search not available.")
    return shopping


def get_current_user_id(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> str:
    """Verifies the bearer token and returns its subject as the user id."""
    if credentials is None:
        raise HTTPException(status_code=401, detail="token missing")
    try:
        payload = jwt.decode(credentials.credentials, settings.jwt_secret, algorithms=["HS256"])
    except jwt.InvalidTokenError as e:
        logger.warning(f"Rejected bearer token: {e}")
        raise HTTPException(status_code=401, detail="invalid token")
    subject = payload.get("sub")
    if not subject:
        raise HTTPException(status_code=401, detail="invalid token")
    return str(subject)


# Type hints for the dependencies
StoreDep = Annotated[FinanceStore, Depends(get_store)]
AssistantDep = Annotated[AgentAssistant, Depends(get_assistant)]
VisionDep = Annotated[VisionClient, Depends(get_vision)]
ShoppingDep = Annotated[ShoppingClient, Depends(get_shopping)]
UserIdDep = Annotated[str, Depends(get_current_user_id)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
