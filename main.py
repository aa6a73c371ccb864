"""Main FastAPI application"""
import logging
import logging.config
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from config import get_settings
from dependencies import limiter
from routes import router as api_router
from services.errors import CollaboratorFailure
from services.store import FinanceStore
from utils.llm import AgentAssistant
from utils.shopping import ShoppingClient
from utils.vision import VisionClient

# --- Unified Logging Configuration with Rich ---
LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(name)s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "default": {
            "class": "rich.logging.RichHandler",
            "formatter": "default",
            "level": "DEBUG",
            "rich_tracebacks": True,
            "show_time": True,
            "show_path": False,
            "log_time_format": "%Y-%m-%d %H:%M:%S",
            "markup": False,
        },
    },
    "loggers": {
        "uvicorn": {"handlers": ["default"], "level": "INFO", "propagate": False},
        "uvicorn.error": {"handlers": ["default"], "level": "INFO", "propagate": False},
        "uvicorn.access": {"handlers": ["default"], "level": "INFO", "propagate": False},
        "": {"handlers": ["default"], "level": "INFO", "propagate": False},
    },
}

logging.config.dictConfig(LOGGING_CONFIG)
logger = logging.getLogger(__name__)

settings = get_settings()
API_PREFIX = "/api/v1"
UPLOAD_ENDPOINT_PATH = f"{API_PREFIX}/receipts/parse"


# --- Middleware for Upload Size Limit ---
class LimitUploadSizeMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if request.url.path == UPLOAD_ENDPOINT_PATH:
            content_length_header = request.headers.get("content-length")
            if content_length_header:
                try:
                    content_length = int(content_length_header)
                except ValueError:
                    logger.warning("Upload rejected: Invalid Content-Length header.")
                    return Response("Invalid Content-Length header.", status_code=400)
                if content_length > settings.max_upload_size:
                    logger.warning(f"Upload rejected: size {content_length} exceeds limit {settings.max_upload_size}.")
                    return Response(
                        f"Maximum upload size limit ({settings.max_upload_size / (1024 * 1024):.1f} MB) exceeded.",
                        status_code=413,
                    )
        return await call_next(request)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: connect once and hand the connected handles to the routes through app.state
    try:
        app.state.store = await FinanceStore.connect(settings.mongodb_uri, settings.db_name)
    except CollaboratorFailure as e:
        logger.error(f"Failed to connect to MongoDB: {e}")
        app.state.store = None
    app.state.assistant = AgentAssistant(model=settings.llm_model)
    app.state.vision = VisionClient(settings.google_vision_key, timeout=settings.vision_timeout_secs)
    app.state.shopping = ShoppingClient(timeout=settings.shopping_timeout_secs)
    logger.info(f"Configuration: LLM_MODEL = {settings.llm_model}, "
                f"BUDGET_STRICT_ALLOCATION = {settings.budget_strict_allocation}")

    yield  # Application runs here

    if app.state.store is not None:
        app.state.store.close()
        logger.info("MongoDB connection closed.")


app = FastAPI(
    title="Personal Finance API",
    description="Budgets, income, spending entries, savings and a chat assistant over them.",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and path parameters are reported as 400 before any service runs."""
    logger.warning(f"Validation failed for {request.method} {request.url.path}: {exc.errors()}")
    messages = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
    return JSONResponse(status_code=400, content={"error": "; ".join(messages)})


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Adjust in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LimitUploadSizeMiddleware)

app.include_router(api_router, prefix=API_PREFIX)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=4000, reload=True)
