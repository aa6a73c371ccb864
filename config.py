"""Application settings loaded from the environment"""
import os
import logging
from functools import lru_cache
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()  # Searches for .env in current dir and parent dirs


class Settings:
    def __init__(
        self,
        mongodb_uri: str,
        db_name: str,
        jwt_secret: str,
        llm_model: str,
        google_vision_key: str,
        vision_timeout_secs: float,
        max_upload_size: int,
        chat_rate_limit: str,
        budget_strict_allocation: bool,
        shopping_timeout_secs: float = 30.0,
    ) -> None:
        self.mongodb_uri = mongodb_uri
        self.db_name = db_name
        self.jwt_secret = jwt_secret
        self.llm_model = llm_model
        self.google_vision_key = google_vision_key
        self.vision_timeout_secs = vision_timeout_secs
        self.max_upload_size = max_upload_size
        self.chat_rate_limit = chat_rate_limit
        self.budget_strict_allocation = budget_strict_allocation
        self.shopping_timeout_secs = shopping_timeout_secs


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    mongodb_uri = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
    jwt_secret = os.getenv("JWT_SECRET", "")
    if not jwt_secret:
        logger.warning("JWT_SECRET not set! Every authenticated request will be rejected.")
    return Settings(
        mongodb_uri=mongodb_uri,
        db_name=os.getenv("DB_NAME", "pf_dev"),
        jwt_secret=jwt_secret,
        llm_model=os.getenv("LLM_MODEL", "gpt-4o-mini"),
        google_vision_key=os.getenv("GOOGLE_VISION_KEY", ""),
        vision_timeout_secs=float(os.getenv("VISION_TIMEOUT_SECS", "30")),
        max_upload_size=int(os.getenv("MAX_UPLOAD_SIZE", str(10 * 1024 * 1024))),
        chat_rate_limit=os.getenv("CHAT_RATE_LIMIT", "15/minute"),
        budget_strict_allocation=os.getenv("BUDGET_STRICT_ALLOCATION", "false").lower() == "true",
        shopping_timeout_secs=float(os.getenv("SHOPPING_TIMEOUT_SECS", "30")),
    )
