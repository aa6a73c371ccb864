"""Receipt OCR and classification."""
import logging
from datetime import date
from typing import Any, Dict, Optional
from uuid import uuid4

from services.errors import CollaboratorFailure
from services.taxonomy import DEFAULT_TAXONOMY, MISCELLANEOUS, Taxonomy

logger = logging.getLogger(__name__)


async def extract_text(vision, image_b64: str) -> Dict[str, Any]:
    text = await vision.text_from_image(image_b64)
    logger.info(f"OCR extracted {len(text)} characters")
    return {"text": text}


async def classify_receipt(
    assistant,
    text: str,
    taxonomy: Taxonomy = DEFAULT_TAXONOMY,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Classifies OCR text into spending entries ready for add-entries.
    Every entry gets a fresh id; the classifier's own ids are not trusted.
    """
    try:
        payload = await assistant.classify_receipt(text)
    except Exception as e:
        logger.exception(f"Receipt classification failed: {e}")
        raise CollaboratorFailure(f"LLM classify failed: {e}")
    if not isinstance(payload, dict):
        raise CollaboratorFailure("invalid response from LLM")

    month = f"{(today or date.today()):%Y-%m}"
    entries = payload.get("entries")
    if isinstance(entries, list):
        classified = []
        for entry in entries:
            if not isinstance(entry, dict):
                logger.warning(f"Dropping malformed classifier entry: {entry!r}")
                continue
            code = entry.get("code") or MISCELLANEOUS
            classified.append({
                **entry,
                "code": code,
                "name": entry.get("name") or f"{month} {taxonomy.keyword(code)}",
                "id": uuid4().hex,
            })
        payload["entries"] = classified
    logger.info(f"Receipt classified into {len(payload.get('entries') or [])} entries")
    return payload
