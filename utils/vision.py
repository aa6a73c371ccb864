"""Google Vision OCR client"""
import logging
from typing import Any, Dict

import httpx

from services.errors import CollaboratorFailure

logger = logging.getLogger(__name__)

VISION_URL = "https://vision.googleapis.com/v1/images:annotate"


def text_from_response(data: Dict[str, Any]) -> str:
    response = (data.get("responses") or [{}])[0]
    full_text = (response.get("fullTextAnnotation") or {}).get("text")
    if full_text:
        return full_text
    annotations = response.get("textAnnotations") or []
    return (annotations[0].get("description") if annotations else None) or ""


class VisionClient:
    def __init__(self, api_key: str, timeout: float = 30.0, url: str = VISION_URL):
        self.api_key = api_key
        self.timeout = timeout
        self.url = url

    async def text_from_image(self, image_b64: str) -> str:
        if not self.api_key:
            raise CollaboratorFailure("OCR service is not configured (GOOGLE_VISION_KEY missing).")
        payload = {
            "requests": [{
                "image": {"content": image_b64},
                "features": [{"type": "DOCUMENT_TEXT_DETECTION"}],
            }]
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.url, params={"key": self.api_key}, json=payload)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"OCR request failed: {e}")
            raise CollaboratorFailure(f"OCR failed: {e}")
        return text_from_response(data)
