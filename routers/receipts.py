"""API routes for receipt OCR and classification"""
import logging
from fastapi import APIRouter, HTTPException

from dependencies import AssistantDep, UserIdDep, VisionDep
from models.receipt import ReceiptImageIn, ReceiptTextIn
from services import receipts_service

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/parse", summary="OCR Receipt Image", description="Extracts the text of a base64-encoded receipt image.")
async def parse_receipt(vision: VisionDep, user_id: UserIdDep, payload: ReceiptImageIn):
    logger.info(f"POST /receipts/parse called by user {user_id}")
    try:
        return await receipts_service.extract_text(vision, payload.image_b64)
    except ConnectionError as ce:
        raise HTTPException(status_code=502, detail=str(ce))
    except Exception as e:
        logger.exception(f"Unexpected error during OCR: {e}")
        raise HTTPException(status_code=500, detail="failed to extract receipt text")


@router.post("/classify", summary="Classify Receipt Text",
             description="Turns receipt text into spending entries, each with a fresh id.")
async def classify_receipt(assistant: AssistantDep, user_id: UserIdDep, payload: ReceiptTextIn):
    logger.info(f"POST /receipts/classify called by user {user_id} with text: {payload.text[:50]}...")
    try:
        return await receipts_service.classify_receipt(assistant, payload.text)
    except ConnectionError as ce:
        raise HTTPException(status_code=502, detail=str(ce))
    except Exception as e:
        logger.exception(f"Unexpected error classifying receipt: {e}")
        raise HTTPException(status_code=500, detail="failed to classify receipt")
