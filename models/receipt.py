"""Pydantic models for receipt OCR and classification requests"""
from pydantic import BaseModel, Field


class ReceiptImageIn(BaseModel):
    image_b64: str = Field(..., min_length=1)


class ReceiptTextIn(BaseModel):
    text: str = Field(..., min_length=1)
