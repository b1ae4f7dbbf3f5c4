"""
Pydantic models for receipt extraction.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Category(str, Enum):
    """Spending categories, valued by their expense form labels."""
    GASOLINE = "ガソリン代"
    PARKING = "駐車場代"
    HIGHWAY_TOLL = "高速道路代"
    CONSUMABLES = "消耗品費"


class ExtractionResult(BaseModel):
    """
    Best-effort fields recovered from one receipt.

    Every field is optional; a missing field means "leave blank for the user".
    """
    date: Optional[str] = Field(default=None, pattern=r'^\d{4}-\d{2}-\d{2}$')  # YYYY-MM-DD
    amount: Optional[int] = Field(default=None, gt=0, lt=10_000_000)  # Whole yen
    vendor: Optional[str] = Field(default=None, max_length=50)
    category: Optional[Category] = None

    def is_empty(self) -> bool:
        return all(value is None for value in (self.date, self.amount, self.vendor, self.category))


class ExtractTextRequest(BaseModel):
    """Request body for extracting fields from OCR text."""
    text: str = ""


class ImageExtractionResponse(BaseModel):
    """Response for image uploads: extracted fields plus the OCR text they came from."""
    result: ExtractionResult
    raw_text: str = ""
    ocr_failed: bool = False
