"""
Extraction API router.

Turns receipt text or a receipt photo into pre-filled expense form fields.
"""

from fastapi import APIRouter, HTTPException, UploadFile, File
import logging

from keihi.config import settings
from keihi.models.receipt import (
    ExtractTextRequest,
    ExtractionResult,
    ImageExtractionResponse,
)
from keihi.services.ocr import OCRError, OCRService
from keihi.services.parser import parse_receipt_text

router = APIRouter(prefix="/extract", tags=["extract"])
logger = logging.getLogger(__name__)


@router.post("/text", response_model=ExtractionResult)
def extract_from_text(request: ExtractTextRequest):
    """
    Extract date, amount, vendor and category from OCR text.

    Never fails on content: unrecognised text yields an empty record.
    """
    return parse_receipt_text(request.text)


@router.post("/image", response_model=ImageExtractionResponse)
def extract_from_image(file: UploadFile = File(...)):
    """
    Run OCR on an uploaded receipt photo, then extract fields.

    If OCR fails the response carries an empty record and ``ocr_failed``
    so the form opens blank for manual entry.

    Args:
        file: Uploaded image

    Returns:
        Extracted fields, the OCR text and the OCR failure flag
    """
    if not OCRService.is_image(file.content_type or "", file.filename or ""):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type: {file.content_type}. Upload a receipt image (JPG, PNG)"
        )

    image_data = file.file.read()
    file_size_mb = len(image_data) / (1024 * 1024)

    if file_size_mb > settings.MAX_UPLOAD_MB:
        raise HTTPException(
            status_code=400,
            detail=f"File too large: {file_size_mb:.2f}MB. Maximum: {settings.MAX_UPLOAD_MB}MB"
        )

    try:
        text = OCRService().extract_text_from_image(image_data)
    except OCRError as e:
        logger.warning("OCR failed, returning empty record", extra={
            "upload_name": file.filename,
            "error": str(e)
        })
        return ImageExtractionResponse(result=ExtractionResult(), raw_text="", ocr_failed=True)

    result = parse_receipt_text(text)

    logger.info("Receipt extracted", extra={
        "upload_name": file.filename,
        "text_length": len(text),
        "fields_found": sum(v is not None for v in (result.date, result.amount, result.vendor, result.category)),
    })

    return ImageExtractionResponse(result=result, raw_text=text)
