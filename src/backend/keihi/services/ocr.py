"""
OCR service for extracting text from receipt images.
"""

import io
import logging

import pytesseract
from PIL import Image, ImageEnhance, UnidentifiedImageError

from keihi.config import settings

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif', '.bmp', '.tif', '.tiff', '.webp')


class OCRError(Exception):
    """Raised when a receipt image cannot be turned into text."""


class OCRService:
    """Service for extracting text from receipt images."""

    def __init__(self, languages: str = None, config: str = None):
        """Initialize OCR service with Tesseract configuration."""
        pytesseract.pytesseract.tesseract_cmd = settings.TESSERACT_CMD
        self.languages = languages or settings.OCR_LANGUAGES
        self.config = config or settings.OCR_CONFIG

    @staticmethod
    def is_image(mime_type: str, filename: str = "") -> bool:
        """Check MIME type first, then fall back to the file extension."""
        if mime_type and mime_type.startswith('image/'):
            return True
        return filename.lower().endswith(IMAGE_EXTENSIONS)

    def extract_text_from_image(self, image_data: bytes) -> str:
        """
        Extract text from an image using Tesseract OCR.

        Args:
            image_data: Raw image bytes (JPEG, PNG, etc.)

        Returns:
            Extracted text

        Raises:
            OCRError: If the bytes are not a decodable image or Tesseract fails
        """
        if not image_data:
            raise OCRError("Empty image")

        try:
            image = Image.open(io.BytesIO(image_data))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise OCRError(f"Unreadable image: {e}") from e

        image = self._preprocess_image(image)

        try:
            text = pytesseract.image_to_string(image, lang=self.languages, config=self.config)
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as e:
            raise OCRError(f"Tesseract failed: {e}") from e

        logger.debug("OCR extracted %d characters", len(text))
        return text.strip()

    def _preprocess_image(self, image: Image.Image) -> Image.Image:
        """
        Preprocess image to improve OCR accuracy.

        Converts to grayscale and doubles contrast, which helps with
        faded thermal receipts.
        """
        if image.mode != 'RGB':
            image = image.convert('RGB')

        image = image.convert('L')

        enhancer = ImageEnhance.Contrast(image)
        return enhancer.enhance(2.0)
