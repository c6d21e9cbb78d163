#src/domain/services/i_ocr_service.py

"""
OCR service interface for extracting text from images.

Defines the contract for OCR services in the application.
"""
from abc import ABC, abstractmethod
from typing import Any, Optional

from src.domain.common.result import Result
from src.domain.models.translation_result import OcrResult


class IOcrService(ABC):
    """
    Interface for OCR (Optical Character Recognition) services.
    """

    @abstractmethod
    def recognize(self, image: Any, language: Optional[str] = None) -> Result[OcrResult]:
        """
        Recognize text in an image.

        Args:
            image: PIL Image or encoded image bytes
            language: Application language code ("en", "ja", ...); None or
                "auto" uses the configured default

        Returns:
            Result containing the recognized text, lines and mean confidence
        """
        pass

    @abstractmethod
    def preprocess_image(self, image: Any) -> Result[Any]:
        """
        Preprocess an image to improve OCR accuracy.

        Args:
            image: The image to preprocess

        Returns:
            Result containing the preprocessed image on success
        """
        pass
