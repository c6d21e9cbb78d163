#src/domain/services/i_translation_service.py

"""
Translation service interface: OCR plus machine translation.

The capture pipeline hands captured images and free text to this service and
receives finished TranslationResults.
"""
from abc import ABC, abstractmethod

from src.domain.common.result import Result
from src.domain.models.capture_result import CaptureResult
from src.domain.models.translation_result import TranslationRequest, TranslationResult


class ITranslationService(ABC):

    @abstractmethod
    def process(self, capture: CaptureResult) -> Result[TranslationResult]:
        """
        Recognize the text in a captured image and translate it.

        Args:
            capture: The captured region

        Returns:
            Result containing the translation, OCR_FAILED or TRANSLATION_FAILED
        """
        pass

    @abstractmethod
    def translate(self, request: TranslationRequest) -> Result[TranslationResult]:
        """
        Translate free text.

        Args:
            request: Text plus resolved source and target languages

        Returns:
            Result containing the translation, or TRANSLATION_FAILED
        """
        pass

    @abstractmethod
    def clear_cache(self) -> None:
        """Drop all cached translations."""
        pass
