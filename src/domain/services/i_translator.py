#src/domain/services/i_translator.py
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from src.domain.common.result import Result


class ITranslator(ABC):
    """A machine translation backend."""

    @abstractmethod
    def translate(self, text: str, source_language: Optional[str],
                  target_language: str) -> Result[Tuple[str, str]]:
        """
        Translate text.

        Args:
            text: Text to translate
            source_language: Source language code, or None/"auto" to detect
            target_language: Target language code

        Returns:
            Result containing (translated_text, source_language) where the
            source language is the detected one when detection was requested
        """
        pass
