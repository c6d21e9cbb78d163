# src/infrastructure/translation/google_translator.py
"""
Google Cloud Translation (v2 REST API) backend.
"""
import os
from typing import Optional, Tuple

import requests

from src.domain.common.errors import ConfigurationError, TranslationServiceError
from src.domain.common.result import Result
from src.domain.services.i_logger_service import ILoggerService
from src.domain.services.i_settings_repository import ISettingsRepository
from src.domain.services.i_translator import ITranslator

DEFAULT_ENDPOINT = "https://translation.googleapis.com/language/translate/v2"
API_KEY_ENV = "GOOGLE_TRANSLATE_API_KEY"
REQUEST_TIMEOUT = 10


class GoogleTranslator(ITranslator):
    """
    Translates text with the Google Cloud Translation v2 API.

    The API key comes from ``translation.api_key``, falling back to the
    GOOGLE_TRANSLATE_API_KEY environment variable when the setting is empty.
    """

    def __init__(self, logger: ILoggerService, settings: ISettingsRepository,
                 session: Optional[requests.Session] = None):
        self.logger = logger
        self.settings = settings
        self.session = session or requests.Session()

    def translate(self, text: str, source_language: Optional[str],
                  target_language: str) -> Result[Tuple[str, str]]:
        api_key = self.settings.get_in("translation", "api_key") or os.environ.get(API_KEY_ENV, "")
        if not api_key:
            return Result.fail(ConfigurationError(
                f"No translation API key configured; set translation.api_key or {API_KEY_ENV}"
            ))

        endpoint = self.settings.get_in("translation", "api_endpoint") or DEFAULT_ENDPOINT
        # Key and text stay out of the URL.
        headers = {"X-Goog-Api-Key": api_key}
        body = {"q": text, "target": target_language, "format": "text"}
        if source_language and source_language != "auto":
            body["source"] = source_language

        try:
            r = self.session.post(endpoint, data=body, headers=headers, timeout=REQUEST_TIMEOUT)
            r.raise_for_status()
            translation = r.json()["data"]["translations"][0]
            translated = translation["translatedText"]
            detected = translation.get("detectedSourceLanguage") or source_language or "auto"
        except requests.RequestException as e:
            error = TranslationServiceError(
                f"Translation request failed: {self._describe(e)}",
                details={"target_language": target_language},
                inner_error=e
            )
            self.logger.error(str(error))
            return Result.fail(error)
        except (KeyError, IndexError, ValueError, TypeError, AttributeError) as e:
            error = TranslationServiceError("Unexpected translation response", inner_error=e)
            self.logger.error(str(error))
            return Result.fail(error)

        return Result.ok((translated, detected))

    @staticmethod
    def _describe(error: requests.RequestException) -> str:
        response = getattr(error, "response", None)
        if response is not None:
            return f"HTTP {response.status_code}"
        return type(error).__name__
