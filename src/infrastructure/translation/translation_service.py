# src/infrastructure/translation/translation_service.py
"""
OCR + translation stage used by the capture pipeline.
"""
import base64
import threading
import time
from collections import OrderedDict
from typing import Optional, Tuple

from src.domain.common.errors import OcrError, ValidationError
from src.domain.common.result import Result
from src.domain.models.capture_result import CaptureResult
from src.domain.models.translation_result import (
    TranslationRequest, TranslationResult, new_result_id, now_ms
)
from src.domain.services.i_logger_service import ILoggerService
from src.domain.services.i_ocr_service import IOcrService
from src.domain.services.i_settings_repository import ISettingsRepository
from src.domain.services.i_translation_service import ITranslationService
from src.domain.services.i_translator import ITranslator

CacheKey = Tuple[str, str, str]


class TranslationCache:
    """
    Thread-safe LRU cache of translations with a time-to-live.

    Values are (translated_text, source_language) pairs.
    """

    def __init__(self, max_size: int = 1000, ttl_seconds: float = 604800):
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._entries: "OrderedDict[CacheKey, Tuple[float, Tuple[str, str]]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: CacheKey) -> Optional[Tuple[str, str]]:
        with self._lock:
            item = self._entries.get(key)
            if item is None:
                return None
            stored_at, value = item
            if time.monotonic() - stored_at > self.ttl_seconds:
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return value

    def put(self, key: CacheKey, value: Tuple[str, str]) -> None:
        with self._lock:
            self._entries[key] = (time.monotonic(), value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_size:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class TranslationService(ITranslationService):
    """
    Runs OCR on captured images and sends the text to the translator.

    Translations are cached per (text, source, target) when
    ``translation.cache_enabled`` is set.
    """

    def __init__(self, logger: ILoggerService, settings: ISettingsRepository,
                 ocr_service: IOcrService, translator: ITranslator):
        self.logger = logger
        self.settings = settings
        self.ocr_service = ocr_service
        self.translator = translator

        translation_settings = settings.get("translation")
        self.cache = TranslationCache(
            max_size=int(translation_settings.get("cache_size", 1000)),
            ttl_seconds=float(translation_settings.get("cache_ttl", 604800)),
        )

    def process(self, capture: CaptureResult) -> Result[TranslationResult]:
        started = time.monotonic()
        source_language = self.settings.get_in("general", "source_language", "auto")
        target_language = self.settings.get_in("translation", "target_language", "th")

        ocr_result = self.ocr_service.recognize(capture.image, source_language)
        if ocr_result.is_failure:
            return Result.fail(ocr_result.error)

        ocr = ocr_result.value
        if not ocr.has_text:
            return Result.fail(OcrError("No text detected in the selected region",
                                        details={"region": capture.region.to_dict()}))

        translated = self._translate_cached(ocr.text, source_language, target_language)
        if translated.is_failure:
            return Result.fail(translated.error)

        (translated_text, detected_source), cached = translated.value
        return Result.ok(TranslationResult(
            id=new_result_id(),
            source_text=ocr.text,
            translated_text=translated_text,
            source_language=detected_source,
            target_language=target_language,
            confidence=ocr.confidence,
            timestamp=now_ms(),
            cached=cached,
            ocr_confidence=ocr.confidence,
            processing_time=int((time.monotonic() - started) * 1000),
            image_data=base64.b64encode(capture.image).decode("ascii"),
        ))

    def translate(self, request: TranslationRequest) -> Result[TranslationResult]:
        if not request.text or not request.text.strip():
            return Result.fail(ValidationError("Text to translate is empty"))

        started = time.monotonic()
        source_language = request.source_language or self.settings.get_in("general", "source_language", "auto")
        target_language = request.target_language or self.settings.get_in("translation", "target_language", "th")

        translated = self._translate_cached(request.text, source_language, target_language)
        if translated.is_failure:
            return Result.fail(translated.error)

        (translated_text, detected_source), cached = translated.value
        return Result.ok(TranslationResult(
            id=new_result_id(),
            source_text=request.text,
            translated_text=translated_text,
            source_language=detected_source,
            target_language=target_language,
            confidence=1.0,
            timestamp=now_ms(),
            cached=cached,
            processing_time=int((time.monotonic() - started) * 1000),
        ))

    def clear_cache(self) -> None:
        self.cache.clear()
        self.logger.debug("Translation cache cleared")

    def _translate_cached(self, text: str, source_language: str,
                          target_language: str) -> Result[Tuple[Tuple[str, str], bool]]:
        """Returns ((translated_text, source_language), served_from_cache)."""
        use_cache = bool(self.settings.get_in("translation", "cache_enabled", True))
        key = (text, source_language, target_language)

        if use_cache:
            hit = self.cache.get(key)
            if hit is not None:
                self.logger.debug("Translation cache hit", target_language=target_language)
                return Result.ok((hit, True))

        result = self.translator.translate(text, source_language, target_language)
        if result.is_failure:
            return Result.fail(result.error)

        if use_cache:
            self.cache.put(key, result.value)
        return Result.ok((result.value, False))
