#src/infrastructure/ocr/tesseract_ocr_service.py

"""
Implementation of the OCR service using Tesseract OCR.
"""
import io
import os
import shutil
from typing import Any, Dict, List, Optional, Tuple

import cv2
import numpy as np
import pytesseract
from PIL import Image

from src.domain.common.errors import OcrError
from src.domain.common.result import Result
from src.domain.models.translation_result import BoundingBox, OcrLine, OcrResult
from src.domain.services.i_logger_service import ILoggerService
from src.domain.services.i_ocr_service import IOcrService
from src.domain.services.i_settings_repository import ISettingsRepository

# Application language code -> Tesseract traineddata name
TESSERACT_LANGUAGES = {
    'en': 'eng',
    'ja': 'jpn',
    'ko': 'kor',
    'zh-CN': 'chi_sim',
    'zh-TW': 'chi_tra',
    'th': 'tha',
}
DEFAULT_TESSERACT_LANGUAGE = 'eng'

# Adaptive threshold and denoise parameters
THRESHOLD_BLOCK_SIZE = 11
THRESHOLD_C = 2
DENOISE_H = 10
DENOISE_TEMPLATE_WINDOW = 7
DENOISE_SEARCH_WINDOW = 21


class TesseractOcrService(IOcrService):
    """
    Implementation of the OCR service using Tesseract OCR.

    Reads the ``ocr`` settings section on every call, so changes to language,
    preprocessing or confidence take effect without a restart.
    """

    def __init__(self, logger: ILoggerService, settings: ISettingsRepository):
        self.logger = logger
        self.settings = settings
        self._configure_tesseract_path()

    def _configure_tesseract_path(self) -> None:
        """
        Point pytesseract at the configured executable, or at the first common
        install location that exists.
        """
        configured = self.settings.get_in("ocr", "tesseract_path", "")
        if configured:
            pytesseract.pytesseract.tesseract_cmd = configured
            self.logger.info("Configured Tesseract path from settings", path=configured)
            return

        if shutil.which("tesseract"):
            return

        possible_paths = [
            r'C:\Program Files\Tesseract-OCR\tesseract.exe',
            r'C:\Program Files (x86)\Tesseract-OCR\tesseract.exe',
            '/usr/bin/tesseract',
            '/usr/local/bin/tesseract',
            '/opt/homebrew/bin/tesseract',
        ]
        for path in possible_paths:
            if os.path.exists(path):
                pytesseract.pytesseract.tesseract_cmd = path
                self.logger.info("Configured Tesseract path", path=path)
                return

        self.logger.warning("Tesseract OCR not found in common locations. "
                            "Install Tesseract or set ocr.tesseract_path.")

    def recognize(self, image: Any, language: Optional[str] = None) -> Result[OcrResult]:
        ocr_settings = self.settings.get("ocr")
        tesseract_language = self.resolve_language(language or ocr_settings.get("language"))

        try:
            pil_image = self._load_image(image)
        except Exception as e:
            error = OcrError("Failed to decode captured image", inner_error=e)
            self.logger.error(str(error))
            return Result.fail(error)

        if ocr_settings.get("preprocess", True):
            preprocessed = self._preprocess(pil_image, float(ocr_settings.get("scale_factor", 2.0)))
            if preprocessed.is_failure:
                return Result.fail(preprocessed.error)
            pil_image = preprocessed.value

        try:
            data = pytesseract.image_to_data(pil_image, lang=tesseract_language,
                                             output_type=pytesseract.Output.DICT)
        except pytesseract.TesseractNotFoundError as e:
            error = OcrError("Tesseract OCR executable not found", inner_error=e)
            self.logger.error(str(error))
            return Result.fail(error)
        except Exception as e:
            error = OcrError(
                "Text recognition failed",
                details={"language": tesseract_language, "image_size": f"{pil_image.width}x{pil_image.height}"},
                inner_error=e
            )
            self.logger.error(str(error))
            return Result.fail(error)

        min_confidence = float(ocr_settings.get("confidence", 0))
        lines = self._group_lines(data, min_confidence)
        text = "\n".join(line.text for line in lines)
        confidence = (sum(line.confidence for line in lines) / len(lines)) if lines else 0.0

        self.logger.debug("Recognized text", lines=len(lines), confidence=round(confidence, 3),
                          language=tesseract_language)
        return Result.ok(OcrResult(text=text, confidence=confidence, language=tesseract_language, lines=lines))

    def preprocess_image(self, image: Any) -> Result[Image.Image]:
        try:
            pil_image = self._load_image(image)
        except Exception as e:
            return Result.fail(OcrError("Failed to decode image", inner_error=e))
        return self._preprocess(pil_image, float(self.settings.get_in("ocr", "scale_factor", 2.0)))

    @staticmethod
    def resolve_language(language: Optional[str]) -> str:
        """Map an application language code to a Tesseract language ("auto" -> English)."""
        if not language or language == "auto":
            return DEFAULT_TESSERACT_LANGUAGE
        return TESSERACT_LANGUAGES.get(language, language)

    def _load_image(self, image: Any) -> Image.Image:
        if isinstance(image, (bytes, bytearray)):
            return Image.open(io.BytesIO(image))
        return image

    def _preprocess(self, image: Image.Image, scale_factor: float) -> Result[Image.Image]:
        """Grayscale, upscale, adaptive threshold and light denoising."""
        try:
            img_np = np.array(image.convert("RGB"))
            img_gray = cv2.cvtColor(img_np, cv2.COLOR_RGB2GRAY)

            # Light text on a dark background thresholds badly, so flip it first
            if np.mean(img_gray) < 128:
                img_gray = cv2.bitwise_not(img_gray)

            h, w = img_gray.shape
            if scale_factor and scale_factor != 1.0:
                img_gray = cv2.resize(
                    img_gray,
                    (max(1, int(w * scale_factor)), max(1, int(h * scale_factor))),
                    interpolation=cv2.INTER_CUBIC
                )

            img_thresh = cv2.adaptiveThreshold(
                img_gray,
                255,
                cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
                cv2.THRESH_BINARY,
                THRESHOLD_BLOCK_SIZE,
                THRESHOLD_C
            )

            img_denoised = cv2.fastNlMeansDenoising(
                img_thresh, None, DENOISE_H, DENOISE_TEMPLATE_WINDOW, DENOISE_SEARCH_WINDOW
            )
            return Result.ok(Image.fromarray(img_denoised))
        except Exception as e:
            error = OcrError(
                "Image preprocessing failed",
                details={"image_size": f"{image.width}x{image.height}"},
                inner_error=e
            )
            self.logger.error(str(error))
            return Result.fail(error)

    def _group_lines(self, data: Dict[str, List[Any]], min_confidence: float) -> List[OcrLine]:
        """
        Collapse Tesseract's word rows into lines.

        Words below ``min_confidence`` (0-100) are dropped; the line confidence
        is the mean of the kept words, scaled to [0, 1].
        """
        grouped: Dict[Tuple[int, int, int], List[int]] = {}
        for i, word in enumerate(data.get("text", [])):
            if not word or not word.strip():
                continue
            conf = float(data["conf"][i])
            if conf < 0 or conf < min_confidence:
                continue
            key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
            grouped.setdefault(key, []).append(i)

        lines = []
        for key in sorted(grouped):
            indices = grouped[key]
            words = [data["text"][i].strip() for i in indices]
            confs = [float(data["conf"][i]) for i in indices]
            box = BoundingBox(
                x0=min(data["left"][i] for i in indices),
                y0=min(data["top"][i] for i in indices),
                x1=max(data["left"][i] + data["width"][i] for i in indices),
                y1=max(data["top"][i] + data["height"][i] for i in indices),
            )
            lines.append(OcrLine(text=" ".join(words), confidence=sum(confs) / len(confs) / 100.0,
                                 bounding_box=box))
        return lines
