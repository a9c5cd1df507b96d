"""Tesseract OCR adapter for rendered page bitmaps."""

import io
import os
import shlex
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

import pytesseract
from PIL import Image

from mcq_extractor.config import OCRConfig
from mcq_extractor.exceptions import OCRError
from mcq_extractor.logger import Timer, get_logger
from mcq_extractor.markers import detect_answer_marker
from mcq_extractor.models import ExtractedText, PageImage
from mcq_extractor.normalizer import clean_ocr_text

logger = get_logger(__name__)


class TesseractOCREngine:
    """Recognizes text on one page bitmap at a time.

    Each call opens the bitmap, runs a single tesseract process over it and
    releases the image on every exit path. Engine failures never propagate:
    the page comes back empty with zero confidence.
    """

    def __init__(self, config: Optional[OCRConfig] = None):
        self.config = config or OCRConfig()

        if self.config.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.config.tesseract_cmd
        if self.config.tessdata_prefix:
            os.environ["TESSDATA_PREFIX"] = self.config.tessdata_prefix

    @property
    def tesseract_config(self) -> str:
        """Command line options passed to tesseract."""
        options = [f"--psm {self.config.psm_mode}"]
        if self.config.use_oem_1:
            options.append("--oem 1")
        if self.config.char_whitelist:
            whitelist = f"tessedit_char_whitelist={self.config.char_whitelist}"
            options.append(f"-c {shlex.quote(whitelist)}")
        return " ".join(options)

    def recognize(self, page: PageImage) -> ExtractedText:
        """OCR a page, returning raw text, cleaned text, marker and confidence."""
        try:
            with Timer("page_ocr") as timer:
                raw_text, confidence = self._run(page.bitmap)
        except Exception as exc:
            logger.error(
                f"OCR failed for page {page.page_number}",
                extra_data={
                    "page_number": page.page_number,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )
            return ExtractedText.empty()

        cleaned = clean_ocr_text(raw_text)
        marker = detect_answer_marker(raw_text)

        logger.info(
            f"OCR completed for page {page.page_number}",
            extra_data={
                "page_number": page.page_number,
                "characters_extracted": len(cleaned),
                "confidence": round(confidence, 1),
                "answer_marker": marker,
                "ocr_time_ms": timer.get_elapsed_ms(),
            },
        )

        return ExtractedText(
            raw_text=raw_text,
            cleaned_text=cleaned,
            answer_marker=marker,
            confidence=confidence,
        )

    @contextmanager
    def _open_bitmap(self, bitmap: bytes) -> Iterator[Image.Image]:
        image = Image.open(io.BytesIO(bitmap))
        try:
            yield image
        finally:
            image.close()

    def _run(self, bitmap: bytes) -> tuple[str, float]:
        with self._open_bitmap(bitmap) as image:
            data = pytesseract.image_to_data(
                image,
                lang=self.config.languages,
                config=self.tesseract_config,
                output_type=pytesseract.Output.DICT,
            )
        if not isinstance(data, dict) or "text" not in data:
            raise OCRError("tesseract returned no word data")
        return _text_from_words(data), _mean_confidence(data)


def _text_from_words(data: dict) -> str:
    """Rebuild line-broken text from tesseract word boxes."""
    lines: list[str] = []
    current_key = None
    current_words: list[str] = []

    for i, word in enumerate(data["text"]):
        key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
        if key != current_key:
            if current_words:
                lines.append(" ".join(current_words))
            current_key = key
            current_words = []
        if word and word.strip():
            current_words.append(word.strip())

    if current_words:
        lines.append(" ".join(current_words))
    return "\n".join(lines)


def _mean_confidence(data: dict) -> float:
    """Average word confidence (0-100); tesseract marks non-words with -1."""
    scores = []
    for word, conf in zip(data["text"], data["conf"]):
        try:
            value = float(conf)
        except (TypeError, ValueError):
            continue
        if value >= 0 and word and word.strip():
            scores.append(value)
    if not scores:
        return 0.0
    return sum(scores) / len(scores)
