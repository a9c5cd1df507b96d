"""Configuration classes for the MCQ extractor."""

import os
from dataclasses import dataclass, field
from typing import Optional

DEFAULT_CHAR_WHITELIST = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    "abcdefghijklmnopqrstuvwxyz"
    "0123456789"
    " .,?!()[]{}:;-/"
    "✓*✅x"
)


@dataclass
class OCRConfig:
    """Configuration for rasterizing and recognizing image-based pages.

    Examples:
        >>> # Default configuration (English answer sheets)
        >>> config = OCRConfig()

        >>> # Custom tesseract install
        >>> config = OCRConfig(tesseract_cmd="/opt/tesseract/bin/tesseract")
    """

    tesseract_cmd: str = "tesseract"
    """Path to tesseract binary. Default: "tesseract" (assumes in PATH)."""

    tessdata_prefix: Optional[str] = None
    """Optional path to tessdata directory. If None, uses system default."""

    languages: str = "eng"
    """OCR languages in Tesseract format (e.g., "eng", "eng+fra")."""

    render_scale: float = 2.5
    """Zoom factor used when rendering a page to a bitmap.

    2.5x is the balance point between OCR accuracy and the memory/time a
    single page bitmap costs. Lower values lose small option labels.
    """

    psm_mode: int = 6
    """Page segmentation mode (0-13). Default: 6 (uniform block of text)."""

    use_oem_1: bool = True
    """Use Tesseract OEM 1 (LSTM engine only)."""

    char_whitelist: str = DEFAULT_CHAR_WHITELIST
    """Characters tesseract is allowed to emit.

    Covers letters, digits, punctuation and the answer-marker symbols.
    Restricting the alphabet reduces noise on answer-sheet content.
    """


@dataclass
class StructuringConfig:
    """Configuration for the external completion service."""

    api_key: Optional[str] = None
    base_url: str = "https://api.deepseek.com"
    model: str = "deepseek-chat"
    temperature: float = 0.1
    max_tokens: int = 4000
    timeout_seconds: float = 120.0
    verify_ssl: bool = True

    @classmethod
    def from_env(cls) -> "StructuringConfig":
        """Build a config from ``DEEPSEEK_API_KEY`` and ``MCQ_STRUCTURING_*``."""
        defaults = cls()
        return cls(
            api_key=os.environ.get("DEEPSEEK_API_KEY"),
            base_url=os.environ.get("MCQ_STRUCTURING_BASE_URL", defaults.base_url),
            model=os.environ.get("MCQ_STRUCTURING_MODEL", defaults.model),
        )


@dataclass
class PipelineConfig:
    """Thresholds and collaborators' configuration for the pipeline."""

    ocr: OCRConfig = field(default_factory=OCRConfig)
    structuring: StructuringConfig = field(default_factory=StructuringConfig)

    classifier_sample_pages: int = 3
    """Number of leading pages sampled when classifying a document."""

    classifier_min_total_chars: int = 300
    """Normalized sample length above which a document is text based."""

    classifier_min_page_chars: int = 100
    """Raw characters on any single sampled page that mark it text based."""

    sample_text_limit: int = 500

    direct_min_chars: int = 100
    """Direct extraction shorter than this falls back to OCR."""

    ocr_min_chars: int = 50
    """OCR pages with less cleaned text than this are not sent for structuring."""

    prompt_text_limit: int = 4000

    inter_page_delay_seconds: float = 2.0
    """Pause between pages of the image path (service rate limits)."""

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Build a pipeline config whose collaborators read the environment."""
        ocr = OCRConfig()
        if os.environ.get("TESSERACT_CMD"):
            ocr.tesseract_cmd = os.environ["TESSERACT_CMD"]
        if os.environ.get("TESSDATA_PREFIX"):
            ocr.tessdata_prefix = os.environ["TESSDATA_PREFIX"]
        return cls(ocr=ocr, structuring=StructuringConfig.from_env())
