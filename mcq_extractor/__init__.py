"""Multiple-choice question extraction from text and scanned PDFs."""

from mcq_extractor.client import StructuringClient
from mcq_extractor.config import OCRConfig, PipelineConfig, StructuringConfig
from mcq_extractor.detector import PDFTypeClassifier
from mcq_extractor.exceptions import (
    ExtractionError,
    MCQExtractorError,
    OCRError,
    QuestionValidationError,
    RenderingError,
    StructuringError,
)
from mcq_extractor.extractor import DirectTextExtractor, PageRasterizer
from mcq_extractor.markers import detect_answer_marker
from mcq_extractor.models import (
    WHOLE_DOCUMENT,
    ClassificationResult,
    Confidence,
    ExtractedText,
    ExtractionMethod,
    ExtractionResponse,
    PageImage,
    PipelineResult,
    Question,
)
from mcq_extractor.normalizer import clean_ocr_text, clean_text
from mcq_extractor.ocr import TesseractOCREngine
from mcq_extractor.parser import extract_questions
from mcq_extractor.pipeline import MCQExtractionPipeline
from mcq_extractor.prompts import build_structuring_prompt
from mcq_extractor.response_parser import parse_structuring_response
from mcq_extractor.validation import partition_valid, to_record, validate_question

__version__ = "0.1.0"

__all__ = [
    # High-level API
    "extract_questions",
    # Core classes
    "MCQExtractionPipeline",
    "PDFTypeClassifier",
    "DirectTextExtractor",
    "PageRasterizer",
    "TesseractOCREngine",
    "StructuringClient",
    # Functions
    "clean_text",
    "clean_ocr_text",
    "detect_answer_marker",
    "build_structuring_prompt",
    "parse_structuring_response",
    "validate_question",
    "partition_valid",
    "to_record",
    # Data models
    "WHOLE_DOCUMENT",
    "ClassificationResult",
    "Confidence",
    "ExtractedText",
    "ExtractionMethod",
    "ExtractionResponse",
    "PageImage",
    "PipelineResult",
    "Question",
    # Configuration
    "OCRConfig",
    "StructuringConfig",
    "PipelineConfig",
    # Exceptions
    "MCQExtractorError",
    "ExtractionError",
    "RenderingError",
    "OCRError",
    "StructuringError",
    "QuestionValidationError",
]
