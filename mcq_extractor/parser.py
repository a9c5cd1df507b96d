"""High-level API for MCQ extraction."""

from pathlib import Path
from typing import Optional

from mcq_extractor.config import PipelineConfig
from mcq_extractor.logger import get_logger
from mcq_extractor.models import ExtractionResponse
from mcq_extractor.pipeline import MCQExtractionPipeline

logger = get_logger(__name__)


def extract_questions(
    file_path: Optional[str] = None,
    file_bytes: Optional[bytes] = None,
    config: Optional[PipelineConfig] = None,
    pipeline: Optional[MCQExtractionPipeline] = None,
) -> ExtractionResponse:
    """Extract multiple-choice questions from a PDF.

    Accepts either a file path or raw bytes. Input problems come back as a
    400 response; the pipeline itself degrades to an empty question list
    rather than failing.

    Args:
        file_path: Path to a PDF file (alternative to file_bytes)
        file_bytes: Raw PDF bytes (alternative to file_path)
        config: Pipeline configuration (uses defaults if not provided)
        pipeline: Pre-built pipeline; takes precedence over config

    Returns:
        ExtractionResponse with the questions and their count, or an error
        message and status

    Examples:
        >>> config = PipelineConfig(structuring=StructuringConfig(api_key="sk-..."))
        >>> response = extract_questions(file_path="quiz.pdf", config=config)
        >>> response.count
        12
    """
    if file_path and file_bytes:
        return _invalid("Provide either file_path or file_bytes, not both")
    if not file_path and file_bytes is None:
        return _invalid("No PDF file uploaded")

    if file_path:
        path = Path(file_path)
        if not path.is_file():
            return _invalid(f"File not found: {file_path}")
        file_bytes = path.read_bytes()

    if not file_bytes:
        return _invalid("Uploaded PDF is empty")

    pipeline = pipeline or MCQExtractionPipeline(config=config)
    try:
        result = pipeline.run(file_bytes)
    except Exception as exc:
        logger.error(
            "PDF processing failed",
            extra_data={"error_type": type(exc).__name__, "error": str(exc)},
            exc_info=True,
        )
        return ExtractionResponse(
            success=False, error=f"Failed to process PDF: {exc}", status=500
        )

    return ExtractionResponse(success=True, questions=result.questions, status=200)


def _invalid(message: str) -> ExtractionResponse:
    logger.warning("Rejected extraction request", extra_data={"reason": message})
    return ExtractionResponse(success=False, error=message, status=400)
