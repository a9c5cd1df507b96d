"""Custom exceptions for the MCQ extractor."""


class MCQExtractorError(Exception):
    """Base exception for MCQ extractor errors."""

    pass


class ExtractionError(MCQExtractorError):
    """Raised when the text layer of a document cannot be read."""

    pass


class RenderingError(MCQExtractorError):
    """Raised when a page cannot be rasterized for OCR."""

    pass


class OCRError(MCQExtractorError):
    """Raised when the OCR engine fails on a page bitmap."""

    pass


class StructuringError(MCQExtractorError):
    """Raised when the structuring service returns an unusable payload."""

    pass


class QuestionValidationError(MCQExtractorError):
    """Raised when a question record breaks the persistence contract."""

    pass
