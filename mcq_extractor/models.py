"""Data models for the MCQ extractor."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

WHOLE_DOCUMENT = "whole-document"
"""``source_page`` value for questions extracted from the whole text layer."""


class ExtractionMethod(str, Enum):
    DIRECT = "direct"
    OCR = "ocr"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def coerce(cls, value: Any) -> Optional["Confidence"]:
        """Map a free-form confidence label onto a tier, or None if unknown."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class ClassificationResult:
    """Whether a document carries a usable text layer."""

    is_text_based: bool
    page_count: int
    sample_text: str = ""


@dataclass(frozen=True)
class PageImage:
    """A rendered page bitmap (PNG encoded)."""

    page_number: int
    bitmap: bytes = field(repr=False)
    width: int
    height: int


@dataclass(frozen=True)
class ExtractedText:
    """Text produced by one extraction unit (whole document or one page)."""

    raw_text: str
    cleaned_text: str
    answer_marker: Optional[str] = None
    confidence: float = 0.0

    @classmethod
    def empty(cls) -> "ExtractedText":
        return cls(raw_text="", cleaned_text="", answer_marker=None, confidence=0.0)


@dataclass(frozen=True)
class Question:
    """A structured multiple-choice question.

    ``correct_answer_index`` is zero based; ``correct_answer_letters`` holds
    every option letter marked correct (more than one for multi-answer
    questions). Neither is checked against ``options`` here, see
    :mod:`mcq_extractor.validation`.
    """

    question_text: str
    options: tuple[str, ...]
    correct_answer_index: Optional[int]
    correct_answer_letters: frozenset[str]
    confidence: Optional[Confidence]
    source_page: Union[int, str]
    extraction_method: ExtractionMethod
    pattern_detected: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the field names of the structuring contract."""
        data: dict[str, Any] = {
            "question": self.question_text,
            "options": list(self.options),
            "correctAnswer": self.correct_answer_index,
            "correctAnswerLetters": sorted(self.correct_answer_letters),
            "confidence": self.confidence.value if self.confidence else None,
            "page": self.source_page,
            "extractionMethod": self.extraction_method.value,
        }
        if self.pattern_detected:
            data["patternDetected"] = self.pattern_detected
        return data


@dataclass(frozen=True)
class PipelineResult:
    """Questions produced by one pipeline run and the route taken."""

    questions: tuple[Question, ...]
    path: tuple[str, ...] = ()
    fallback_exhausted: bool = False

    @property
    def count(self) -> int:
        return len(self.questions)


@dataclass(frozen=True)
class ExtractionResponse:
    """Inbound result: a question list, or an explicit processing error."""

    success: bool
    questions: tuple[Question, ...] = ()
    error: Optional[str] = None
    status: int = 200

    @property
    def count(self) -> int:
        return len(self.questions)

    def to_dict(self) -> dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error, "status": self.status}
        return {
            "success": True,
            "questions": [q.to_dict() for q in self.questions],
            "count": self.count,
        }
