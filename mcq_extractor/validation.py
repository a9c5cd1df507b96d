"""Question validation and the persistence record shape.

The pipeline hands back whatever the structuring service produced. Before a
question is stored, its correctness markers must point at options that
actually exist.
"""

import re
from collections.abc import Iterable
from typing import Any, Optional

from mcq_extractor.exceptions import QuestionValidationError
from mcq_extractor.models import WHOLE_DOCUMENT, Question
from mcq_extractor.response_parser import OPTION_LETTERS

_OPTION_LABEL = re.compile(r"^\s*\(?([A-Za-z])[\.\):]\s*")


def option_labels(question: Question) -> list[str]:
    """Labels of a question's options.

    Taken from an ``A.``/``A)``/``(A)`` prefix when every option has one,
    otherwise assigned by position.
    """
    prefixed = [_OPTION_LABEL.match(option) for option in question.options]
    if prefixed and all(prefixed):
        return [match.group(1).upper() for match in prefixed]
    return list(OPTION_LETTERS[: len(question.options)])


def validate_question(question: Question) -> None:
    """Check a question against the persistence contract.

    Raises:
        QuestionValidationError: If the text or options are missing, or a
            correctness marker references an option that does not exist
    """
    if not question.question_text.strip():
        raise QuestionValidationError("question text is empty")
    if not question.options:
        raise QuestionValidationError("question has no options")

    labels = option_labels(question)
    missing = sorted(question.correct_answer_letters - set(labels))
    if missing:
        raise QuestionValidationError(
            f"correct answer {', '.join(missing)} not among options {', '.join(labels)}"
        )
    index = question.correct_answer_index
    if index is not None and not 0 <= index < len(question.options):
        raise QuestionValidationError(
            f"correct answer index {index} out of range for {len(question.options)} options"
        )


def partition_valid(
    questions: Iterable[Question],
) -> tuple[list[Question], list[tuple[Question, str]]]:
    """Split questions into valid ones and (question, reason) rejects."""
    valid: list[Question] = []
    rejected: list[tuple[Question, str]] = []
    for question in questions:
        try:
            validate_question(question)
        except QuestionValidationError as exc:
            rejected.append((question, str(exc)))
        else:
            valid.append(question)
    return valid, rejected


def to_record(
    question: Question,
    pdf_url: Optional[str] = None,
    pdf_filename: Optional[str] = None,
) -> dict[str, Any]:
    """Map a question onto the row shape the persistence layer stores.

    Call :func:`validate_question` first; an out-of-range answer index maps
    to ``None`` here.
    """
    labels = option_labels(question)
    index = question.correct_answer_index
    correct_answer = labels[index] if index is not None and 0 <= index < len(labels) else None

    page = question.source_page
    return {
        "question_text": question.question_text,
        "options": list(question.options),
        "correct_answer": correct_answer,
        "confidence": question.confidence.value if question.confidence else None,
        "extraction_method": question.extraction_method.value,
        "pattern_detected": question.pattern_detected,
        "page": None if page == WHOLE_DOCUMENT else int(page),
        "pdf_url": pdf_url,
        "pdf_filename": pdf_filename,
    }
