"""Parsing of structuring-service replies into Question records."""

import json
import re
from typing import Any, Optional, Union

from mcq_extractor.logger import get_logger
from mcq_extractor.models import (
    WHOLE_DOCUMENT,
    Confidence,
    ExtractionMethod,
    Question,
)

logger = get_logger(__name__)

_CODE_FENCE = re.compile(r"```json|```")
_JSON_ARRAY = re.compile(r"\[\s*{[\s\S]*}\s*\]")

OPTION_LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_LABELLED_ANSWER = re.compile(r"\(?([A-Z])[.)]\s")


def strip_code_fences(response: str) -> str:
    return _CODE_FENCE.sub("", response).strip()


def parse_structuring_response(
    response: Optional[str],
    pattern_answer: Optional[str] = None,
    method: ExtractionMethod = ExtractionMethod.DIRECT,
    page: Union[int, str] = WHOLE_DOCUMENT,
) -> list[Question]:
    """Turn a free-form completion into questions.

    The reply may wrap its JSON array in code fences or commentary. A reply
    that does not decode to a JSON array yields an empty list.

    Args:
        response: Raw completion text
        pattern_answer: Letter found by marker detection, if any. When set,
            every question is stamped with it and missing confidence
            defaults to "high".
        method: Extraction method stamped on every question
        page: Source page stamped on every question

    Returns:
        Parsed questions (possibly empty)
    """
    if not response:
        return []

    cleaned = strip_code_fences(response)
    match = _JSON_ARRAY.search(cleaned)
    payload = match.group(0) if match else cleaned

    try:
        items = json.loads(payload)
    except ValueError as exc:
        logger.warning(
            "Structuring response is not valid JSON",
            extra_data={
                "error": str(exc),
                "response_sample": response[:300],
            },
        )
        return []

    if not isinstance(items, list):
        logger.warning(
            "Structuring response is not a JSON array",
            extra_data={"payload_type": type(items).__name__},
        )
        return []

    method = ExtractionMethod(method)
    questions = []
    for item in items:
        if not isinstance(item, dict):
            continue
        questions.append(_to_question(item, pattern_answer, method, page))
    return questions


def _to_question(
    item: dict[str, Any],
    pattern_answer: Optional[str],
    method: ExtractionMethod,
    page: Union[int, str],
) -> Question:
    options = item.get("options") or []
    if not isinstance(options, list):
        options = [options]
    letters = _correct_letters(item.get("correctAnswer"))
    index = OPTION_LETTERS.index(min(letters)) if letters else None

    raw_confidence = item.get("confidence")
    confidence = Confidence.coerce(raw_confidence)
    if confidence is None and raw_confidence not in (None, ""):
        logger.debug(
            "Unrecognised confidence label dropped",
            extra_data={"confidence": raw_confidence},
        )
    if pattern_answer and confidence is None:
        confidence = Confidence.HIGH

    return Question(
        question_text=str(item.get("question") or "").strip(),
        options=tuple(str(option).strip() for option in options),
        correct_answer_index=index,
        correct_answer_letters=letters,
        confidence=confidence,
        source_page=page,
        extraction_method=method,
        pattern_detected=pattern_answer or None,
    )


def _correct_letters(value: Any) -> frozenset[str]:
    """Normalize ``correctAnswer`` (index, digit, letter, option label or list) to letters."""
    if isinstance(value, list):
        letters: set[str] = set()
        for entry in value:
            letters |= _correct_letters(entry)
        return frozenset(letters)
    if isinstance(value, bool):
        return frozenset()
    if isinstance(value, int):
        if 0 <= value < len(OPTION_LETTERS):
            return frozenset(OPTION_LETTERS[value])
        return frozenset()
    if isinstance(value, float) and value.is_integer():
        return _correct_letters(int(value))
    if isinstance(value, str):
        text = value.strip().rstrip(".)").lstrip("(").upper()
        if text.isdigit():
            return _correct_letters(int(text))
        if len(text) == 1 and text in OPTION_LETTERS:
            return frozenset(text)
        labelled = _LABELLED_ANSWER.match(value.strip().upper())
        if labelled:
            return frozenset(labelled.group(1))
    return frozenset()
