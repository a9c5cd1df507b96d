"""Prompt construction for the structuring service."""

from typing import Union

from mcq_extractor.models import WHOLE_DOCUMENT, ExtractedText, ExtractionMethod

DEFAULT_TEXT_LIMIT = 4000

NO_PATTERN_HINT = "No clear answer patterns detected."

PROMPT_TEMPLATE = """Extract ALL Multiple Choice Questions (MCQs) from this PDF {scope}.

ANALYSIS INSTRUCTIONS:
1. Identify COMPLETE MCQs: a question followed by its options (usually A, B, C, D).
2. For EACH question, decide the correct answer using:
   - Pattern detection: {pattern_hint}
   - Options marked with ✓, *, ✅, (correct), [x] or similar markers
   - {priority_hint}
   - Logical deduction when no marker is present

3. OUTPUT FORMAT:
   - Return ONLY a valid JSON array, with no commentary before or after it
   - Each element: {{
        "question": "full question text",
        "options": ["A. option1", "B. option2", "C. option3", "D. option4"],
        "correctAnswer": index (0-3),
        "confidence": "high/medium/low",
        "extractionMethod": "{method}"
     }}
   - correctAnswer index: 0=A, 1=B, 2=C, 3=D
   - Include ALL questions you can identify

TEXT CONTENT:
{text}"""


def describe_scope(page: Union[int, str]) -> str:
    if page == WHOLE_DOCUMENT:
        return "the entire document"
    return f"page {page}"


def build_structuring_prompt(
    extracted: ExtractedText,
    page: Union[int, str] = WHOLE_DOCUMENT,
    method: ExtractionMethod = ExtractionMethod.DIRECT,
    text_limit: int = DEFAULT_TEXT_LIMIT,
) -> str:
    """Build the instruction sent to the structuring service.

    Args:
        extracted: Text of the unit being structured
        page: Page number, or ``WHOLE_DOCUMENT`` for direct extraction
        method: Extraction method the results will be tagged with
        text_limit: Maximum number of cleaned characters embedded

    Returns:
        Prompt text
    """
    marker = extracted.answer_marker
    if marker:
        pattern_hint = (
            f"Found a marker for answer {marker}. "
            "This is LIKELY the correct answer, but verify it against the content."
        )
        priority_hint = f"If the pattern indicates answer {marker}, prioritize that option"
    else:
        pattern_hint = NO_PATTERN_HINT
        priority_hint = "No pattern hint is available for this text"

    return PROMPT_TEMPLATE.format(
        scope=describe_scope(page),
        pattern_hint=pattern_hint,
        priority_hint=priority_hint,
        method=ExtractionMethod(method).value,
        text=extracted.cleaned_text[:text_limit],
    )
