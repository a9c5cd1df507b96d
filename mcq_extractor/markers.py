"""Answer-marker detection.

Scans raw text for the symbols or phrases an answer key uses to flag the
correct option. Patterns are tried in order and the first one that matches
anywhere in the text wins. Symbolic markers come first; the textual
"correct"/"answer" patterns are last since they also fire on question stems.
The order was tuned by trial and is kept as is.
"""

import re
from typing import Optional

ANSWER_MARKER_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"✓\s*[A-D]", re.IGNORECASE),
    re.compile(r"\*\s*[A-D]", re.IGNORECASE),
    re.compile(r"\[[xX✓]\][A-D]", re.IGNORECASE),
    re.compile(r"[A-D]\s*\(correct\)", re.IGNORECASE),
    re.compile(r"[A-D]\s*✅", re.IGNORECASE),
    re.compile(r"[A-D].*?\[answer\]", re.IGNORECASE),
    re.compile(r"correct.*?[A-D]", re.IGNORECASE),
    re.compile(r"answer.*?[A-D]", re.IGNORECASE),
)

_OPTION_LETTER = re.compile(r"[A-D]", re.IGNORECASE)


def detect_answer_marker(text: Optional[str]) -> Optional[str]:
    """Return the option letter flagged as correct in ``text``, or None.

    Examples:
        >>> detect_answer_marker("The capital is Paris. ✓ B) Paris")
        'B'
        >>> detect_answer_marker("no hints here") is None
        True
    """
    if not text:
        return None
    for pattern in ANSWER_MARKER_PATTERNS:
        match = pattern.search(text)
        if match is None:
            continue
        letter = _OPTION_LETTER.search(match.group(0))
        if letter:
            return letter.group(0).upper()
    return None
