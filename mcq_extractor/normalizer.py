"""Whitespace and byte cleanup for extracted and recognized text."""

import re
from typing import Optional

_NON_PRINTABLE = re.compile(r"[^\x20-\x7E\n\r\t]")
_HORIZONTAL_SPACE = re.compile(r"[ \t]+")
_LINE_BREAKS = re.compile(r"[\n\r]+")
_BLANK_LINES = re.compile(r"\n\s*\n")
_JOINED_SENTENCE = re.compile(r"([a-zA-Z])\.([a-zA-Z])")


def clean_text(text: Optional[str]) -> str:
    """Normalize text taken from a PDF text layer.

    Drops non-printable characters, collapses spaces and line breaks and
    removes empty lines.
    """
    if not text:
        return ""
    text = _NON_PRINTABLE.sub("", text)
    text = _HORIZONTAL_SPACE.sub(" ", text)
    text = _LINE_BREAKS.sub("\n", text)
    lines = (line.strip() for line in text.split("\n"))
    return "\n".join(line for line in lines if line).strip()


def clean_ocr_text(text: Optional[str]) -> str:
    """Normalize tesseract output.

    OCR tends to glue sentences together ("a.b"), so a space is put back
    after such periods.
    """
    if not text:
        return ""
    text = _BLANK_LINES.sub("\n", text)
    text = _HORIZONTAL_SPACE.sub(" ", text)
    text = _JOINED_SENTENCE.sub(r"\1. \2", text)
    text = _NON_PRINTABLE.sub("", text)
    return text.strip()
