"""Shared fixtures: synthetic PDFs, page bitmaps and a mock completion service."""

from __future__ import annotations

import io
import json

import fitz
import httpx
import pytest
from PIL import Image

MCQ_PAGE = """1. What is the capital of France?
A. London
B. Paris
C. Berlin
D. Madrid
2. Which planet is known as the red planet?
A. Venus
B. Jupiter
C. Mars
D. Saturn
3. What is the boiling point of water at sea level?
A. 90 degrees Celsius
B. 100 degrees Celsius
C. 110 degrees Celsius
D. 120 degrees Celsius"""

SERVICE_QUESTIONS = [
    {
        "question": "What is the capital of France?",
        "options": ["A. London", "B. Paris", "C. Berlin", "D. Madrid"],
        "correctAnswer": 1,
        "confidence": "high",
        "extractionMethod": "direct",
    },
    {
        "question": "Which planet is known as the red planet?",
        "options": ["A. Venus", "B. Jupiter", "C. Mars", "D. Saturn"],
        "correctAnswer": 2,
        "confidence": "medium",
        "extractionMethod": "direct",
    },
]


def make_pdf(pages: list[str]) -> bytes:
    """Build a PDF whose pages carry the given text layers ("" = blank page)."""
    document = fitz.open()
    for text in pages:
        page = document.new_page()
        if text:
            page.insert_text((72, 72), text, fontsize=10)
    data = document.tobytes()
    document.close()
    return data


def make_png(width: int = 20, height: int = 20) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), "white").save(buffer, format="PNG")
    return buffer.getvalue()


def completion(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


def fenced(items: list[dict]) -> str:
    return "Here are the questions:\n```json\n" + json.dumps(items) + "\n```\nDone."


@pytest.fixture
def text_pdf() -> bytes:
    return make_pdf([MCQ_PAGE, MCQ_PAGE, MCQ_PAGE])


@pytest.fixture
def blank_pdf() -> bytes:
    return make_pdf(["", ""])


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


class RecordingSleep:
    """Stand-in for time.sleep that records requested delays."""

    def __init__(self):
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def no_sleep() -> RecordingSleep:
    return RecordingSleep()
