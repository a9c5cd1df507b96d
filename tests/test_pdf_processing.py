"""Tests for PDF classification, text-layer extraction and rasterization."""

from __future__ import annotations

import io
from unittest.mock import patch

import fitz
import pytest
from PIL import Image

from conftest import MCQ_PAGE, make_pdf
from mcq_extractor.config import OCRConfig, PipelineConfig
from mcq_extractor.detector import PDFTypeClassifier
from mcq_extractor.exceptions import ExtractionError, RenderingError
from mcq_extractor.extractor import (
    PAGE_FAILED_PLACEHOLDER,
    DirectTextExtractor,
    PageRasterizer,
)
from mcq_extractor.models import ClassificationResult

PNG_SIGNATURE = b"\x89PNG"


# ═══════════════════════════════════════════════════════════════════════════════
# CLASSIFIER
# ═══════════════════════════════════════════════════════════════════════════════


class TestPDFTypeClassifier:
    def test_text_layer_over_threshold_is_text_based(self, text_pdf):
        result = PDFTypeClassifier().classify(text_pdf)
        assert result.is_text_based is True
        assert result.page_count == 3
        assert "capital of France" in result.sample_text
        assert len(result.sample_text) <= 500

    def test_blank_pages_are_image_based(self, blank_pdf):
        result = PDFTypeClassifier().classify(blank_pdf)
        assert result == ClassificationResult(is_text_based=False, page_count=2, sample_text="")

    def test_single_dense_page_is_enough(self):
        dense = "\n".join(MCQ_PAGE.splitlines()[:10])
        assert 100 < len(dense) < 300
        config = PipelineConfig(classifier_min_total_chars=10_000)
        result = PDFTypeClassifier(config).classify(make_pdf(["", dense]))
        assert result.is_text_based is True

    def test_short_text_is_image_based(self):
        result = PDFTypeClassifier().classify(make_pdf(["Page 1", "Scanned exam"]))
        assert result.is_text_based is False
        assert result.page_count == 2

    def test_only_leading_pages_are_sampled(self):
        pdf = make_pdf(["", "", "", MCQ_PAGE])
        result = PDFTypeClassifier().classify(pdf)
        assert result.is_text_based is False
        assert result.page_count == 4

    def test_empty_buffer_returns_default(self):
        assert PDFTypeClassifier().classify(b"") == ClassificationResult(False, 0, "")

    def test_corrupt_bytes_return_default(self):
        result = PDFTypeClassifier().classify(b"%PDF-1.7 this is not really a pdf")
        assert result == ClassificationResult(False, 0, "")

    def test_encrypted_document_returns_default(self):
        document = fitz.open()
        document.new_page().insert_text((72, 72), MCQ_PAGE, fontsize=10)
        encrypted = document.tobytes(
            encryption=fitz.PDF_ENCRYPT_AES_256, owner_pw="owner", user_pw="reader"
        )
        document.close()
        assert PDFTypeClassifier().classify(encrypted) == ClassificationResult(False, 0, "")

    def test_total_length_without_dense_page(self):
        line = ("Question text " * 7)[:90]
        pdf = make_pdf([line] * 5)

        result = PDFTypeClassifier(PipelineConfig(classifier_sample_pages=5)).classify(pdf)
        assert result.is_text_based is True
        assert len(result.sample_text) > 300

        # Three sampled pages stay under the total threshold.
        assert PDFTypeClassifier().classify(pdf).is_text_based is False

    def test_failing_page_is_skipped(self, text_pdf):
        with patch.object(
            fitz.Page, "get_text", side_effect=[RuntimeError("bad page"), MCQ_PAGE, MCQ_PAGE]
        ):
            result = PDFTypeClassifier().classify(text_pdf)
        assert result.is_text_based is True
        assert result.page_count == 3


# ═══════════════════════════════════════════════════════════════════════════════
# DIRECT TEXT EXTRACTOR
# ═══════════════════════════════════════════════════════════════════════════════


class TestDirectTextExtractor:
    def test_extracts_labelled_pages(self, text_pdf):
        extracted = DirectTextExtractor().extract(text_pdf)
        for number in (1, 2, 3):
            assert f"--- Page {number} ---" in extracted.cleaned_text
        assert "What is the capital of France?" in extracted.cleaned_text
        assert extracted.confidence == 100.0
        assert extracted.answer_marker is None

    def test_detects_marker_in_raw_text(self):
        pdf = make_pdf([MCQ_PAGE + "\nAnswer key: *B"])
        assert DirectTextExtractor().extract(pdf).answer_marker == "B"

    def test_failed_page_gets_placeholder(self, text_pdf):
        with patch.object(
            fitz.Page, "get_text", side_effect=[MCQ_PAGE, RuntimeError("broken"), MCQ_PAGE]
        ):
            extracted = DirectTextExtractor().extract(text_pdf)
        assert f"--- Page 2 ---\n{PAGE_FAILED_PLACEHOLDER}" in extracted.cleaned_text
        assert extracted.cleaned_text.count("capital of France") == 2

    def test_sparse_document_yields_short_text(self, blank_pdf):
        extracted = DirectTextExtractor().extract(blank_pdf)
        assert extracted.cleaned_text == "--- Page 1 ---\n--- Page 2 ---"
        assert len(extracted.cleaned_text) < 100

    def test_unreadable_document_raises(self):
        with pytest.raises(ExtractionError):
            DirectTextExtractor().extract(b"")


# ═══════════════════════════════════════════════════════════════════════════════
# RASTERIZER
# ═══════════════════════════════════════════════════════════════════════════════


class TestPageRasterizer:
    def test_renders_each_page_at_scale(self, text_pdf):
        images = PageRasterizer().render(text_pdf)
        assert [image.page_number for image in images] == [1, 2, 3]

        page_rect = fitz.open(stream=text_pdf, filetype="pdf")[0].rect
        first = images[0]
        assert first.bitmap.startswith(PNG_SIGNATURE)
        assert first.width == pytest.approx(page_rect.width * 2.5, abs=1)
        assert first.height == pytest.approx(page_rect.height * 2.5, abs=1)

    def test_background_is_white(self, blank_pdf):
        image = next(PageRasterizer().iter_pages(blank_pdf))
        with Image.open(io.BytesIO(image.bitmap)) as bitmap:
            assert bitmap.mode == "RGB"
            assert bitmap.getpixel((0, 0)) == (255, 255, 255)

    def test_scale_is_configurable(self, blank_pdf):
        rasterizer = PageRasterizer(OCRConfig(render_scale=1.0))
        small = next(rasterizer.iter_pages(blank_pdf))
        large = next(PageRasterizer().iter_pages(blank_pdf))
        assert large.width > small.width * 2

    def test_pages_are_rendered_lazily(self, text_pdf):
        pages = PageRasterizer().iter_pages(text_pdf)
        assert next(pages).page_number == 1
        assert next(pages).page_number == 2

    def test_unreadable_document_raises(self):
        with pytest.raises(RenderingError):
            list(PageRasterizer().iter_pages(b""))

    def test_render_failure_is_fatal(self, text_pdf):
        with patch.object(fitz.Page, "get_pixmap", side_effect=RuntimeError("no memory")):
            with pytest.raises(RenderingError, match="page 1"):
                PageRasterizer().render(text_pdf)
