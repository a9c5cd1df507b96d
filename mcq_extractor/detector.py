"""PDF type detection: text layer or scanned images."""

from typing import Optional

import fitz  # PyMuPDF

from mcq_extractor.config import PipelineConfig
from mcq_extractor.logger import Timer, get_logger
from mcq_extractor.models import ClassificationResult
from mcq_extractor.normalizer import clean_text

logger = get_logger(__name__)

PDF_SIGNATURE = b"%PDF"


class PDFTypeClassifier:
    """Decides whether a PDF has a usable embedded text layer.

    Only the first few pages are sampled. A document counts as text based
    when the normalized sample is long enough, or when any single sampled
    page is dense on its own (scanned title plates followed by real text
    are common).
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        self.config = config or PipelineConfig()

    def classify(self, file_bytes: bytes) -> ClassificationResult:
        """Classify a document, never raising.

        Unreadable input (empty, corrupt, encrypted) is reported as an
        image-based document with zero pages.
        """
        logger.debug(
            "Starting PDF type detection",
            extra_data={
                "file_size_bytes": len(file_bytes),
                "has_pdf_signature": file_bytes[:4].startswith(PDF_SIGNATURE),
            },
        )

        try:
            with Timer("pdf_type_detection") as timer:
                result = self._classify(file_bytes)
        except Exception as exc:
            logger.error(
                "PDF type detection failed, assuming image-based document",
                extra_data={
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )
            return ClassificationResult(is_text_based=False, page_count=0, sample_text="")

        logger.info(
            "PDF type detected",
            extra_data={
                "pdf_type": "text" if result.is_text_based else "image",
                "page_count": result.page_count,
                "sample_length": len(result.sample_text),
                "detection_time_ms": timer.get_elapsed_ms(),
            },
        )
        return result

    def _classify(self, file_bytes: bytes) -> ClassificationResult:
        if not file_bytes:
            raise ValueError("empty document")

        with fitz.open(stream=file_bytes, filetype="pdf") as document:
            if document.needs_pass:
                raise ValueError("document is encrypted")

            page_count = document.page_count
            pages_to_check = min(self.config.classifier_sample_pages, page_count)
            sampled: list[str] = []
            has_dense_page = False

            for index in range(pages_to_check):
                try:
                    page_text = document[index].get_text()
                except Exception as exc:
                    logger.warning(
                        f"Text sampling failed for page {index + 1}",
                        extra_data={"error_type": type(exc).__name__, "error": str(exc)},
                    )
                    continue

                sampled.append(page_text)
                if len(page_text) > self.config.classifier_min_page_chars:
                    has_dense_page = True

        normalized = clean_text(" ".join(sampled))
        is_text_based = (
            len(normalized) > self.config.classifier_min_total_chars or has_dense_page
        )
        return ClassificationResult(
            is_text_based=is_text_based,
            page_count=page_count,
            sample_text=normalized[: self.config.sample_text_limit],
        )
