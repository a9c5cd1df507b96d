"""PyMuPDF-based text-layer extraction and page rasterization."""

from collections.abc import Iterator
from typing import Optional

import fitz  # PyMuPDF

from mcq_extractor.config import OCRConfig
from mcq_extractor.exceptions import ExtractionError, RenderingError
from mcq_extractor.logger import Timer, get_logger
from mcq_extractor.markers import detect_answer_marker
from mcq_extractor.models import ExtractedText, PageImage
from mcq_extractor.normalizer import clean_text

logger = get_logger(__name__)

PAGE_FAILED_PLACEHOLDER = "[Text extraction partially failed]"


def _open_pdf(file_bytes: bytes) -> fitz.Document:
    return fitz.open(stream=file_bytes, filetype="pdf")


class DirectTextExtractor:
    """Reads the embedded text layer of every page.

    A page whose text cannot be read is replaced by a placeholder so the
    rest of the document is kept.
    """

    def extract(self, file_bytes: bytes) -> ExtractedText:
        """Extract the whole document as one unit.

        Raises:
            ExtractionError: If the document cannot be opened
        """
        try:
            document = _open_pdf(file_bytes)
        except Exception as exc:
            raise ExtractionError(f"Failed to open PDF: {exc}") from exc

        sections: list[str] = []
        failed_pages: list[int] = []

        with Timer("pdf_direct_extraction") as timer, document:
            for index in range(1, document.page_count + 1):
                try:
                    lines = document[index - 1].get_text().split("\n")
                    page_text = " ".join(line.strip() for line in lines if line.strip())
                except Exception as exc:
                    logger.warning(
                        f"Text extraction failed for page {index}",
                        extra_data={
                            "page_number": index,
                            "error_type": type(exc).__name__,
                            "error": str(exc),
                        },
                    )
                    failed_pages.append(index)
                    page_text = PAGE_FAILED_PLACEHOLDER

                sections.append(f"\n--- Page {index} ---\n{page_text}\n")
            page_count = len(sections)

        raw_text = "".join(sections)
        cleaned = clean_text(raw_text)

        logger.info(
            "PDF text layer extracted",
            extra_data={
                "page_count": page_count,
                "failed_pages": failed_pages or None,
                "characters_extracted": len(cleaned),
                "extraction_time_ms": timer.get_elapsed_ms(),
            },
        )

        return ExtractedText(
            raw_text=raw_text,
            cleaned_text=cleaned,
            answer_marker=detect_answer_marker(raw_text),
            confidence=100.0,
        )


class PageRasterizer:
    """Renders PDF pages to PNG bitmaps for OCR.

    Pages are rendered one at a time at a fixed zoom onto an opaque white
    background, so transparent regions do not turn into OCR noise.
    """

    def __init__(self, config: Optional[OCRConfig] = None):
        self.config = config or OCRConfig()

    def iter_pages(self, file_bytes: bytes) -> Iterator[PageImage]:
        """Yield one PageImage per page, in order.

        Raises:
            RenderingError: On any failure; a missing page bitmap cannot be
                recovered, so the whole image pipeline stops
        """
        try:
            document = _open_pdf(file_bytes)
        except Exception as exc:
            raise RenderingError(f"Failed to open PDF for rendering: {exc}") from exc

        matrix = fitz.Matrix(self.config.render_scale, self.config.render_scale)
        with document:
            logger.debug(
                "Rendering PDF pages",
                extra_data={
                    "page_count": document.page_count,
                    "render_scale": self.config.render_scale,
                },
            )
            for index in range(document.page_count):
                try:
                    pix = document[index].get_pixmap(matrix=matrix, alpha=False)
                    image = PageImage(
                        page_number=index + 1,
                        bitmap=pix.tobytes("png"),
                        width=pix.width,
                        height=pix.height,
                    )
                except Exception as exc:
                    logger.error(
                        f"Rendering failed for page {index + 1}",
                        extra_data={
                            "page_number": index + 1,
                            "error_type": type(exc).__name__,
                            "error": str(exc),
                        },
                    )
                    raise RenderingError(
                        f"Failed to render page {index + 1}: {exc}"
                    ) from exc

                logger.debug(
                    f"Page {image.page_number} rendered",
                    extra_data={"width": image.width, "height": image.height},
                )
                yield image

    def render(self, file_bytes: bytes) -> list[PageImage]:
        """Render every page eagerly."""
        return list(self.iter_pages(file_bytes))
