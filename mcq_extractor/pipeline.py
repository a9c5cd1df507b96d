"""Extraction pipeline orchestration.

The pipeline is a small state machine::

    CLASSIFY --text--> DIRECT_PATH --success--> DONE
       |                   | insufficient / error
       +--image/error--> IMAGE_PATH --success--> DONE
                           | error
                         FINAL_RETRY --> DONE (empty on error)

Each stage returns a :class:`StageResult` whose outcome picks the next
state. Nothing raises out of :meth:`MCQExtractionPipeline.run`; when every
tier fails the result is an empty question list.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from mcq_extractor.client import StructuringClient
from mcq_extractor.config import PipelineConfig
from mcq_extractor.detector import PDFTypeClassifier
from mcq_extractor.extractor import DirectTextExtractor, PageRasterizer
from mcq_extractor.logger import Timer, document_context, get_logger, log_context
from mcq_extractor.models import (
    WHOLE_DOCUMENT,
    ExtractionMethod,
    PageImage,
    PipelineResult,
    Question,
)
from mcq_extractor.ocr import TesseractOCREngine
from mcq_extractor.prompts import build_structuring_prompt
from mcq_extractor.response_parser import parse_structuring_response

logger = get_logger(__name__)


class PipelineState(str, Enum):
    CLASSIFY = "classify"
    DIRECT_PATH = "direct_path"
    IMAGE_PATH = "image_path"
    FINAL_RETRY = "final_retry"
    DONE = "done"


class StageOutcome(str, Enum):
    SUCCESS = "success"
    INSUFFICIENT = "insufficient"
    ERROR = "error"


@dataclass(frozen=True)
class StageResult:
    outcome: StageOutcome
    questions: tuple[Question, ...] = ()
    reason: str = ""

    @classmethod
    def success(cls, questions: list[Question]) -> "StageResult":
        return cls(StageOutcome.SUCCESS, tuple(questions))

    @classmethod
    def insufficient(cls, reason: str) -> "StageResult":
        return cls(StageOutcome.INSUFFICIENT, reason=reason)

    @classmethod
    def error(cls, exc: BaseException) -> "StageResult":
        return cls(StageOutcome.ERROR, reason=f"{type(exc).__name__}: {exc}")


class MCQExtractionPipeline:
    """Runs one PDF through classification, extraction and structuring."""

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        classifier: Optional[PDFTypeClassifier] = None,
        text_extractor: Optional[DirectTextExtractor] = None,
        rasterizer: Optional[PageRasterizer] = None,
        ocr_engine: Optional[TesseractOCREngine] = None,
        client: Optional[StructuringClient] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Pipeline configuration, including the service credential.
                If None, uses defaults (no credential).
            classifier: PDF type classifier. If None, creates default.
            text_extractor: Text-layer extractor. If None, creates default.
            rasterizer: Page rasterizer. If None, creates default from config.
            ocr_engine: OCR adapter. If None, creates default from config.
            client: Structuring service client. If None, creates default from config.
            sleep: Function used for the inter-page delay.
        """
        self.config = config or PipelineConfig()
        self.classifier = classifier or PDFTypeClassifier(self.config)
        self.text_extractor = text_extractor or DirectTextExtractor()
        self.rasterizer = rasterizer or PageRasterizer(self.config.ocr)
        self.ocr_engine = ocr_engine or TesseractOCREngine(self.config.ocr)
        self.client = client or StructuringClient(self.config.structuring)
        self._sleep = sleep

    def extract(self, file_bytes: bytes) -> list[Question]:
        """Return the questions found in a document (possibly none)."""
        return list(self.run(file_bytes).questions)

    def run(self, file_bytes: bytes, document_id: Optional[str] = None) -> PipelineResult:
        """Run the fallback state machine over one document.

        Log lines emitted during the run carry the document id. The binding
        is released when the run returns.
        """
        with document_context(document_id):
            return self._run(file_bytes)

    def _run(self, file_bytes: bytes) -> PipelineResult:
        path: list[str] = []
        questions: tuple[Question, ...] = ()
        exhausted = False
        state = PipelineState.CLASSIFY

        with Timer("pipeline") as timer:
            while state is not PipelineState.DONE:
                path.append(state.value)
                try:
                    state, questions, exhausted = self._step(state, file_bytes)
                except Exception as exc:
                    if state is PipelineState.FINAL_RETRY:
                        logger.error(
                            "All processing methods failed",
                            extra_data={"error_type": type(exc).__name__, "error": str(exc)},
                        )
                        state, questions, exhausted = PipelineState.DONE, (), True
                        continue
                    logger.error(
                        "Unexpected pipeline error, retrying with image processing",
                        extra_data={
                            "state": state.value,
                            "error_type": type(exc).__name__,
                            "error": str(exc),
                        },
                    )
                    state = PipelineState.FINAL_RETRY

        self._log_summary(questions, path, exhausted, timer.get_elapsed_ms())
        return PipelineResult(
            questions=questions, path=tuple(path), fallback_exhausted=exhausted
        )

    def _step(
        self, state: PipelineState, file_bytes: bytes
    ) -> tuple[PipelineState, tuple[Question, ...], bool]:
        """Execute one state; return (next state, questions, exhausted)."""
        if state is PipelineState.CLASSIFY:
            try:
                classification = self.classifier.classify(file_bytes)
            except Exception as exc:
                logger.error(
                    "Classification failed, using image processing",
                    extra_data={"error_type": type(exc).__name__, "error": str(exc)},
                )
                return PipelineState.IMAGE_PATH, (), False
            if classification.is_text_based:
                return PipelineState.DIRECT_PATH, (), False
            return PipelineState.IMAGE_PATH, (), False

        if state is PipelineState.DIRECT_PATH:
            result = self._run_direct_path(file_bytes)
            if result.outcome is StageOutcome.SUCCESS:
                return PipelineState.DONE, result.questions, False
            logger.warning(
                "Direct extraction unusable, falling back to image processing",
                extra_data={"outcome": result.outcome.value, "reason": result.reason},
            )
            return PipelineState.IMAGE_PATH, (), False

        if state is PipelineState.IMAGE_PATH:
            result = self._run_image_path(file_bytes)
            if result.outcome is StageOutcome.SUCCESS:
                return PipelineState.DONE, result.questions, False
            logger.warning(
                "Image processing failed, attempting final retry",
                extra_data={"reason": result.reason},
            )
            return PipelineState.FINAL_RETRY, (), False

        if state is PipelineState.FINAL_RETRY:
            result = self._run_image_path(file_bytes)
            if result.outcome is StageOutcome.SUCCESS:
                return PipelineState.DONE, result.questions, False
            logger.error(
                "All processing methods failed",
                extra_data={"reason": result.reason},
            )
            return PipelineState.DONE, (), True

        raise ValueError(f"Unknown pipeline state: {state}")

    def _run_direct_path(self, file_bytes: bytes) -> StageResult:
        try:
            extracted = self.text_extractor.extract(file_bytes)
        except Exception as exc:
            return StageResult.error(exc)

        if len(extracted.cleaned_text) < self.config.direct_min_chars:
            return StageResult.insufficient(
                f"only {len(extracted.cleaned_text)} characters in text layer"
            )

        prompt = build_structuring_prompt(
            extracted,
            page=WHOLE_DOCUMENT,
            method=ExtractionMethod.DIRECT,
            text_limit=self.config.prompt_text_limit,
        )
        response = self.client.complete(prompt, identifier="text PDF")
        if response is None:
            return StageResult.insufficient("no response from structuring service")

        return StageResult.success(
            parse_structuring_response(
                response,
                pattern_answer=extracted.answer_marker,
                method=ExtractionMethod.DIRECT,
                page=WHOLE_DOCUMENT,
            )
        )

    def _run_image_path(self, file_bytes: bytes) -> StageResult:
        questions: list[Question] = []
        try:
            for position, page in enumerate(self.rasterizer.iter_pages(file_bytes)):
                if position > 0:
                    self._sleep(self.config.inter_page_delay_seconds)
                with log_context(page_number=page.page_number):
                    questions.extend(self._process_page(page))
        except Exception as exc:
            return StageResult.error(exc)
        return StageResult.success(questions)

    def _process_page(self, page: PageImage) -> list[Question]:
        extracted = self.ocr_engine.recognize(page)
        if len(extracted.cleaned_text) < self.config.ocr_min_chars:
            logger.info(
                f"Page {page.page_number}: insufficient text extracted, skipping",
                extra_data={"characters_extracted": len(extracted.cleaned_text)},
            )
            return []

        prompt = build_structuring_prompt(
            extracted,
            page=page.page_number,
            method=ExtractionMethod.OCR,
            text_limit=self.config.prompt_text_limit,
        )
        response = self.client.complete(prompt, identifier=f"page {page.page_number}")
        if response is None:
            return []

        questions = parse_structuring_response(
            response,
            pattern_answer=extracted.answer_marker,
            method=ExtractionMethod.OCR,
            page=page.page_number,
        )
        logger.info(
            f"Page {page.page_number}: extracted {len(questions)} questions",
            extra_data={"question_count": len(questions)},
        )
        return questions

    @staticmethod
    def _log_summary(
        questions: tuple[Question, ...], path: list[str], exhausted: bool, elapsed_ms: int
    ) -> None:
        if not questions:
            logger.warning(
                "No questions were extracted",
                extra_data={"path": "->".join(path), "fallback_exhausted": exhausted},
            )
            return
        logger.info(
            f"Extracted {len(questions)} questions",
            extra_data={
                "with_pattern": sum(1 for q in questions if q.pattern_detected),
                "direct": sum(1 for q in questions if q.extraction_method is ExtractionMethod.DIRECT),
                "ocr": sum(1 for q in questions if q.extraction_method is ExtractionMethod.OCR),
                "path": "->".join(path),
                "pipeline_time_ms": elapsed_ms,
            },
        )
