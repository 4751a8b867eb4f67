"""Document-to-text extraction with ordered, quality-gated fallbacks.

Strategies run cheapest first: native structured parse, an enhanced
native parse, raw container scraping and finally OCR. The first text
that passes the quality gate is returned and nothing after it runs.
"""

import re
from collections.abc import Callable
from types import ModuleType

from company_extractor.errors import ExtractionExhausted, OCRServiceUnavailable
from company_extractor.ocr.strategy_runner import OCRStrategyRunner
from company_extractor.quality.text_quality import QualityGate
from company_extractor.utils.config import AppConfig, Capabilities
from company_extractor.utils.logger import get_logger

from . import native, scraper
from .types import ExtractionAttempt, MediaKind, TextExtraction, media_kind

logger = get_logger(__name__)

OCR_STRATEGY = "ocr"

# (strategy, module, function); functions are looked up when each document runs.
_STRATEGIES: dict[MediaKind, list[tuple[str, ModuleType, str]]] = {
    MediaKind.PDF: [
        ("native_parse", native, "parse_pdf"),
        ("enhanced_native_parse", native, "parse_pdf_enhanced"),
        ("raw_scrape", scraper, "scrape_container_text"),
    ],
    MediaKind.DOCX: [
        ("native_parse", native, "parse_docx"),
        ("enhanced_native_parse", native, "parse_docx_runs"),
    ],
    MediaKind.DOC: [
        ("native_parse", native, "parse_doc"),
    ],
    MediaKind.IMAGE: [],
}

_OCR_KINDS = {MediaKind.PDF, MediaKind.IMAGE}


def normalize_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


class DocumentTextExtractor:
    """Turn a document into trustworthy plain text.

    Args:
        gate: Quality gate applied to native and scraped text.
        capabilities: Which OCR providers may be used.
        ocr_runner: Runner for the OCR stage; ``None`` disables OCR.
    """

    def __init__(
        self,
        gate: QualityGate,
        capabilities: Capabilities,
        ocr_runner: OCRStrategyRunner | None = None,
    ) -> None:
        self.gate = gate
        self.capabilities = capabilities
        self.ocr_runner = ocr_runner

    @classmethod
    def from_config(
        cls, config: AppConfig, capabilities: Capabilities
    ) -> "DocumentTextExtractor":
        runner = (
            OCRStrategyRunner.from_config(config, capabilities)
            if capabilities.any_ocr
            else None
        )
        return cls(QualityGate(config.quality_gate), capabilities, runner)

    def close(self) -> None:
        if self.ocr_runner is not None:
            self.ocr_runner.close()

    def extract(self, data: bytes, media_type: str) -> TextExtraction:
        """Extract text from a document.

        Args:
            data: Raw document bytes.
            media_type: Declared media type.

        Returns:
            Accepted text, winning strategy, quality report and attempts.

        Raises:
            UnsupportedMediaType: If the media type is not supported.
            ExtractionExhausted: If no strategy yields acceptable text.
        """
        kind = media_kind(media_type)
        attempts: list[ExtractionAttempt] = []
        logger.info("Extracting text from %s document (%d bytes)", kind, len(data))

        for name, module, function in _STRATEGIES[kind]:
            result = self._attempt(name, getattr(module, function), data)
            attempts.append(result)
            if result.succeeded:
                return TextExtraction(
                    text=result.text or "",
                    strategy=name,
                    quality=result.quality,
                    attempts=attempts,
                )

        if kind in _OCR_KINDS:
            extraction = self._run_ocr(data, media_type, attempts)
            if extraction is not None:
                return extraction

        best_text = max((a.text or "" for a in attempts), key=len, default="")
        logger.error(
            "Text extraction exhausted after %d attempts", len(attempts)
        )
        raise ExtractionExhausted(attempts, best_text)

    def _attempt(
        self, name: str, strategy: Callable[[bytes], str], data: bytes
    ) -> ExtractionAttempt:
        try:
            text = normalize_whitespace(strategy(data))
        except Exception as exc:
            logger.warning("Strategy %s failed: %s", name, exc)
            return ExtractionAttempt(name, succeeded=False, error=f"error: {exc}")

        verdict = self.gate.evaluate(text)
        if not verdict.passed:
            logger.info("Strategy %s rejected: %s", name, verdict.reason)
        else:
            logger.info(
                "Strategy %s accepted (%d chars, %d%% readable)",
                name,
                len(text),
                verdict.report.readable_ratio,
            )
        return ExtractionAttempt(
            name,
            succeeded=verdict.passed,
            text=text,
            quality=verdict.report,
            error=verdict.reason,
        )

    def _run_ocr(
        self, data: bytes, media_type: str, attempts: list[ExtractionAttempt]
    ) -> TextExtraction | None:
        if self.ocr_runner is None or not self.capabilities.any_ocr:
            attempts.append(
                ExtractionAttempt(
                    OCR_STRATEGY,
                    succeeded=False,
                    error="skipped: no OCR provider configured",
                )
            )
            return None

        try:
            result = self.ocr_runner.run(data, media_type)
        except OCRServiceUnavailable as exc:
            attempts.extend(exc.attempts)
            if not exc.attempts:
                attempts.append(
                    ExtractionAttempt(OCR_STRATEGY, succeeded=False, error=exc.message)
                )
            return None

        attempts.extend(result.attempts)
        return TextExtraction(
            text=result.text,
            strategy=result.strategy,
            quality=result.quality,
            attempts=attempts,
            ocr_sourced=True,
        )
