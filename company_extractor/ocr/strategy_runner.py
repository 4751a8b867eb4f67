"""Ordered OCR fallback across providers and parameter profiles.

Profiles run in a fixed priority order. The first one whose cleaned,
page-joined text clears the OCR quality gate wins; every other outcome
(HTTP error, processing error, empty or low-quality text) moves on to the
next profile. A provider that reports an outage has its remaining
profiles skipped.
"""

import tempfile
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from company_extractor.errors import OCRProfileFailed, OCRServiceUnavailable
from company_extractor.parsing.types import ExtractionAttempt
from company_extractor.preprocessing.pipeline import PreprocessingPipeline
from company_extractor.quality.text_quality import (
    QualityGate,
    TextQualityReport,
    analyze_text_quality,
)
from company_extractor.utils.config import AppConfig, Capabilities
from company_extractor.utils.logger import get_logger

from .cleanup import clean_ocr_text
from .pdf_handler import PDFHandler
from .providers import (
    OCRProfile,
    OCRProvider,
    OCRRunContext,
    OCRSpaceProvider,
    TesseractProvider,
    VisionProvider,
)
from .tesseract_engine import TesseractEngine

logger = get_logger(__name__)

PAGE_SEPARATOR = "\n\n--- Page Break ---\n\n"

OCRPlan = tuple[OCRProvider, OCRProfile]


@dataclass
class OCRRunResult:
    """Accepted OCR text with per-page diagnostics."""

    text: str
    strategy: str
    quality: TextQualityReport
    page_qualities: list[TextQualityReport]
    attempts: list[ExtractionAttempt] = field(default_factory=list)


def build_default_plans(
    config: AppConfig,
    capabilities: Capabilities,
    http_client: httpx.Client | None = None,
) -> list[OCRPlan]:
    """Assemble the provider/profile order for the available capabilities.

    OCR.space profiles come first, then Google Vision, then Tesseract.
    """
    ocr = config.ocr
    plans: list[OCRPlan] = []

    if capabilities.ocr_space and ocr.ocr_space_api_key:
        provider = OCRSpaceProvider(
            api_key=ocr.ocr_space_api_key,
            url=ocr.ocr_space_url,
            language=ocr.ocr_space_language,
            timeout=ocr.timeout_seconds,
            client=http_client,
        )
        for profile in ocr.profiles:
            plans.append(
                (provider, OCRProfile(profile.name, profile.model_dump(exclude={"name"})))
            )

    if capabilities.vision and ocr.vision_api_key:
        provider = VisionProvider(
            api_key=ocr.vision_api_key,
            url=ocr.vision_url,
            timeout=ocr.timeout_seconds,
            client=http_client,
        )
        plans.append((provider, OCRProfile("document_text")))

    if capabilities.tesseract:
        engine = TesseractEngine(
            tesseract_cmd=ocr.tesseract_cmd,
            default_lang=ocr.default_lang,
            preprocessing=PreprocessingPipeline(config.preprocessing),
        )
        provider = TesseractProvider(engine)
        for psm in ocr.tesseract_psm_profiles:
            plans.append((provider, OCRProfile(f"psm{psm}", {"psm": psm})))

    return plans


class OCRStrategyRunner:
    """Try OCR plans in order until one yields trustworthy text.

    Args:
        plans: Ordered (provider, profile) pairs.
        gate: Quality gate OCR text must clear.
        pdf_handler: Rasterizer used by image-based providers.
        scratch_dir: Parent directory for per-run temporary files.
    """

    def __init__(
        self,
        plans: list[OCRPlan],
        gate: QualityGate,
        pdf_handler: PDFHandler | None = None,
        scratch_dir: str | None = None,
    ) -> None:
        self.plans = plans
        self.gate = gate
        self.pdf_handler = pdf_handler or PDFHandler()
        self.scratch_dir = scratch_dir

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        capabilities: Capabilities,
        http_client: httpx.Client | None = None,
    ) -> "OCRStrategyRunner":
        return cls(
            plans=build_default_plans(config, capabilities, http_client),
            gate=QualityGate(config.ocr.quality_gate),
            pdf_handler=PDFHandler(dpi=config.ocr.pdf_dpi),
            scratch_dir=config.ocr.scratch_dir,
        )

    def close(self) -> None:
        """Close every distinct provider in the plan list."""
        closed: set[int] = set()
        for provider, _ in self.plans:
            if id(provider) not in closed:
                closed.add(id(provider))
                provider.close()

    def run(self, data: bytes, media_type: str) -> OCRRunResult:
        """OCR a document, returning the first result that passes the gate.

        Raises:
            OCRServiceUnavailable: If no plan produced acceptable text. The
                exception carries every attempt made.
        """
        attempts: list[ExtractionAttempt] = []
        unavailable: set[str] = set()

        if not self.plans:
            raise OCRServiceUnavailable("No OCR provider is configured", attempts)

        with tempfile.TemporaryDirectory(prefix="ocr-", dir=self.scratch_dir) as tmp:
            context = OCRRunContext(
                data=data,
                media_type=media_type,
                workdir=Path(tmp),
                pdf_handler=self.pdf_handler,
            )
            for provider, profile in self.plans:
                strategy = f"ocr:{provider.name}:{profile.name}"
                if provider.name in unavailable:
                    continue

                logger.info("Trying OCR profile %s", strategy)
                try:
                    pages = provider.recognize(context, profile)
                except OCRProfileFailed as exc:
                    logger.warning("OCR profile %s failed: %s", strategy, exc.reason)
                    attempts.append(
                        ExtractionAttempt(strategy, succeeded=False, error=exc.reason)
                    )
                    continue
                except OCRServiceUnavailable as exc:
                    logger.warning("OCR provider %s unavailable: %s", provider.name, exc)
                    unavailable.add(provider.name)
                    attempts.append(
                        ExtractionAttempt(strategy, succeeded=False, error=exc.message)
                    )
                    continue
                except Exception as exc:
                    logger.exception("OCR profile %s raised unexpectedly", strategy)
                    attempts.append(
                        ExtractionAttempt(
                            strategy,
                            succeeded=False,
                            error=f"error: {type(exc).__name__}: {exc}",
                        )
                    )
                    continue

                text, page_qualities = self._join_pages(pages)
                verdict = self.gate.evaluate(text)
                attempts.append(
                    ExtractionAttempt(
                        strategy,
                        succeeded=verdict.passed,
                        text=text,
                        quality=verdict.report,
                        error=verdict.reason,
                    )
                )
                if not verdict.passed:
                    logger.warning(
                        "OCR profile %s rejected: %s", strategy, verdict.reason
                    )
                    continue

                logger.info(
                    "OCR profile %s accepted (%d chars, %d%% readable)",
                    strategy,
                    len(text),
                    verdict.report.readable_ratio,
                )
                return OCRRunResult(
                    text=text,
                    strategy=strategy,
                    quality=verdict.report,
                    page_qualities=page_qualities,
                    attempts=attempts,
                )

        raise OCRServiceUnavailable(
            f"All {len(attempts)} OCR attempts failed", attempts
        )

    @staticmethod
    def _join_pages(pages: list[str]) -> tuple[str, list[TextQualityReport]]:
        """Clean each page, score it, and join the non-empty ones."""
        cleaned = [clean_ocr_text(page) for page in pages]
        page_qualities = [analyze_text_quality(page) for page in cleaned]
        return PAGE_SEPARATOR.join(p for p in cleaned if p), page_qualities
