"""End-to-end pipeline: document bytes to ranked company name candidates."""

from dataclasses import dataclass, field
from pathlib import Path

from company_extractor.errors import (
    REMEDIATION_HINTS,
    ExtractionExhausted,
    NoCandidateNamesFound,
)
from company_extractor.extraction.candidates import CompanyCandidate
from company_extractor.extraction.gazetteer import Gazetteer
from company_extractor.extraction.name_extractor import CompanyNameExtractor
from company_extractor.extraction.patterns import PatternTier
from company_extractor.parsing.extractor import DocumentTextExtractor
from company_extractor.parsing.types import ExtractionAttempt
from company_extractor.quality.text_quality import TextQualityReport
from company_extractor.utils.config import AppConfig, Capabilities
from company_extractor.utils.logger import get_logger

logger = get_logger(__name__)

EXCERPT_CHARS = 1000


def attempt_to_dict(attempt: ExtractionAttempt) -> dict:
    return {
        "strategy": attempt.strategy,
        "succeeded": attempt.succeeded,
        "text_length": len(attempt.text or ""),
        "readable_ratio": attempt.quality.readable_ratio if attempt.quality else None,
        "error": attempt.error,
    }


def quality_to_dict(quality: TextQualityReport | None) -> dict | None:
    if quality is None:
        return None
    return {
        "readable_ratio": quality.readable_ratio,
        "valid_word_count": quality.valid_word_count,
        "garbled_ratio": quality.garbled_ratio,
        "total_words": quality.total_words,
        "avg_word_length": quality.avg_word_length,
    }


@dataclass
class ExtractionSuccess:
    """Ranked candidates for one document."""

    filename: str
    candidates: list[CompanyCandidate]
    document_length: int
    quality: TextQualityReport
    strategy: str
    tier: PatternTier
    attempts: list[ExtractionAttempt] = field(default_factory=list)
    ok: bool = True

    @property
    def best(self) -> CompanyCandidate:
        return self.candidates[0]

    def to_dict(self) -> dict:
        return {
            "success": True,
            "filename": self.filename,
            "options": [c.to_dict() for c in self.candidates],
            "document_length": self.document_length,
            "extraction_method": self.strategy,
            "pattern_tier": str(self.tier),
            "text_quality": quality_to_dict(self.quality),
            "attempts": [attempt_to_dict(a) for a in self.attempts],
        }


@dataclass
class ExtractionFailure:
    """Why no candidates could be produced for a document."""

    filename: str
    error_code: str
    message: str
    text_excerpt: str = ""
    quality: TextQualityReport | None = None
    attempts: list[ExtractionAttempt] = field(default_factory=list)
    hints: list[str] = field(default_factory=list)
    ok: bool = False

    def to_dict(self) -> dict:
        return {
            "success": False,
            "filename": self.filename,
            "error": self.error_code,
            "message": self.message,
            "extracted_text": self.text_excerpt,
            "text_quality": quality_to_dict(self.quality),
            "attempts": [attempt_to_dict(a) for a in self.attempts],
            "suggestions": self.hints,
        }


ExtractionResult = ExtractionSuccess | ExtractionFailure


class CompanyNameOrchestrator:
    """Compose text extraction and name extraction for one document at a time.

    Args:
        config: Application configuration.
        capabilities: OCR providers available to this process.
        gazetteer: Known companies; loaded from ``extraction.gazetteer_path``
            when omitted.
        text_extractor: Override for the document-to-text stage.
        name_extractor: Override for the name extraction stage.
    """

    def __init__(
        self,
        config: AppConfig,
        capabilities: Capabilities,
        gazetteer: Gazetteer | None = None,
        text_extractor: DocumentTextExtractor | None = None,
        name_extractor: CompanyNameExtractor | None = None,
    ) -> None:
        self.config = config
        self.capabilities = capabilities
        if gazetteer is None:
            gazetteer = Gazetteer.from_yaml(
                Path(config.extraction.gazetteer_path),
                config.extraction.gazetteer_min_fragment_ratio,
            )
        self.text_extractor = text_extractor or DocumentTextExtractor.from_config(
            config, capabilities
        )
        self.name_extractor = name_extractor or CompanyNameExtractor(
            config.extraction, gazetteer
        )

    def close(self) -> None:
        """Release HTTP clients held by the OCR providers."""
        self.text_extractor.close()

    def process(
        self, data: bytes, media_type: str, filename: str = "document"
    ) -> ExtractionResult:
        """Extract ranked company names from a document.

        Args:
            data: Raw document bytes.
            media_type: Declared media type.
            filename: Name used in logs and results.

        Returns:
            ``ExtractionSuccess`` with ranked candidates, or
            ``ExtractionFailure`` when no text or no names were recovered.

        Raises:
            UnsupportedMediaType: If the media type is not supported.
        """
        logger.info("Processing %s (%s, %d bytes)", filename, media_type, len(data))

        try:
            extraction = self.text_extractor.extract(data, media_type)
        except ExtractionExhausted as exc:
            logger.error("No usable text recovered from %s", filename)
            return ExtractionFailure(
                filename=filename,
                error_code=exc.code,
                message=exc.message,
                text_excerpt=exc.text[:EXCERPT_CHARS],
                attempts=exc.attempts,
                hints=exc.hints,
            )

        candidates, tier = self.name_extractor.extract_with_fallback(
            extraction.text, ocr_sourced=extraction.ocr_sourced
        )
        if not candidates:
            error = NoCandidateNamesFound(extraction.text)
            logger.warning(
                "No company names found in %s (%d chars via %s)",
                filename,
                len(extraction.text),
                extraction.strategy,
            )
            return ExtractionFailure(
                filename=filename,
                error_code=error.code,
                message=error.message,
                text_excerpt=extraction.text[:EXCERPT_CHARS],
                quality=extraction.quality,
                attempts=extraction.attempts,
                hints=list(REMEDIATION_HINTS),
            )

        logger.info(
            "Best candidate for %s: %s (%d%%) via %s",
            filename,
            candidates[0].name,
            candidates[0].confidence,
            extraction.strategy,
        )
        return ExtractionSuccess(
            filename=filename,
            candidates=candidates,
            document_length=len(extraction.text),
            quality=extraction.quality,
            strategy=extraction.strategy,
            tier=tier,
            attempts=extraction.attempts,
        )
