"""Error taxonomy for the extraction pipeline.

Recoverable errors (``OCRProfileFailed``, ``OCRServiceUnavailable``) move the
pipeline to the next fallback. The others end processing of a document and
carry enough context for a caller to act on.
"""

from typing import Any

REMEDIATION_HINTS: list[str] = [
    "Rescan the document at 300 DPI or higher",
    "Convert the document to DOCX or a PDF with a text layer",
    "Configure OCR credentials (OCR_SPACE_API_KEY / GOOGLE_VISION_API_KEY) "
    "or install Tesseract",
    "Check that the document is not password protected or corrupted",
]


class CompanyExtractorError(Exception):
    """Base class for all pipeline errors."""

    code = "company_extractor_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UnsupportedMediaType(CompanyExtractorError):
    """The declared media type is not one the pipeline can read."""

    code = "unsupported_media_type"

    def __init__(self, media_type: str) -> None:
        self.media_type = media_type
        super().__init__(f"Unsupported media type: {media_type or '<missing>'}")


class ExtractionExhausted(CompanyExtractorError):
    """Every text extraction strategy failed or produced unusable text.

    Args:
        attempts: Ordered extraction attempts (the audit trail).
        text: Best text recovered along the way, possibly empty.
    """

    code = "extraction_exhausted"

    def __init__(self, attempts: list[Any], text: str = "") -> None:
        self.attempts = attempts
        self.text = text
        self.hints = list(REMEDIATION_HINTS)
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        lines = [
            f"Unable to extract usable text using any of "
            f"{len(self.attempts)} extraction strategies:"
        ]
        for attempt in self.attempts:
            lines.append(f"  - {attempt.strategy}: {attempt.error or 'failed'}")
        lines.append("Suggestions:")
        lines.extend(f"  * {hint}" for hint in self.hints)
        return "\n".join(lines)


class OCRProfileFailed(CompanyExtractorError):
    """A single OCR profile produced no usable text."""

    code = "ocr_profile_failed"

    def __init__(self, profile: str, reason: str) -> None:
        self.profile = profile
        self.reason = reason
        super().__init__(f"OCR profile {profile} failed: {reason}")


class OCRServiceUnavailable(CompanyExtractorError):
    """An OCR provider, or every OCR provider, cannot serve requests."""

    code = "ocr_service_unavailable"

    def __init__(self, message: str, attempts: list[Any] | None = None) -> None:
        self.attempts = attempts or []
        super().__init__(message)


class NoCandidateNamesFound(CompanyExtractorError):
    """Text was extracted but no strategy produced a company name."""

    code = "no_candidates_found"

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(
            "Could not extract any company names from the document. Make sure "
            "it names the company with a legal entity type (LLC, Inc., Corp., "
            "PLLC, etc.)"
        )


class CRMUpdateFailed(CompanyExtractorError):
    """The CRM rejected or never received an update."""

    code = "crm_update_failed"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
