"""Media types and result records for document text extraction."""

from dataclasses import dataclass, field
from enum import StrEnum

from company_extractor.errors import UnsupportedMediaType
from company_extractor.quality.text_quality import TextQualityReport


class MediaKind(StrEnum):
    """Document families the extractor knows how to read."""

    PDF = "pdf"
    DOCX = "docx"
    DOC = "doc"
    IMAGE = "image"


MEDIA_TYPES: dict[str, MediaKind] = {
    "application/pdf": MediaKind.PDF,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": (
        MediaKind.DOCX
    ),
    "application/msword": MediaKind.DOC,
    "image/png": MediaKind.IMAGE,
    "image/jpeg": MediaKind.IMAGE,
    "image/jpg": MediaKind.IMAGE,
}

EXTENSION_MEDIA_TYPES: dict[str, str] = {
    ".pdf": "application/pdf",
    ".docx": (
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    ),
    ".doc": "application/msword",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}


def media_kind(media_type: str) -> MediaKind:
    """Resolve a declared media type, ignoring parameters such as charset.

    Raises:
        UnsupportedMediaType: If the type is not supported.
    """
    base = (media_type or "").split(";", 1)[0].strip().lower()
    try:
        return MEDIA_TYPES[base]
    except KeyError:
        raise UnsupportedMediaType(media_type) from None


@dataclass
class ExtractionAttempt:
    """One text extraction strategy tried on a document."""

    strategy: str
    succeeded: bool
    text: str | None = None
    quality: TextQualityReport | None = None
    error: str | None = None


@dataclass
class TextExtraction:
    """Accepted text for a document plus the audit trail that produced it."""

    text: str
    strategy: str
    quality: TextQualityReport
    attempts: list[ExtractionAttempt] = field(default_factory=list)
    ocr_sourced: bool = False
