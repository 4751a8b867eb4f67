"""Deterministic cleanup applied to every OCR result before scoring."""

import re

from company_extractor.quality.text_quality import analyze_text_quality

NOISY_READABLE_RATIO = 50

_WHITESPACE = re.compile(r"\s+")
_OCR_DISALLOWED = re.compile(r"[^\w\s.,;:!?\-()'\"&]")
# Single-letter abbreviations such as L.L.C. and U.S. keep their dots tight.
_MISSING_SPACE_AFTER_PUNCT = re.compile(r"(?<=[A-Za-z]{2})([.,;:!?])(?=[A-Za-z])")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z])(?=[A-Z])")


def clean_ocr_text(text: str) -> str:
    """Normalise raw OCR output.

    Collapses whitespace, strips symbol noise from low-readability text,
    then restores spacing after punctuation and at camelCase boundaries.
    """
    text = _WHITESPACE.sub(" ", text).strip()
    if not text:
        return text

    if analyze_text_quality(text).readable_ratio < NOISY_READABLE_RATIO:
        text = _OCR_DISALLOWED.sub("", text)

    text = _MISSING_SPACE_AFTER_PUNCT.sub(r"\1 ", text)
    text = _CAMEL_BOUNDARY.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()
