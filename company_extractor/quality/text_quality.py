"""Text quality scoring for extracted and OCR'd document text.

Separates recognisable prose from OCR garbage with cheap character and
word statistics, and gates candidate texts before they are trusted.
"""

import re
from dataclasses import dataclass

from company_extractor.utils.config import QualityGateConfig

_READABLE_CHAR = re.compile(r"[A-Za-z0-9\s.,;:!?\-()&]")
_NON_GARBLED_CHAR = re.compile(r"[\w\s.,;:!?\-()&]", re.ASCII)
_WORD = re.compile(r"[A-Za-z]{2,}")
_CONSONANT_RUN = re.compile(r"[bcdfghjklmnpqrstvwxz]{5,}", re.IGNORECASE)
_VOWELS = frozenset("aeiouyAEIOUY")

MIN_WORD_LENGTH = 2
MAX_WORD_LENGTH = 20


@dataclass(frozen=True)
class TextQualityReport:
    """Character and word statistics for one piece of text."""

    readable_ratio: int
    valid_word_count: int
    garbled_ratio: float
    total_words: int = 0
    avg_word_length: float = 0.0


EMPTY_REPORT = TextQualityReport(
    readable_ratio=0,
    valid_word_count=0,
    garbled_ratio=1.0,
)


def is_valid_word(word: str) -> bool:
    """Check whether a letter run looks like a real word rather than noise."""
    if not MIN_WORD_LENGTH <= len(word) <= MAX_WORD_LENGTH:
        return False
    has_vowel = any(ch in _VOWELS for ch in word)
    if not has_vowel and len(word) > 3:
        return False
    return _CONSONANT_RUN.search(word) is None


def analyze_text_quality(text: str) -> TextQualityReport:
    """Score text for readability.

    Args:
        text: Arbitrary text, possibly empty.

    Returns:
        Quality report; empty input yields a zero-readability report.
    """
    if not text:
        return EMPTY_REPORT

    total_chars = len(text)
    readable_chars = len(_READABLE_CHAR.findall(text))
    garbled_chars = total_chars - len(_NON_GARBLED_CHAR.findall(text))
    words = _WORD.findall(text)
    valid_words = sum(1 for word in words if is_valid_word(word))
    avg_length = sum(len(w) for w in words) / len(words) if words else 0.0

    return TextQualityReport(
        readable_ratio=round(100 * readable_chars / total_chars),
        valid_word_count=valid_words,
        garbled_ratio=garbled_chars / total_chars,
        total_words=len(words),
        avg_word_length=round(avg_length, 2),
    )


@dataclass(frozen=True)
class GateVerdict:
    """Outcome of running text through a quality gate."""

    passed: bool
    report: TextQualityReport
    reason: str | None = None


class QualityGate:
    """Accept or reject text based on length, readability and word validity.

    Args:
        config: Thresholds for this gate.
    """

    def __init__(self, config: QualityGateConfig | None = None) -> None:
        self.config = config or QualityGateConfig()

    def evaluate(self, text: str) -> GateVerdict:
        """Check text against the gate thresholds.

        The reason names the first threshold the text misses, checked in
        the order length, readable ratio, valid words.
        """
        report = analyze_text_quality(text)
        cfg = self.config

        if len(text) < cfg.min_length:
            reason = f"text too short ({len(text)} < {cfg.min_length} chars)"
        elif report.readable_ratio < cfg.min_readable_ratio:
            reason = (
                f"readable ratio too low "
                f"({report.readable_ratio}% < {cfg.min_readable_ratio}%)"
            )
        elif report.valid_word_count < cfg.min_valid_words:
            reason = (
                f"too few valid words "
                f"({report.valid_word_count} < {cfg.min_valid_words})"
            )
        else:
            return GateVerdict(passed=True, report=report)

        return GateVerdict(passed=False, report=report, reason=reason)

    def accepts(self, text: str) -> bool:
        return self.evaluate(text).passed
