"""Regex library for legal entity names.

Patterns expose a ``name`` group holding the company fragment and, where
the entity type is captured, a ``suffix`` group. They come in two tiers:
the enhanced tier (document phraseology first, then generic suffix
matches) and a conservative standard tier used when the enhanced tier
finds nothing. OCR-tolerant variants allow noise characters between the
letters of anchor phrases and suffixes.
"""

import re
from dataclasses import dataclass, field
from enum import StrEnum


class PatternTier(StrEnum):
    """Which pattern set to run."""

    ENHANCED = "enhanced"
    STANDARD = "standard"


@dataclass(frozen=True)
class NamePattern:
    """One entity name pattern with its base confidence."""

    name: str
    regex: re.Pattern[str]
    confidence: int
    strip_leading_words: bool = False
    exclude: tuple[re.Pattern[str], ...] = field(default_factory=tuple)


def tolerant(phrase: str, gap: int = 2) -> str:
    """Build a regex matching ``phrase`` through OCR noise.

    Each letter becomes a case-insensitive character class and up to
    ``gap`` non-letters may sit between letters; words may be separated
    by up to three non-letters, including none.
    """
    noise = rf"[^A-Za-z]{{0,{gap}}}"
    words = [
        noise.join(f"[{ch.lower()}{ch.upper()}]" for ch in word)
        for word in phrase.split()
    ]
    return r"[^A-Za-z]{0,3}".join(words)


# An entity suffix word ends a name run, so "Globex Corp. and Initech LLC" stays two names.
_SUFFIX_WORD = (
    r"(?i:p\.?l\.?l\.?c|l\.?l\.?[cp]|inc(?:orporated)?|corp(?:oration)?"
    r"|company|co|ltd|limited)\.?(?![A-Za-z])"
)
_CAP_WORD = rf"(?!{_SUFFIX_WORD})(?:\d+)?[A-Z][A-Za-z0-9&'\-.]*"
_NAME_RUN = rf"{_CAP_WORD}(?:[ \t]+(?:&|and|of|the|{_CAP_WORD})){{0,6}}"
_LOOSE_NAME = r"[A-Za-z][A-Za-z0-9\s&.\-',]{0,60}?"

_LLC = r"L\.?L\.?C\.?|Limited\s+Liability\s+Company"
_PLLC = r"P\.?L\.?L\.?C\.?"
_LLP = r"L\.?L\.?P\.?"
_ANY_SUFFIX = (
    rf"{_PLLC}|{_LLC}|{_LLP}|Inc(?:orporated)?\.?|Corp(?:oration)?\.?"
    r"|Ltd\.?|Limited|Company|Co\."
)
_END = r"(?![A-Za-z])"


def _p(
    name: str,
    pattern: str,
    confidence: int,
    flags: int = 0,
    strip_leading_words: bool = False,
    exclude: tuple[str, ...] = (),
) -> NamePattern:
    return NamePattern(
        name=name,
        regex=re.compile(pattern, flags),
        confidence=confidence,
        strip_leading_words=strip_leading_words,
        exclude=tuple(re.compile(e, re.IGNORECASE) for e in exclude),
    )


def _generic(name: str, suffix: str, confidence: int, **kwargs) -> NamePattern:
    return _p(
        name,
        rf"\b(?P<name>{_NAME_RUN})\s*,?\s*\b(?P<suffix>(?i:{suffix})){_END}",
        confidence,
        strip_leading_words=True,
        **kwargs,
    )


ENHANCED_PATTERNS: list[NamePattern] = [
    _p(
        "Articles LLC Name",
        r"the\s+name\s+of\s+the\s+limited\s+liability\s+company\s+is\s*:?\s*"
        rf"(?P<name>{_LOOSE_NAME})\s*,?\s*\b(?P<suffix>{_PLLC}|{_LLC}){_END}",
        80,
        re.IGNORECASE,
    ),
    _p(
        "Corporation Name",
        r"the\s+name\s+of\s+the\s+corporation\s+is\s*:?\s*"
        r"(?P<name>[A-Za-z][A-Za-z0-9\s&.\-',]{0,60}?)\s*,?\s*"
        rf"\b(?P<suffix>Inc(?:orporated)?\.?|Corp(?:oration)?\.?|Company|Co\.){_END}",
        75,
        re.IGNORECASE,
    ),
    _p(
        "Labelled Company Name",
        r"\b(?:company|entity|business|legal)\s+name\s*:\s*"
        rf"(?P<name>{_LOOSE_NAME})\s*,?\s*\b(?P<suffix>{_ANY_SUFFIX}){_END}",
        70,
        re.IGNORECASE,
    ),
    _p(
        "Law Firm Header",
        r"\b(?P<name>[A-Z][A-Za-z'\-]+(?:,\s*[A-Z][A-Za-z'\-]+)*,?\s*(?:&|and)\s*"
        r"[A-Z][A-Za-z'\-]+),?\s*"
        rf"\b(?P<suffix>{_PLLC}|{_LLP}){_END}",
        70,
    ),
    _p(
        "Articles Line",
        r"limited\s+liability\s+company\s+is\s*:?\s*"
        rf"(?P<name>[A-Za-z][^.\n\r]{{1,60}}?)\s*,?\s*\b(?P<suffix>PLLC|LLC){_END}",
        65,
        re.IGNORECASE,
    ),
    _p(
        "Party Clause",
        r"(?i:by\s+and\s+between|between|among)\s+"
        rf"(?P<name>{_NAME_RUN})\s*,?\s*\b(?P<suffix>(?i:{_ANY_SUFFIX})){_END}",
        60,
    ),
    _generic("Any PLLC", _PLLC, 50),
    _generic("Formal LLC", r"LLC|L\.L\.C\.", 40),
    _generic("Standard Inc", r"Inc\.?|Incorporated", 40),
    _generic("Standard Corp", r"Corp\.?|Corporation", 40),
    _generic("Standard LLP", r"LLP|L\.L\.P\.", 40),
    _generic("Standard Ltd", r"Ltd\.?|Limited", 35),
    _generic("Standard Company", r"Company", 35),
]


_STANDARD_EXCLUDES = (
    r"articles?\s+of\s+incorporation\s+for",
    r"certificate\s+of\s+formation\s+for",
    r"bylaws?\s+of\s+the",
    r"operating\s+agreement\s+of",
    r"memorandum\s+of\s+understanding\s+between",
    r"terms?\s+of\s+service\s+agreement",
    r"privacy\s+policy\s+of",
)

STANDARD_PATTERNS: list[NamePattern] = [
    _p(
        "Articles LLC Format",
        r"name\s+of\s+the\s+limited\s+liability\s+company\s+is\s*:?\s*"
        rf"(?P<name>[A-Za-z][A-Za-z\s&.\-',]{{2,50}}?)\s*,?\s*\b(?P<suffix>LLC){_END}",
        55,
        re.IGNORECASE,
        exclude=_STANDARD_EXCLUDES,
    ),
    _generic("Standard LLC", r"LLC|L\.L\.C\.", 40, exclude=_STANDARD_EXCLUDES),
    _generic(
        "Professional LLC (PLLC)", r"PLLC|P\.L\.L\.C\.", 45, exclude=_STANDARD_EXCLUDES
    ),
    _generic(
        "Standard Corporation",
        r"Inc\.?|Incorporated|Corporation|Corp\.?",
        40,
        exclude=_STANDARD_EXCLUDES,
    ),
]


_OCR_SUFFIX = rf"(?P<suffix>{tolerant('PLLC', 1)}|{tolerant('LLC', 1)}|{tolerant('Inc', 1)})"

OCR_PATTERNS: list[NamePattern] = [
    _p(
        "OCR Articles LLC Name",
        tolerant("name of the limited liability company is")
        + r"[^A-Za-z]{0,3}(?P<name>[A-Za-z][A-Za-z0-9\s&.\-',]{1,60}?)[^A-Za-z]{0,3}"
        + rf"(?<![A-Za-z]){_OCR_SUFFIX}{_END}",
        70,
    ),
    _p(
        "OCR Entity Suffix",
        rf"\b(?P<name>{_NAME_RUN})[^A-Za-z]{{0,3}}(?<![A-Za-z]){_OCR_SUFFIX}{_END}",
        35,
        strip_leading_words=True,
    ),
]


def patterns_for(tier: PatternTier, ocr_sourced: bool = False) -> list[NamePattern]:
    """Return the ordered pattern list for a tier.

    OCR-tolerant patterns are appended to the enhanced tier for OCR text.
    """
    if tier == PatternTier.STANDARD:
        return STANDARD_PATTERNS
    if ocr_sourced:
        return ENHANCED_PATTERNS + OCR_PATTERNS
    return ENHANCED_PATTERNS
