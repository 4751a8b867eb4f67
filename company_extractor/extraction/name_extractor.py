"""Legal company name extraction from recovered document text.

Runs the pattern library for a tier, cleans each fragment, appends the
canonical entity suffix, scores it, and merges in gazetteer matches.
Results are deduplicated and ranked.
"""

import re

from company_extractor.utils.config import ExtractionConfig
from company_extractor.utils.logger import get_logger

from .candidates import CompanyCandidate, dedupe_and_rank
from .gazetteer import Gazetteer
from .patterns import NamePattern, PatternTier, patterns_for

logger = get_logger(__name__)

CONTEXT_CHARS = 50

_DISALLOWED = re.compile(r"[^\w\s&.,'\-]")
_WHITESPACE = re.compile(r"\s+")
_STRAY_TOKEN = re.compile(r"[A-Za-z][.,]?|\d+[.,]?|[.,'\-]+")
_SENTENCE_BREAK = re.compile(r"(?<=[A-Za-z]{3})\.\s+")
_EDGE_PUNCTUATION = " ,.-'&"

_LEADING_WORDS = frozenset(
    {
        "the", "this", "that", "by", "between", "among", "and", "with",
        "from", "to", "for", "of", "re", "dear", "attn",
    }
)
_TRAILING_WORDS = frozenset({"and", "&", "of", "the"})

_DENYLIST = re.compile(
    r"^(?:articles?|certificate|department|the\s+name|limited\s+liability)\b"
    r"|\b(?:stream|endstream|filter|flatedecode|endobj|obj|xref|trailer)\b",
    re.IGNORECASE,
)

_BUSINESS_WORDS = re.compile(
    r"\b(?:solutions|services|systems|technologies|consulting|industries"
    r"|enterprises|group|partners|holdings)\b",
    re.IGNORECASE,
)

# Letters-only suffix form -> canonical suffix. PLLC is checked before LLC.
_CANONICAL_SUFFIXES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"^pllc$"), "PLLC"),
    (re.compile(r"^(?:llc|limitedliabilitycompany)$"), "LLC"),
    (re.compile(r"^(?:llp|limitedliabilitypartnership)$"), "LLP"),
    (re.compile(r"^inc(?:orporated)?$"), "Inc."),
    (re.compile(r"^corp(?:oration)?$"), "Corp."),
    (re.compile(r"^(?:ltd|limited)$"), "Ltd."),
    (re.compile(r"^(?:company|co)$"), "Company"),
]


def canonical_suffix(raw: str | None, default: str = "LLC") -> str:
    """Map a matched entity suffix (``L.L.C.``, ``Incorporated``) to its canonical form."""
    letters = re.sub(r"[^a-z]", "", (raw or "").lower())
    for pattern, suffix in _CANONICAL_SUFFIXES:
        if pattern.match(letters):
            return suffix
    return default


def has_suffix(name: str, suffix: str) -> bool:
    """Whether ``name`` already ends in a word equal to ``suffix``, ignoring case and dots."""
    target = re.sub(r"[^a-z]", "", suffix.lower())
    words = [re.sub(r"[^a-z]", "", w.lower()) for w in name.split()]
    return bool(words) and words[-1] == target


def clean_fragment(fragment: str, strip_leading_words: bool = False) -> str:
    """Normalise a raw name fragment.

    Strips characters that never occur in legal names, collapses
    whitespace, drops stray single letters and bare numbers, and trims
    punctuation from both ends. Generic matches also lose a leading
    sentence and leading function words ("the", "between", ...).
    """
    text = _DISALLOWED.sub("", fragment)
    text = _WHITESPACE.sub(" ", text).strip()
    if strip_leading_words:
        text = _SENTENCE_BREAK.split(text)[-1]

    tokens = [t for t in text.split(" ") if t and not _STRAY_TOKEN.fullmatch(t)]
    if strip_leading_words:
        while tokens and tokens[0].lower().strip(_EDGE_PUNCTUATION) in _LEADING_WORDS:
            tokens.pop(0)
    while tokens and tokens[-1].lower().strip(",") in _TRAILING_WORDS:
        tokens.pop()

    return " ".join(tokens).strip(_EDGE_PUNCTUATION)


class CompanyNameExtractor:
    """Find and rank legal company names in text.

    Args:
        config: Limits, default suffix and scoring weights.
        gazetteer: Known companies for fragment matching. Optional.
    """

    def __init__(
        self, config: ExtractionConfig | None = None, gazetteer: Gazetteer | None = None
    ) -> None:
        self.config = config or ExtractionConfig()
        self.gazetteer = gazetteer or Gazetteer()

    def extract(
        self,
        text: str,
        tier: PatternTier | str = PatternTier.ENHANCED,
        ocr_sourced: bool = False,
    ) -> list[CompanyCandidate]:
        """Extract ranked company name candidates.

        Args:
            text: Document text.
            tier: Pattern tier to run.
            ocr_sourced: Whether the text came from OCR, which enables the
                noise-tolerant patterns.

        Returns:
            At most ``max_candidates`` candidates, highest confidence first.
        """
        text = _WHITESPACE.sub(" ", text or "").strip()
        if len(text) < self.config.min_name_length:
            return []

        tier = PatternTier(tier)
        candidates: list[CompanyCandidate] = []
        for pattern in patterns_for(tier, ocr_sourced):
            candidates.extend(self._apply_pattern(pattern, text))
        candidates.extend(self.gazetteer.match(text))

        ranked = dedupe_and_rank(candidates, self.config.max_candidates)
        logger.info(
            "%s tier found %d raw candidates, %d after dedup",
            tier,
            len(candidates),
            len(ranked),
        )
        return ranked

    def extract_with_fallback(
        self, text: str, ocr_sourced: bool = False
    ) -> tuple[list[CompanyCandidate], PatternTier]:
        """Run the enhanced tier, falling back to the standard tier when it finds nothing."""
        candidates = self.extract(text, PatternTier.ENHANCED, ocr_sourced)
        if candidates:
            return candidates, PatternTier.ENHANCED

        logger.info("Enhanced tier found no candidates, trying standard tier")
        return self.extract(text, PatternTier.STANDARD, ocr_sourced), PatternTier.STANDARD

    def _apply_pattern(self, pattern: NamePattern, text: str) -> list[CompanyCandidate]:
        results: list[CompanyCandidate] = []
        for match in pattern.regex.finditer(text):
            if len(results) >= self.config.max_matches_per_pattern:
                break
            if self._excluded(pattern, text, match):
                continue
            candidate = self._build_candidate(pattern, text, match)
            if candidate is not None:
                results.append(candidate)
        return results

    @staticmethod
    def _excluded(pattern: NamePattern, text: str, match: re.Match[str]) -> bool:
        if not pattern.exclude:
            return False
        window = text[max(0, match.start() - 40) : match.end()]
        return any(exclude.search(window) for exclude in pattern.exclude)

    def _build_candidate(
        self, pattern: NamePattern, text: str, match: re.Match[str]
    ) -> CompanyCandidate | None:
        fragment = clean_fragment(match.group("name"), pattern.strip_leading_words)
        if not fragment:
            return None

        raw_suffix = match.groupdict().get("suffix")
        suffix = canonical_suffix(raw_suffix, self.config.default_suffix)
        name = fragment if has_suffix(fragment, suffix) else f"{fragment} {suffix}"

        if not (self.config.min_name_length <= len(name) <= self.config.max_name_length):
            return None
        if _DENYLIST.search(name):
            logger.debug("Discarding denylisted candidate %r", name)
            return None

        start, end = match.span()
        return CompanyCandidate(
            name=name,
            confidence=self._score(pattern.confidence, name, fragment, text, start),
            pattern_name=pattern.name,
            original_match=match.group(0),
            context=text[max(0, start - CONTEXT_CHARS) : end + CONTEXT_CHARS],
        )

    def _score(self, base: int, name: str, fragment: str, text: str, position: int) -> int:
        """Adjust a pattern's base confidence and clamp it to [0, 100]."""
        scoring = self.config.scoring
        score = base

        occurrences = max(1, len(re.findall(re.escape(fragment), text, re.IGNORECASE)))
        score += min(scoring.repeat_bonus_cap, scoring.repeat_bonus * occurrences)

        if position < scoring.early_position:
            score += scoring.early_position_bonus
        elif position < scoring.near_position:
            score += scoring.near_position_bonus

        length = len(name)
        if scoring.typical_length_min <= length <= scoring.typical_length_max:
            score += scoring.typical_length_bonus
        elif length < scoring.short_length:
            score -= scoring.short_length_penalty
        elif length > scoring.long_length:
            score -= scoring.long_length_penalty

        if _BUSINESS_WORDS.search(fragment):
            score += scoring.business_word_bonus

        return max(0, min(100, score))
