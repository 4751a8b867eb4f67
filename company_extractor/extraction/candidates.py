"""Candidate company names and their deduplication."""

import re
from dataclasses import dataclass

ENTITY_SUFFIX_WORDS = frozenset(
    {
        "llc",
        "pllc",
        "llp",
        "inc",
        "incorporated",
        "corp",
        "corporation",
        "company",
        "co",
        "ltd",
        "limited",
    }
)

_DOTTED_ABBREVIATION = re.compile(r"\b(?:[a-z]\.){2,}[a-z]?\.?")
_ALNUM_TOKEN = re.compile(r"[a-z0-9]+")


@dataclass
class CompanyCandidate:
    """A proposed legal company name.

    Attributes:
        name: Cleaned name including its entity suffix.
        confidence: Score between 0 and 100.
        pattern_name: Pattern or strategy that produced the candidate.
        original_match: Text as matched in the document.
        context: Up to 50 characters either side of the match.
    """

    name: str
    confidence: int
    pattern_name: str
    original_match: str = ""
    context: str = ""

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "confidence": self.confidence,
            "pattern_name": self.pattern_name,
            "original_match": self.original_match,
            "context": self.context,
        }


def normalize_key(name: str) -> str:
    """Reduce a name to the key used to detect duplicates.

    Lowercases, collapses dotted abbreviations (``L.L.C.`` -> ``llc``),
    drops entity-suffix words and joins the remaining alphanumerics.
    """
    lowered = _DOTTED_ABBREVIATION.sub(
        lambda m: m.group().replace(".", ""), name.lower()
    )
    tokens = _ALNUM_TOKEN.findall(lowered)
    kept = [t for t in tokens if t not in ENTITY_SUFFIX_WORDS]
    return "".join(kept or tokens)


def dedupe_and_rank(
    candidates: list[CompanyCandidate], limit: int = 5
) -> list[CompanyCandidate]:
    """Keep the most confident candidate per key, best first.

    Ties keep the candidate seen first.
    """
    best: dict[str, CompanyCandidate] = {}
    for candidate in candidates:
        key = normalize_key(candidate.name)
        if not key:
            continue
        current = best.get(key)
        if current is None or candidate.confidence > current.confidence:
            best[key] = candidate

    ranked = sorted(best.values(), key=lambda c: c.confidence, reverse=True)
    return ranked[:limit]
