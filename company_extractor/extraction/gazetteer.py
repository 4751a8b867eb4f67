"""Fragment matching against a gazetteer of known companies.

OCR often breaks a name apart ("Bit" ... "Concepts") or glues it to
neighbouring words. Each gazetteer entry lists alias fragments; an entry
matches when enough of its fragments occur inside the document's tokens.
Entries are loaded from YAML, for example::

    companies:
      - canonical_name: "BitConcepts, LLC"
        alias_fragments: [bit, concepts]
        confidence: 85
"""

import re
from dataclasses import dataclass
from pathlib import Path

import yaml

from company_extractor.utils.logger import get_logger

from .candidates import CompanyCandidate

logger = get_logger(__name__)

PATTERN_NAME = "Gazetteer Match"

_TOKEN = re.compile(r"[A-Za-z]{3,}")


@dataclass(frozen=True)
class GazetteerEntry:
    """A known company and the fragments that identify it."""

    canonical_name: str
    alias_fragments: tuple[str, ...]
    confidence: int = 85


class Gazetteer:
    """Matches document tokens against known company fragments.

    Args:
        entries: Known companies. An empty list makes the gazetteer inert.
        min_fragment_ratio: Share of an entry's fragments that must be
            present for it to match.
    """

    def __init__(
        self, entries: list[GazetteerEntry] | None = None, min_fragment_ratio: float = 0.6
    ) -> None:
        self.entries = list(entries or [])
        self.min_fragment_ratio = min_fragment_ratio

    @classmethod
    def from_yaml(cls, path: Path, min_fragment_ratio: float = 0.6) -> "Gazetteer":
        """Load entries from a YAML file; a missing file yields no entries."""
        if not path.exists():
            logger.debug("No gazetteer file at %s, fragment matching disabled", path)
            return cls([], min_fragment_ratio)

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        entries = [
            GazetteerEntry(
                canonical_name=item["canonical_name"],
                alias_fragments=tuple(
                    str(fragment).lower() for fragment in item.get("alias_fragments", [])
                ),
                confidence=int(item.get("confidence", 85)),
            )
            for item in data.get("companies") or []
        ]
        logger.info("Loaded %d gazetteer entries from %s", len(entries), path)
        return cls(entries, min_fragment_ratio)

    def __len__(self) -> int:
        return len(self.entries)

    def match(self, text: str) -> list[CompanyCandidate]:
        """Return a candidate for every entry whose fragments are present.

        Args:
            text: Document text.

        Returns:
            Candidates named by the entries' canonical names.
        """
        if not self.entries:
            return []

        tokens = {token.lower() for token in _TOKEN.findall(text)}
        candidates: list[CompanyCandidate] = []
        for entry in self.entries:
            if not entry.alias_fragments:
                continue
            found = [
                fragment
                for fragment in entry.alias_fragments
                if any(fragment in token for token in tokens)
            ]
            ratio = len(found) / len(entry.alias_fragments)
            if ratio >= self.min_fragment_ratio:
                logger.debug(
                    "Gazetteer matched %s (%d/%d fragments)",
                    entry.canonical_name,
                    len(found),
                    len(entry.alias_fragments),
                )
                candidates.append(
                    CompanyCandidate(
                        name=entry.canonical_name,
                        confidence=entry.confidence,
                        pattern_name=PATTERN_NAME,
                        original_match=" ".join(found),
                    )
                )
        return candidates
