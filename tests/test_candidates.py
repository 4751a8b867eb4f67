"""Tests for candidate normalisation, gazetteer matching and ranking."""

from pathlib import Path

import yaml

from company_extractor.extraction.candidates import (
    CompanyCandidate,
    dedupe_and_rank,
    normalize_key,
)
from company_extractor.extraction.gazetteer import Gazetteer, GazetteerEntry


class TestNormalizeKey:
    """Tests for the duplicate detection key."""

    def test_suffix_spellings_collapse(self) -> None:
        assert normalize_key("Acme LLC") == "acme"
        assert normalize_key("ACME, L.L.C.") == "acme"
        assert normalize_key("Acme Inc.") == "acme"
        assert normalize_key("acme corporation") == "acme"

    def test_keeps_words_that_contain_suffixes(self) -> None:
        assert normalize_key("Princeton Holdings LLC") == "princetonholdings"

    def test_law_firm(self) -> None:
        assert (
            normalize_key("Porvin, Burnstein & Garelik PLLC")
            == "porvinburnsteingarelik"
        )

    def test_suffix_only_name(self) -> None:
        assert normalize_key("LLC") == "llc"


class TestDedupeAndRank:
    """Tests for dedupe_and_rank."""

    def test_keeps_highest_confidence(self) -> None:
        ranked = dedupe_and_rank(
            [
                CompanyCandidate("Acme LLC", 55, "Formal LLC"),
                CompanyCandidate("ACME L.L.C.", 80, "Articles LLC Name"),
                CompanyCandidate("Beta Corp.", 60, "Standard Corp"),
            ]
        )
        assert [(c.name, c.confidence) for c in ranked] == [
            ("ACME L.L.C.", 80),
            ("Beta Corp.", 60),
        ]

    def test_ties_keep_first_seen(self) -> None:
        ranked = dedupe_and_rank(
            [
                CompanyCandidate("Acme LLC", 50, "a"),
                CompanyCandidate("ACME LLC", 50, "b"),
            ]
        )
        assert ranked[0].pattern_name == "a"

    def test_limit(self) -> None:
        candidates = [CompanyCandidate(f"Firm {i} LLC", i, "p") for i in range(10)]
        ranked = dedupe_and_rank(candidates, limit=5)
        assert [c.confidence for c in ranked] == [9, 8, 7, 6, 5]

    def test_to_dict(self) -> None:
        candidate = CompanyCandidate("Acme LLC", 55, "Formal LLC", "Acme, LLC", "ctx")
        assert candidate.to_dict() == {
            "name": "Acme LLC",
            "confidence": 55,
            "pattern_name": "Formal LLC",
            "original_match": "Acme, LLC",
            "context": "ctx",
        }


class TestGazetteer:
    """Tests for fragment matching against known companies."""

    def setup_method(self) -> None:
        self.gazetteer = Gazetteer(
            [GazetteerEntry("BitConcepts, LLC", ("bit", "concepts"), 85)]
        )

    def test_glued_fragments_match(self) -> None:
        matches = self.gazetteer.match("Invoice from BITCONCEPTS for services")
        assert len(matches) == 1
        assert matches[0].name == "BitConcepts, LLC"
        assert matches[0].confidence == 85
        assert matches[0].pattern_name == "Gazetteer Match"

    def test_split_fragments_match(self) -> None:
        assert self.gazetteer.match("Bit ~~ Concepts signed here")

    def test_below_ratio(self) -> None:
        assert self.gazetteer.match("a bit of everything") == []

    def test_ratio_is_configurable(self) -> None:
        lenient = Gazetteer(self.gazetteer.entries, min_fragment_ratio=0.5)
        assert lenient.match("a bit of everything")

    def test_short_tokens_ignored(self) -> None:
        gazetteer = Gazetteer([GazetteerEntry("AB Foods Ltd.", ("ab", "foods"))])
        assert gazetteer.match("ab foods") == []

    def test_empty_gazetteer_is_inert(self) -> None:
        assert Gazetteer().match("BitConcepts") == []
        assert len(Gazetteer()) == 0

    def test_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "gazetteer.yaml"
        with open(path, "w") as f:
            yaml.dump(
                {
                    "companies": [
                        {
                            "canonical_name": "Northwind Traders LLC",
                            "alias_fragments": ["North", "Wind", "Traders"],
                            "confidence": 90,
                        }
                    ]
                },
                f,
            )

        gazetteer = Gazetteer.from_yaml(path)
        assert len(gazetteer) == 1
        assert gazetteer.entries[0].alias_fragments == ("north", "wind", "traders")
        assert gazetteer.match("NORTHWIND TRADERS")[0].confidence == 90

    def test_from_missing_yaml(self, tmp_path: Path) -> None:
        assert len(Gazetteer.from_yaml(tmp_path / "missing.yaml")) == 0

    def test_shipped_gazetteer_loads(self, config_dir: Path) -> None:
        gazetteer = Gazetteer.from_yaml(config_dir / "gazetteer.yaml")
        assert len(gazetteer) >= 1
