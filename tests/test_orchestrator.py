"""Tests for the end-to-end company name orchestrator."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from company_extractor.errors import UnsupportedMediaType
from company_extractor.extraction.patterns import PatternTier
from company_extractor.orchestrator import (
    EXCERPT_CHARS,
    CompanyNameOrchestrator,
    ExtractionFailure,
    ExtractionSuccess,
)
from company_extractor.parsing.types import EXTENSION_MEDIA_TYPES, TextExtraction
from company_extractor.quality.text_quality import analyze_text_quality
from company_extractor.utils.config import AppConfig, Capabilities, ExtractionConfig

DOCX_MEDIA_TYPE = EXTENSION_MEDIA_TYPES[".docx"]


class TestCompanyNameOrchestrator:
    """Tests for CompanyNameOrchestrator.process."""

    def test_docx_law_firm(
        self,
        orchestrator: CompanyNameOrchestrator,
        make_docx: Callable[[list[str]], bytes],
        engagement_letter: list[str],
    ) -> None:
        result = orchestrator.process(
            make_docx(engagement_letter), DOCX_MEDIA_TYPE, "letter.docx"
        )

        assert isinstance(result, ExtractionSuccess)
        assert result.ok is True
        assert result.best.name == "Porvin, Burnstein & Garelik PLLC"
        assert result.best.confidence >= 40
        assert result.strategy == "native_parse"
        assert result.tier == PatternTier.ENHANCED
        assert len(result.candidates) <= 5
        assert result.document_length > 0

    def test_image_only_pdf_is_exhausted(
        self, orchestrator: CompanyNameOrchestrator, image_only_pdf: bytes
    ) -> None:
        result = orchestrator.process(image_only_pdf, "application/pdf", "scan.pdf")

        assert isinstance(result, ExtractionFailure)
        assert result.error_code == "extraction_exhausted"
        strategies = [a.strategy for a in result.attempts]
        assert "native_parse" in strategies
        assert "raw_scrape" in strategies
        assert result.hints

    def test_no_candidates(
        self,
        orchestrator: CompanyNameOrchestrator,
        make_docx: Callable[[list[str]], bytes],
    ) -> None:
        text = "This letter has plenty of ordinary words but names no entity. " * 40
        result = orchestrator.process(make_docx([text]), DOCX_MEDIA_TYPE)

        assert isinstance(result, ExtractionFailure)
        assert result.error_code == "no_candidates_found"
        assert len(result.text_excerpt) == EXCERPT_CHARS
        assert result.quality is not None
        assert result.attempts[0].strategy == "native_parse"

    def test_unsupported_media_type_raises(
        self, orchestrator: CompanyNameOrchestrator
    ) -> None:
        with pytest.raises(UnsupportedMediaType):
            orchestrator.process(b"hello", "text/plain")

    def test_ocr_sourced_text_uses_tolerant_patterns(self, app_config: AppConfig) -> None:
        text = "The name of the lim-ited liabil ity company is Foo Bar L.L,C here"
        text_extractor = MagicMock()
        text_extractor.extract.return_value = TextExtraction(
            text=text,
            strategy="ocr:vision:document_text",
            quality=analyze_text_quality(text),
            ocr_sourced=True,
        )
        orchestrator = CompanyNameOrchestrator(
            app_config,
            Capabilities(vision=True),
            text_extractor=text_extractor,
            name_extractor=None,
            gazetteer=MagicMock(match=MagicMock(return_value=[])),
        )

        result = orchestrator.process(b"\x89PNG", "image/png")

        assert isinstance(result, ExtractionSuccess)
        assert result.best.name == "Foo Bar LLC"
        assert result.strategy == "ocr:vision:document_text"

    def test_gazetteer_loaded_from_config(self, tmp_path: Path) -> None:
        path = tmp_path / "gazetteer.yaml"
        path.write_text(
            "companies:\n"
            "  - canonical_name: BitConcepts, LLC\n"
            "    alias_fragments: [bit, concepts]\n"
        )
        config = AppConfig(extraction=ExtractionConfig(gazetteer_path=str(path)))
        orchestrator = CompanyNameOrchestrator(config, Capabilities())

        assert len(orchestrator.name_extractor.gazetteer) == 1

    def test_result_dicts(
        self,
        orchestrator: CompanyNameOrchestrator,
        make_docx: Callable[[list[str]], bytes],
        engagement_letter: list[str],
        image_only_pdf: bytes,
    ) -> None:
        success = orchestrator.process(
            make_docx(engagement_letter), DOCX_MEDIA_TYPE, "letter.docx"
        ).to_dict()
        assert success["success"] is True
        assert success["options"][0]["name"] == "Porvin, Burnstein & Garelik PLLC"
        assert success["extraction_method"] == "native_parse"
        assert success["pattern_tier"] == "enhanced"

        failure = orchestrator.process(image_only_pdf, "application/pdf").to_dict()
        assert failure["success"] is False
        assert failure["error"] == "extraction_exhausted"
        assert failure["suggestions"]
