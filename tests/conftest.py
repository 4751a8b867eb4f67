"""Shared test fixtures for the company name extractor test suite."""

import io
from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest
from docx import Document

from company_extractor.extraction.gazetteer import Gazetteer
from company_extractor.extraction.name_extractor import CompanyNameExtractor
from company_extractor.orchestrator import CompanyNameOrchestrator
from company_extractor.parsing.extractor import DocumentTextExtractor
from company_extractor.quality.text_quality import QualityGate
from company_extractor.utils.config import AppConfig, Capabilities

_IMAGE_ONLY_PDF = b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\n%%EOF"

_ENGAGEMENT_LETTER = [
    "ENGAGEMENT LETTER",
    "This engagement letter confirms that our client has retained "
    "Porvin, Burnstein & Garelik, PLLC as counsel in connection with the "
    "formation matter described below.",
    "Fees for the work will be billed monthly and are payable within thirty "
    "days of the invoice date.",
]


@pytest.fixture
def sample_image() -> np.ndarray:
    """Create a simple synthetic grayscale test image."""
    image = np.zeros((200, 300), dtype=np.uint8)
    image[50:150, 50:250] = 255
    return image


@pytest.fixture
def sample_color_image() -> np.ndarray:
    """Create a simple synthetic BGR test image."""
    image = np.zeros((200, 300, 3), dtype=np.uint8)
    image[50:150, 50:250] = (255, 255, 255)
    return image


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"


@pytest.fixture
def make_docx() -> Callable[[list[str]], bytes]:
    """Build DOCX bytes from a list of paragraphs."""

    def _make(paragraphs: list[str]) -> bytes:
        document = Document()
        for paragraph in paragraphs:
            document.add_paragraph(paragraph)
        buf = io.BytesIO()
        document.save(buf)
        return buf.getvalue()

    return _make


@pytest.fixture
def app_config() -> AppConfig:
    """Default configuration, independent of any YAML on disk."""
    return AppConfig()


@pytest.fixture
def no_ocr() -> Capabilities:
    """Capabilities of a host with no OCR provider at all."""
    return Capabilities(ocr_space=False, vision=False, tesseract=False)


@pytest.fixture
def text_extractor(app_config: AppConfig, no_ocr: Capabilities) -> DocumentTextExtractor:
    """Text extractor with the default gate and OCR disabled."""
    return DocumentTextExtractor(QualityGate(app_config.quality_gate), no_ocr)


@pytest.fixture
def orchestrator(
    app_config: AppConfig, no_ocr: Capabilities, text_extractor: DocumentTextExtractor
) -> CompanyNameOrchestrator:
    """Orchestrator with OCR disabled and an empty gazetteer."""
    return CompanyNameOrchestrator(
        app_config,
        no_ocr,
        gazetteer=Gazetteer([]),
        text_extractor=text_extractor,
        name_extractor=CompanyNameExtractor(app_config.extraction, Gazetteer([])),
    )


@pytest.fixture
def image_only_pdf() -> bytes:
    """A PDF with a catalog and no text layer, as an image-only scan would be."""
    return _IMAGE_ONLY_PDF


@pytest.fixture
def engagement_letter() -> list[str]:
    """Paragraphs of a law firm engagement letter."""
    return list(_ENGAGEMENT_LETTER)
