"""Configuration management for the company name extractor.

Loads and validates YAML configuration with sensible defaults for
preprocessing, OCR providers, quality gates, name extraction and the CRM
client. Secrets can be supplied through environment variables.
"""

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Environment variable -> (section, key) for secrets kept out of YAML.
_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "OCR_SPACE_API_KEY": ("ocr", "ocr_space_api_key"),
    "GOOGLE_VISION_API_KEY": ("ocr", "vision_api_key"),
    "HUBSPOT_ACCESS_TOKEN": ("crm", "access_token"),
}


class PreprocessingConfig(BaseModel):
    """Configuration for image preprocessing before local OCR."""

    normalize_enabled: bool = True
    contrast_enabled: bool = True
    clahe_clip_limit: float = 2.0
    clahe_tile_size: int = 8
    sharpen_enabled: bool = True
    sharpen_amount: float = 1.5
    binarize_enabled: bool = True


class QualityGateConfig(BaseModel):
    """Thresholds a text must clear before it is trusted."""

    min_readable_ratio: int = 15
    min_length: int = 10
    min_valid_words: int = 5


class OCRProfileConfig(BaseModel):
    """One parameter profile for the remote OCR service."""

    name: str
    engine: int = 2
    scale: bool = True
    is_table: bool = False
    detect_orientation: bool = True


def _default_profiles() -> list[OCRProfileConfig]:
    return [
        OCRProfileConfig(name="engine2_scaled", engine=2, scale=True),
        OCRProfileConfig(name="engine1_scaled", engine=1, scale=True),
        OCRProfileConfig(name="engine2_table", engine=2, scale=True, is_table=True),
        OCRProfileConfig(
            name="engine1_plain", engine=1, scale=False, detect_orientation=False
        ),
    ]


def _default_ocr_gate() -> QualityGateConfig:
    return QualityGateConfig(min_readable_ratio=20, min_length=20, min_valid_words=5)


class OCRConfig(BaseModel):
    """Configuration for remote and local OCR."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng"
    tesseract_psm_profiles: list[int] = Field(default_factory=lambda: [3, 6])
    pdf_dpi: int = 300
    timeout_seconds: float = 45.0
    scratch_dir: str | None = None

    ocr_space_url: str = "https://api.ocr.space/parse/image"
    ocr_space_api_key: str | None = None
    ocr_space_language: str = "eng"
    profiles: list[OCRProfileConfig] = Field(default_factory=_default_profiles)

    vision_url: str = "https://vision.googleapis.com/v1/images:annotate"
    vision_api_key: str | None = None

    quality_gate: QualityGateConfig = Field(default_factory=_default_ocr_gate)


class ScoringConfig(BaseModel):
    """Confidence adjustments applied to pattern matches."""

    repeat_bonus: int = 3
    repeat_bonus_cap: int = 15
    early_position: int = 200
    early_position_bonus: int = 10
    near_position: int = 500
    near_position_bonus: int = 5
    typical_length_min: int = 5
    typical_length_max: int = 30
    typical_length_bonus: int = 5
    short_length: int = 3
    short_length_penalty: int = 15
    long_length: int = 50
    long_length_penalty: int = 10
    business_word_bonus: int = 3


class ExtractionConfig(BaseModel):
    """Configuration for company name extraction."""

    max_candidates: int = 5
    max_matches_per_pattern: int = 10
    min_name_length: int = 3
    max_name_length: int = 80
    default_suffix: str = "LLC"
    gazetteer_path: str = "configs/gazetteer.yaml"
    gazetteer_min_fragment_ratio: float = 0.6
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)


class CRMConfig(BaseModel):
    """Configuration for the HubSpot CRM client."""

    base_url: str = "https://api.hubapi.com"
    access_token: str | None = None
    timeout_seconds: float = 30.0


class AppConfig(BaseModel):
    """Top-level application configuration."""

    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    quality_gate: QualityGateConfig = Field(default_factory=QualityGateConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    crm: CRMConfig = Field(default_factory=CRMConfig)
    log_level: str = "INFO"


@dataclass(frozen=True)
class Capabilities:
    """Which OCR providers and engines this process can use.

    Built once at startup and handed to the orchestrator so that no
    component has to inspect the environment on its own.
    """

    ocr_space: bool = False
    vision: bool = False
    tesseract: bool = False

    @property
    def remote_ocr(self) -> bool:
        return self.ocr_space or self.vision

    @property
    def any_ocr(self) -> bool:
        return self.remote_ocr or self.tesseract

    @classmethod
    def detect(cls, config: AppConfig) -> "Capabilities":
        """Derive capabilities from configured credentials and installed binaries."""
        tesseract_cmd = config.ocr.tesseract_cmd or "tesseract"
        capabilities = cls(
            ocr_space=bool(config.ocr.ocr_space_api_key),
            vision=bool(config.ocr.vision_api_key),
            tesseract=shutil.which(tesseract_cmd) is not None,
        )
        logger.info(
            "OCR capabilities: ocr_space=%s vision=%s tesseract=%s",
            capabilities.ocr_space,
            capabilities.vision,
            capabilities.tesseract,
        )
        return capabilities


def _apply_env_overrides(raw: dict) -> dict:
    for env_name, (section, key) in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            raw.setdefault(section, {})[key] = value
    return raw


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    raw: dict = {}
    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    else:
        logger.info("No config file found at %s, using defaults", path)

    return AppConfig(**_apply_env_overrides(raw))
