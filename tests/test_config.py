"""Tests for configuration loading and validation."""

from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from company_extractor.utils.config import (
    AppConfig,
    Capabilities,
    CRMConfig,
    ExtractionConfig,
    OCRConfig,
    PreprocessingConfig,
    QualityGateConfig,
    load_config,
)


@pytest.fixture(autouse=True)
def _clear_secret_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("OCR_SPACE_API_KEY", "GOOGLE_VISION_API_KEY", "HUBSPOT_ACCESS_TOKEN"):
        monkeypatch.delenv(name, raising=False)


class TestPreprocessingConfig:
    """Tests for PreprocessingConfig defaults and overrides."""

    def test_defaults(self) -> None:
        cfg = PreprocessingConfig()
        assert cfg.normalize_enabled is True
        assert cfg.contrast_enabled is True
        assert cfg.sharpen_enabled is True
        assert cfg.binarize_enabled is True
        assert cfg.clahe_clip_limit == 2.0

    def test_override(self) -> None:
        cfg = PreprocessingConfig(sharpen_enabled=False, clahe_clip_limit=3.5)
        assert cfg.sharpen_enabled is False
        assert cfg.clahe_clip_limit == 3.5


class TestQualityGates:
    """Tests for the native and OCR quality gate defaults."""

    def test_native_gate_defaults(self) -> None:
        gate = AppConfig().quality_gate
        assert (gate.min_readable_ratio, gate.min_length, gate.min_valid_words) == (
            15,
            10,
            5,
        )

    def test_ocr_gate_is_stricter(self) -> None:
        gate = OCRConfig().quality_gate
        assert (gate.min_readable_ratio, gate.min_length, gate.min_valid_words) == (
            20,
            20,
            5,
        )


class TestOCRConfig:
    """Tests for OCRConfig defaults and overrides."""

    def test_defaults(self) -> None:
        cfg = OCRConfig()
        assert cfg.default_lang == "eng"
        assert cfg.pdf_dpi == 300
        assert cfg.tesseract_cmd is None
        assert cfg.tesseract_psm_profiles == [3, 6]
        assert cfg.ocr_space_api_key is None

    def test_profile_order(self) -> None:
        names = [p.name for p in OCRConfig().profiles]
        assert names == [
            "engine2_scaled",
            "engine1_scaled",
            "engine2_table",
            "engine1_plain",
        ]


class TestExtractionConfig:
    """Tests for ExtractionConfig defaults."""

    def test_defaults(self) -> None:
        cfg = ExtractionConfig()
        assert cfg.max_candidates == 5
        assert cfg.default_suffix == "LLC"
        assert cfg.gazetteer_min_fragment_ratio == 0.6
        assert cfg.scoring.repeat_bonus_cap == 15


class TestAppConfig:
    """Tests for the top-level AppConfig."""

    def test_defaults(self) -> None:
        cfg = AppConfig()
        assert isinstance(cfg.preprocessing, PreprocessingConfig)
        assert isinstance(cfg.ocr, OCRConfig)
        assert isinstance(cfg.extraction, ExtractionConfig)
        assert isinstance(cfg.crm, CRMConfig)
        assert isinstance(cfg.quality_gate, QualityGateConfig)
        assert cfg.log_level == "INFO"

    def test_nested_override(self) -> None:
        cfg = AppConfig(
            preprocessing=PreprocessingConfig(binarize_enabled=False),
            log_level="DEBUG",
        )
        assert cfg.preprocessing.binarize_enabled is False
        assert cfg.log_level == "DEBUG"


class TestLoadConfig:
    """Tests for the load_config function."""

    def test_load_default_config(self, config_dir: Path) -> None:
        cfg = load_config(config_dir / "config.yaml")
        assert isinstance(cfg, AppConfig)
        assert cfg.ocr.default_lang == "eng"
        assert len(cfg.ocr.profiles) == 4

    def test_load_missing_file_returns_defaults(self) -> None:
        cfg = load_config(Path("/nonexistent/path/config.yaml"))
        assert isinstance(cfg, AppConfig)
        assert cfg.ocr.default_lang == "eng"

    def test_load_custom_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "quality_gate": {"min_readable_ratio": 30},
            "ocr": {"default_lang": "deu", "pdf_dpi": 200},
            "extraction": {"default_suffix": "Inc."},
            "log_level": "DEBUG",
        }
        config_file = tmp_path / "config.yaml"
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

        cfg = load_config(config_file)
        assert cfg.quality_gate.min_readable_ratio == 30
        assert cfg.ocr.default_lang == "deu"
        assert cfg.ocr.pdf_dpi == 200
        assert cfg.extraction.default_suffix == "Inc."
        assert cfg.log_level == "DEBUG"

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        cfg = load_config(config_file)
        assert isinstance(cfg, AppConfig)

    def test_env_overrides_secrets(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("crm:\n  access_token: from-yaml\n")
        monkeypatch.setenv("HUBSPOT_ACCESS_TOKEN", "from-env")
        monkeypatch.setenv("OCR_SPACE_API_KEY", "ocr-key")

        cfg = load_config(config_file)
        assert cfg.crm.access_token == "from-env"
        assert cfg.ocr.ocr_space_api_key == "ocr-key"


class TestCapabilities:
    """Tests for capability detection."""

    @patch("company_extractor.utils.config.shutil.which", return_value=None)
    def test_detect_without_anything(self, _mock_which) -> None:
        caps = Capabilities.detect(AppConfig())
        assert caps == Capabilities(False, False, False)
        assert caps.any_ocr is False

    @patch(
        "company_extractor.utils.config.shutil.which",
        return_value="/usr/bin/tesseract",
    )
    def test_detect_with_keys_and_tesseract(self, _mock_which) -> None:
        cfg = AppConfig(ocr=OCRConfig(ocr_space_api_key="k", vision_api_key="v"))
        caps = Capabilities.detect(cfg)
        assert caps.ocr_space and caps.vision and caps.tesseract
        assert caps.remote_ocr is True

    def test_tesseract_only_is_not_remote(self) -> None:
        caps = Capabilities(tesseract=True)
        assert caps.remote_ocr is False
        assert caps.any_ocr is True
