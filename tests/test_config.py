"""
Unit tests for configuration loading and validation.

Tests defaults, strict key validation and environment overrides.
"""

import os
import tempfile

import pytest
import yaml

from inventory_report.config.loader import (
    API_URL_ENV,
    ApiConfig,
    DisplayConfig,
    ExportConfig,
    Settings,
    load_settings,
)
from inventory_report.core.statistics import RangePolicy


class TestConfigLoading:
    """Test configuration loading and validation."""

    def setup_method(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self):
        """Clean up test environment."""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write_config(self, config_data, filename: str = "config.yaml") -> str:
        """Write configuration data to temporary file."""
        config_path = os.path.join(self.temp_dir, filename)
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(config_data, f, allow_unicode=True)
        return config_path

    def test_defaults_without_file(self):
        """Test that no file yields default settings."""
        settings = load_settings(env={})

        assert settings == Settings()
        assert settings.api.base_url == "http://localhost:8080/api"
        assert settings.display.locale == "tr-TR"
        assert settings.export.page_height_mm == 295.0
        assert settings.range_policy == RangePolicy.SWAP

    def test_valid_config_loads_correctly(self):
        """Test that a complete configuration loads correctly."""
        config_path = self._write_config({
            "api": {"base_url": "https://servis.example/api", "timeout": 10},
            "display": {"locale": "en-US", "currency": "USD"},
            "export": {
                "output_dir": "reports",
                "file_prefix": "usage-report",
                "scale": 3,
                "background": "#fafafa",
                "page_width_mm": 210,
                "page_height_mm": 297,
            },
            "report": {"range_policy": "reject"},
            "logging": {"level": "debug"},
        })

        settings = load_settings(config_path, env={})

        assert settings.api == ApiConfig(base_url="https://servis.example/api", timeout=10.0)
        assert settings.display == DisplayConfig(locale="en-US", currency="USD")
        assert settings.export == ExportConfig(
            output_dir="reports",
            file_prefix="usage-report",
            scale=3,
            background="#fafafa",
            page_width_mm=210.0,
            page_height_mm=297.0,
        )
        assert settings.range_policy == RangePolicy.REJECT
        assert settings.log_level == "DEBUG"

    def test_partial_config_keeps_defaults(self):
        config_path = self._write_config({"export": {"scale": 1}})

        settings = load_settings(config_path, env={})

        assert settings.export.scale == 1
        assert settings.export.file_prefix == "envanter-raporu"
        assert settings.api == ApiConfig()

    def test_empty_file(self):
        config_path = os.path.join(self.temp_dir, "empty.yaml")
        open(config_path, 'w').close()

        assert load_settings(config_path, env={}) == Settings()

    def test_env_overrides_base_url(self):
        config_path = self._write_config({"api": {"base_url": "http://file/api"}})

        settings = load_settings(config_path, env={API_URL_ENV: "http://env/api"})

        assert settings.api.base_url == "http://env/api"

    def test_missing_file(self):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_settings(os.path.join(self.temp_dir, "missing.yaml"), env={})

    def test_invalid_yaml(self):
        config_path = os.path.join(self.temp_dir, "bad.yaml")
        with open(config_path, 'w', encoding='utf-8') as f:
            f.write("api: [unclosed\n")

        with pytest.raises(yaml.YAMLError, match="Invalid YAML"):
            load_settings(config_path, env={})

    def test_non_mapping_root(self):
        config_path = self._write_config(["api"])

        with pytest.raises(ValueError, match="Configuration must be a mapping"):
            load_settings(config_path, env={})


class TestConfigValidation:
    """Test rejection of invalid values."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self):
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _load(self, config_data):
        config_path = os.path.join(self.temp_dir, "config.yaml")
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(config_data, f)
        return load_settings(config_path, env={})

    def test_unknown_top_level_key(self):
        with pytest.raises(ValueError, match="Unknown configuration keys"):
            self._load({"budget": {"daily": 1}})

    def test_unknown_section_key(self):
        with pytest.raises(ValueError, match="Unknown keys in export"):
            self._load({"export": {"dpi": 300}})

    def test_section_must_be_mapping(self):
        with pytest.raises(ValueError, match="'api' must be a dictionary"):
            self._load({"api": "http://localhost"})

    def test_invalid_range_policy(self):
        with pytest.raises(ValueError, match="'report.range_policy' must be one of"):
            self._load({"report": {"range_policy": "clamp"}})

    def test_invalid_log_level(self):
        with pytest.raises(ValueError, match="'logging.level' must be one of"):
            self._load({"logging": {"level": "verbose"}})

    def test_unsupported_locale(self):
        with pytest.raises(ValueError, match="display.locale must be one of"):
            self._load({"display": {"locale": "de-DE"}})

    def test_scale_must_be_integer(self):
        with pytest.raises(ValueError, match="'export.scale' must be an integer"):
            self._load({"export": {"scale": 1.5}})

    def test_scale_must_be_positive(self):
        with pytest.raises(ValueError, match="export.scale must be >= 1"):
            self._load({"export": {"scale": 0}})

    def test_timeout_must_be_number(self):
        with pytest.raises(ValueError, match="'api.timeout' must be a number"):
            self._load({"api": {"timeout": "fast"}})

    def test_non_positive_page_height(self):
        with pytest.raises(ValueError, match="page dimensions must be > 0"):
            self._load({"export": {"page_height_mm": 0}})
