"""
Configuration management and loading.

Handles report settings from a YAML file and environment variables.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from inventory_report.core.formatting import LOCALES
from inventory_report.core.statistics import RangePolicy

API_URL_ENV = "INVENTORY_API_URL"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class ApiConfig:
    """Upstream REST API connection settings."""
    base_url: str = "http://localhost:8080/api"
    timeout: float = 30.0

    def __post_init__(self):
        """Validate API settings."""
        if not self.base_url:
            raise ValueError("api.base_url cannot be empty")
        if self.timeout <= 0:
            raise ValueError("api.timeout must be > 0")


@dataclass(frozen=True)
class DisplayConfig:
    """Locale used for currency and date formatting."""
    locale: str = "tr-TR"
    currency: str = "TRY"

    def __post_init__(self):
        """Validate locale is supported."""
        if self.locale not in LOCALES:
            raise ValueError(f"display.locale must be one of: {sorted(LOCALES)}")
        if not self.currency:
            raise ValueError("display.currency cannot be empty")


@dataclass(frozen=True)
class ExportConfig:
    """PDF export settings.

    ``page_width_mm`` and ``page_height_mm`` are the tiling geometry; pages
    are always A4.
    """
    output_dir: str = "."
    file_prefix: str = "envanter-raporu"
    scale: int = 2
    background: str = "#ffffff"
    page_width_mm: float = 210.0
    page_height_mm: float = 295.0

    def __post_init__(self):
        """Validate export values."""
        if not self.file_prefix:
            raise ValueError("export.file_prefix cannot be empty")
        if self.scale < 1:
            raise ValueError("export.scale must be >= 1")
        if self.page_width_mm <= 0 or self.page_height_mm <= 0:
            raise ValueError("export page dimensions must be > 0")


@dataclass(frozen=True)
class Settings:
    """Complete application settings."""
    api: ApiConfig = field(default_factory=ApiConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    range_policy: RangePolicy = RangePolicy.SWAP
    log_level: str = "WARNING"


_SECTION_KEYS = {
    "api": {"base_url", "timeout"},
    "display": {"locale", "currency"},
    "export": {"output_dir", "file_prefix", "scale", "background", "page_width_mm", "page_height_mm"},
    "report": {"range_policy"},
    "logging": {"level"},
}


def load_settings(path: Optional[str] = None, env: Optional[Dict[str, str]] = None) -> Settings:
    """Load and validate settings from a YAML file.

    Every key is optional; missing keys take their defaults. Unknown keys
    are rejected so typos do not silently fall back to defaults.
    ``INVENTORY_API_URL`` overrides ``api.base_url``.

    Args:
        path: Path to YAML configuration file, or None for defaults only
        env: Environment mapping (defaults to os.environ)

    Returns:
        Validated Settings object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    env = os.environ if env is None else env
    raw_config: Dict[str, Any] = {}

    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            try:
                raw_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

        if not isinstance(raw_config, dict):
            raise ValueError("Configuration must be a mapping")

    unknown_keys = set(raw_config.keys()) - set(_SECTION_KEYS)
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    sections = {name: _section(raw_config, name) for name in _SECTION_KEYS}

    api_data = dict(sections["api"])
    if env.get(API_URL_ENV):
        api_data["base_url"] = env[API_URL_ENV]
    if "timeout" in api_data:
        api_data["timeout"] = _number(api_data["timeout"], "api.timeout")

    export_data = dict(sections["export"])
    if "scale" in export_data:
        scale = export_data["scale"]
        if not isinstance(scale, int) or isinstance(scale, bool):
            raise ValueError("'export.scale' must be an integer")
    for key in ("page_width_mm", "page_height_mm"):
        if key in export_data:
            export_data[key] = _number(export_data[key], f"export.{key}")

    policy_str = sections["report"].get("range_policy", RangePolicy.SWAP.value)
    try:
        policy = RangePolicy(str(policy_str).lower())
    except ValueError:
        valid = [p.value for p in RangePolicy]
        raise ValueError(f"'report.range_policy' must be one of: {valid}")

    level = str(sections["logging"].get("level", "WARNING")).upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"'logging.level' must be one of: {sorted(_LOG_LEVELS)}")

    return Settings(
        api=ApiConfig(**api_data),
        display=DisplayConfig(**sections["display"]),
        export=ExportConfig(**export_data),
        range_policy=policy,
        log_level=level,
    )


def configure_logging(level: str) -> None:
    """Set up root logging for the CLI."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _section(raw_config: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Extract one section and reject unknown keys in it."""
    data = raw_config.get(name) or {}
    if not isinstance(data, dict):
        raise ValueError(f"'{name}' must be a dictionary")
    unknown_keys = set(data.keys()) - _SECTION_KEYS[name]
    if unknown_keys:
        raise ValueError(f"Unknown keys in {name}: {unknown_keys}")
    return data


def _number(value: Any, path: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"'{path}' must be a number")
    return float(value)
