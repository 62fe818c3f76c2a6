"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local env overrides (gitignored)
  4. Environment variables        — ``TBC_CATALOG_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The pipeline and every CLI command receive an ``AppConfig`` instance —
never raw dicts or individual env var lookups scattered through the codebase.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

logger = logging.getLogger(__name__)

CATEGORIES = ("items", "enchants", "gems")

# ── Sub-config models ─────────────────────────────────────────────────────────


class SourcesConfig(BaseModel):
    """Where the generated sim data lives and what each array is called."""

    model_config = ConfigDict(frozen=True)

    input_dir: str = "data/wowsims"
    items_file: str = "all_items.go"
    enchants_file: str = "all_enchants.go"
    gems_file: str = "all_gems.go"
    items_collection: str = "Items"
    enchants_collection: str = "Enchants"
    gems_collection: str = "Gems"

    def source_path(self, category: str) -> Path:
        return Path(self.input_dir) / getattr(self, f"{category}_file")

    def collection_name(self, category: str) -> str:
        return getattr(self, f"{category}_collection")


class OutputConfig(BaseModel):
    """Where the catalog JSON files are written."""

    model_config = ConfigDict(frozen=True)

    output_dir: str = "data/catalog"
    items_file: str = "tbc-items.json"
    enchants_file: str = "tbc-enchants.json"
    gems_file: str = "tbc-gems.json"
    indent: int = 2

    def output_path(self, category: str) -> Path:
        return Path(self.output_dir) / getattr(self, f"{category}_file")

    @field_validator("indent")
    @classmethod
    def validate_indent(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"indent must be >= 0, got {v}.")
        return v


class PipelineConfig(BaseModel):
    """Pipeline execution parameters."""

    model_config = ConfigDict(frozen=True)

    parallel: bool = True
    max_workers: int = 3
    max_diagnostics: int = 20  # skip/warning lines shown per category in the report

    @field_validator("max_workers", "max_diagnostics")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"value must be >= 1, got {v}.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth."""

    model_config = ConfigDict(frozen=True)

    sources: SourcesConfig = SourcesConfig()
    output: OutputConfig = OutputConfig()
    pipeline: PipelineConfig = PipelineConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``; when that default file
            does not exist the built-in defaults are used.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    raw: dict[str, Any] = {}
    if config_path is None:
        default_path = root / "config" / "default.toml"
        if default_path.exists():
            raw = _read_toml(default_path)
            config_dir = default_path.parent
        else:
            logger.debug("No %s found; using built-in defaults", default_path)
            config_dir = None
    else:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        raw = _read_toml(config_path)
        config_dir = config_path.parent

    # Also merge local.toml if present (gitignored local overrides)
    if config_dir is not None:
        local_config_path = config_dir / "local.toml"
        if local_config_path.exists():
            raw = _deep_merge(raw, _read_toml(local_config_path))

    # 3. Apply TBC_CATALOG_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _read_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _as_bool(value: str) -> bool:
    return value.lower() in ("1", "true", "yes")


# env var → (section, key, converter); section None means a top-level key.
_ENV_OVERRIDES: tuple[tuple[str, Optional[str], str, Callable[[str], Any]], ...] = (
    ("TBC_CATALOG_INPUT_DIR", "sources", "input_dir", str),
    ("TBC_CATALOG_OUTPUT_DIR", "output", "output_dir", str),
    ("TBC_CATALOG_LOG_LEVEL", "logging", "level", str),
    ("TBC_CATALOG_PARALLEL", "pipeline", "parallel", _as_bool),
    ("TBC_CATALOG_DEBUG", None, "debug", _as_bool),
)


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply the non-empty TBC_CATALOG_* env vars listed in ``_ENV_OVERRIDES``."""
    for env_var, section, key, convert in _ENV_OVERRIDES:
        value = os.environ.get(env_var)
        if not value:
            continue
        target = raw.setdefault(section, {}) if section else raw
        target[key] = convert(value)
    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    return AppConfig(
        sources=SourcesConfig(**raw.get("sources", {})),
        output=OutputConfig(**raw.get("output", {})),
        pipeline=PipelineConfig(**raw.get("pipeline", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", False),
    )
