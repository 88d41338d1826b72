"""Load and merge configuration from .sastscan.toml and env vars."""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from sastscan.config.schema import (
    LOG_LEVELS,
    OutputConfig,
    ReportsConfig,
    SastScanConfig,
    ScannerConfig,
    StagingConfig,
)

CONFIG_FILENAME = ".sastscan.toml"


class ConfigError(Exception):
    """Raised when config is malformed or unreadable."""


def find_config_file(repo_root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = repo_root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _env_int(name: str, minimum: int = 0) -> Optional[int]:
    val = os.environ.get(name)
    if not val:
        return None
    try:
        parsed = int(val)
    except ValueError:
        return None
    return parsed if parsed >= minimum else None


def _merge_env_overrides(cfg: SastScanConfig) -> None:
    """Apply SASTSCAN_* environment variable overrides."""
    if val := os.environ.get("SASTSCAN_REPORTS_DIR"):
        cfg.reports.directory = val
    if (keep := _env_int("SASTSCAN_KEEP")) is not None:
        cfg.reports.keep = keep
    if val := os.environ.get("SASTSCAN_SCANNER"):
        cfg.scanner.command = val
    if (threads := _env_int("SASTSCAN_THREADS")) is not None:
        cfg.scanner.threads = threads
    if val := os.environ.get("SASTSCAN_SCAN_MODE"):
        cfg.scanner.scan_mode = val
    if val := os.environ.get("SASTSCAN_LOG_LEVEL"):
        if val.upper() in LOG_LEVELS:
            cfg.scanner.log_level = val.upper()


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    raw_section = data.get(section, {})
    if not isinstance(raw_section, dict):
        raise ConfigError(f"[{section}] must be a table")
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in raw_section.items() if k in valid_fields}
    return cls(**filtered)


def _is_count(value: Any) -> bool:
    # TOML booleans are ints to isinstance
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _validate(cfg: SastScanConfig) -> None:
    if not _is_count(cfg.reports.keep):
        raise ConfigError(f"reports.keep must be a non-negative integer, got {cfg.reports.keep!r}")
    if not _is_count(cfg.scanner.threads):
        raise ConfigError(f"scanner.threads must be a non-negative integer, got {cfg.scanner.threads!r}")
    if not isinstance(cfg.scanner.extra_args, list):
        raise ConfigError("scanner.extra_args must be a list of strings")
    level = cfg.scanner.log_level
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        raise ConfigError(
            f"scanner.log_level must be one of {', '.join(LOG_LEVELS)}, got {cfg.scanner.log_level!r}"
        )


def load_config(
    repo_root: Path,
    config_override: Optional[str] = None,
) -> SastScanConfig:
    """Load, validate, and return a SastScanConfig."""
    config_path = find_config_file(repo_root, config_override)

    if config_path is None:
        cfg = SastScanConfig()
    else:
        raw = _parse_toml(config_path)
        cfg = SastScanConfig(
            version=raw.get("version", "1.0"),
            scanner=_build_section(raw, ScannerConfig, "scanner"),
            reports=_build_section(raw, ReportsConfig, "reports"),
            output=_build_section(raw, OutputConfig, "output"),
            staging=_build_section(raw, StagingConfig, "staging"),
        )

    _merge_env_overrides(cfg)
    _validate(cfg)
    return cfg
