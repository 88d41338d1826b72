"""Configuration loading, schema, and defaults."""

from sastscan.config.loader import ConfigError, load_config
from sastscan.config.schema import SastScanConfig, ScannerConfig

__all__ = [
    "ConfigError",
    "SastScanConfig",
    "ScannerConfig",
    "load_config",
]
