"""Configuration schema: dataclasses for every config section."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

DEFAULT_KEEP = 5
DEFAULT_REPORTS_DIR = "sast_reports"

LOG_LEVELS = ("ERROR", "WARN", "INFO", "DEBUG")


@dataclass
class ScannerConfig:
    command: str = "jf"
    scan_mode: str = "file"  # JF_SAST_DEFAULT_SCAN_MODE
    log_level: str = "DEBUG"  # JFROG_CLI_LOG_LEVEL
    threads: int = 0  # 0 = auto (cpu count, at least 4)
    extra_args: List[str] = field(default_factory=list)


@dataclass
class ReportsConfig:
    directory: str = DEFAULT_REPORTS_DIR  # relative paths resolve against the cwd
    keep: int = DEFAULT_KEEP


@dataclass
class OutputConfig:
    show_table: bool = True
    show_csv: bool = True


@dataclass
class StagingConfig:
    keep: bool = False  # leave the staging directory behind for inspection


@dataclass
class SastScanConfig:
    version: str = "1.0"
    scanner: ScannerConfig = field(default_factory=ScannerConfig)
    reports: ReportsConfig = field(default_factory=ReportsConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    staging: StagingConfig = field(default_factory=StagingConfig)
