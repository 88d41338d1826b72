"""Report artifacts on disk: timestamped raw JSON and CSV siblings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
RAW_PREFIX = "sast_raw_"
CSV_PREFIX = "sast_report_"


def make_timestamp(now: Optional[datetime] = None) -> str:
    """Return the artifact timestamp, e.g. ``20240131_235959``."""
    return (now or datetime.now()).strftime(TIMESTAMP_FORMAT)


@dataclass(frozen=True)
class ReportArtifacts:
    """Paths of the two artifacts produced by one run."""

    directory: Path
    timestamp: str

    @property
    def raw_json(self) -> Path:
        return self.directory / f"{RAW_PREFIX}{self.timestamp}.json"

    @property
    def csv(self) -> Path:
        return self.directory / f"{CSV_PREFIX}{self.timestamp}.csv"


def open_run(reports_dir: Path, now: Optional[datetime] = None) -> ReportArtifacts:
    """Create *reports_dir* if needed and name this run's artifacts.

    A second run within the same second gets a ``_1``, ``_2``... suffix
    instead of overwriting the earlier artifacts.
    """
    reports_dir.mkdir(parents=True, exist_ok=True)
    base = make_timestamp(now)
    artifacts = ReportArtifacts(directory=reports_dir, timestamp=base)
    suffix = 0
    while artifacts.raw_json.exists() or artifacts.csv.exists():
        suffix += 1
        artifacts = ReportArtifacts(directory=reports_dir, timestamp=f"{base}_{suffix}")
    if suffix:
        logger.warning("Reports for %s already exist, using %s", base, artifacts.timestamp)
    return artifacts


def write_raw_json(artifacts: ReportArtifacts, cleaned: bytes) -> Path:
    """Persist the control-character-stripped scanner output."""
    artifacts.raw_json.write_bytes(cleaned)
    return artifacts.raw_json


def write_csv(artifacts: ReportArtifacts, csv_text: str) -> Path:
    artifacts.csv.write_text(csv_text, encoding="utf-8", newline="")
    return artifacts.csv
