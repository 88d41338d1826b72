"""Count-based retention for CSV reports.

Two passes, always in this order:

1. ``prune_old_reports`` keeps the *keep* most recent CSVs (by mtime,
   filename as tie-break) and deletes the rest.
2. ``prune_empty_reports`` deletes any remaining CSV with at most one line
   (header only, or nothing at all).

A failed deletion never aborts a pass: it is logged, recorded as a
``DeletionError`` on the result, and the next artifact is processed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

from sastscan.config.schema import DEFAULT_KEEP

logger = logging.getLogger(__name__)

REPORT_GLOB = "*.csv"


class DeletionError(Exception):
    """A report could not be deleted. Recorded, not raised."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Could not delete {path}: {reason}")
        self.path = path
        self.reason = reason


@dataclass
class RetentionResult:
    deleted: List[Path] = field(default_factory=list)
    errors: List[DeletionError] = field(default_factory=list)

    def merge(self, other: "RetentionResult") -> "RetentionResult":
        return RetentionResult(
            deleted=self.deleted + other.deleted,
            errors=self.errors + other.errors,
        )


def list_reports(reports_dir: Path) -> List[Path]:
    """Return CSV reports, most recent first.

    Order is mtime descending; equal mtimes fall back to filename
    descending, which follows the embedded timestamp.
    """
    if not reports_dir.is_dir():
        return []

    keyed: List[Tuple[float, str, Path]] = []
    for path in reports_dir.glob(REPORT_GLOB):
        try:
            if not path.is_file():
                continue
            mtime = path.stat().st_mtime
        except OSError as exc:
            # vanished between glob and stat
            logger.debug("Skipping %s: %s", path, exc)
            continue
        keyed.append((mtime, path.name, path))

    keyed.sort(key=lambda item: (item[0], item[1]), reverse=True)
    return [path for _, _, path in keyed]


def _delete(path: Path, result: RetentionResult) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        logger.debug("%s already gone", path)
    except OSError as exc:
        error = DeletionError(path, exc.strerror or str(exc))
        logger.warning("%s", error)
        result.errors.append(error)
    else:
        result.deleted.append(path)


def prune_old_reports(reports_dir: Path, keep: int = DEFAULT_KEEP) -> RetentionResult:
    """Delete every CSV report beyond the *keep* most recent."""
    if keep < 0:
        raise ValueError(f"keep must be >= 0, got {keep}")

    result = RetentionResult()
    reports = list_reports(reports_dir)
    if len(reports) <= keep:
        return result

    logger.info("Total CSV reports: %d. Keeping the %d most recent.", len(reports), keep)
    for path in reports[keep:]:
        logger.info("Deleting old report %s", path.name)
        _delete(path, result)
    return result


def count_lines(path: Path) -> int:
    """Physical line count; a last line without a newline still counts."""
    with open(path, "rb") as f:
        return sum(1 for _ in f)


def prune_empty_reports(reports_dir: Path) -> RetentionResult:
    """Delete CSV reports that hold no data rows."""
    result = RetentionResult()
    for path in list_reports(reports_dir):
        try:
            lines = count_lines(path)
        except OSError as exc:
            logger.warning("Could not read %s: %s", path, exc)
            continue
        if lines <= 1:
            logger.info("Deleting empty report %s", path.name)
            _delete(path, result)
    return result


def enforce_retention(reports_dir: Path, keep: int = DEFAULT_KEEP) -> RetentionResult:
    """Count-based pruning first, then the empty-report sweep."""
    return prune_old_reports(reports_dir, keep).merge(prune_empty_reports(reports_dir))
