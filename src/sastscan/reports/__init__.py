"""Report artifacts and retention."""

from sastscan.reports.retention import (
    DeletionError,
    RetentionResult,
    enforce_retention,
    prune_empty_reports,
    prune_old_reports,
)
from sastscan.reports.store import ReportArtifacts, open_run

__all__ = [
    "DeletionError",
    "ReportArtifacts",
    "RetentionResult",
    "enforce_retention",
    "open_run",
    "prune_empty_reports",
    "prune_old_reports",
]
