"""Scanner: staging, external invocation, pipeline engine."""

from sastscan.scanner.engine import (
    PipelineResult,
    PipelineStatus,
    ReportOutcome,
    reduce_scan_output,
    run_pipeline,
)
from sastscan.scanner.runner import MissingDependencyError, ScannerOptions, run_scanner
from sastscan.scanner.staging import build_staging_area, remove_staging_area

__all__ = [
    "MissingDependencyError",
    "PipelineResult",
    "PipelineStatus",
    "ReportOutcome",
    "ScannerOptions",
    "build_staging_area",
    "reduce_scan_output",
    "remove_staging_area",
    "run_pipeline",
    "run_scanner",
]
