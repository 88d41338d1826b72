"""Core scan engine: orchestrates the full pipeline.

change detection → staging → scanner → reduction → retention

Every stage runs once, in order, on the calling thread. The scanner call
blocks for as long as the scanner runs.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional

from sastscan.config.schema import DEFAULT_KEEP, SastScanConfig
from sastscan.findings.models import Finding
from sastscan.findings.reducer import (
    count_findings,
    findings_from_document,
    parse_scan_output,
    strip_control_chars,
)
from sastscan.output import csv_report
from sastscan.reports.retention import RetentionResult, enforce_retention
from sastscan.reports.store import ReportArtifacts, open_run, write_csv, write_raw_json
from sastscan.scanner.runner import ScannerOptions, run_scanner
from sastscan.scanner.staging import build_staging_area, make_staging_dir, remove_staging_area
from sastscan.vcs.adapter import detect_vcs, get_repo_root, provider_for
from sastscan.vcs.models import ChangeSetProvider, VcsKind

logger = logging.getLogger(__name__)

ScannerRunner = Callable[[Path, ScannerOptions], bytes]


class PipelineStatus(str, Enum):
    NO_CHANGES = "no_changes"
    CLEAN = "clean"
    FINDINGS = "findings"


@dataclass
class ReportOutcome:
    """What the reduction step produced for one scanner run."""

    status: PipelineStatus
    artifacts: ReportArtifacts
    findings: List[Finding] = field(default_factory=list)
    csv_text: Optional[str] = None  # None when no CSV was kept
    retention: RetentionResult = field(default_factory=RetentionResult)

    @property
    def csv_path(self) -> Optional[Path]:
        return self.artifacts.csv if self.csv_text is not None else None


@dataclass
class ChangeSet:
    vcs: Optional[VcsKind]
    repo_root: Path
    files: List[Path] = field(default_factory=list)


@dataclass
class PipelineResult:
    """Complete result of a pipeline run."""

    status: PipelineStatus
    changes: ChangeSet
    report: Optional[ReportOutcome] = None
    staging_dir: Optional[Path] = None
    duration_ms: float = 0.0

    @property
    def findings(self) -> List[Finding]:
        return self.report.findings if self.report else []


def resolve_reports_dir(cwd: Path, config: SastScanConfig) -> Path:
    reports_dir = Path(config.reports.directory).expanduser()
    return reports_dir if reports_dir.is_absolute() else cwd / reports_dir


def _exclude_dir(files: List[Path], repo_root: Path, directory: Path) -> List[Path]:
    """Drop files that live under *directory* (when it is inside the repo)."""
    try:
        rel_dir = directory.resolve().relative_to(repo_root.resolve())
    except ValueError:
        return files
    prefix = rel_dir.parts
    if not prefix:
        return files
    return [f for f in files if f.parts[: len(prefix)] != prefix]


def collect_changes(
    cwd: Path,
    config: SastScanConfig,
    *,
    provider: Optional[ChangeSetProvider] = None,
    repo_root: Optional[Path] = None,
) -> ChangeSet:
    """Detect the VCS (unless *provider* is given) and list changed files.

    Raises VcsError when *cwd* is not under git or ClearCase.
    """
    kind: Optional[VcsKind] = None
    if provider is None:
        kind = detect_vcs(cwd)
        provider = provider_for(kind)
        repo_root = get_repo_root(kind, cwd)
        logger.info("Detected version control system: %s", kind.value)
    root = repo_root or cwd

    files = provider.list_changed_files(root)
    files = _exclude_dir(files, root, resolve_reports_dir(cwd, config))
    return ChangeSet(vcs=kind, repo_root=root, files=files)


def reduce_scan_output(
    raw: bytes,
    reports_dir: Path,
    *,
    keep: int = DEFAULT_KEEP,
    now: Optional[datetime] = None,
) -> ReportOutcome:
    """Persist, parse and reduce one scanner output, then apply retention.

    The cleaned raw JSON is written before parsing so a ParseError leaves it
    behind for diagnosis. Retention only runs after a CSV has been kept.
    """
    artifacts = open_run(reports_dir, now)
    cleaned = strip_control_chars(raw)
    write_raw_json(artifacts, cleaned)
    logger.info("Raw JSON scan output saved to %s", artifacts.raw_json)

    document = parse_scan_output(cleaned)
    total = count_findings(document)
    if total == 0:
        logger.info("No SAST issues found.")
        return ReportOutcome(status=PipelineStatus.CLEAN, artifacts=artifacts)

    logger.info("Total SAST issues found: %d", total)
    findings = findings_from_document(document)
    csv_text = csv_report.render(findings)
    write_csv(artifacts, csv_text)

    if not findings:
        artifacts.csv.unlink(missing_ok=True)
        logger.info("No SAST finding details found.")
        return ReportOutcome(status=PipelineStatus.CLEAN, artifacts=artifacts)

    logger.info("SAST report CSV file: %s", artifacts.csv)
    retention = enforce_retention(reports_dir, keep)
    return ReportOutcome(
        status=PipelineStatus.FINDINGS,
        artifacts=artifacts,
        findings=findings,
        csv_text=csv_text,
        retention=retention,
    )


def run_pipeline(
    cwd: Path,
    config: SastScanConfig,
    *,
    provider: Optional[ChangeSetProvider] = None,
    repo_root: Optional[Path] = None,
    runner: Optional[ScannerRunner] = None,
    now: Optional[datetime] = None,
) -> PipelineResult:
    """Execute the full pipeline from *cwd*. Returns a PipelineResult.

    Raises VcsError, MissingDependencyError, ParseError or OSError (a
    changed file that cannot be copied) on terminal failures. The staging
    directory is released either way.
    """
    runner = runner or run_scanner
    start = time.perf_counter()
    changes = collect_changes(cwd, config, provider=provider, repo_root=repo_root)

    if not changes.files:
        logger.info("No changes detected.")
        return PipelineResult(status=PipelineStatus.NO_CHANGES, changes=changes)

    staging = make_staging_dir()
    try:
        build_staging_area(changes.repo_root, changes.files, dest=staging)
        logger.info("Copied %d changed files to %s", len(changes.files), staging)
        raw = runner(staging, ScannerOptions.from_config(config.scanner))
        report = reduce_scan_output(
            raw,
            resolve_reports_dir(cwd, config),
            keep=config.reports.keep,
            now=now,
        )
    finally:
        if config.staging.keep:
            logger.info("Keeping staging directory %s", staging)
        else:
            remove_staging_area(staging)

    elapsed = (time.perf_counter() - start) * 1000
    return PipelineResult(
        status=report.status,
        changes=changes,
        report=report,
        staging_dir=staging,
        duration_ms=round(elapsed, 2),
    )
