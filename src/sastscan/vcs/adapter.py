"""VCS subprocess wrappers: detection, repo root, changed files."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Iterator, List, Optional

from sastscan.vcs.models import StatusEntry, VcsKind

logger = logging.getLogger(__name__)


class VcsError(Exception):
    """Raised when git/cleartool is unavailable or returns an unexpected error."""


def _run(args: list[str], cwd: Path, timeout: int = 60) -> subprocess.CompletedProcess:
    tool = args[0]
    try:
        return subprocess.run(
            args,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
            encoding="utf-8",
            errors="replace",
        )
    except FileNotFoundError:
        raise VcsError(f"{tool} is not installed or not on PATH")
    except subprocess.TimeoutExpired:
        raise VcsError(f"{tool} command timed out after {timeout}s: {' '.join(args)}")


def _run_checked(args: list[str], cwd: Path, timeout: int = 60) -> str:
    """Run a VCS command and return stdout. Raises VcsError on failure."""
    result = _run(args, cwd, timeout)
    if result.returncode != 0:
        stderr = result.stderr.strip() or f"exit code {result.returncode}"
        raise VcsError(f"{args[0]} error: {stderr}")
    return result.stdout


def _succeeds(args: list[str], cwd: Path) -> bool:
    try:
        return _run(args, cwd).returncode == 0
    except VcsError:
        return False


def detect_vcs(cwd: Optional[Path] = None) -> VcsKind:
    """Return which version-control system manages *cwd*."""
    cwd = cwd or Path.cwd()
    if _succeeds(["git", "rev-parse", "--is-inside-work-tree"], cwd):
        return VcsKind.GIT
    if _succeeds(["cleartool", "ls"], cwd):
        return VcsKind.CLEARCASE
    return VcsKind.UNKNOWN


def get_repo_root(kind: VcsKind, cwd: Optional[Path] = None) -> Path:
    """Return the root that changed paths are relative to."""
    cwd = cwd or Path.cwd()
    if kind == VcsKind.GIT:
        out = _run_checked(["git", "rev-parse", "--show-toplevel"], cwd)
        return Path(out.strip())
    return cwd


def parse_porcelain(output: str) -> Iterator[StatusEntry]:
    """Parse NUL-separated ``git status --porcelain -z`` output.

    Renames and copies carry a second record holding the original path.
    """
    records = output.split("\0")
    idx = 0
    while idx < len(records):
        record = records[idx]
        idx += 1
        if len(record) < 4:
            continue
        status, path = record[:2], record[3:]
        orig_path = None
        if status[0] in ("R", "C") and idx < len(records):
            orig_path = records[idx]
            idx += 1
        yield StatusEntry(status=status, path=path, orig_path=orig_path)


class GitChangeSetProvider:
    """Changed files from ``git status`` (staged, unstaged and untracked)."""

    def list_changed_files(self, repo_root: Path) -> List[Path]:
        output = _run_checked(
            ["git", "status", "--porcelain", "-z", "--untracked-files=all"],
            cwd=repo_root,
        )
        changed: List[Path] = []
        for entry in parse_porcelain(output):
            if entry.is_deleted:
                logger.debug("Skipping deleted file %s", entry.path)
                continue
            changed.append(Path(entry.path))
        return changed


class ClearCaseChangeSetProvider:
    """Checked-out elements of a ClearCase view.

    Mirrors ``cleartool ls -short`` + ``cleartool describe``; not exercised
    against a live view.
    """

    def list_changed_files(self, repo_root: Path) -> List[Path]:
        listing = _run_checked(["cleartool", "ls", "-short"], cwd=repo_root)
        changed: List[Path] = []
        for line in listing.splitlines():
            element = line.strip()
            if not element:
                continue
            described = _run(["cleartool", "describe", element], cwd=repo_root)
            if described.returncode == 0 and "CHECKEDOUT" in described.stdout:
                changed.append(Path(element))
        return changed


def provider_for(kind: VcsKind) -> GitChangeSetProvider | ClearCaseChangeSetProvider:
    """Return the change-set provider for *kind*."""
    if kind == VcsKind.GIT:
        return GitChangeSetProvider()
    if kind == VcsKind.CLEARCASE:
        return ClearCaseChangeSetProvider()
    raise VcsError("Not a Git or ClearCase repository")
