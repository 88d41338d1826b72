"""Data models for change detection."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Protocol


class VcsKind(str, Enum):
    GIT = "git"
    CLEARCASE = "clearcase"
    UNKNOWN = "unknown"


class ChangeSetProvider(Protocol):
    """Anything that can list the changed files of a working copy."""

    def list_changed_files(self, repo_root: Path) -> List[Path]:
        ...


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """One record of ``git status --porcelain``."""

    status: str  # two-letter XY code, e.g. " M", "??", "R "
    path: str
    orig_path: str | None = None  # set on renames / copies

    @property
    def is_deleted(self) -> bool:
        return "D" in self.status
