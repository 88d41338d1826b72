"""VCS interface layer: detection and change-set providers."""

from sastscan.vcs.adapter import (
    ClearCaseChangeSetProvider,
    GitChangeSetProvider,
    VcsError,
    detect_vcs,
    get_repo_root,
    parse_porcelain,
    provider_for,
)
from sastscan.vcs.models import ChangeSetProvider, StatusEntry, VcsKind

__all__ = [
    "ChangeSetProvider",
    "ClearCaseChangeSetProvider",
    "GitChangeSetProvider",
    "StatusEntry",
    "VcsError",
    "VcsKind",
    "detect_vcs",
    "get_repo_root",
    "parse_porcelain",
    "provider_for",
]
