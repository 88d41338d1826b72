"""Scratch copy of the change-set, laid out like the repository."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


def make_staging_dir() -> Path:
    """Create an empty scratch directory for one run."""
    return Path(tempfile.mkdtemp(prefix="sastscan-"))


def build_staging_area(
    repo_root: Path,
    paths: Iterable[Path],
    dest: Optional[Path] = None,
) -> Path:
    """Copy *paths* (relative to *repo_root*) into a staging directory.

    Missing paths and paths outside *repo_root* are skipped.
    """
    staging = dest if dest is not None else make_staging_dir()
    staging.mkdir(parents=True, exist_ok=True)

    for rel in paths:
        relative = Path(os.path.normpath(rel))
        if relative.is_absolute() or relative.parts[:1] == ("..",):
            logger.warning("Skipping %s: outside %s", rel, repo_root)
            continue

        source = repo_root / relative
        target = staging / relative
        if source.is_dir():
            shutil.copytree(source, target, dirs_exist_ok=True)
        elif source.is_file():
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
        else:
            logger.debug("Skipping %s: no longer exists", rel)

    return staging


def remove_staging_area(staging: Path) -> None:
    """Best-effort removal; a staging dir that is already gone is fine."""
    try:
        shutil.rmtree(staging)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Could not remove staging directory %s: %s", staging, exc)
