"""Shared test fixtures: scanner outputs, report dirs, temp git repos."""

from __future__ import annotations

import json
import os
import subprocess
from pathlib import Path
from typing import Callable, List

import pytest


@pytest.fixture
def single_finding_json() -> bytes:
    """The canonical one-finding scanner document."""
    return (
        b'{"sast":[{"severity":"high","file":"a.go","startLine":10,'
        b'"startColumn":2,"finding":"bad thing"}]}'
    )


@pytest.fixture
def empty_sast_json() -> bytes:
    return b'{"sast":[]}'


@pytest.fixture
def multi_finding_json() -> bytes:
    """Three findings, including missing fields and awkward descriptions."""
    doc = {
        "vulnerabilities": [],
        "sast": [
            {
                "severity": "High",
                "file": "/work/src/app.py",
                "startLine": 12,
                "startColumn": 5,
                "finding": "SQL injection, via \"user\" input",
            },
            {
                "severity": "Medium",
                "file": "src/util.js",
                "finding": "line1\nline2\r\"quoted\"",
            },
            {
                "file": "",
                "startLine": 0,
                "startColumn": None,
            },
        ],
    }
    return json.dumps(doc).encode("utf-8")


@pytest.fixture
def make_reports(tmp_path: Path) -> Callable[..., List[Path]]:
    """Create CSV reports with strictly increasing mtimes; returns oldest first."""

    def _make(count: int, *, empty: tuple = (), directory: Path | None = None) -> List[Path]:
        reports_dir = directory or tmp_path / "sast_reports"
        reports_dir.mkdir(parents=True, exist_ok=True)
        base = 1_700_000_000
        paths = []
        for i in range(count):
            path = reports_dir / f"sast_report_20240101_0000{i:02d}.csv"
            body = "severity,file,line,column,finding\n"
            if i not in empty:
                body += f"high,f{i}.go,{i},1,issue {i}\n"
            path.write_text(body, encoding="utf-8")
            os.utime(path, (base + i * 60, base + i * 60))
            paths.append(path)
        return paths

    return _make


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository with one commit."""
    repo = tmp_path / "repo"
    repo.mkdir()
    subprocess.run(["git", "init", str(repo)], capture_output=True, check=True)
    subprocess.run(
        ["git", "config", "user.email", "test@test.com"],
        cwd=repo, capture_output=True, check=True,
    )
    subprocess.run(
        ["git", "config", "user.name", "Test"],
        cwd=repo, capture_output=True, check=True,
    )
    (repo / "README.md").write_text("# Test\n")
    (repo / "main.go").write_text("package main\n")
    subprocess.run(["git", "add", "."], cwd=repo, capture_output=True, check=True)
    subprocess.run(
        ["git", "commit", "-m", "init"],
        cwd=repo, capture_output=True, check=True,
    )
    return repo
