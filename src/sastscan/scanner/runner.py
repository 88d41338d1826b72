"""JFrog CLI invocation: argument-array command, explicit environment."""

from __future__ import annotations

import logging
import os
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from sastscan.config.schema import ScannerConfig

logger = logging.getLogger(__name__)

MIN_THREADS = 4


class MissingDependencyError(Exception):
    """Raised when the scanner executable cannot be found."""


@dataclass
class ScannerOptions:
    """Everything the scanner invocation needs; nothing read from globals."""

    command: str = "jf"
    scan_mode: str = "file"
    log_level: str = "DEBUG"
    threads: int = 0
    extra_args: List[str] = field(default_factory=list)

    @classmethod
    def from_config(cls, cfg: ScannerConfig) -> "ScannerOptions":
        return cls(
            command=cfg.command,
            scan_mode=cfg.scan_mode,
            log_level=cfg.log_level.upper(),
            threads=cfg.threads,
            extra_args=list(cfg.extra_args),
        )


def default_thread_count() -> int:
    """CPU count, never fewer than MIN_THREADS."""
    return max(os.cpu_count() or MIN_THREADS, MIN_THREADS)


def build_command(options: ScannerOptions) -> List[str]:
    threads = options.threads or default_thread_count()
    return [
        options.command,
        "audit",
        "--sast=true",
        f"--threads={threads}",
        "--format",
        "simple-json",
        *options.extra_args,
    ]


def build_environment(
    options: ScannerOptions,
    base: Optional[Dict[str, str]] = None,
) -> Dict[str, str]:
    """Return a copy of *base* (default: os.environ) with the JFrog settings."""
    env = dict(os.environ if base is None else base)
    env["JF_SAST_DEFAULT_SCAN_MODE"] = options.scan_mode
    env["JFROG_CLI_LOG_LEVEL"] = options.log_level
    return env


def run_scanner(target_dir: Path, options: ScannerOptions) -> bytes:
    """Run the scanner inside *target_dir* and return its raw stdout.

    Blocks until the scanner exits. A non-zero exit status is logged but
    not raised: the JSON on stdout is still the result to reduce.
    """
    cmd = build_command(options)
    logger.info("Executing: %s (cwd=%s)", " ".join(cmd), target_dir)
    start = time.perf_counter()
    try:
        proc = subprocess.run(
            cmd,
            cwd=target_dir,
            env=build_environment(options),
            capture_output=True,
            check=False,
        )
    except FileNotFoundError as exc:
        raise MissingDependencyError(
            f"{options.command} is not installed or not on PATH"
        ) from exc

    elapsed = time.perf_counter() - start
    stderr = proc.stderr.decode("utf-8", errors="replace").strip()
    if stderr:
        logger.debug("%s stderr:\n%s", options.command, stderr)
    if proc.returncode != 0:
        logger.warning("%s exited with status %d", options.command, proc.returncode)
    logger.info("Scanner finished in %.1fs, %d bytes of output", elapsed, len(proc.stdout))
    return proc.stdout
