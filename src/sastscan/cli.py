"""sastscan CLI: Typer application with scan, report, prune, and init commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from sastscan import __version__

app = typer.Typer(
    name="sastscan",
    help="Run a JFrog SAST scan on the files you changed and keep CSV reports.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)
out = Console(highlight=False, soft_wrap=True)


def _configure_logging(verbose: bool, debug: bool) -> None:
    """Route the package loggers to stderr through Rich."""
    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    pkg_logger = logging.getLogger("sastscan")
    for handler in list(pkg_logger.handlers):
        pkg_logger.removeHandler(handler)
    pkg_logger.addHandler(
        RichHandler(console=console, show_path=debug, markup=False, rich_tracebacks=debug)
    )
    pkg_logger.setLevel(level)


def _resolve_repo_root(cwd: Path) -> Path:
    """Find the git or ClearCase root, falling back to *cwd* outside both."""
    from sastscan.vcs.adapter import VcsError, detect_vcs, get_repo_root
    from sastscan.vcs.models import VcsKind

    kind = detect_vcs(cwd)
    if kind == VcsKind.UNKNOWN:
        return cwd
    try:
        return get_repo_root(kind, cwd)
    except VcsError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc


def _load(cwd: Path, config: Optional[str]):
    """Load .sastscan.toml from the repository root above *cwd*."""
    from sastscan.config.loader import ConfigError, load_config

    try:
        return load_config(_resolve_repo_root(cwd), config)
    except ConfigError as exc:
        console.print(f"[bold red]Config error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc


def _print_report(report, *, show_table: bool, show_csv: bool) -> None:
    from sastscan.output import table

    if report.csv_text is None:
        return
    if show_table:
        out.rule("SAST issues")
        table.print_table(out, report.csv_text)
    if show_csv:
        out.rule("SAST issues (CSV)")
        out.print(report.csv_text, markup=False, end="")
    out.print(f"Report: {report.csv_path}", markup=False)


def _print_retention(retention) -> None:
    for path in retention.deleted:
        console.print(f"[dim]Deleted {path.name}[/dim]")
    for error in retention.errors:
        console.print(f"[yellow]⚠[/yellow]  {error}")


# ── scan ──────────────────────────────────────────────────────────────────────


@app.command()
def scan(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .sastscan.toml"),
    reports_dir: Optional[str] = typer.Option(None, "--reports-dir", "-o", help="Directory for JSON/CSV reports"),
    keep: Optional[int] = typer.Option(None, "--keep", min=0, help="Number of recent CSV reports to keep"),
    threads: Optional[int] = typer.Option(None, "--threads", min=1, help="Scanner threads (default: CPUs, min 4)"),
    no_table: bool = typer.Option(False, "--no-table", help="Do not print the findings table"),
    no_csv: bool = typer.Option(False, "--no-csv", help="Do not print the CSV report"),
    keep_staging: bool = typer.Option(False, "--keep-staging", help="Keep the temporary copy of changed files"),
    dry_run: bool = typer.Option(False, "--dry-run", help="List the changed files without scanning"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug output"),
) -> None:
    """Scan locally changed files and write a CSV report."""
    from sastscan.findings.reducer import ParseError
    from sastscan.scanner.engine import PipelineStatus, collect_changes, run_pipeline
    from sastscan.scanner.runner import MissingDependencyError
    from sastscan.vcs.adapter import VcsError

    _configure_logging(verbose, debug)
    cwd = Path.cwd()
    cfg = _load(cwd, config)

    # --- CLI overrides ---
    if reports_dir:
        cfg.reports.directory = reports_dir
    if keep is not None:
        cfg.reports.keep = keep
    if threads is not None:
        cfg.scanner.threads = threads
    if keep_staging:
        cfg.staging.keep = True

    if dry_run:
        try:
            changes = collect_changes(cwd, cfg)
        except VcsError as exc:
            console.print(f"[bold red]Error:[/bold red] {exc}")
            raise typer.Exit(code=2) from exc
        out.print(f"Dry run: {len(changes.files)} files would be scanned:")
        for f in changes.files:
            out.print(f"  {f}", markup=False)
        raise typer.Exit(code=0)

    try:
        result = run_pipeline(cwd, cfg)
    except VcsError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc
    except MissingDependencyError as exc:
        console.print(f"[bold red]Missing dependency:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc
    except ParseError as exc:
        console.print(f"[bold red]Scan failed:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc
    except OSError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc

    if result.status == PipelineStatus.NO_CHANGES:
        out.print("No changes detected. Exiting scan.")
        raise typer.Exit(code=0)

    if debug:
        console.print(f"[dim]Pipeline duration: {result.duration_ms:.0f}ms[/dim]")

    report = result.report
    if result.status == PipelineStatus.CLEAN:
        out.print("[bold green]No SAST issues found.[/bold green]")
        raise typer.Exit(code=0)

    out.print(f"Total SAST issues found: {len(report.findings)}")
    _print_report(
        report,
        show_table=cfg.output.show_table and not no_table,
        show_csv=cfg.output.show_csv and not no_csv,
    )
    _print_retention(report.retention)
    raise typer.Exit(code=0)


# ── report ────────────────────────────────────────────────────────────────────


@app.command()
def report(
    raw_json: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Scanner JSON output"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .sastscan.toml"),
    reports_dir: Optional[str] = typer.Option(None, "--reports-dir", "-o", help="Directory for JSON/CSV reports"),
    keep: Optional[int] = typer.Option(None, "--keep", min=0, help="Number of recent CSV reports to keep"),
    no_table: bool = typer.Option(False, "--no-table", help="Do not print the findings table"),
    no_csv: bool = typer.Option(False, "--no-csv", help="Do not print the CSV report"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Reduce an existing scanner JSON file into a CSV report."""
    from sastscan.findings.reducer import ParseError
    from sastscan.scanner.engine import PipelineStatus, reduce_scan_output, resolve_reports_dir

    _configure_logging(verbose, False)
    cwd = Path.cwd()
    cfg = _load(cwd, config)
    if reports_dir:
        cfg.reports.directory = reports_dir
    if keep is not None:
        cfg.reports.keep = keep

    try:
        outcome = reduce_scan_output(
            raw_json.read_bytes(),
            resolve_reports_dir(cwd, cfg),
            keep=cfg.reports.keep,
        )
    except ParseError as exc:
        console.print(f"[bold red]Scan failed:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc
    except OSError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=2) from exc

    if outcome.status == PipelineStatus.CLEAN:
        out.print("[bold green]No SAST issues found.[/bold green]")
        raise typer.Exit(code=0)

    _print_report(
        outcome,
        show_table=cfg.output.show_table and not no_table,
        show_csv=cfg.output.show_csv and not no_csv,
    )
    _print_retention(outcome.retention)


# ── prune ─────────────────────────────────────────────────────────────────────


@app.command()
def prune(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .sastscan.toml"),
    reports_dir: Optional[str] = typer.Option(None, "--reports-dir", "-o", help="Directory holding CSV reports"),
    keep: Optional[int] = typer.Option(None, "--keep", min=0, help="Number of recent CSV reports to keep"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Apply report retention without scanning."""
    from sastscan.reports.retention import enforce_retention
    from sastscan.scanner.engine import resolve_reports_dir

    _configure_logging(verbose, False)
    cwd = Path.cwd()
    cfg = _load(cwd, config)
    if reports_dir:
        cfg.reports.directory = reports_dir
    if keep is not None:
        cfg.reports.keep = keep

    retention = enforce_retention(resolve_reports_dir(cwd, cfg), cfg.reports.keep)
    _print_retention(retention)
    out.print(f"Deleted {len(retention.deleted)} report(s).")
    if retention.errors:
        out.print(f"{len(retention.errors)} report(s) could not be deleted.")


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init() -> None:
    """Generate a starter .sastscan.toml in the current directory."""
    from sastscan.config.defaults import DEFAULT_TOML
    from sastscan.config.loader import CONFIG_FILENAME

    config_path = Path.cwd() / CONFIG_FILENAME

    if config_path.exists():
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"sastscan {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """sastscan: SAST-scan the files you changed."""
