"""Finding model and scanner-output reduction."""

from sastscan.findings.models import CSV_HEADER, Finding
from sastscan.findings.reducer import (
    ParseError,
    count_findings,
    extract_findings,
    parse_scan_output,
    strip_control_chars,
)

__all__ = [
    "CSV_HEADER",
    "Finding",
    "ParseError",
    "count_findings",
    "extract_findings",
    "parse_scan_output",
    "strip_control_chars",
]
