"""CSV reporter: one row per finding under a fixed five-column header."""

from __future__ import annotations

import csv
import io
from typing import Iterable

from sastscan.findings.models import CSV_HEADER, Finding

HEADER_LINE = ",".join(CSV_HEADER)


def render(findings: Iterable[Finding]) -> str:
    """Return the CSV text for *findings* (header only when there are none)."""
    buf = io.StringIO()
    buf.write(HEADER_LINE + "\n")
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    for finding in findings:
        writer.writerow(finding.as_row())
    return buf.getvalue()
