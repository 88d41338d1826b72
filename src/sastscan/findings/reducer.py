"""Reduce raw scanner output (``jf audit --format simple-json``) to Findings.

The scanner may emit control characters that break JSON parsing, so every
byte in 0x00-0x1F is removed before the document is parsed. JSON escapes
such as ``\\n`` survive the strip and are normalised per field afterwards.
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from sastscan.findings.models import Finding

logger = logging.getLogger(__name__)

_CONTROL_CHARS = bytes(range(0x20))

_DESCRIPTION_REPLACEMENTS = (
    ("\n", " "),
    ("\r", " "),
    ('"', "'"),
)


class ParseError(Exception):
    """Raised when scanner output is not valid JSON after cleaning."""


def strip_control_chars(raw: bytes) -> bytes:
    """Delete every byte in the range 0x00-0x1F."""
    return raw.translate(None, _CONTROL_CHARS)


def parse_scan_output(raw: bytes) -> Any:
    """Strip control characters from *raw* and parse it as JSON."""
    cleaned = strip_control_chars(raw)
    try:
        return json.loads(cleaned)
    except ValueError as exc:  # JSONDecodeError and UnicodeDecodeError
        raise ParseError(f"Scanner output is not valid JSON: {exc}") from exc


def _sast_entries(document: Any) -> Optional[list]:
    if not isinstance(document, dict):
        return None
    entries = document.get("sast")
    return entries if isinstance(entries, list) else None


def count_findings(document: Any) -> int:
    """Length of the top-level ``sast`` array; 0 for any other shape."""
    entries = _sast_entries(document)
    return len(entries) if entries is not None else 0


def _text(value: Any) -> str:
    # null and false both count as missing
    if value is None or value is False:
        return ""
    return value if isinstance(value, str) else str(value)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def normalise_description(text: str) -> str:
    """Flatten a finding message so it fits in a single CSV cell."""
    for old, new in _DESCRIPTION_REPLACEMENTS:
        text = text.replace(old, new)
    return text


def project_finding(entry: dict) -> Finding:
    """Project one ``sast`` entry into a Finding. *entry* is not modified."""
    return Finding(
        severity=_text(entry.get("severity")),
        file=_text(entry.get("file")),
        line=_optional_int(entry.get("startLine")),
        column=_optional_int(entry.get("startColumn")),
        description=normalise_description(_text(entry.get("finding"))),
    )


def findings_from_document(document: Any) -> List[Finding]:
    """Project every ``sast`` entry of an already parsed document, in order."""
    entries = _sast_entries(document)
    if entries is None:
        return []

    findings: List[Finding] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            logger.warning("Skipping sast[%d]: expected an object, got %s", index, type(entry).__name__)
            continue
        findings.append(project_finding(entry))
    return findings


def extract_findings(raw: bytes) -> List[Finding]:
    """Parse raw scanner output and return its findings in scanner order."""
    return findings_from_document(parse_scan_output(raw))
