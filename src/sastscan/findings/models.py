"""Finding data model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

CSV_HEADER = ("severity", "file", "line", "column", "finding")


@dataclass(frozen=True)
class Finding:
    """One SAST result, projected from a scanner ``sast`` entry."""

    severity: str = ""
    file: str = ""
    line: Optional[int] = None  # None renders as an empty cell, never 0
    column: Optional[int] = None
    description: str = ""

    def as_row(self) -> List[str]:
        """Return the CSV cells in header order."""
        return [
            self.severity,
            self.file,
            "" if self.line is None else str(self.line),
            "" if self.column is None else str(self.column),
            self.description,
        ]
