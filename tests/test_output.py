"""Tests for the CSV and table reporters."""

import csv
import io

from rich.console import Console

from sastscan.findings.models import Finding
from sastscan.findings.reducer import extract_findings
from sastscan.output import csv_report, table


def _findings():
    return [
        Finding(severity="high", file="a.go", line=10, column=2, description="bad thing"),
        Finding(severity="medium", file="dir, with comma/b.py", line=None, column=None,
                description="uses eval, exec"),
        Finding(severity="", file="", line=0, column=0, description=""),
    ]


class TestCsvReport:
    def test_end_to_end_single_finding(self, single_finding_json):
        text = csv_report.render(extract_findings(single_finding_json))
        assert text == "severity,file,line,column,finding\nhigh,a.go,10,2,bad thing\n"

    def test_empty_is_header_only(self):
        assert csv_report.render([]) == "severity,file,line,column,finding\n"

    def test_parses_back_to_same_rows(self):
        findings = _findings()
        rows = list(csv.reader(io.StringIO(csv_report.render(findings))))
        assert len(rows) == len(findings) + 1
        assert rows[0] == ["severity", "file", "line", "column", "finding"]
        assert rows[1:] == [f.as_row() for f in findings]

    def test_commas_are_quoted(self):
        text = csv_report.render(_findings()[1:2])
        assert '"dir, with comma/b.py"' in text
        assert '"uses eval, exec"' in text

    def test_missing_line_renders_empty_not_zero(self):
        lines = csv_report.render(_findings()).splitlines()
        assert lines[2].split('"')[2] == ",,,"  # b.py row: empty line and column
        assert lines[3] == ",,0,0,"

    def test_general_quoting_for_unnormalised_text(self):
        finding = Finding(severity="low", description='say "hi"\nbye')
        rows = list(csv.reader(io.StringIO(csv_report.render([finding]))))
        assert rows[1][4] == 'say "hi"\nbye'

    def test_normalised_description_stays_in_one_cell(self):
        raw = b'{"sast":[{"severity":"low","finding":"line1\\nline2\\r\\"quoted\\""}]}'
        text = csv_report.render(extract_findings(raw))
        assert text.splitlines()[1] == "low,,,,line1 line2 'quoted'"
        rows = list(csv.reader(io.StringIO(text)))
        assert rows[1][4] == "line1 line2 'quoted'"


class TestTable:
    def test_columns_aligned(self):
        text = table.render(csv_report.render(_findings()[:1]))
        header, row = text.splitlines()[:2]
        assert header.split() == ["severity", "file", "line", "column", "finding"]
        assert header.index("file") == row.index("a.go")
        assert header.index("line") == row.index("10")
        assert header.index("finding") == row.index("bad thing")

    def test_column_width_follows_widest_cell(self):
        csv_text = "severity,file\nhigh,some/very/long/path.py\nlow,x\n"
        lines = table.render(csv_text).splitlines()
        assert lines[0].index("file") == lines[1].index("some/") == lines[2].index("x")
        assert lines[0].index("file") == len("severity") + 2

    def test_markup_like_text_kept_literally(self):
        csv_text = "severity,file\n[bold]high[/bold],a.py\n"
        assert "[bold]high[/bold]" in table.render(csv_text)

    def test_no_rows_falls_back_to_raw_text(self):
        assert table.render("") == ""

    def test_header_only(self):
        text = table.render("severity,file,line,column,finding\n")
        assert text.splitlines() == ["severity  file  line  column  finding"]

    def test_print_table_writes_to_console(self):
        console = Console(file=io.StringIO(), width=120, color_system=None)
        table.print_table(console, csv_report.render(_findings()[:1]))
        output = console.file.getvalue()
        assert "a.go" in output
        assert "bad thing" in output

    def test_long_finding_folds_in_narrow_console(self):
        description = "x" * 150 + "END"
        csv_text = csv_report.render(
            [Finding(severity="high", file="a.go", line=10, column=2, description=description)]
        )
        console = Console(file=io.StringIO(), width=80, color_system=None)
        table.print_table(console, csv_text)
        output = console.file.getvalue()
        lines = output.splitlines()
        assert "…" not in output
        assert lines[0].split() == ["severity", "file", "line", "column", "finding"]
        assert lines[1].split()[:4] == ["high", "a.go", "10", "2"]
        assert description in "".join(output.split())
        assert all(len(line) <= 80 for line in lines)

    def test_tab_in_finding_is_not_truncated(self):
        csv_text = csv_report.render(
            [Finding(severity="high", file="a.go", line=1, column=1, description="foo\tbar baz qux")]
        )
        text = table.render(csv_text)
        assert "\t" not in text
        assert text.splitlines()[1].endswith("foo     bar baz qux")
