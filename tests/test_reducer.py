"""Tests for scanner-output reduction: cleaning, parsing, projection."""

import json

import pytest

from sastscan.findings.models import Finding
from sastscan.findings.reducer import (
    ParseError,
    count_findings,
    extract_findings,
    normalise_description,
    parse_scan_output,
    project_finding,
    strip_control_chars,
)


class TestControlCharacters:
    def test_strips_full_range(self):
        raw = bytes(range(0x00, 0x20)) + b"ok" + b"\x7f"
        assert strip_control_chars(raw) == b"ok\x7f"

    def test_keeps_printable_and_utf8(self):
        raw = "naïve {} ✓".encode("utf-8")
        assert strip_control_chars(raw) == raw

    def test_control_chars_inside_strings_no_longer_break_parsing(self):
        raw = b'{"sast":[{"finding":"bad\x01\x1f thing"}]}'
        findings = extract_findings(raw)
        assert findings[0].description == "bad thing"

    def test_pretty_printed_document_still_parses(self):
        raw = b'{\n\t"sast": [\r\n\t\t{"severity": "low"}\n\t]\n}\n'
        assert extract_findings(raw) == [Finding(severity="low")]


class TestParse:
    def test_invalid_json_raises(self):
        with pytest.raises(ParseError):
            parse_scan_output(b"{not json")

    def test_empty_output_raises(self):
        with pytest.raises(ParseError):
            parse_scan_output(b"")

    def test_invalid_utf8_raises(self):
        with pytest.raises(ParseError):
            parse_scan_output(b'{"sast": ["\xff\xfe"]}')

    def test_extract_propagates_parse_error(self):
        with pytest.raises(ParseError):
            extract_findings(b"[1, 2")


class TestCount:
    def test_counts_entries(self, multi_finding_json):
        assert count_findings(json.loads(multi_finding_json)) == 3

    @pytest.mark.parametrize(
        "document",
        [{"sast": []}, {}, {"sast": None}, {"sast": "x"}, {"sast": {"a": 1}}, [], "text", 3],
    )
    def test_zero_for_other_shapes(self, document):
        assert count_findings(document) == 0


class TestExtract:
    def test_single_finding(self, single_finding_json):
        assert extract_findings(single_finding_json) == [
            Finding(severity="high", file="a.go", line=10, column=2, description="bad thing")
        ]

    def test_empty_sast(self, empty_sast_json):
        assert extract_findings(empty_sast_json) == []

    def test_absent_sast_is_not_an_error(self):
        assert extract_findings(b'{"vulnerabilities": [1, 2]}') == []

    def test_non_object_document(self):
        assert extract_findings(b"[1, 2, 3]") == []

    def test_order_preserved(self):
        entries = [{"severity": s, "file": f"{i}.py"} for i, s in enumerate(["low", "high", "medium", "high"])]
        raw = json.dumps({"sast": entries}).encode()
        findings = extract_findings(raw)
        assert [f.file for f in findings] == ["0.py", "1.py", "2.py", "3.py"]
        assert [f.severity for f in findings] == ["low", "high", "medium", "high"]

    def test_missing_fields_default(self, multi_finding_json):
        third = extract_findings(multi_finding_json)[2]
        assert third.severity == ""
        assert third.file == ""
        assert third.description == ""
        assert third.column is None

    def test_line_zero_distinct_from_missing(self, multi_finding_json):
        findings = extract_findings(multi_finding_json)
        assert findings[2].line == 0
        assert findings[1].line is None

    def test_non_object_entries_skipped(self):
        raw = b'{"sast": [{"severity": "low"}, 7, null, {"severity": "high"}]}'
        assert [f.severity for f in extract_findings(raw)] == ["low", "high"]

    def test_source_document_not_mutated(self):
        entry = {"severity": None, "finding": "a\nb", "startLine": 3}
        snapshot = dict(entry)
        project_finding(entry)
        assert entry == snapshot


class TestProjection:
    def test_null_and_false_become_empty(self):
        finding = project_finding({"severity": None, "file": False})
        assert finding.severity == ""
        assert finding.file == ""

    def test_numeric_severity_is_stringified(self):
        assert project_finding({"severity": 3}).severity == "3"

    @pytest.mark.parametrize(
        "value, expected",
        [(7, 7), ("12", 12), (4.0, 4), (None, None), (True, None), ("n/a", None), (2.5, None)],
    )
    def test_start_line_coercion(self, value, expected):
        assert project_finding({"startLine": value}).line == expected

    def test_finding_is_frozen(self):
        finding = project_finding({"severity": "low"})
        with pytest.raises(AttributeError):
            finding.severity = "high"  # type: ignore[misc]


class TestDescriptionNormalisation:
    def test_newlines_returns_and_quotes(self):
        assert normalise_description('line1\nline2\r"quoted"') == "line1 line2 'quoted'"

    def test_crlf_becomes_two_spaces(self):
        assert normalise_description("a\r\nb") == "a  b"

    def test_via_json_escapes(self, multi_finding_json):
        findings = extract_findings(multi_finding_json)
        assert findings[0].description == "SQL injection, via 'user' input"
        assert findings[1].description == "line1 line2 'quoted'"
