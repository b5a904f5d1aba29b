"""Tests for CLI formatting utilities."""

from nbmolviz2d.cli._format import (
    SCHEMA_VERSION,
    format_bond,
    format_coord,
    format_outcome,
    format_table,
    json_envelope,
    print_json,
    print_lines,
    truncate_value,
)


class TestTruncateValue:
    def test_short_string(self):
        assert truncate_value("hello") == "hello"

    def test_non_string_serialized(self):
        assert truncate_value({"a": 1}) == '{"a": 1}'
        assert truncate_value(None) == "null"

    def test_long_truncated(self):
        result = truncate_value("x" * 100, max_chars=10)
        assert result == "x" * 10 + "…"


class TestJsonEnvelope:
    def test_structure(self):
        env = json_envelope("render", {"ticks": 3})
        assert env["schema_version"] == SCHEMA_VERSION
        assert env["command"] == "render"
        assert env["data"] == {"ticks": 3}
        assert "generated_at" in env

    def test_print_to_file(self, tmp_path, capsys):
        out = tmp_path / "out.json"
        print_json("inspect", {"node_count": 1}, output=str(out))
        assert '"node_count": 1' in out.read_text()
        assert "Wrote inspect output" in capsys.readouterr().out


class TestFormatTable:
    def test_empty(self):
        assert format_table(["#", "Atom"], []) == []

    def test_alignment(self):
        lines = format_table(["#", "Atom", "x"], [["1", "C1", "3.5"], ["10", "O", "12.25"]])
        assert lines[0] == "  #   Atom  x    "
        assert lines[2] == "   1  C1      3.5"
        assert lines[3] == "  10  O     12.25"

    def test_print_lines_truncates(self, capsys):
        print_lines([str(i) for i in range(5)], max_lines=2)
        out = capsys.readouterr().out
        assert out.startswith("0\n1\n")
        assert "3 more lines" in out

    def test_numeric_override(self):
        lines = format_table(["Atom", "Charge"], [["O", "-1"]], indent=0, numeric=("Charge",))
        assert lines[2] == "O         -1"


class TestShortForms:
    def test_coord(self):
        assert format_coord(12.345) == "12.3"
        assert format_coord(None) == "-"

    def test_bond(self):
        assert format_bond((0, 1)) == "0-1"

    def test_outcome(self):
        assert format_outcome(None) == "ignored"
        assert format_outcome({"event": "function_done", "result": None}) == "done null"
        failed = {"event": "function_failed", "error_type": "MissingElementError", "error": "No atom element"}
        assert format_outcome(failed) == "FAILED MissingElementError: No atom element"
