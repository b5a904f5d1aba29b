"""Text and JSON formatting for CLI output.

Tables of atoms and replayed messages, short renderings of coordinates,
bonds and call responses, and the versioned JSON envelope.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

# Bump when the JSON output structure changes incompatibly
SCHEMA_VERSION = 1

MAX_LINES = 100
NUMERIC_COLUMNS = ("#", "x", "y")


def json_envelope(command: str, data: Any) -> dict[str, Any]:
    """Wrap command output with the schema version and a UTC timestamp."""
    return {
        "schema_version": SCHEMA_VERSION,
        "command": command,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "data": data,
    }


def print_json(command: str, data: Any, output: str | None = None) -> None:
    text = json.dumps(json_envelope(command, data), indent=2, default=str)
    if not output:
        print(text)
        return
    Path(output).write_text(text)
    print(f"Wrote {command} output to {output} ({len(text.encode()) / 1024:.1f}KB)")


def format_coord(value: float | None) -> str:
    return "-" if value is None else f"{value:.1f}"


def format_bond(bond: Sequence[Any]) -> str:
    """(0, 1) -> '0-1'"""
    return "-".join(str(end) for end in bond)


def truncate_value(value: Any, max_chars: int = 60) -> str:
    text = value if isinstance(value, str) else json.dumps(value, default=str)
    return text if len(text) <= max_chars else text[:max_chars] + "…"


def format_outcome(response: dict[str, Any] | None) -> str:
    """One-word-plus-detail summary of a view's answer to a message."""
    if response is None:
        return "ignored"
    if response.get("event") == "function_done":
        return f"done {truncate_value(response.get('result'))}"
    return f"FAILED {response.get('error_type')}: {truncate_value(response.get('error'))}"


def format_table(
    headers: list[str],
    rows: list[list[str]],
    *,
    indent: int = 2,
    numeric: Sequence[str] = NUMERIC_COLUMNS,
) -> list[str]:
    """Align ``rows`` under ``headers``; columns named in ``numeric`` align right.

    Returns the lines without printing them.
    """
    if not rows:
        return []

    widths = [max([len(h), *(len(row[i]) for row in rows if i < len(row))]) for i, h in enumerate(headers)]
    right = [h in numeric for h in headers]

    def line(cells: Sequence[str], header: bool = False) -> str:
        padded = [
            cell.rjust(width) if align_right and not header else cell.ljust(width)
            for cell, width, align_right in zip(cells, widths, right)
        ]
        return " " * indent + "  ".join(padded)

    return [line(headers, header=True), line(["─" * w for w in widths], header=True), *(line(row) for row in rows)]


def print_lines(lines: list[str], max_lines: int = MAX_LINES) -> None:
    """Print up to ``max_lines`` lines, then say how many were cut."""
    for text in lines[:max_lines]:
        print(text)
    if len(lines) > max_lines:
        print(f"\n  # ... {len(lines) - max_lines} more lines (use --json for everything)")
