"""CLI command for replaying recorded kernel messages against a view."""

from __future__ import annotations

import json
from typing import Annotated, Any

import typer

from nbmolviz2d.cli._format import format_outcome, format_table, print_json, print_lines
from nbmolviz2d.cli.render_cmd import open_view
from nbmolviz2d.comm import LoopbackComm
from nbmolviz2d.events.rich_progress import RichActivityProcessor


def _read_messages(path: str) -> list[dict[str, Any]]:
    """Read one JSON message per line; blank lines are skipped."""
    messages = []
    try:
        with open(path) as f:
            for lineno, line in enumerate(f, 1):
                if not line.strip():
                    continue
                try:
                    messages.append(json.loads(line))
                except json.JSONDecodeError as e:
                    print(f"Error: {path}:{lineno} is not valid JSON: {e}")
                    raise typer.Exit(1) from None
    except OSError as e:
        print(f"Error: Could not read '{path}': {e}")
        raise typer.Exit(1) from e
    return messages


def replay(
    graph: Annotated[str, typer.Argument(help="Graph JSON (snapshot or networkx node-link)")],
    messages: Annotated[str, typer.Argument(help="JSON Lines file of inbound custom messages")],
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log each render and call")] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Output responses as JSON")] = False,
):
    """Send recorded messages to a headless view and list what it answers."""
    _kernel, view_end = LoopbackComm.pair()
    processors = [RichActivityProcessor(show_ignored=True)] if verbose and not as_json else None
    view = open_view(graph, comm=view_end, processors=processors)

    responses: list[dict[str, Any]] = []
    for message in _read_messages(messages):
        response = view.handle_message(message)
        responses.append({"request": message, "response": response})

    if as_json:
        print_json("replay", {"messages": len(view.messages), "responses": responses})
        return

    answered = sum(1 for r in responses if r["response"] is not None)
    print(f"\nReplayed {len(responses)} messages, {answered} answered, {len(view_end.sent)} sent to kernel\n")
    rows = []
    for r in responses:
        request, response = r["request"], r["response"]
        what = request.get("function_name") or request.get("event") or "?"
        rows.append([what, str(request.get("call_id", "-")), format_outcome(response)])
    print_lines(format_table(["Message", "Call Id", "Outcome"], rows))


def register_commands(app: typer.Typer) -> None:
    app.command("replay")(replay)
