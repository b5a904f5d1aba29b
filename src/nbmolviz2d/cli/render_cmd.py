"""CLI commands for laying out and inspecting a molecule graph."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from nbmolviz2d._config import load_config
from nbmolviz2d.comm import Comm
from nbmolviz2d.cli._format import format_bond, format_coord, format_table, print_json, print_lines
from nbmolviz2d.exceptions import SimulationConfigError
from nbmolviz2d.molecule import load_graph
from nbmolviz2d.models import MoleculeModel
from nbmolviz2d.views.molecule import MolViz2DView


def open_view(
    graph_path: str,
    width: int | None = None,
    height: int | None = None,
    *,
    comm: Comm | None = None,
    **view_kwargs,
) -> MolViz2DView:
    """Load a graph file into a fresh headless view."""
    try:
        graph = load_graph(graph_path)
    except (OSError, ValueError) as e:
        print(f"Error: Could not load graph '{graph_path}': {e}")
        raise typer.Exit(1) from e

    try:
        config = load_config().with_overrides(width=width, height=height)
        model = MoleculeModel({"graph": graph, "width": config.width, "height": config.height}, comm=comm)
        return MolViz2DView(model, config=config, **view_kwargs)
    except SimulationConfigError as e:
        print(f"Error: {e}")
        raise typer.Exit(1) from e


def render(
    graph: Annotated[str, typer.Argument(help="Graph JSON (snapshot or networkx node-link)")],
    output: Annotated[str | None, typer.Option("--output", "-o", help="Write .svg or .html")] = None,
    ticks: Annotated[int | None, typer.Option("--ticks", help="Stop after this many ticks")] = None,
    width: Annotated[int | None, typer.Option("--width", help="Canvas width in pixels")] = None,
    height: Annotated[int | None, typer.Option("--height", help="Canvas height in pixels")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Output positions as JSON")] = False,
):
    """Run the force layout and write the drawing or print positions."""
    view = open_view(graph, width, height)
    ran = view.settle(ticks)
    nodes = view.graph["nodes"]

    if output:
        path = Path(output)
        text = view._repr_html_() if path.suffix == ".html" else view.to_svg()
        path.write_text(text)
        print(f"Wrote {len(nodes)} atoms after {ran} ticks to {output}")
        return

    positions = [{"id": n["id"], "x": round(n["x"], 2), "y": round(n["y"], 2)} for n in nodes]
    if as_json:
        print_json("render", {"ticks": ran, "alpha": view.simulation.alpha, "nodes": positions})
        return

    print(f"\nLayout settled after {ran} ticks (alpha={view.simulation.alpha:.4f})\n")
    rows = [[str(i), str(p["id"]), format_coord(p["x"]), format_coord(p["y"])] for i, p in enumerate(positions)]
    print_lines(format_table(["#", "Atom", "x", "y"], rows))


def inspect(
    graph: Annotated[str, typer.Argument(help="Graph JSON (snapshot or networkx node-link)")],
    as_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
):
    """Show graph size and the keys the view indexes atoms and bonds by."""
    view = open_view(graph)
    node_keys = sorted(view.svg_nodes)
    link_keys = sorted({tuple(sorted(k)) for k in view.svg_links})

    if as_json:
        data = {
            "id": view.view_id,
            "node_count": len(view.graph["nodes"]),
            "link_count": len(view.graph["links"]),
            "atoms": node_keys,
            "bonds": [list(k) for k in link_keys],
        }
        print_json("inspect", data)
        return

    print(f"\nGraph: {len(view.graph['nodes'])} atoms | {len(view.graph['links'])} bonds\n")
    rows = [
        [str(i), str(node["id"]), str(node.get("atom", node.get("label", "-")))]
        for i, node in enumerate(view.graph["nodes"])
    ]
    print_lines(format_table(["#", "Id", "Atom"], rows))
    if link_keys:
        bonds = ", ".join(format_bond(k) for k in link_keys)
        print(f"\n  Bonds: {bonds}")


def register_commands(app: typer.Typer) -> None:
    app.command("render")(render)
    app.command("inspect")(inspect)
