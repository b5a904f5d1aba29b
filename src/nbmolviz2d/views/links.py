"""Bond sub-view: one ``g.link`` group per link record."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from nbmolviz2d.scene import SceneElement

if TYPE_CHECKING:
    from nbmolviz2d.models import LinksModel

DEFAULT_STROKE = "#999"


class LinksView:
    """Draws bonds as a line (``children[0]``) plus a label (``children[1]``).

    The line carries ``source``/``target`` node positions as attributes,
    which is what the parent view indexes links by.
    """

    def __init__(self, model: LinksModel, svg: SceneElement, nodes: list[dict[str, Any]]) -> None:
        self.model = model
        self.svg = svg
        self.nodes = nodes
        self.elements: list[SceneElement] = []

    def render(self) -> list[SceneElement]:
        self.elements = []
        for link in self.model.get("links"):
            group = self.svg.append("g", {"class": "link"}, datum=link)
            group.append(
                "line",
                {"source": link["source"], "target": link["target"]},
                style={"stroke": link.get("color", DEFAULT_STROKE), "strokeWidth": link.get("width", 2)},
            )
            group.append("text", {"text-anchor": "middle"}, text=str(link.get("label", "")))
            self.elements.append(group)
        self.render_position()
        return self.elements

    def render_position(self) -> None:
        """Redraw every line between its endpoints' current positions."""
        for group in self.elements:
            link = group.datum
            source = self.nodes[link["source"]]
            target = self.nodes[link["target"]]
            x1, y1 = source.get("x", 0), source.get("y", 0)
            x2, y2 = target.get("x", 0), target.get("y", 0)
            line, label = group.children
            line.attributes.update({"x1": x1, "y1": y1, "x2": x2, "y2": y2})
            label.attributes.update({"x": (x1 + x2) / 2, "y": (y1 + y2) / 2})
