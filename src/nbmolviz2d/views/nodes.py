"""Atom sub-view: one ``g.node`` group per node record."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from nbmolviz2d.scene import SceneElement

if TYPE_CHECKING:
    from nbmolviz2d.layout import ForceSimulation
    from nbmolviz2d.models import NodesModel

DEFAULT_RADIUS = 12
DEFAULT_FILL = "#ccc"
HIGHLIGHT_STROKE = "#ff9800"
SELECTED_STROKE = "#1e88e5"
DRAG_ALPHA_TARGET = 0.3


class NodesView:
    """Draws atoms and handles click selection and dragging.

    Each group holds a circle (``children[0]``) and a text label
    (``children[1]``); style and label calls write into those.
    """

    def __init__(self, model: NodesModel, svg: SceneElement, simulation: ForceSimulation | None = None) -> None:
        self.model = model
        self.svg = svg
        self.simulation = simulation
        self.elements: list[SceneElement] = []

    @property
    def nodes(self) -> list[dict[str, Any]]:
        return self.model.get("nodes")

    def render(self) -> list[SceneElement]:
        highlighted = set(self.model.get("highlighted_atoms") or ())
        clicked = self.model.get("clicked_atom_index")

        self.elements = []
        for i, node in enumerate(self.nodes):
            group = self.svg.append("g", {"class": "node", "index": i}, datum=node)
            circle = group.append(
                "circle",
                {"r": node.get("size", DEFAULT_RADIUS)},
                style={"fill": node.get("color", DEFAULT_FILL), "stroke": "#fff", "strokeWidth": 1.5},
            )
            if i in highlighted:
                circle.style["stroke"] = HIGHLIGHT_STROKE
                circle.style["strokeWidth"] = 3
            if i == clicked:
                circle.attributes["data-selected"] = "true"
                circle.style["stroke"] = SELECTED_STROKE
                circle.style["strokeWidth"] = 3
            group.append(
                "text",
                {"text-anchor": "middle", "dy": ".35em"},
                text=str(node.get("label", node.get("atom", ""))),
                style={"pointerEvents": "none"},
            )
            self.elements.append(group)
        self.render_transform()
        return self.elements

    def render_transform(self) -> None:
        """Move every group to its node's current position."""
        for group in self.elements:
            node = group.datum
            group.attributes["transform"] = f"translate({node.get('x', 0):.2f},{node.get('y', 0):.2f})"

    def click(self, index: int) -> None:
        """A click on atom ``index`` selects it."""
        self.model.select(index)

    def drag_start(self, index: int) -> None:
        node = self.nodes[index]
        if self.simulation is not None:
            self.simulation.alpha_target = DRAG_ALPHA_TARGET
            self.simulation.restart()
        node["fx"], node["fy"] = node.get("x"), node.get("y")

    def drag(self, index: int, x: float, y: float) -> None:
        node = self.nodes[index]
        node["fx"], node["fy"] = x, y

    def drag_end(self, index: int) -> None:
        node = self.nodes[index]
        if self.simulation is not None:
            self.simulation.alpha_target = 0.0
        node["fx"] = node["fy"] = None
