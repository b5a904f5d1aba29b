"""Render controller for the 2D molecule view.

``MolViz2DView`` owns everything the view mutates: the graph snapshot,
the scene, the visual index and the message log. It re-renders on every
model change, keeps the layout ticking, and answers the kernel's style
and label calls through a ``FunctionDispatcher``.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any

from nbmolviz2d._config import VizConfig
from nbmolviz2d._utils import atom_key, bond_key, css_size, to_pixels, with_default
from nbmolviz2d.events.dispatcher import EventDispatcher
from nbmolviz2d.events.types import LayoutEndEvent, RenderEvent
from nbmolviz2d.exceptions import MissingElementError
from nbmolviz2d.layout import ForceSimulation
from nbmolviz2d.models import LinksModel, NodesModel
from nbmolviz2d.reconcile import update_records
from nbmolviz2d.rpc import FunctionDispatcher, Message, ready_message
from nbmolviz2d.scene import SceneElement
from nbmolviz2d.views.links import LinksView
from nbmolviz2d.views.nodes import NodesView

if TYPE_CHECKING:
    from nbmolviz2d.events.processor import EventProcessor
    from nbmolviz2d.models import MoleculeModel

logger = logging.getLogger(__name__)

# Wire name -> method name. Nothing outside this table is callable remotely.
OPERATIONS: dict[str, str] = {
    "setAtomStyle": "set_atom_style",
    "setBondStyle": "set_bond_style",
    "setAtomLabel": "set_atom_label",
    "setBondLabel": "set_bond_label",
}


def _align_order(records: list[dict[str, Any]], order: list[dict[str, Any]]) -> None:
    """Reorder ``records`` in place to follow the ids in ``order``.

    Links address nodes by position, so reconciled nodes must sit where
    the incoming snapshot put them.
    """
    position = {}
    for i, record in enumerate(order):
        position.setdefault(record["id"], i)
    records.sort(key=lambda r: position.get(r["id"], len(order)))


class MolViz2DView:
    """Interactive 2D molecule view bound to a ``MoleculeModel``.

    Args:
        model: Authoritative model; the view re-renders on each of its changes
        config: Layout and error-handling defaults
        processors: Event processors for render/call/layout events
        strict: Re-raise failures of dispatched calls (after answering them)
        animate: Tick the layout on the running event loop after each render
    """

    def __init__(
        self,
        model: MoleculeModel,
        *,
        config: VizConfig | None = None,
        processors: list[EventProcessor] | None = None,
        strict: bool | None = None,
        animate: bool = False,
    ) -> None:
        self.model = model
        self.config = config or VizConfig()
        self.animate = animate

        self.el = SceneElement("div")
        self.svg: SceneElement | None = None
        self.graph: dict[str, Any] | None = None
        self.svg_nodes: dict[Any, SceneElement] = {}
        self.svg_links: dict[tuple, SceneElement] = {}
        self.simulation: ForceSimulation | None = None
        self.nodes_view: NodesView | None = None
        self.links_view: LinksView | None = None
        self.messages: list[Message] = []
        self.render_count = 0

        self._events = EventDispatcher(processors)
        self._dispatcher = FunctionDispatcher(
            {name: getattr(self, method) for name, method in OPERATIONS.items()},
            send=model.send if model.can_send else None,
            strict=self.config.strict if strict is None else strict,
            events=self._events,
            view_id=model.get("id"),
        )
        self._unsubscribe = [
            model.on_change(self._on_model_change),
            model.on("msg:custom", self.handle_message),
        ]
        self.render()

    @property
    def view_id(self) -> str:
        return self.model.get("id")

    @property
    def send(self):
        """The outbound channel, or None when the model has no comm."""
        return self.model.send if self.model.can_send else None

    # -- messages ----------------------------------------------------------

    def handle_message(self, message: Message) -> Message | None:
        """Log an inbound custom message and answer it if it is a function call."""
        self.messages.append(message)
        return self._dispatcher.handle_message(message)

    # -- rendering ---------------------------------------------------------

    def _on_model_change(self, model: MoleculeModel) -> None:
        self.render()

    def render(self) -> None:
        """Rebuild the snapshot, scene, layout and visual index from the model."""
        snapshot = copy.deepcopy(self.model.get("graph") or {})
        snapshot.setdefault("nodes", [])
        snapshot.setdefault("links", [])

        reconciled = False
        if self.graph is not None:
            old_nodes, old_links = self.graph["nodes"], self.graph["links"]
            nodes = update_records(old_nodes, snapshot["nodes"])
            links = update_records(old_links, snapshot["links"])
            if nodes is old_nodes:
                _align_order(nodes, snapshot["nodes"])
            reconciled = nodes is old_nodes and links is old_links
            snapshot["nodes"], snapshot["links"] = nodes, links
        self.graph = snapshot

        self.el.attributes["id"] = self.view_id
        self.el.style.update(
            {
                "width": css_size(self.model.get("width")),
                "height": css_size(self.model.get("height")),
                "position": "relative",
            }
        )

        self.render_viewer()
        self.index_svg_elements()
        self.render_count += 1

        if self.model.can_send:
            self.model.send(ready_message())

        self._events.emit(
            RenderEvent(
                view_id=self.view_id,
                node_count=len(self.graph["nodes"]),
                link_count=len(self.graph["links"]),
                reconciled=reconciled,
                render_count=self.render_count,
            )
        )

    def render_viewer(self) -> None:
        width = to_pixels(self.model.get("width"))
        height = to_pixels(self.model.get("height"))

        if self.svg is None:
            self.svg = self.el.append("svg")
        else:
            self.svg.clear()
        self.svg.attributes.update({"width": width, "height": height, "border": 1})

        if self.simulation is not None:
            self.simulation.stop()

        cfg = self.config
        simulation = ForceSimulation(
            alpha_min=cfg.alpha_min,
            velocity_decay=cfg.velocity_decay,
            charge_strength=cfg.charge_strength,
        )
        simulation.nodes(self.graph["nodes"])
        simulation.links(
            self.graph["links"],
            distance=lambda d: with_default(d.get("distance"), cfg.link_distance),
            strength=lambda d: with_default(d.get("strength"), cfg.link_strength),
        )
        simulation.center(width / 2, height / 2)

        links_view = LinksView(LinksModel({"links": self.graph["links"]}), self.svg, self.graph["nodes"])
        links_view.render()

        nodes_model = NodesModel(
            {
                "nodes": self.graph["nodes"],
                "clicked_atom_index": self.model.get("clicked_atom_index"),
                "highlighted_atoms": self.model.get("highlighted_atoms") or [],
            }
        )
        nodes_model.on("change:clicked_atom_index", self._on_atom_clicked)
        nodes_view = NodesView(nodes_model, self.svg, simulation)
        nodes_view.render()

        def ticked() -> None:
            nodes_view.render_transform()
            links_view.render_position()

        simulation.on("tick", ticked)
        simulation.on("end", self._on_layout_end)

        self.simulation = simulation
        self.nodes_view = nodes_view
        self.links_view = links_view

        if self.animate:
            simulation.start_background()

    def _on_atom_clicked(self, nodes_model: NodesModel, index: int) -> None:
        self.model.set("clicked_atom_index", index)
        self.model.save()

    def _on_layout_end(self) -> None:
        simulation = self.simulation
        if simulation is None:
            return
        self._events.emit(
            LayoutEndEvent(view_id=self.view_id, ticks=simulation.ticks, node_count=len(self.graph["nodes"]))
        )

    def index_svg_elements(self) -> None:
        """Rebuild the node and link lookups from the rendered scene."""
        self.svg_nodes = {}
        self.svg_links = {}
        for elem in self.svg.find_all("node"):
            self.svg_nodes[atom_key(elem.get_attribute("index"))] = elem
        for elem in self.svg.find_all("link"):
            child = elem.children[0]
            source = atom_key(child.get_attribute("source"))
            target = atom_key(child.get_attribute("target"))
            self.svg_links[(source, target)] = elem
            self.svg_links[(target, source)] = elem

    def settle(self, max_ticks: int | None = None) -> int:
        """Run the layout until it settles. Returns the number of ticks."""
        if self.simulation is None:
            return 0
        return self.simulation.run(max_ticks)

    # -- remotely callable operations --------------------------------------

    def set_atom_style(self, atoms: list[Any], atom_spec: dict[str, Any]) -> None:
        self.apply_style_spec([atom_key(a) for a in atoms], self.svg_nodes, atom_spec, kind="atom")

    def set_bond_style(self, bonds: list[Any], bond_spec: dict[str, Any]) -> None:
        self.apply_style_spec([bond_key(b) for b in bonds], self.svg_links, bond_spec, kind="bond", missing_ok=True)

    def apply_style_spec(
        self,
        objs: list[Any],
        obj_lookup: dict[Any, SceneElement],
        spec: dict[str, Any],
        *,
        kind: str,
        missing_ok: bool = False,
    ) -> None:
        """Write ``spec`` into the shape element of each object."""
        for o in objs:
            obj = obj_lookup.get(o)
            if obj is None:
                if missing_ok:
                    continue
                raise MissingElementError(kind, o)
            obj.children[0].style.update(spec)

    def set_atom_label(self, atom: Any, text: str | None = None, spec: dict[str, Any] | None = None) -> None:
        key = atom_key(atom)
        obj = self.svg_nodes.get(key)
        if obj is None:
            raise MissingElementError("atom", key)
        self._apply_label(obj.children[1], text, spec)

    def set_bond_label(self, bond: Any, text: str | None = None, spec: dict[str, Any] | None = None) -> None:
        link = self.svg_links.get(bond_key(bond))
        if link is None:
            logger.debug("No bond %r, skipping label", bond)
            return
        self._apply_label(link.children[1], text, spec)

    @staticmethod
    def _apply_label(label: SceneElement, text: str | None, spec: dict[str, Any] | None) -> None:
        if text is not None:
            label.text = str(text)
        label.style.update(spec or {})

    # -- lifecycle / display -----------------------------------------------

    def add_processor(self, processor: EventProcessor) -> None:
        """Start delivering this view's events to ``processor`` as well."""
        self._events.add(processor)

    def close(self) -> None:
        """Unsubscribe from the model and stop the layout."""
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []
        if self.simulation is not None:
            self.simulation.stop()
        self._events.shutdown()

    def to_svg(self) -> str:
        return self.svg.to_svg() if self.svg is not None else ""

    def _repr_html_(self) -> str:
        return self.el.to_svg()
