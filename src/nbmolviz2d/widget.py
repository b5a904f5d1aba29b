"""Kernel-side molecule widget.

``MoleculeWidget`` owns the authoritative state and talks to a view over a
comm: state goes out as ``update`` envelopes, style/label requests go out
as function calls, and atom clicks come back as ``clicked_atom_index``
updates. Without a comm it opens an in-process loopback view, which is
also what the notebook display and the CLI use.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

import networkx as nx

from nbmolviz2d._config import VizConfig, load_config
from nbmolviz2d.comm import Comm, LoopbackComm, update_envelope
from nbmolviz2d.molecule import graph_from_networkx, normalize_graph
from nbmolviz2d.models import MoleculeModel
from nbmolviz2d.reconcile import update_records
from nbmolviz2d.rpc import PendingCall, RemoteCaller
from nbmolviz2d.views.molecule import MolViz2DView

if TYPE_CHECKING:
    from nbmolviz2d.events.processor import EventProcessor

logger = logging.getLogger(__name__)


class MoleculeWidget:
    """Interactive 2D molecule widget.

    Args:
        graph: Graph snapshot dict or a networkx graph
        width: View width in pixels (default from config)
        height: View height in pixels (default from config)
        comm: Channel to a frontend view; None opens a loopback view
        config: Defaults; read from pyproject.toml when omitted
        processors: Event processors for the loopback view

    Example:
        >>> G = nx.Graph([("C1", "O1")])
        >>> widget = MoleculeWidget(G)
        >>> widget.set_atom_style([0], {"fill": "red"}).result() is None
        True
    """

    def __init__(
        self,
        graph: dict[str, Any] | nx.Graph | None = None,
        *,
        width: int | None = None,
        height: int | None = None,
        comm: Comm | None = None,
        config: VizConfig | None = None,
        processors: list[EventProcessor] | None = None,
    ) -> None:
        self.config = config or load_config()
        view_comm = None
        if comm is None:
            comm, view_comm = LoopbackComm.pair()

        self.model = MoleculeModel(
            {
                "graph": self._as_snapshot(graph),
                "width": width if width is not None else self.config.width,
                "height": height if height is not None else self.config.height,
            },
            comm=comm,
        )
        self.caller = RemoteCaller(self.model.send)
        self.model.on("msg:custom", self.caller.handle_message)

        self.view: MolViz2DView | None = None
        if view_comm is not None:
            self.view = MolViz2DView(
                MoleculeModel(self.model.state(), comm=view_comm),
                config=self.config,
                processors=processors,
            )
        else:
            # Full initial sync for a frontend on the other end
            comm.send(update_envelope(self.model.state()))

    @staticmethod
    def _as_snapshot(graph: dict[str, Any] | nx.Graph | None) -> dict[str, Any]:
        if graph is None:
            return {"nodes": [], "links": []}
        if isinstance(graph, nx.Graph):
            return graph_from_networkx(graph)
        return normalize_graph(graph)

    # -- state -------------------------------------------------------------

    @property
    def graph(self) -> dict[str, Any]:
        return self.model.graph

    @property
    def clicked_atom_index(self) -> int:
        return self.model.get("clicked_atom_index")

    @property
    def ready(self) -> bool:
        return self.caller.ready

    def set_graph(self, graph: dict[str, Any] | nx.Graph) -> bool:
        """Replace the molecule, keeping record objects for ids that survive.

        Returns True if anything changed (and was pushed to the view).
        """
        new = copy.deepcopy(self._as_snapshot(graph))
        current = self.model.graph
        if current == new:
            return False
        merged = {
            **new,
            "nodes": update_records(current["nodes"], new["nodes"]),
            "links": update_records(current["links"], new["links"]),
        }
        self.model.set("graph", merged, force=True)
        self.model.save()
        return True

    def resize(self, width: int, height: int) -> None:
        self.model.set({"width": width, "height": height})
        self.model.save()

    def highlight_atoms(self, atoms: Iterable[int]) -> None:
        """Highlight atoms through model state; the view redraws on the change."""
        self.model.set("highlighted_atoms", sorted(set(atoms)))
        self.model.save()

    def on_atom_click(self, handler: Callable[[int], None]) -> Callable[[], None]:
        """Call ``handler(index)`` whenever the view reports a clicked atom."""
        return self.model.on("change:clicked_atom_index", lambda model, index: handler(index))

    # -- remote calls ------------------------------------------------------

    def set_atom_style(self, atoms: Iterable[int], spec: dict[str, Any]) -> PendingCall:
        return self.caller.call("setAtomStyle", list(atoms), spec)

    def set_bond_style(self, bonds: Iterable[tuple[int, int]], spec: dict[str, Any]) -> PendingCall:
        return self.caller.call("setBondStyle", [list(b) for b in bonds], spec)

    def set_atom_label(self, atom: int, text: str | None = None, spec: dict[str, Any] | None = None) -> PendingCall:
        return self.caller.call("setAtomLabel", atom, text, spec or {})

    def set_bond_label(
        self, bond: tuple[int, int], text: str | None = None, spec: dict[str, Any] | None = None
    ) -> PendingCall:
        return self.caller.call("setBondLabel", list(bond), text, spec or {})

    # -- display -----------------------------------------------------------

    def _repr_html_(self) -> str:
        if self.view is None:
            return f"<pre>MoleculeWidget({len(self.graph['nodes'])} atoms, attached to a frontend)</pre>"
        self.view.settle()
        return self.view._repr_html_()

    def close(self) -> None:
        if self.view is not None:
            self.view.close()
