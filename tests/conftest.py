"""Shared fixtures: a small molecule graph and a view wired to a kernel end."""

from __future__ import annotations

import copy

import pytest

from nbmolviz2d.comm import LoopbackComm
from nbmolviz2d.events import EventProcessor
from nbmolviz2d.models import MoleculeModel
from nbmolviz2d.views.molecule import MolViz2DView

# Carbonyl-ish chain: C1 - C2 = O3
MOLECULE = {
    "nodes": [
        {"id": "C1", "atom": "C", "color": "#909090"},
        {"id": "C2", "atom": "C", "color": "#909090"},
        {"id": "O3", "atom": "O", "color": "#ff0d0d"},
    ],
    "links": [
        {"id": "C1-C2", "source": 0, "target": 1},
        {"id": "C2-O3", "source": 1, "target": 2, "distance": 15},
    ],
}


class ListProcessor(EventProcessor):
    """Collects all events for assertion."""

    def __init__(self):
        self.events: list = []
        self.shutdown_called = False

    def on_event(self, event):
        self.events.append(event)

    def shutdown(self):
        self.shutdown_called = True

    def of_type(self, cls):
        return [e for e in self.events if isinstance(e, cls)]


class Kernel:
    """Kernel end of a loopback comm that records the custom messages it receives."""

    def __init__(self, comm: LoopbackComm):
        self.comm = comm
        self.envelopes: list[dict] = []
        comm.on_msg(self.envelopes.append)

    @property
    def messages(self) -> list[dict]:
        return [e["content"] for e in self.envelopes if e["method"] == "custom"]

    @property
    def updates(self) -> list[dict]:
        return [e["state"] for e in self.envelopes if e["method"] == "update"]

    def call(self, message: dict) -> None:
        self.comm.send({"method": "custom", "content": message})

    def clear(self) -> None:
        self.envelopes.clear()


@pytest.fixture
def molecule() -> dict:
    return copy.deepcopy(MOLECULE)


@pytest.fixture
def processor() -> ListProcessor:
    return ListProcessor()


@pytest.fixture
def wired(molecule, processor):
    """(view, kernel) with the view rendered and the kernel's inbox emptied."""
    kernel_end, view_end = LoopbackComm.pair()
    kernel = Kernel(kernel_end)
    model = MoleculeModel({"graph": molecule, "width": 300, "height": 200}, comm=view_end)
    view = MolViz2DView(model, processors=[processor])
    kernel.clear()
    return view, kernel
