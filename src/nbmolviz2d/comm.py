"""Message channel between the kernel and the view.

The real transport (a Jupyter comm) is owned by the notebook. Everything
in this package talks to it through the small ``Comm`` protocol below;
``LoopbackComm`` wires two endpoints together in memory for tests, the
CLI and headless use.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

MessageHandler = Callable[[dict[str, Any]], None]


@runtime_checkable
class Comm(Protocol):
    """One end of a one-directional-per-send message channel."""

    def send(self, data: dict[str, Any]) -> None: ...

    def on_msg(self, callback: MessageHandler) -> None: ...


class LoopbackComm:
    """In-memory comm endpoint. Create connected endpoints with ``pair()``.

    Delivery is synchronous: ``send`` runs the peer's handlers before it
    returns. With ``serialize=True`` every payload goes through a JSON
    round-trip, so tuples arrive as lists like on a real channel.
    """

    def __init__(self, name: str = "comm", *, serialize: bool = True) -> None:
        self.name = name
        self._serialize = serialize
        self._peer: LoopbackComm | None = None
        self._handlers: list[MessageHandler] = []
        self.sent: list[dict[str, Any]] = []

    @classmethod
    def pair(cls, *, serialize: bool = True) -> tuple[LoopbackComm, LoopbackComm]:
        """Return (kernel_end, view_end), connected to each other."""
        kernel = cls("kernel", serialize=serialize)
        view = cls("view", serialize=serialize)
        kernel._peer = view
        view._peer = kernel
        return kernel, view

    def on_msg(self, callback: MessageHandler) -> None:
        self._handlers.append(callback)

    def send(self, data: dict[str, Any]) -> None:
        if self._serialize:
            data = json.loads(json.dumps(data))
        self.sent.append(data)
        if self._peer is None:
            logger.debug("%s has no peer, dropping %s", self.name, data.get("method"))
            return
        self._peer._deliver(data)

    def _deliver(self, data: dict[str, Any]) -> None:
        for handler in list(self._handlers):
            handler(data)


def custom_envelope(content: dict[str, Any]) -> dict[str, Any]:
    """Wrap a custom message the way the widget protocol does."""
    return {"method": "custom", "content": content}


def update_envelope(state: dict[str, Any]) -> dict[str, Any]:
    """Wrap a state sync the way the widget protocol does."""
    return {"method": "update", "state": state}
