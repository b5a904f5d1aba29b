"""Observable models shared by the kernel and the view.

``WidgetModel`` is a small attribute store with Backbone-style events:
``set`` fires ``change:<attr>`` for every changed attribute and then one
``change``. When attached to a comm it also speaks the widget protocol:
``save()`` pushes unsaved attributes as an ``update`` envelope, and
inbound envelopes are applied (``update``) or re-emitted as
``msg:custom`` events (``custom``).
"""

from __future__ import annotations

import copy
import logging
import uuid
from collections import defaultdict
from collections.abc import Callable
from typing import Any, ClassVar

from nbmolviz2d.comm import Comm, custom_envelope, update_envelope

logger = logging.getLogger(__name__)

Handler = Callable[..., None]
Unsubscribe = Callable[[], None]

_MISSING = object()


class WidgetModel:
    """Attribute store with change events and optional comm sync."""

    defaults: ClassVar[dict[str, Any]] = {}

    def __init__(self, attributes: dict[str, Any] | None = None, *, comm: Comm | None = None) -> None:
        self._attributes: dict[str, Any] = copy.deepcopy(self.defaults)
        if attributes:
            self._attributes.update(attributes)
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._unsaved: dict[str, Any] = {}
        self.comm = comm
        if comm is not None:
            comm.on_msg(self.receive)

    # -- attributes --------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        return self._attributes.get(key, default)

    def state(self) -> dict[str, Any]:
        """Deep copy of every attribute, for handing to another model."""
        return copy.deepcopy(self._attributes)

    def set(self, key: str | dict[str, Any], value: Any = _MISSING, *, force: bool = False) -> bool:
        """Set one attribute or a dict of attributes.

        Returns True if anything changed. ``force`` fires change events even
        for values that compare equal, for callers that mutated an attribute
        in place.
        """
        attrs = key if isinstance(key, dict) else {key: value}
        return self._apply(attrs, remote=False, force=force)

    def _apply(self, attrs: dict[str, Any], *, remote: bool, force: bool = False) -> bool:
        changed = {
            k: v
            for k, v in attrs.items()
            if force or k not in self._attributes or self._attributes[k] != v
        }
        if not changed:
            return False

        self._attributes.update(changed)
        if not remote:
            self._unsaved.update(changed)

        for k, v in changed.items():
            self.trigger(f"change:{k}", self, v)
        self.trigger("change", self)
        return True

    # -- events ------------------------------------------------------------

    def on(self, event: str, handler: Handler) -> Unsubscribe:
        """Subscribe to an event. Returns a callable that unsubscribes."""
        self._handlers[event].append(handler)
        return lambda: self.off(event, handler)

    def off(self, event: str, handler: Handler) -> None:
        handlers = self._handlers.get(event)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def on_change(self, handler: Handler) -> Unsubscribe:
        """Subscribe to any attribute change."""
        return self.on("change", handler)

    def trigger(self, event: str, *args: Any) -> None:
        for handler in list(self._handlers.get(event, ())):
            handler(*args)

    # -- comm --------------------------------------------------------------

    @property
    def can_send(self) -> bool:
        return self.comm is not None

    def send(self, content: dict[str, Any]) -> None:
        """Send a custom message to the other side."""
        if self.comm is None:
            raise RuntimeError(f"{type(self).__name__} has no comm attached")
        self.comm.send(custom_envelope(content))

    def save(self) -> dict[str, Any]:
        """Push attributes changed since the last save. Returns what was sent."""
        state, self._unsaved = self._unsaved, {}
        if not state:
            return state
        if self.comm is None:
            logger.debug("save() without comm, discarding %s", sorted(state))
            return state
        self.comm.send(update_envelope(state))
        return state

    def receive(self, data: dict[str, Any]) -> None:
        """Handle an inbound comm envelope."""
        method = data.get("method")
        if method == "update":
            self._apply(data.get("state", {}), remote=True)
        elif method == "custom":
            self.trigger("msg:custom", data.get("content", {}))
        else:
            logger.debug("Ignoring comm message with method %r", method)


class MoleculeModel(WidgetModel):
    """Authoritative molecule state: the graph plus view geometry and selection."""

    defaults: ClassVar[dict[str, Any]] = {
        "graph": {"nodes": [], "links": []},
        "id": "",
        "width": 400,
        "height": 300,
        "clicked_atom_index": -1,
        "highlighted_atoms": [],
    }

    def __init__(self, attributes: dict[str, Any] | None = None, *, comm: Comm | None = None) -> None:
        super().__init__(attributes, comm=comm)
        if not self._attributes.get("id"):
            self._attributes["id"] = f"molviz2d_{uuid.uuid4().hex[:12]}"

    @property
    def graph(self) -> dict[str, Any]:
        return self._attributes["graph"]


class NodesModel(WidgetModel):
    """Node records plus click selection and highlight state."""

    defaults: ClassVar[dict[str, Any]] = {
        "nodes": [],
        "clicked_atom_index": -1,
        "highlighted_atoms": [],
    }

    def select(self, index: int) -> None:
        self.set("clicked_atom_index", index)


class LinksModel(WidgetModel):
    """Link records for the links sub-view."""

    defaults: ClassVar[dict[str, Any]] = {"links": []}
