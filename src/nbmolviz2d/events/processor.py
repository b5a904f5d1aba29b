"""Event processor base classes."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nbmolviz2d.events.types import (
        CallEndEvent,
        CallErrorEvent,
        CallStartEvent,
        Event,
        LayoutEndEvent,
        MessageIgnoredEvent,
        RenderEvent,
    )


# Mapping from event class name to handler method name.
_EVENT_METHOD_MAP: dict[str, str] = {
    "RenderEvent": "on_render",
    "CallStartEvent": "on_call_start",
    "CallEndEvent": "on_call_end",
    "CallErrorEvent": "on_call_error",
    "MessageIgnoredEvent": "on_message_ignored",
    "LayoutEndEvent": "on_layout_end",
}


class EventProcessor:
    """Base class for event consumers.

    Subclass and override ``on_event`` to receive all events,
    or use ``TypedEventProcessor`` for per-type dispatch.
    """

    def on_event(self, event: Event) -> None:
        """Called for every event. Override in subclasses."""

    def shutdown(self) -> None:
        """Called once when the view is closed. Override to flush buffers."""


class TypedEventProcessor(EventProcessor):
    """Dispatches ``on_event`` to typed handler methods automatically.

    Override any of the ``on_*`` methods below to handle specific event types.
    Unhandled event types are silently ignored.
    """

    def on_event(self, event: Event) -> None:
        method_name = _EVENT_METHOD_MAP.get(type(event).__name__)
        if method_name is not None:
            method = getattr(self, method_name, None)
            if method is not None:
                method(event)

    def on_render(self, event: RenderEvent) -> None: ...
    def on_call_start(self, event: CallStartEvent) -> None: ...
    def on_call_end(self, event: CallEndEvent) -> None: ...
    def on_call_error(self, event: CallErrorEvent) -> None: ...
    def on_message_ignored(self, event: MessageIgnoredEvent) -> None: ...
    def on_layout_end(self, event: LayoutEndEvent) -> None: ...
