"""Event system for observing the view."""

from nbmolviz2d.events.dispatcher import EventDispatcher
from nbmolviz2d.events.processor import EventProcessor, TypedEventProcessor
from nbmolviz2d.events.types import (
    BaseEvent,
    CallEndEvent,
    CallErrorEvent,
    CallStartEvent,
    CallStatus,
    Event,
    LayoutEndEvent,
    MessageIgnoredEvent,
    RenderEvent,
)

__all__ = [
    # Event types
    "BaseEvent",
    "CallEndEvent",
    "CallErrorEvent",
    "CallStartEvent",
    "CallStatus",
    "Event",
    "LayoutEndEvent",
    "MessageIgnoredEvent",
    "RenderEvent",
    # Processor interfaces
    "EventProcessor",
    "TypedEventProcessor",
    # Dispatcher
    "EventDispatcher",
]
