"""Event types emitted by the view while rendering and serving calls."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum


class CallStatus(Enum):
    """Outcome of a dispatched function call.

    Values:
        DONE: The operation returned and ``function_done`` was sent.
        FAILED: The operation raised and ``function_failed`` was sent.
    """

    DONE = "done"
    FAILED = "failed"


def _generate_span_id() -> str:
    """Generate a unique span ID."""
    return uuid.uuid4().hex[:16]


def _now() -> float:
    """Current timestamp."""
    return time.time()


@dataclass(frozen=True)
class BaseEvent:
    """Base class for all view events.

    Attributes:
        view_id: Id of the view (the model's ``id``) that produced this event.
        span_id: Unique identifier for this event's scope.
        parent_span_id: Span ID of the enclosing scope, if any.
        timestamp: Unix timestamp when the event was created.
    """

    view_id: str
    span_id: str = field(default_factory=_generate_span_id)
    parent_span_id: str | None = None
    timestamp: float = field(default_factory=_now)


@dataclass(frozen=True)
class RenderEvent(BaseEvent):
    """Emitted after a full render pass.

    Attributes:
        node_count: Nodes in the new graph snapshot.
        link_count: Links in the new graph snapshot.
        reconciled: Whether retained records kept their identity (same id sets).
        render_count: How many renders this view has done, this one included.
    """

    node_count: int = 0
    link_count: int = 0
    reconciled: bool = False
    render_count: int = 0


@dataclass(frozen=True)
class CallStartEvent(BaseEvent):
    """Emitted when a function call is about to be dispatched.

    Attributes:
        function_name: Name of the operation.
        call_id: Correlation token from the request.
    """

    function_name: str = ""
    call_id: str | None = None


@dataclass(frozen=True)
class CallEndEvent(BaseEvent):
    """Emitted when a call has been answered.

    Attributes:
        function_name: Name of the operation.
        call_id: Correlation token from the request.
        status: DONE or FAILED.
        duration_ms: Wall-clock duration in milliseconds.
    """

    function_name: str = ""
    call_id: str | None = None
    status: CallStatus = CallStatus.DONE
    duration_ms: float = 0.0

    def __post_init__(self) -> None:
        if isinstance(self.status, str):
            object.__setattr__(self, "status", CallStatus(self.status))


@dataclass(frozen=True)
class CallErrorEvent(BaseEvent):
    """Emitted when a dispatched operation raises.

    Attributes:
        function_name: Name of the operation.
        call_id: Correlation token from the request.
        error: Error message.
        error_type: Exception type name.
    """

    function_name: str = ""
    call_id: str | None = None
    error: str = ""
    error_type: str = ""


@dataclass(frozen=True)
class MessageIgnoredEvent(BaseEvent):
    """Emitted for inbound messages that get no response.

    Attributes:
        event_name: The message's ``event`` field.
        function_name: The message's ``function_name``, for suppressed calls.
        reason: "not_a_call" or "suppressed".
    """

    event_name: str | None = None
    function_name: str | None = None
    reason: str = ""


@dataclass(frozen=True)
class LayoutEndEvent(BaseEvent):
    """Emitted when the layout simulation settles.

    Attributes:
        ticks: Ticks run since the last render.
        node_count: Nodes in the simulation.
    """

    ticks: int = 0
    node_count: int = 0


Event = RenderEvent | CallStartEvent | CallEndEvent | CallErrorEvent | MessageIgnoredEvent | LayoutEndEvent
