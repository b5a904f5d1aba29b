"""Request/response calls over the one-way custom-message channel.

The kernel sends ``function_call`` messages naming a view operation and
a positional argument list. The view answers each one with a
``function_done`` (or ``function_failed``) message carrying the same
``call_id``, which is the only thing tying a response to its request.

View side: ``FunctionDispatcher``. Kernel side: ``RemoteCaller``.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from nbmolviz2d.events.dispatcher import EventDispatcher
from nbmolviz2d.events.types import (
    CallEndEvent,
    CallErrorEvent,
    CallStartEvent,
    CallStatus,
    MessageIgnoredEvent,
)
from nbmolviz2d.exceptions import RemoteCallError, UnknownFunctionError

logger = logging.getLogger(__name__)

FUNCTION_CALL = "function_call"
FUNCTION_DONE = "function_done"
FUNCTION_FAILED = "function_failed"
READY = "ready"

# Kept in sync through model state instead of a call round-trip
SUPPRESSED_FUNCTIONS = frozenset({"updateHighlightAtoms"})

Message = dict[str, Any]
Send = Callable[[Message], None]


def function_call_message(function_name: str, arguments: list[Any], call_id: str) -> Message:
    return {
        "event": FUNCTION_CALL,
        "function_name": function_name,
        "arguments": arguments,
        "call_id": call_id,
    }


def function_done_message(call_id: Any, result: Any, function_name: str) -> Message:
    return {
        "call_id": call_id,
        "result": result,
        "function_name": function_name,
        "event": FUNCTION_DONE,
    }


def function_failed_message(call_id: Any, error: BaseException, function_name: str) -> Message:
    return {
        "call_id": call_id,
        "error": str(error),
        "error_type": type(error).__name__,
        "function_name": function_name,
        "event": FUNCTION_FAILED,
    }


def ready_message() -> Message:
    return {"event": READY}


class FunctionDispatcher:
    """Routes inbound ``function_call`` messages to a fixed set of operations.

    Messages of any other kind, and suppressed function names, are ignored
    without a response. Every dispatched call gets exactly one response:
    ``function_done`` with the return value, or ``function_failed`` when
    the name is unknown or the operation raises. With ``strict=True`` the
    failure is re-raised after the response has been sent.

    Args:
        operations: Wire name -> callable, e.g. ``{"setAtomStyle": view.set_atom_style}``
        send: Outbound channel, or None when there is nobody to answer
        strict: Re-raise operation failures
        events: Receives call lifecycle events
        view_id: Stamped on emitted events
    """

    def __init__(
        self,
        operations: Mapping[str, Callable[..., Any]],
        send: Send | None = None,
        *,
        strict: bool = False,
        events: EventDispatcher | None = None,
        view_id: str = "",
    ) -> None:
        self._operations = dict(operations)
        self.send = send
        self.strict = strict
        self._events = events or EventDispatcher()
        self.view_id = view_id

    @property
    def operation_names(self) -> list[str]:
        return sorted(self._operations)

    def resolve(self, function_name: str) -> Callable[..., Any]:
        try:
            return self._operations[function_name]
        except KeyError:
            raise UnknownFunctionError(function_name, self.operation_names) from None

    def handle_message(self, message: Message) -> Message | None:
        """Classify one inbound message and answer it if it is a call.

        Returns the response that was sent, or None if the message was ignored.
        """
        event_name = message.get("event")
        if event_name != FUNCTION_CALL:
            logger.debug("Ignoring %r message", event_name)
            self._emit_ignored(event_name, None, "not_a_call")
            return None

        function_name = message.get("function_name")
        if function_name in SUPPRESSED_FUNCTIONS:
            logger.debug("Ignoring suppressed call %s", function_name)
            self._emit_ignored(event_name, function_name, "suppressed")
            return None

        return self._dispatch(message)

    def _dispatch(self, message: Message) -> Message:
        function_name = message.get("function_name") or ""
        call_id = message.get("call_id")
        arguments = message.get("arguments") or []

        start = CallStartEvent(view_id=self.view_id, function_name=function_name, call_id=call_id)
        self._events.emit(start)
        t0 = time.perf_counter()

        try:
            operation = self.resolve(function_name)
            result = operation(*arguments)
        except Exception as e:
            logger.warning("Function call %s (call_id=%s) failed", function_name, call_id, exc_info=True)
            response = function_failed_message(call_id, e, function_name)
            self._respond(response)
            self._events.emit(
                CallErrorEvent(
                    view_id=self.view_id,
                    span_id=start.span_id,
                    function_name=function_name,
                    call_id=call_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
            )
            self._emit_end(start, CallStatus.FAILED, t0)
            if self.strict:
                raise
            return response

        logger.debug("Function call %s (call_id=%s) done", function_name, call_id)
        response = function_done_message(call_id, result, function_name)
        self._respond(response)
        self._emit_end(start, CallStatus.DONE, t0)
        return response

    def _respond(self, response: Message) -> None:
        if self.send is None:
            logger.debug("No outbound channel, dropping %s for call_id=%s", response["event"], response["call_id"])
            return
        self.send(response)

    def _emit_end(self, start: CallStartEvent, status: CallStatus, t0: float) -> None:
        self._events.emit(
            CallEndEvent(
                view_id=self.view_id,
                span_id=start.span_id,
                function_name=start.function_name,
                call_id=start.call_id,
                status=status,
                duration_ms=(time.perf_counter() - t0) * 1000,
            )
        )

    def _emit_ignored(self, event_name: str | None, function_name: str | None, reason: str) -> None:
        self._events.emit(
            MessageIgnoredEvent(
                view_id=self.view_id,
                event_name=event_name,
                function_name=function_name,
                reason=reason,
            )
        )


_UNSET = object()


@dataclass
class PendingCall:
    """A call sent to the view, resolved when its response arrives."""

    call_id: str
    function_name: str
    arguments: list[Any] = field(default_factory=list)
    done: bool = False
    _result: Any = field(default=_UNSET, repr=False)
    error: RemoteCallError | None = None

    def result(self) -> Any:
        """Return the call's result, raising if it failed or has not completed."""
        if not self.done:
            raise RuntimeError(f"Call {self.function_name} ({self.call_id}) has not completed")
        if self.error is not None:
            raise self.error
        return self._result


class RemoteCaller:
    """Kernel-side half of the call protocol.

    ``call`` sends a ``function_call`` with a fresh correlation token and
    returns a ``PendingCall``; feed every inbound custom message to
    ``handle_message`` to resolve them.
    """

    def __init__(self, send: Send) -> None:
        self._send = send
        self._pending: dict[str, PendingCall] = {}
        self.ready = False

    @property
    def pending(self) -> list[PendingCall]:
        return list(self._pending.values())

    def call(self, function_name: str, *arguments: Any) -> PendingCall:
        call_id = uuid.uuid4().hex
        pending = PendingCall(call_id=call_id, function_name=function_name, arguments=list(arguments))
        self._pending[call_id] = pending
        self._send(function_call_message(function_name, list(arguments), call_id))
        return pending

    def handle_message(self, content: Message) -> PendingCall | None:
        """Resolve the call a response belongs to. Returns it, or None."""
        event_name = content.get("event")
        if event_name == READY:
            self.ready = True
            return None
        if event_name not in (FUNCTION_DONE, FUNCTION_FAILED):
            logger.debug("Ignoring %r message from view", event_name)
            return None

        call_id = content.get("call_id")
        pending = self._pending.pop(call_id, None)
        if pending is None:
            logger.warning("Response for unknown call_id %r (%s)", call_id, content.get("function_name"))
            return None

        if event_name == FUNCTION_DONE:
            pending._result = content.get("result")
        else:
            pending.error = RemoteCallError(
                content.get("error", "remote call failed"),
                function_name=pending.function_name,
                call_id=call_id,
                error_type=content.get("error_type"),
            )
        pending.done = True
        return pending
