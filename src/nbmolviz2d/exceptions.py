"""Exceptions for the 2D molecule viewer."""

from __future__ import annotations


class VisualLookupError(LookupError):
    """A call referenced something the view does not have.

    Base class for lookups that fail during a dispatched call. The
    dispatcher reports these to the kernel as ``function_failed``.

    Attributes:
        kind: What was being looked up ("atom", "function", ...)
        key: The key that was not found
        message: Human-readable error message
    """

    def __init__(self, kind: str, key: object, message: str | None = None) -> None:
        self.kind = kind
        self.key = key
        self.message = message or self._default_message()
        super().__init__(self.message)

    def _default_message(self) -> str:
        return f"No {self.kind} {self.key!r}"

    def __str__(self) -> str:
        # LookupError would otherwise repr() the message
        return self.message


class MissingElementError(VisualLookupError):
    """Style or label mutation targets a node absent from the visual index."""

    def _default_message(self) -> str:
        return f"No {self.kind} element for {self.key!r} in the rendered scene"


class UnknownFunctionError(VisualLookupError):
    """Function call names an operation the view does not expose.

    Attributes:
        available: Names the view does expose
    """

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        self.available = sorted(available or [])
        super().__init__("function", name)

    def _default_message(self) -> str:
        msg = f"Unknown function {self.key!r}"
        if self.available:
            msg += f". Available: {', '.join(self.available)}"
        return msg


class RemoteCallError(Exception):
    """The view answered a function call with ``function_failed``.

    Attributes:
        function_name: Name of the remote operation
        call_id: Correlation token of the failed call
        error_type: Exception type name reported by the view
    """

    def __init__(
        self,
        message: str,
        *,
        function_name: str | None = None,
        call_id: str | None = None,
        error_type: str | None = None,
    ) -> None:
        self.message = message
        self.function_name = function_name
        self.call_id = call_id
        self.error_type = error_type
        super().__init__(message)


class SimulationConfigError(ValueError):
    """Layout engine received parameters it cannot run with."""
