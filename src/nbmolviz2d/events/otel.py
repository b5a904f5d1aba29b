"""OpenTelemetry export processor: converts view events to OTel spans.

Opt-in via::

    pip install nbmolviz2d[otel]

Usage::

    from nbmolviz2d.events.otel import OpenTelemetryProcessor

    view = MolViz2DView(model, processors=[OpenTelemetryProcessor()])
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from nbmolviz2d.events.processor import TypedEventProcessor

if TYPE_CHECKING:
    from nbmolviz2d.events.types import (
        CallEndEvent,
        CallErrorEvent,
        CallStartEvent,
        LayoutEndEvent,
        RenderEvent,
    )


def _require_opentelemetry() -> None:
    """Raise a clear error if opentelemetry is not installed."""
    try:
        import opentelemetry  # noqa: F401
    except ImportError:
        raise ImportError(
            "The 'opentelemetry' package is required for OpenTelemetryProcessor. "
            "Install with: pip install 'nbmolviz2d[otel]' "
            "or: pip install opentelemetry-api opentelemetry-sdk"
        ) from None


class OpenTelemetryProcessor(TypedEventProcessor):
    """Converts view events to OpenTelemetry spans.

    Mapping:
        CallStartEvent → span (``call:{function_name}``)
        CallEndEvent   → end span with status/duration attributes
        CallErrorEvent → error status on the open call span
        RenderEvent    → zero-length span (``render:{view_id}``)
        LayoutEndEvent → zero-length span (``layout:{view_id}``)
    """

    def __init__(self, tracer_name: str = "nbmolviz2d", *, tracer_provider: Any = None) -> None:
        _require_opentelemetry()
        from opentelemetry import trace
        from opentelemetry.trace import StatusCode

        self._tracer = trace.get_tracer(tracer_name, tracer_provider=tracer_provider)
        self._StatusCode = StatusCode
        self._spans: dict[str, Any] = {}  # span_id → OTel Span

    def on_call_start(self, event: CallStartEvent) -> None:
        span = self._tracer.start_span(
            name=f"call:{event.function_name}",
            attributes={
                "nbmolviz2d.view_id": event.view_id,
                "nbmolviz2d.function_name": event.function_name,
                "nbmolviz2d.call_id": str(event.call_id),
            },
        )
        self._spans[event.span_id] = span

    def on_call_error(self, event: CallErrorEvent) -> None:
        span = self._spans.get(event.span_id)
        if span is None:
            return
        span.set_status(self._StatusCode.ERROR, event.error)
        span.set_attribute("nbmolviz2d.error_type", event.error_type)

    def on_call_end(self, event: CallEndEvent) -> None:
        span = self._spans.pop(event.span_id, None)
        if span is None:
            return
        span.set_attribute("nbmolviz2d.duration_ms", event.duration_ms)
        span.set_attribute("nbmolviz2d.status", event.status.value)
        span.end()

    def on_render(self, event: RenderEvent) -> None:
        span = self._tracer.start_span(
            name=f"render:{event.view_id}",
            attributes={
                "nbmolviz2d.node_count": event.node_count,
                "nbmolviz2d.link_count": event.link_count,
                "nbmolviz2d.reconciled": event.reconciled,
            },
        )
        span.end()

    def on_layout_end(self, event: LayoutEndEvent) -> None:
        span = self._tracer.start_span(
            name=f"layout:{event.view_id}",
            attributes={"nbmolviz2d.ticks": event.ticks, "nbmolviz2d.node_count": event.node_count},
        )
        span.end()

    def shutdown(self) -> None:
        """End call spans left open when the view closes mid-call."""
        for span in self._spans.values():
            span.end()
        self._spans.clear()
