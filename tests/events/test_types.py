"""Tests for event types, processor interfaces and the dispatcher."""

from __future__ import annotations

import pytest

from nbmolviz2d.events import (
    CallEndEvent,
    CallErrorEvent,
    CallStartEvent,
    CallStatus,
    EventDispatcher,
    EventProcessor,
    LayoutEndEvent,
    MessageIgnoredEvent,
    RenderEvent,
    TypedEventProcessor,
)

# ---------------------------------------------------------------------------
# Event immutability
# ---------------------------------------------------------------------------


class TestEventImmutability:
    def test_frozen_prevents_mutation(self):
        event = RenderEvent(view_id="v", node_count=3)
        with pytest.raises(AttributeError):
            event.node_count = 4  # type: ignore[misc]

    def test_default_fields(self):
        event = CallStartEvent(view_id="v", function_name="setAtomStyle", call_id="c1")
        assert event.view_id == "v"
        assert event.parent_span_id is None
        assert event.span_id  # auto-generated
        assert event.timestamp > 0

    def test_span_ids_unique(self):
        assert RenderEvent(view_id="v").span_id != RenderEvent(view_id="v").span_id

    def test_all_event_types_constructible(self):
        """Every event type can be instantiated with just view_id."""
        for cls in (
            RenderEvent,
            CallStartEvent,
            CallEndEvent,
            CallErrorEvent,
            MessageIgnoredEvent,
            LayoutEndEvent,
        ):
            e = cls(view_id="v")
            assert e.view_id == "v"

    def test_call_end_status_from_string(self):
        event = CallEndEvent(view_id="v", status="failed")
        assert event.status is CallStatus.FAILED

    def test_call_end_bad_status(self):
        with pytest.raises(ValueError):
            CallEndEvent(view_id="v", status="maybe")


# ---------------------------------------------------------------------------
# Processors
# ---------------------------------------------------------------------------


class TestTypedEventProcessor:
    def test_routes_to_typed_methods(self):
        seen = []

        class Recorder(TypedEventProcessor):
            def on_render(self, event):
                seen.append(("render", event.node_count))

            def on_call_end(self, event):
                seen.append(("end", event.function_name))

        proc = Recorder()
        proc.on_event(RenderEvent(view_id="v", node_count=2))
        proc.on_event(CallEndEvent(view_id="v", function_name="setBondStyle"))
        proc.on_event(LayoutEndEvent(view_id="v"))  # not overridden

        assert seen == [("render", 2), ("end", "setBondStyle")]

    def test_base_processor_is_noop(self):
        proc = EventProcessor()
        proc.on_event(RenderEvent(view_id="v"))
        proc.shutdown()


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


class _Boom(EventProcessor):
    def on_event(self, event):
        raise RuntimeError("processor broke")

    def shutdown(self):
        raise RuntimeError("shutdown broke")


class _Collect(EventProcessor):
    def __init__(self):
        self.events = []
        self.closed = False

    def on_event(self, event):
        self.events.append(event)

    def shutdown(self):
        self.closed = True


class TestEventDispatcher:
    def test_inactive_without_processors(self):
        assert not EventDispatcher().active
        dispatcher = EventDispatcher()
        dispatcher.add(_Collect())
        assert dispatcher.active

    def test_fans_out_in_order(self):
        a, b = _Collect(), _Collect()
        dispatcher = EventDispatcher([a, b])
        event = RenderEvent(view_id="v")
        dispatcher.emit(event)
        assert a.events == [event]
        assert b.events == [event]

    def test_best_effort_by_default(self, caplog):
        collector = _Collect()
        dispatcher = EventDispatcher([_Boom(), collector])
        dispatcher.emit(RenderEvent(view_id="v"))
        assert len(collector.events) == 1
        assert "failed on RenderEvent" in caplog.text

    def test_strict_propagates(self):
        dispatcher = EventDispatcher([_Boom()], strict=True)
        with pytest.raises(RuntimeError, match="processor broke"):
            dispatcher.emit(RenderEvent(view_id="v"))

    def test_shutdown_best_effort(self):
        collector = _Collect()
        EventDispatcher([_Boom(), collector]).shutdown()
        assert collector.closed

    def test_shutdown_strict_raises_after_all(self):
        collector = _Collect()
        dispatcher = EventDispatcher([_Boom(), collector], strict=True)
        with pytest.raises(RuntimeError, match="shutdown broke"):
            dispatcher.shutdown()
        assert collector.closed

    def test_events_dropped_after_shutdown(self):
        collector = _Collect()
        dispatcher = EventDispatcher([collector])
        dispatcher.shutdown()
        dispatcher.emit(RenderEvent(view_id="v"))
        assert collector.events == []
        assert not dispatcher.active
