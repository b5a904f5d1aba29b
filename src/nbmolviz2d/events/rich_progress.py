"""Rich console log of view activity."""

from __future__ import annotations

import sys
from datetime import datetime
from typing import TYPE_CHECKING, Literal

from nbmolviz2d.events.processor import TypedEventProcessor
from nbmolviz2d.events.types import CallStatus

if TYPE_CHECKING:
    from nbmolviz2d.events.types import (
        CallEndEvent,
        CallErrorEvent,
        LayoutEndEvent,
        MessageIgnoredEvent,
        RenderEvent,
    )


def _require_rich() -> None:
    """Raise a clear error if rich is not installed."""
    try:
        import rich  # noqa: F401
    except ImportError:
        raise ImportError(
            "The 'rich' package is required for RichActivityProcessor. Install it with: pip install 'nbmolviz2d[cli]' or pip install rich"
        ) from None


def _is_tty() -> bool:
    """Check if stdout is a TTY."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _timestamp() -> str:
    """Return current time as [HH:MM:SS]."""
    return datetime.now().strftime("[%H:%M:%S]")


class RichActivityProcessor(TypedEventProcessor):
    """Prints one line per render, call and settled layout.

    In TTY mode lines go through a Rich console with colour; otherwise
    plain timestamped text is printed, which keeps CI logs readable.
    """

    def __init__(
        self,
        *,
        show_ignored: bool = False,
        force_mode: Literal["tty", "non-tty", "auto"] = "auto",
    ) -> None:
        if force_mode == "auto":
            self._tty_mode = _is_tty()
        else:
            self._tty_mode = force_mode == "tty"
        self._show_ignored = show_ignored
        self.lines: list[str] = []

        if self._tty_mode:
            _require_rich()
            from rich.console import Console

            self._console = Console()

    def _print(self, markup: str, plain: str) -> None:
        self.lines.append(plain)
        if self._tty_mode:
            self._console.print(markup)
        else:
            print(f"{_timestamp()} {plain}")

    def on_render(self, event: RenderEvent) -> None:
        how = "reconciled" if event.reconciled else "fresh"
        plain = f"render #{event.render_count} {event.view_id}: {event.node_count} atoms, {event.link_count} bonds ({how})"
        self._print(f"[bold cyan]render[/] #{event.render_count} {event.view_id}: "
                    f"{event.node_count} atoms, {event.link_count} bonds [dim]({how})[/]", plain)

    def on_call_end(self, event: CallEndEvent) -> None:
        ok = event.status == CallStatus.DONE
        mark = "✓" if ok else "✗"
        plain = f"{mark} {event.function_name} ({event.duration_ms:.1f}ms)"
        color = "green" if ok else "red"
        self._print(f"[{color}]{mark}[/] {event.function_name} [dim]({event.duration_ms:.1f}ms)[/]", plain)

    def on_call_error(self, event: CallErrorEvent) -> None:
        plain = f"  {event.error_type}: {event.error}"
        self._print(f"  [red]{event.error_type}[/]: {event.error}", plain)

    def on_message_ignored(self, event: MessageIgnoredEvent) -> None:
        if not self._show_ignored:
            return
        what = event.function_name or event.event_name
        plain = f"- ignored {what} ({event.reason})"
        self._print(f"[dim]- ignored {what} ({event.reason})[/]", plain)

    def on_layout_end(self, event: LayoutEndEvent) -> None:
        plain = f"layout settled after {event.ticks} ticks"
        self._print(f"[bold]layout[/] settled after {event.ticks} ticks", plain)
