"""Fan-out of view events to processors."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nbmolviz2d.events.processor import EventProcessor
    from nbmolviz2d.events.types import Event

logger = logging.getLogger(__name__)


class EventDispatcher:
    """Delivers each event to every registered processor, in order.

    A processor that raises is logged and skipped so a broken observer
    never breaks rendering or a call response; ``strict=True`` lets the
    error propagate instead. Once ``shutdown()`` has run, the view is
    closed and later events are dropped.
    """

    def __init__(
        self,
        processors: list[EventProcessor] | None = None,
        *,
        strict: bool = False,
    ) -> None:
        self._processors: list[EventProcessor] = list(processors or ())
        self._strict = strict
        self._closed = False

    @property
    def active(self) -> bool:
        """True while open with at least one processor."""
        return bool(self._processors) and not self._closed

    def add(self, processor: EventProcessor) -> None:
        self._processors.append(processor)

    def emit(self, event: Event) -> None:
        if self._closed:
            logger.debug("Dropping %s after shutdown", type(event).__name__)
            return
        for processor in self._processors:
            self._guarded(processor, "on_event", event)

    def shutdown(self) -> None:
        """Shut every processor down, then stop delivering.

        In strict mode all processors still get their ``shutdown`` call and
        the first failure is raised afterwards.
        """
        if self._closed:
            return
        self._closed = True
        first_error: Exception | None = None
        for processor in self._processors:
            try:
                self._guarded(processor, "shutdown")
            except Exception as e:
                first_error = first_error or e
        if first_error is not None:
            raise first_error

    def _guarded(self, processor: EventProcessor, method: str, *args: object) -> None:
        try:
            getattr(processor, method)(*args)
        except Exception:
            if self._strict:
                raise
            what = type(args[0]).__name__ if args else method
            logger.warning("EventProcessor %s failed on %s", processor, what, exc_info=True)
