from __future__ import annotations

from collections import deque

from intrudernet.core.types import DetectionEvent

DEFAULT_MAX_EVENTS = 50


class EventLog:
    """Insertion-ordered event log; the oldest event is evicted on overflow."""

    def __init__(self, max_events: int = DEFAULT_MAX_EVENTS) -> None:
        if max_events < 1:
            raise ValueError("max_events must be >= 1")
        self._events: deque[DetectionEvent] = deque(maxlen=int(max_events))

    @property
    def max_events(self) -> int:
        return int(self._events.maxlen or 0)

    def append(self, event: DetectionEvent) -> None:
        self._events.append(event)

    def dismiss(self, event_id: str) -> bool:
        """Remove one event by id. Returns False if no such event is logged."""

        for event in self._events:
            if event.id == event_id:
                self._events.remove(event)
                return True
        return False

    def last(self) -> DetectionEvent | None:
        return self._events[-1] if self._events else None

    def events(self) -> list[DetectionEvent]:
        return list(self._events)

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)
