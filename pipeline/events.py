# pipeline/events.py
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from core.draft_schema import TeamColor


@dataclass(frozen=True)
class DraftStarted:
    pass


@dataclass(frozen=True)
class DraftCleared:
    pass


@dataclass(frozen=True)
class MapChanged:
    map_name: str


@dataclass(frozen=True)
class BanChanged:
    team: TeamColor
    index: int
    hero: Optional[str]
    locked: bool


@dataclass(frozen=True)
class PlayerChanged:
    team: TeamColor
    index: int
    player: Dict[str, Any] = field(default_factory=dict)


DraftEvent = Union[DraftStarted, DraftCleared, MapChanged, BanChanged, PlayerChanged]
Listener = Callable[[DraftEvent], None]


class EventBus:
    """
    Listener registry. Ban/pick resolution runs on worker threads, so emit()
    serialises delivery.
    """

    def __init__(self):
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: DraftEvent) -> None:
        with self._lock:
            for listener in list(self._listeners):
                listener(event)


class EventLog:
    """Listener that just records events, handy for offline runs and tests."""

    def __init__(self):
        self.events: List[DraftEvent] = []

    def __call__(self, event: DraftEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type) -> List[DraftEvent]:
        return [e for e in self.events if isinstance(e, event_type)]

    def clear(self) -> None:
        self.events.clear()
