# Model/polygon_session.py
from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Callable, List, Tuple, Union

from .annotations import Point, Polygon

log = logging.getLogger(__name__)

MIN_POLYGON_POINTS = 3


class DrawPhase(Enum):
    EMPTY = auto()
    DRAWING = auto()
    LOCKED = auto()  # single-polygon variant after its polygon was completed


# Events - everything the widget can ask the session to do
@dataclass(frozen=True)
class AddPoint:
    x: float
    y: float


@dataclass(frozen=True)
class UndoLastPoint:
    pass


@dataclass(frozen=True)
class CompletePolygon:
    pass


@dataclass(frozen=True)
class Reset:
    pass


SessionEvent = Union[AddPoint, UndoLastPoint, CompletePolygon, Reset]


@dataclass(frozen=True)
class SessionState:
    current: Polygon = ()
    completed: Tuple[Polygon, ...] = ()
    locked: bool = False

    @property
    def phase(self) -> DrawPhase:
        if self.locked:
            return DrawPhase.LOCKED
        return DrawPhase.DRAWING if self.current else DrawPhase.EMPTY

    @property
    def can_complete(self) -> bool:
        return not self.locked and len(self.current) >= MIN_POLYGON_POINTS

    @property
    def is_empty(self) -> bool:
        return not self.current and not self.completed


def apply_event(state: SessionState, event: SessionEvent, *, multi: bool = True) -> SessionState:
    """
    Pure transition (state, event) -> new state. Invalid events return the very same state object,
    so callers can detect "nothing happened" with an identity check.
    """
    if isinstance(event, AddPoint):
        if state.locked:
            return state
        pt: Point = (float(event.x), float(event.y))
        return replace(state, current=state.current + (pt,))

    if isinstance(event, UndoLastPoint):
        if not state.current:
            return state
        return replace(state, current=state.current[:-1])

    if isinstance(event, CompletePolygon):
        if not state.can_complete:
            return state
        return SessionState(
            current=(),
            completed=state.completed + (state.current,),
            locked=not multi,
        )

    if isinstance(event, Reset):
        return SessionState()

    raise TypeError(f"unknown session event: {event!r}")


PolygonsListener = Callable[[List[List[Point]]], None]


class PolygonSession:
    # Owns the drawing state of one image. multi=False gives the single-polygon variant.
    def __init__(self, multi: bool = True):
        self.multi = multi
        self._state = SessionState()
        self._listeners: list[PolygonsListener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def completed_polygons(self) -> List[List[Point]]:
        return [list(poly) for poly in self._state.completed]

    def subscribe(self, listener: PolygonsListener) -> None:
        self._listeners.append(listener)

    def dispatch(self, event: SessionEvent) -> bool:
        # Returns True if the event changed the state
        old = self._state
        new = apply_event(old, event, multi=self.multi)
        if new is old and not isinstance(event, Reset):
            return False
        self._state = new

        # Consumers always receive the full collection, a reset is always announced
        if isinstance(event, Reset) or new.completed is not old.completed:
            self._notify()
        return new != old

    def add_point(self, x: float, y: float) -> bool:
        return self.dispatch(AddPoint(x, y))

    def undo_last_point(self) -> bool:
        return self.dispatch(UndoLastPoint())

    def complete_polygon(self) -> bool:
        done = self.dispatch(CompletePolygon())
        if done:
            log.debug("[POLY] completed polygon #%d", len(self._state.completed))
        return done

    def reset(self) -> None:
        self.dispatch(Reset())

    def _notify(self):
        polygons = self.completed_polygons
        for listener in list(self._listeners):
            listener(polygons)
