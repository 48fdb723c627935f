"""Marker model: "this operation streams events of type X".

The host application builds a MarkerRegistry while it declares its
routes. Annotators look markers up in the registry instead of inspecting
handler attributes at runtime.

Example::

    markers = MarkerRegistry()

    @app.get("/events/round-started")
    @markers.endpoint(RoundStartedEvent)
    async def round_started(gameId: str): ...

    markers.mark("get", "/events/scores", "ScoreChangedEvent")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from .errors import GeneratorError

F = TypeVar("F", bound=Callable[..., Any])

# Extension Pair keys written by every annotator
EVENT_SOURCE_KEY = "x-event-source"
EVENT_TYPE_KEY = "x-event-type"


class MarkerConflictError(GeneratorError):
    """A second, different marker was registered for the same operation."""

    def __init__(self, key: object, existing: "Marker", new: "Marker") -> None:
        self.key = key
        super().__init__(
            f"{key!r} is already marked as streaming {existing.event_type},"
            f" cannot mark it as {new.event_type}"
        )


@dataclass(frozen=True)
class Marker:
    """The declared event type of one streaming operation."""

    event_type: str

    def __post_init__(self) -> None:
        if not isinstance(self.event_type, str) or not self.event_type.strip():
            raise ValueError("Marker event_type must be a non-empty string")

    @classmethod
    def for_event(cls, event: type | str) -> "Marker":
        """Build a marker from an event class (its name is used) or a name."""
        if isinstance(event, type):
            return cls(event.__name__)
        return cls(event)

    def extension_pair(self) -> dict[str, Any]:
        """The on-the-wire encoding of this marker."""
        return {EVENT_SOURCE_KEY: True, EVENT_TYPE_KEY: self.event_type}


def _route_key(method: str, path: str) -> tuple[str, str]:
    return method.upper(), path


class MarkerRegistry:
    """Explicit operation-key -> Marker mapping.

    An operation can be keyed by (method, path), by operationId, or by its
    handler callable. Each key holds at most one marker.
    """

    def __init__(self) -> None:
        self._by_route: dict[tuple[str, str], Marker] = {}
        self._by_operation_id: dict[str, Marker] = {}
        self._by_handler: dict[Callable[..., Any], Marker] = {}

    def __len__(self) -> int:
        return len(self._by_route) + len(self._by_operation_id) + len(self._by_handler)

    @staticmethod
    def _store(table: dict, key: Any, marker: Marker) -> Marker:
        existing = table.get(key)
        if existing is not None and existing != marker:
            raise MarkerConflictError(key, existing, marker)
        table[key] = marker
        return marker

    def mark(self, method: str, path: str, event: type | str) -> Marker:
        """Mark the operation at (method, path)."""
        return self._store(self._by_route, _route_key(method, path), Marker.for_event(event))

    def mark_operation_id(self, operation_id: str, event: type | str) -> Marker:
        """Mark the operation with the given operationId."""
        return self._store(self._by_operation_id, operation_id, Marker.for_event(event))

    def endpoint(self, event: type | str) -> Callable[[F], F]:
        """Decorator marking a route handler. The handler is returned unchanged."""
        marker = Marker.for_event(event)

        def decorator(handler: F) -> F:
            self._store(self._by_handler, handler, marker)
            return handler

        return decorator

    def for_route(self, method: str, path: str) -> Marker | None:
        return self._by_route.get(_route_key(method, path))

    def for_operation_id(self, operation_id: str | None) -> Marker | None:
        if operation_id is None:
            return None
        return self._by_operation_id.get(operation_id)

    def for_handler(self, handler: Callable[..., Any] | None) -> Marker | None:
        if handler is None:
            return None
        return self._by_handler.get(handler)
