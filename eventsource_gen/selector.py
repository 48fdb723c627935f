"""Select the operations marked as event streams.

An operation is selected iff its x-event-source extension is exactly
true. A selected operation must also declare a non-empty x-event-type;
a missing one means an annotator wrote half a marker, so it is an error
rather than a skip.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from loguru import logger

from .errors import InvalidEventTypeError, MissingEventTypeError
from .loader import OperationDescriptor, Parameter
from .markers import EVENT_SOURCE_KEY, EVENT_TYPE_KEY

_TYPE_NAME = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")


@dataclass(frozen=True)
class SelectedOperation:
    """A marked operation with its event type and query parameters."""

    route_path: str
    http_method: str
    operation_id: str | None
    event_type: str
    query_params: tuple[Parameter, ...]


def is_event_source(operation: OperationDescriptor) -> bool:
    """Check if an operation carries the event-source marker."""
    return operation.extensions.get(EVENT_SOURCE_KEY) is True


def get_event_type(operation: OperationDescriptor) -> str:
    """Return the declared event type of a marked operation."""
    event_type = operation.extensions.get(EVENT_TYPE_KEY)
    if not isinstance(event_type, str) or not event_type.strip():
        raise MissingEventTypeError(operation.http_path, operation.http_method)
    event_type = event_type.strip()
    if not _TYPE_NAME.fullmatch(event_type):
        raise InvalidEventTypeError(
            operation.http_path, operation.http_method, event_type
        )
    return event_type


def get_query_params(operation: OperationDescriptor) -> tuple[Parameter, ...]:
    """Query parameters in declaration order. Other locations are ignored."""
    return tuple(p for p in operation.parameters if p.location == "query")


def select_endpoints(operations: list[OperationDescriptor]) -> list[SelectedOperation]:
    """Filter operations down to marked event streams, sorted by path and method."""
    selected: list[SelectedOperation] = []

    for operation in operations:
        if not is_event_source(operation):
            continue

        event_type = get_event_type(operation)
        if operation.http_method != "get":
            logger.warning(
                f"{operation.http_method.upper()} {operation.http_path} is marked as an"
                " event source but EventSource clients can only issue GET requests"
            )

        selected.append(SelectedOperation(
            route_path=operation.http_path,
            http_method=operation.http_method,
            operation_id=operation.operation_id,
            event_type=event_type,
            query_params=get_query_params(operation),
        ))

    selected.sort(key=lambda s: (s.route_path, s.http_method))
    logger.info(f"Selected {len(selected)} event-source endpoints")
    return selected
