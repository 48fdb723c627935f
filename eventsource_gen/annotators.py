"""Annotators: write the Extension Pair into operations that carry a marker.

Each adapter targets a different OpenAPI producer and discovers markers
through a different key, but all of them write through
write_extension_pair so the resulting document is identical for the
same marker.

- DocumentAnnotator     any producer's OpenAPI dict, keyed by (method, path)
- OperationIdAnnotator  any producer's OpenAPI dict, keyed by operationId
- FastAPIRouteAnnotator FastAPI routes before the schema is built, keyed by handler
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, MutableMapping, NamedTuple

from fastapi import FastAPI
from fastapi.routing import APIRoute
from loguru import logger

from .loader import HTTP_METHODS
from .markers import Marker, MarkerRegistry


class DocumentOperation(NamedTuple):
    """One operation inside an in-progress OpenAPI document."""

    method: str
    path: str
    operation: MutableMapping[str, Any]


def write_extension_pair(
    extensions: MutableMapping[str, Any] | None,
    marker: Marker,
) -> MutableMapping[str, Any]:
    """Write the marker's Extension Pair, creating the map if absent."""
    if extensions is None:
        extensions = {}
    extensions.update(marker.extension_pair())
    return extensions


class Annotator(ABC):
    """Inspect one operation and record its marker, if it has one."""

    def __init__(self, registry: MarkerRegistry) -> None:
        self.registry = registry

    @abstractmethod
    def annotate(self, target: Any) -> bool:
        """Annotate target. Returns False (and leaves it untouched) if unmarked."""


class _DocumentAnnotatorBase(Annotator):
    """Shared walk over the paths of an OpenAPI dict."""

    @abstractmethod
    def find_marker(self, target: DocumentOperation) -> Marker | None:
        ...

    def annotate(self, target: DocumentOperation) -> bool:
        marker = self.find_marker(target)
        if marker is None:
            return False
        write_extension_pair(target.operation, marker)
        logger.debug(
            f"Annotated {target.method.upper()} {target.path} -> {marker.event_type}"
        )
        return True

    def annotate_document(self, document: MutableMapping[str, Any]) -> int:
        """Annotate every operation in document. Returns the annotated count."""
        count = 0
        for path, path_item in (document.get("paths") or {}).items():
            if not isinstance(path_item, MutableMapping):
                continue
            for method, operation in path_item.items():
                if str(method).lower() not in HTTP_METHODS or not isinstance(operation, MutableMapping):
                    continue
                if self.annotate(DocumentOperation(method, path, operation)):
                    count += 1
        return count


class DocumentAnnotator(_DocumentAnnotatorBase):
    """Discovers markers by HTTP method and route path."""

    def find_marker(self, target: DocumentOperation) -> Marker | None:
        return self.registry.for_route(target.method, target.path)


class OperationIdAnnotator(_DocumentAnnotatorBase):
    """Discovers markers by the operation's operationId."""

    def find_marker(self, target: DocumentOperation) -> Marker | None:
        return self.registry.for_operation_id(target.operation.get("operationId"))


class FastAPIRouteAnnotator(Annotator):
    """Discovers markers by route handler and writes them to openapi_extra.

    FastAPI merges openapi_extra into the generated operation, so this
    must run before app.openapi() is first called (annotate_app clears the
    cached schema either way).
    """

    def annotate(self, target: APIRoute) -> bool:
        marker = self.registry.for_handler(target.endpoint)
        if marker is None:
            return False
        target.openapi_extra = write_extension_pair(target.openapi_extra, marker)
        logger.debug(
            f"Annotated {','.join(sorted(target.methods or ()))} {target.path}"
            f" -> {marker.event_type}"
        )
        return True

    def annotate_app(self, app: FastAPI) -> int:
        """Annotate every APIRoute of app. Returns the annotated count."""
        count = 0
        for route in app.routes:
            if isinstance(route, APIRoute) and self.annotate(route):
                count += 1
        app.openapi_schema = None
        return count
