"""Annotator tests.

TestConformance runs the same assertions against every adapter: for the
same marker they must all produce the same Extension Pair.
"""

from __future__ import annotations

import json
from typing import Any, Callable

import pytest
from fastapi import FastAPI
from fastapi.routing import APIRoute
from pydantic import BaseModel

from eventsource_gen.annotators import (
    DocumentAnnotator,
    DocumentOperation,
    FastAPIRouteAnnotator,
    OperationIdAnnotator,
    write_extension_pair,
)
from eventsource_gen.loader import parse_document
from eventsource_gen.markers import Marker, MarkerRegistry
from eventsource_gen.selector import select_endpoints

from conftest import document, operation

PATH = "/events/round-started"
OPERATION_ID = "roundStarted"


class RoundStartedEvent(BaseModel):
    round: int


def _plain_document() -> dict[str, Any]:
    return document({
        PATH: {"get": operation(marked=False, operation_id=OPERATION_ID)},
        "/games": {"get": operation(marked=False, operation_id="listGames")},
    })


def _by_route(event: Any, times: int = 1) -> dict[str, Any]:
    registry = MarkerRegistry()
    if event is not None:
        registry.mark("get", PATH, event)
    doc = _plain_document()
    for _ in range(times):
        DocumentAnnotator(registry).annotate_document(doc)
    return doc["paths"][PATH]["get"]


def _by_operation_id(event: Any, times: int = 1) -> dict[str, Any]:
    registry = MarkerRegistry()
    if event is not None:
        registry.mark_operation_id(OPERATION_ID, event)
    doc = _plain_document()
    for _ in range(times):
        OperationIdAnnotator(registry).annotate_document(doc)
    return doc["paths"][PATH]["get"]


def _by_fastapi_handler(event: Any, times: int = 1) -> dict[str, Any]:
    registry = MarkerRegistry()
    app = FastAPI()

    def round_started(gameId: str):
        return None

    if event is not None:
        registry.endpoint(event)(round_started)
    app.get(PATH, operation_id=OPERATION_ID)(round_started)

    for _ in range(times):
        FastAPIRouteAnnotator(registry).annotate_app(app)
    return app.openapi()["paths"][PATH]["get"]


ADAPTERS: dict[str, Callable[..., dict[str, Any]]] = {
    "document": _by_route,
    "operation_id": _by_operation_id,
    "fastapi": _by_fastapi_handler,
}

adapters = pytest.mark.parametrize("annotate", list(ADAPTERS.values()), ids=list(ADAPTERS))


def _pair(op: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in op.items() if k in ("x-event-source", "x-event-type")}


class TestConformance:
    @adapters
    def test_writes_extension_pair(self, annotate):
        assert _pair(annotate("RoundStartedEvent")) == {
            "x-event-source": True,
            "x-event-type": "RoundStartedEvent",
        }

    @adapters
    def test_event_class_name(self, annotate):
        assert _pair(annotate(RoundStartedEvent))["x-event-type"] == "RoundStartedEvent"

    @adapters
    def test_idempotent(self, annotate):
        assert _pair(annotate("RoundStartedEvent", times=2)) == _pair(annotate("RoundStartedEvent"))

    @adapters
    def test_unmarked_untouched(self, annotate):
        op = annotate(None)
        assert not any(str(k).startswith("x-") for k in op)

    @adapters
    def test_output_selectable(self, annotate):
        doc = document({PATH: {"get": annotate("RoundStartedEvent")}})
        [selected] = select_endpoints(parse_document(json.dumps(doc)))
        assert selected.event_type == "RoundStartedEvent"

    def test_all_adapters_serialize_identically(self):
        serialized = {
            name: json.dumps(_pair(annotate("RoundStartedEvent")), sort_keys=True)
            for name, annotate in ADAPTERS.items()
        }
        assert len(set(serialized.values())) == 1


class TestWriteExtensionPair:
    def test_creates_map_when_absent(self):
        result = write_extension_pair(None, Marker("A"))
        assert result == {"x-event-source": True, "x-event-type": "A"}

    def test_keeps_other_entries(self):
        extensions = {"x-rate-limit": 5}
        result = write_extension_pair(extensions, Marker("A"))
        assert result is extensions
        assert extensions == {"x-rate-limit": 5, "x-event-source": True, "x-event-type": "A"}


class TestDocumentAnnotator:
    def test_annotate_returns_false_when_unmarked(self):
        op = operation(marked=False)
        before = dict(op)
        assert DocumentAnnotator(MarkerRegistry()).annotate(DocumentOperation("get", PATH, op)) is False
        assert op == before

    def test_annotate_document_count(self):
        registry = MarkerRegistry()
        registry.mark("get", PATH, "RoundStartedEvent")
        registry.mark("get", "/games", "GameListedEvent")
        assert DocumentAnnotator(registry).annotate_document(_plain_document()) == 2

    def test_skips_non_operation_keys(self):
        registry = MarkerRegistry()
        registry.mark("get", PATH, "RoundStartedEvent")
        doc = _plain_document()
        doc["paths"][PATH]["parameters"] = [{"name": "gameId", "in": "query"}]
        doc["paths"][PATH]["summary"] = "Round events"
        assert DocumentAnnotator(registry).annotate_document(doc) == 1
        assert doc["paths"][PATH]["summary"] == "Round events"

    def test_method_must_match(self):
        registry = MarkerRegistry()
        registry.mark("post", PATH, "RoundStartedEvent")
        assert DocumentAnnotator(registry).annotate_document(_plain_document()) == 0


class TestOperationIdAnnotator:
    def test_operation_without_id_skipped(self):
        registry = MarkerRegistry()
        registry.mark_operation_id(OPERATION_ID, "RoundStartedEvent")
        doc = document({PATH: {"get": operation(marked=False)}})
        assert OperationIdAnnotator(registry).annotate_document(doc) == 0


class TestFastAPIRouteAnnotator:
    def test_creates_openapi_extra(self):
        registry = MarkerRegistry()
        app = FastAPI()

        @app.get(PATH)
        @registry.endpoint(RoundStartedEvent)
        def round_started(gameId: str):
            return None

        route = next(r for r in app.routes if isinstance(r, APIRoute) and r.path == PATH)
        assert route.openapi_extra is None
        assert FastAPIRouteAnnotator(registry).annotate(route) is True
        assert route.openapi_extra == {"x-event-source": True, "x-event-type": "RoundStartedEvent"}

    def test_keeps_existing_openapi_extra(self):
        registry = MarkerRegistry()
        app = FastAPI()

        @app.get(PATH, openapi_extra={"x-rate-limit": 5})
        @registry.endpoint("RoundStartedEvent")
        def round_started():
            return None

        FastAPIRouteAnnotator(registry).annotate_app(app)
        op = app.openapi()["paths"][PATH]["get"]
        assert op["x-rate-limit"] == 5
        assert op["x-event-type"] == "RoundStartedEvent"

    def test_cached_schema_rebuilt(self):
        registry = MarkerRegistry()
        app = FastAPI()

        @app.get(PATH)
        def round_started():
            return None

        assert "x-event-source" not in app.openapi()["paths"][PATH]["get"]
        registry.endpoint("RoundStartedEvent")(round_started)
        assert FastAPIRouteAnnotator(registry).annotate_app(app) == 1
        assert app.openapi()["paths"][PATH]["get"]["x-event-source"] is True

    def test_query_parameters_reach_document(self):
        registry = MarkerRegistry()
        app = FastAPI()

        @app.get(PATH)
        @registry.endpoint(RoundStartedEvent)
        def round_started(gameId: str):
            return None

        @app.get("/games")
        def list_games():
            return []

        FastAPIRouteAnnotator(registry).annotate_app(app)
        [selected] = select_endpoints(parse_document(json.dumps(app.openapi())))
        assert selected.route_path == PATH
        assert [p.name for p in selected.query_params] == ["gameId"]
