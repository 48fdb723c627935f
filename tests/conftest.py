"""Shared fixtures for the generator tests."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import pytest
from loguru import logger

from eventsource_gen.config import GeneratorConfig

FIXTURES = Path(__file__).parent / "fixtures"
EVENTS_SPEC = FIXTURES / "events.openapi.json"
EVENTS_SPEC_YAML = FIXTURES / "events.openapi.yaml"


@pytest.fixture(autouse=True)
def _reset_logger():
    """The CLI swaps loguru sinks; restore a plain stderr sink after each test."""
    yield
    logger.remove()
    logger.add(sys.stderr, level="WARNING")


@pytest.fixture
def log_messages():
    """Capture loguru messages as a list of (level, message) tuples."""
    records: list[tuple[str, str]] = []
    handler_id = logger.add(
        lambda msg: records.append((msg.record["level"].name, msg.record["message"])),
        level="DEBUG",
    )
    yield records
    logger.remove(handler_id)


@pytest.fixture
def events_spec() -> dict[str, Any]:
    """A fresh copy of the events fixture document."""
    return json.loads(EVENTS_SPEC.read_text())


@pytest.fixture
def write_spec(tmp_path):
    """Serialize a document dict to a temporary JSON file and return its path."""
    def _write(spec: dict[str, Any], name: str = "openapi.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(spec, indent=2))
        return path
    return _write


@pytest.fixture
def make_config(tmp_path):
    """Build a GeneratorConfig writing into tmp_path."""
    def _make(spec_path: Path = EVENTS_SPEC, **overrides: Any) -> GeneratorConfig:
        values: dict[str, Any] = {
            "openapi_spec_path": spec_path,
            "output_path": tmp_path / "out" / "event-sources.ts",
        }
        values.update(overrides)
        return GeneratorConfig(**values)
    return _make


def operation(
    *,
    marked: bool = True,
    event_type: Any = "RoundStartedEvent",
    parameters: list[dict[str, Any]] | None = None,
    operation_id: str | None = None,
) -> dict[str, Any]:
    """Build a raw OpenAPI operation object."""
    op: dict[str, Any] = {"responses": {"200": {"description": "OK"}}}
    if operation_id:
        op["operationId"] = operation_id
    if parameters:
        op["parameters"] = parameters
    if marked:
        op["x-event-source"] = True
        if event_type is not None:
            op["x-event-type"] = event_type
    return op


def document(paths: dict[str, dict[str, Any]]) -> dict[str, Any]:
    """Wrap path items into a minimal OpenAPI document."""
    return {"openapi": "3.0.1", "info": {"title": "t", "version": "1"}, "paths": paths}
