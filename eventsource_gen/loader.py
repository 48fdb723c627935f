"""Load an OpenAPI document and parse it into operation descriptors.

Accepts JSON or YAML. Only the shape this generator needs is validated;
unknown fields pass through.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from .errors import GeneratorIOError, ParseError

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


@dataclass(frozen=True)
class Parameter:
    """A declared operation parameter."""

    name: str
    location: str
    required: bool = False


@dataclass(frozen=True)
class OperationDescriptor:
    """One operation of the parsed document."""

    http_path: str
    http_method: str
    operation_id: str | None
    parameters: tuple[Parameter, ...] = ()
    extensions: dict[str, Any] = field(default_factory=dict)


def load_spec(path: Path, source: str | None = None) -> dict[str, Any]:
    """Read and deserialize the document at path."""
    try:
        raw = Path(path).read_bytes()
    except OSError as exc:
        raise GeneratorIOError("Cannot read OpenAPI document", path) from exc
    return deserialize(raw, source=source or str(path))


def deserialize(raw: bytes | str, source: str | None = None) -> dict[str, Any]:
    """Turn raw bytes into the document mapping, checking the top-level shape.

    JSON is tried first; anything json rejects is parsed as YAML.
    """
    try:
        spec = json.loads(raw)
    except ValueError:
        try:
            spec = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise ParseError(f"not well-formed JSON/YAML ({exc})", source) from exc
    if not isinstance(spec, dict):
        raise ParseError("document root must be a mapping", source)
    if not isinstance(spec.get("paths"), dict):
        raise ParseError("document has no 'paths' mapping", source)
    return spec


def get_paths(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract paths from the spec."""
    return spec.get("paths", {})


def resolve_ref(spec: dict[str, Any], ref: str, source: str | None = None) -> dict[str, Any]:
    """Resolve a local $ref pointer in the spec."""
    if not ref.startswith("#/"):
        raise ParseError(f"only local references are supported, got {ref!r}", source)
    node: Any = spec
    for part in ref[2:].split("/"):
        part = part.replace("~1", "/").replace("~0", "~")
        if not isinstance(node, dict) or part not in node:
            raise ParseError(f"unresolvable reference {ref!r}", source)
        node = node[part]
    if not isinstance(node, dict):
        raise ParseError(f"reference {ref!r} does not point to an object", source)
    return node


def _parse_parameter(
    spec: dict[str, Any], raw: Any, where: str, source: str | None,
) -> Parameter:
    if isinstance(raw, dict) and "$ref" in raw:
        raw = resolve_ref(spec, raw["$ref"], source)
    if not isinstance(raw, dict) or not raw.get("name"):
        raise ParseError(f"{where}: parameter without a name", source)
    return Parameter(
        name=str(raw["name"]),
        location=str(raw.get("in", "query")),
        required=bool(raw.get("required", False)),
    )


def _parse_parameter_list(
    spec: dict[str, Any], raw: Any, where: str, source: str | None,
) -> list[Parameter]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ParseError(f"{where}: 'parameters' must be a list", source)
    return [_parse_parameter(spec, p, where, source) for p in raw]


def _merge_parameters(
    path_level: list[Parameter], operation_level: list[Parameter],
) -> tuple[Parameter, ...]:
    """Operation parameters override path-level ones with the same (name, in)."""
    overrides = {(p.name, p.location): p for p in operation_level}
    merged = [overrides.pop((p.name, p.location), p) for p in path_level]
    merged.extend(p for p in operation_level if (p.name, p.location) in overrides)
    return tuple(merged)


def parse_operations(spec: dict[str, Any], source: str | None = None) -> list[OperationDescriptor]:
    """Build an OperationDescriptor for every operation in the spec."""
    operations: list[OperationDescriptor] = []

    for path, path_item in get_paths(spec).items():
        if not isinstance(path_item, dict):
            raise ParseError(f"path item {path!r} must be a mapping", source)
        shared = _parse_parameter_list(spec, path_item.get("parameters"), path, source)

        for method, operation in path_item.items():
            if str(method).lower() not in HTTP_METHODS:
                continue
            where = f"{method.upper()} {path}"
            if not isinstance(operation, dict):
                raise ParseError(f"{where}: operation must be a mapping", source)

            own = _parse_parameter_list(spec, operation.get("parameters"), where, source)
            operation_id = operation.get("operationId")
            operations.append(OperationDescriptor(
                http_path=str(path),
                http_method=method.lower(),
                operation_id=str(operation_id) if operation_id else None,
                parameters=_merge_parameters(shared, own),
                extensions={k: v for k, v in operation.items() if str(k).startswith("x-")},
            ))

    return operations


def parse_document(raw: bytes | str, source: str | None = None) -> list[OperationDescriptor]:
    """Parse serialized document bytes into operation descriptors."""
    return parse_operations(deserialize(raw, source), source)


def load_document(path: Path) -> list[OperationDescriptor]:
    """Read the document at path and parse it into operation descriptors."""
    source = str(path)
    operations = parse_operations(load_spec(path, source), source)
    logger.info(f"Loaded {len(operations)} operations from {source}")
    return operations
