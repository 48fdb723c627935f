"""Build the Jinja2 template context from the selected operations.

Derives each endpoint's function name and parameter identifiers,
rejects collisions, and assembles the import lines' inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger

from .errors import DuplicateFunctionNameError, DuplicateParameterError
from .naming import build_function_name, normalize_param_name, to_identifier
from .selector import SelectedOperation


@dataclass(frozen=True)
class QueryParam:
    """A query parameter as it appears in the generated signature."""

    original_name: str
    normalized_name: str
    identifier: str

    @property
    def shorthand(self) -> bool:
        """True when the query-string key can be written as {identifier}."""
        return self.identifier == self.normalized_name


@dataclass(frozen=True)
class SelectedEndpoint:
    """Everything the template needs to emit one stream function."""

    function_name: str
    event_type: str
    route_path: str
    http_method: str
    query_params: tuple[QueryParam, ...]


def build_query_params(operation: SelectedOperation) -> tuple[QueryParam, ...]:
    """Normalize an operation's query parameters, keeping declaration order."""
    params: list[QueryParam] = []
    seen: set[str] = set()
    for param in operation.query_params:
        normalized = normalize_param_name(param.name)
        identifier = to_identifier(normalized)
        if identifier in seen:
            raise DuplicateParameterError(operation.route_path, identifier)
        seen.add(identifier)
        params.append(QueryParam(param.name, normalized, identifier))
    return tuple(params)


def build_endpoints(operations: list[SelectedOperation]) -> list[SelectedEndpoint]:
    """Derive names for every operation. Colliding names are an error."""
    endpoints: list[SelectedEndpoint] = []
    owners: dict[str, str] = {}

    for operation in operations:
        name = build_function_name(operation.route_path, operation.operation_id)
        if name in owners:
            raise DuplicateFunctionNameError(name, [owners[name], operation.route_path])
        owners[name] = operation.route_path

        endpoint = SelectedEndpoint(
            function_name=name,
            event_type=operation.event_type,
            route_path=operation.route_path,
            http_method=operation.http_method,
            query_params=build_query_params(operation),
        )
        logger.debug(
            f"{operation.route_path} -> {name}"
            f"({', '.join(p.identifier for p in endpoint.query_params)})"
        )
        endpoints.append(endpoint)

    return endpoints


def build_context(
    operations: list[SelectedOperation],
    base_url_import: str,
    client_import: str,
) -> dict[str, Any]:
    """Build the full template context."""
    endpoints = build_endpoints(operations)
    return {
        "endpoints": endpoints,
        "endpoint_count": len(endpoints),
        "event_types": sorted({e.event_type for e in endpoints}),
        "base_url_import": base_url_import,
        "client_import": client_import,
    }
