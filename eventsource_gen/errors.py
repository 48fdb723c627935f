"""Error types raised by the generator.

Every error is fatal to the current run. Each carries enough context
(route path, method, derived name) to locate the problem without opening
the OpenAPI document.
"""

from __future__ import annotations

from pathlib import Path


class GeneratorError(Exception):
    """Base class for all generator failures."""


class ConfigError(GeneratorError):
    """Invalid or incomplete generator configuration."""


class ParseError(GeneratorError):
    """The document is not well-formed or lacks the OpenAPI top-level shape."""

    def __init__(self, message: str, source: str | Path | None = None) -> None:
        self.source = str(source) if source is not None else None
        if self.source:
            message = f"{self.source}: {message}"
        super().__init__(message)


class MissingEventTypeError(GeneratorError):
    """An operation has x-event-source set but no usable x-event-type."""

    def __init__(self, path: str, method: str) -> None:
        self.path = path
        self.method = method
        super().__init__(
            f"{method.upper()} {path}: x-event-source is true but x-event-type"
            " is missing or empty"
        )


class InvalidEventTypeError(GeneratorError):
    """x-event-type is not a plain identifier that can be imported by name."""

    def __init__(self, path: str, method: str, event_type: str) -> None:
        self.path = path
        self.method = method
        self.event_type = event_type
        super().__init__(
            f"{method.upper()} {path}: x-event-type {event_type!r} is not a plain"
            " type name"
        )


class DuplicateFunctionNameError(GeneratorError):
    """Two selected endpoints derive the same function name."""

    def __init__(self, function_name: str, paths: list[str]) -> None:
        self.function_name = function_name
        self.paths = list(paths)
        super().__init__(
            f"{function_name} is derived by more than one endpoint: "
            + ", ".join(self.paths)
            + " (set a distinct operationId on one of them)"
        )


class DuplicateParameterError(GeneratorError):
    """Two query parameters of one operation normalize to the same identifier."""

    def __init__(self, path: str, identifier: str) -> None:
        self.path = path
        self.identifier = identifier
        super().__init__(
            f"{path}: more than one query parameter normalizes to {identifier!r}"
        )


class GeneratorIOError(GeneratorError):
    """Reading the document or writing the output failed."""

    def __init__(self, message: str, path: str | Path) -> None:
        self.path = str(path)
        super().__init__(f"{message}: {self.path}")
