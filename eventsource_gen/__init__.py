"""Generate typed EventSource clients from annotated OpenAPI documents."""

from .annotators import (
    Annotator,
    DocumentAnnotator,
    FastAPIRouteAnnotator,
    OperationIdAnnotator,
    write_extension_pair,
)
from .codegen import GenerationResult, generate
from .config import GeneratorConfig
from .errors import (
    ConfigError,
    DuplicateFunctionNameError,
    DuplicateParameterError,
    GeneratorError,
    GeneratorIOError,
    InvalidEventTypeError,
    MissingEventTypeError,
    ParseError,
)
from .markers import Marker, MarkerConflictError, MarkerRegistry

__all__ = [
    "Annotator",
    "ConfigError",
    "DocumentAnnotator",
    "DuplicateFunctionNameError",
    "DuplicateParameterError",
    "FastAPIRouteAnnotator",
    "GenerationResult",
    "GeneratorConfig",
    "GeneratorError",
    "GeneratorIOError",
    "InvalidEventTypeError",
    "Marker",
    "MarkerConflictError",
    "MarkerRegistry",
    "MissingEventTypeError",
    "OperationIdAnnotator",
    "ParseError",
    "generate",
    "write_extension_pair",
]
