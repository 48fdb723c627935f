"""Render the template and write the generated output.

Takes the context from context_builder and produces the TypeScript
client module. Nothing is written unless rendering succeeds, and the
destination is replaced atomically.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jinja2
from loguru import logger

from .config import GeneratorConfig
from .context_builder import build_context
from .errors import GeneratorError, GeneratorIOError
from .loader import load_document
from .selector import select_endpoints

TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "eventsource.ts.j2"


@dataclass(frozen=True)
class GenerationResult:
    """Where generate() wrote the module and which functions it contains."""

    output_path: Path
    function_names: tuple[str, ...]

    @property
    def endpoint_count(self) -> int:
        return len(self.function_names)


def ts_string(value: str) -> str:
    """Escape a value for a single-quoted TypeScript string literal."""
    return str(value).replace("\\", "\\\\").replace("'", "\\'")


def ts_template(value: str) -> str:
    """Escape a value for a TypeScript template literal."""
    return str(value).replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


def _environment() -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )
    env.filters["ts_string"] = ts_string
    env.filters["ts_template"] = ts_template
    return env


def render(context: dict[str, Any]) -> str:
    """Render the client module from a build_context() result."""
    template = _environment().get_template(TEMPLATE_NAME)
    try:
        return template.render(**context)
    except jinja2.TemplateError as exc:
        raise GeneratorError(f"Rendering {TEMPLATE_NAME} failed: {exc}") from exc


def write_output(text: str, output_path: Path) -> Path:
    """Write text to output_path via a temporary file and atomic replace.

    On failure the previous content of output_path is left as it was.
    """
    output_path = Path(output_path)
    tmp_name: str | None = None
    replaced = False
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            newline="\n",
            dir=output_path.parent,
            prefix=f".{output_path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(text)
        os.replace(tmp_name, output_path)
        replaced = True
    except (OSError, UnicodeError) as exc:
        raise GeneratorIOError("Cannot write generated output", output_path) from exc
    finally:
        if not replaced and tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
    return output_path


def generate(config: GeneratorConfig) -> GenerationResult:
    """Run the whole pipeline: load, select, build, render, write."""
    operations = load_document(config.openapi_spec_path)
    selected = select_endpoints(operations)
    context = build_context(selected, config.base_url_import, config.client_import)
    output = render(context)

    write_output(output, config.output_path)
    logger.info(f"Wrote {config.output_path} ({context['endpoint_count']} endpoints)")

    return GenerationResult(
        output_path=Path(config.output_path),
        function_names=tuple(e.function_name for e in context["endpoints"]),
    )
