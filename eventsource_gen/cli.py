"""CLI entry point for eventsource-gen."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import click
from loguru import logger

from .codegen import generate
from .config import DEFAULT_CONFIG_FILE, GeneratorConfig
from .context_builder import build_endpoints
from .errors import GeneratorError
from .loader import load_document
from .selector import select_endpoints


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO", format="{level}: {message}")


def _build_config(config_path: Path | None, overrides: dict[str, Any]) -> GeneratorConfig:
    """Merge the config file (if any) with command-line overrides."""
    data: dict[str, Any] = {}

    if config_path is None and Path(DEFAULT_CONFIG_FILE).is_file():
        config_path = Path(DEFAULT_CONFIG_FILE)
    if config_path is not None:
        file_config = GeneratorConfig.from_file(config_path)
        data = {
            "openApiSpecPath": file_config.openapi_spec_path,
            "outputPath": file_config.output_path,
            "baseUrlImport": file_config.base_url_import,
            "clientImport": file_config.client_import,
        }

    data.update({k: v for k, v in overrides.items() if v is not None})
    return GeneratorConfig.from_mapping(data)


config_option = click.option(
    "-c", "--config", "config_path", default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help=f"Config file (JSON or YAML). Defaults to ./{DEFAULT_CONFIG_FILE} if present.",
)
spec_option = click.option(
    "-s", "--spec", default=None, type=click.Path(path_type=Path),
    help="OpenAPI document to read.",
)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """eventsource-gen: typed EventSource clients from an annotated OpenAPI document."""
    _configure_logging(verbose)


@main.command(name="generate")
@config_option
@spec_option
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file path.")
@click.option("--base-url-import", default=None, help="Module path the baseUrl symbol is imported from.")
@click.option("--client-import", default=None, help="Module path the event types are imported from.")
def generate_cmd(
    config_path: Path | None,
    spec: Path | None,
    output: Path | None,
    base_url_import: str | None,
    client_import: str | None,
):
    """Generate the EventSource client module."""
    try:
        config = _build_config(config_path, {
            "openApiSpecPath": spec,
            "outputPath": output,
            "baseUrlImport": base_url_import,
            "clientImport": client_import,
        })
        result = generate(config)
    except GeneratorError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"Generated {result.output_path} ({result.endpoint_count} endpoints)")


@main.command(name="list")
@config_option
@spec_option
def list_cmd(config_path: Path | None, spec: Path | None):
    """List the event-source endpoints of the OpenAPI document."""
    try:
        if spec is None:
            spec = _build_config(config_path, {}).openapi_spec_path
        endpoints = build_endpoints(select_endpoints(load_document(spec)))
    except GeneratorError as exc:
        raise click.ClickException(str(exc)) from exc

    for endpoint in endpoints:
        click.echo(
            f"{endpoint.function_name}  {endpoint.http_method.upper()} {endpoint.route_path}"
            f"  {endpoint.event_type}"
        )
