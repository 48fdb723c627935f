"""Generator configuration.

Config files use the camelCase keys below (snake_case is accepted too)::

    openApiSpecPath: openapi.json
    outputPath: src/generated/event-sources.ts
    baseUrlImport: ./utils/baseUrl
    clientImport: ./generated-client

Relative paths are resolved against the config file's directory.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ConfigError, GeneratorIOError

DEFAULT_BASE_URL_IMPORT = "./utils/baseUrl"
DEFAULT_CLIENT_IMPORT = "./generated-client"
DEFAULT_CONFIG_FILE = "eventsource-gen.yaml"

_KEYS: dict[str, str] = {
    "openApiSpecPath": "openapi_spec_path",
    "outputPath": "output_path",
    "baseUrlImport": "base_url_import",
    "clientImport": "client_import",
}


@dataclass(frozen=True)
class GeneratorConfig:
    openapi_spec_path: Path
    output_path: Path
    base_url_import: str = DEFAULT_BASE_URL_IMPORT
    client_import: str = DEFAULT_CLIENT_IMPORT

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, Any], base_dir: Path | None = None,
    ) -> "GeneratorConfig":
        """Build a config from camelCase (or snake_case) keys."""
        values: dict[str, Any] = {}
        for key, value in data.items():
            field_name = _KEYS.get(key, key)
            if field_name not in _KEYS.values():
                raise ConfigError(f"Unknown configuration option: {key}")
            if value is None:
                continue
            if not isinstance(value, (str, Path)) or not str(value):
                raise ConfigError(f"Configuration option {key} must be a non-empty string")
            values[field_name] = value

        for required in ("openapi_spec_path", "output_path"):
            if required not in values:
                camel = next(k for k, v in _KEYS.items() if v == required)
                raise ConfigError(f"Missing required configuration option: {camel}")

        for path_field in ("openapi_spec_path", "output_path"):
            path = Path(values[path_field])
            if base_dir is not None and not path.is_absolute():
                path = base_dir / path
            values[path_field] = path

        return cls(**values)

    @classmethod
    def from_file(cls, path: Path) -> "GeneratorConfig":
        """Load a JSON or YAML config file."""
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise GeneratorIOError("Cannot read configuration file", path) from exc
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"{path}: not well-formed JSON/YAML ({exc})") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: configuration must be a mapping")
        return cls.from_mapping(data, base_dir=Path(path).parent)
