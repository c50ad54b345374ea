"""Generator settings.

Every name the generated TypeScript relies on (HTTP client accessor,
envelope wrappers, project helpers, library import table) lives here so
a project with different conventions can override it from a YAML file:

    # hookgen.yaml
    client_accessor: getHttpClient
    gateway_prefix: /gateway
    project_symbols: [getHttpClient, WithResponse]
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError

CONFIG_FILENAME = "hookgen.yaml"


@dataclass(frozen=True)
class GeneratorConfig:
    """Names and tables used while emitting and importing fragments."""

    # Generated accessors call `<client_accessor>().get(...)`
    client_accessor: str = "getInstance"

    # Envelope wrappers
    response_wrapper: str = "WithResponse"
    record_wrapper: str = "WithRecordResponse"
    custom_record_wrapper: str = "WithCustomRecordResponse"

    # Fields marking a paginated envelope payload
    pagination_markers: tuple[str, ...] = ("totalRecords", "filteredRecords")

    # Variable overridden by the page parameter in paginated accessors
    page_param: str = "pageNo"

    # Example value injected for path variables missing from params
    url_placeholder: Any = 123

    # Stripped from OpenAPI paths before emission
    gateway_prefix: str = "/api"

    # Hooks called by generated mutations
    invalidate_hook: str = "useInvalidateCommonQueries"
    error_notifier: str = "showSnackbarOnApiError"

    # External symbol -> providing module
    library_imports: dict[str, str] = field(
        default_factory=lambda: {
            "useQuery": "@tanstack/react-query",
            "useMutation": "@tanstack/react-query",
            "useInfiniteQuery": "@tanstack/react-query",
            "UseQueryOptions": "@tanstack/react-query",
            "QueryFunctionContext": "@tanstack/react-query",
            "AxiosResponse": "axios",
            "AxiosError": "axios",
            "axios": "axios",
        }
    )

    # Symbols imported as the module's default export
    default_imports: tuple[str, ...] = ("axios",)

    # Symbols looked up in the workspace symbol index
    project_symbols: tuple[str, ...] = (
        "getInstance",
        "WithResponse",
        "WithCustomRecordResponse",
        "WithRecordResponse",
        "useInvalidateCommonQueries",
        "showSnackbarOnApiError",
    )

    # Symbol kinds accepted from the index
    symbol_kinds: tuple[str, ...] = (
        "function",
        "constant",
        "interface",
        "variable",
        "class",
    )

    # Directories whose declarations are never imported from
    excluded_dirs: tuple[str, ...] = ("node_modules",)


DEFAULT_CONFIG = GeneratorConfig()

_FIELD_NAMES = {f.name for f in dataclasses.fields(GeneratorConfig)}


def load_config(path: Path) -> GeneratorConfig:
    """Load settings from a YAML file, falling back to defaults per key."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"Cannot read config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in config {path}: {exc}") from exc

    if data is None:
        return DEFAULT_CONFIG
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")

    unknown = sorted(set(data) - _FIELD_NAMES)
    if unknown:
        raise ConfigError(f"Unknown config keys in {path}: {', '.join(unknown)}")

    overrides = {
        key: tuple(value) if isinstance(value, list) else value
        for key, value in data.items()
    }
    return dataclasses.replace(DEFAULT_CONFIG, **overrides)


def find_config(directory: Path) -> GeneratorConfig:
    """Load hookgen.yaml from a directory if present, else the defaults."""
    candidate = directory / CONFIG_FILENAME
    if candidate.is_file():
        return load_config(candidate)
    return DEFAULT_CONFIG
