"""Command-line shell over the generator.

    hookgen feature getUser --url /v1/user --response '{"success": true, "data": {"id": 1}}'
    hookgen operations openapi.yaml
    hookgen openapi openapi.yaml --select "GET /api/users" --api-file src/api/users.ts
"""

from __future__ import annotations

import functools
import logging
import re
from pathlib import Path
from typing import Any, Callable

import click

from .batch import generate_batch, select_operations
from .config import GeneratorConfig, find_config, load_config
from .errors import HookgenError
from .feature import Example, FeatureSpec, HookKind, HttpMethod, Schema
from .imports import WorkspaceSymbolIndex
from .loader import load_document
from .operations import get_operations
from .pipeline import generate_files
from .writer import append_fragments

_DECLARED_NAME = re.compile(r"^export\s+(?:interface|type)\s+([A-Za-z_$][\w$]*)", re.M)

_FRAGMENT_OPTIONS = {
    "model": "model_file",
    "api": "api_file",
    "query_key": "key_file",
    "hook": "hook_file",
}

# Hook names (useInfiniteQuery) and enum names (infinite_query)
_HOOK_CHOICES = list(dict.fromkeys(
    [kind.value for kind in HookKind] + [kind.name.lower() for kind in HookKind]
))


def _output_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Destination options shared by the generating commands."""
    file_type = click.Path(dir_okay=False, path_type=Path)
    options = [
        click.option("--model-file", type=file_type, help="Append type declarations to this file."),
        click.option("--api-file", type=file_type, help="Append accessor functions to this file."),
        click.option("--key-file", type=file_type, help="Append cache-key factories to this file."),
        click.option("--hook-file", type=file_type, help="Append hooks to this file."),
        click.option(
            "--workspace", type=click.Path(file_okay=False, path_type=Path), default=Path("."),
            show_default=True, help="Root scanned for project symbols to import.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Report generator errors as one line instead of a traceback."""
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except HookgenError as exc:
            raise click.ClickException(str(exc)) from exc
    return wrapper


def _emit(
    fragments: dict[str, str],
    options: dict[str, Any],
    config: GeneratorConfig,
) -> None:
    destinations = {
        name: options[option] for name, option in _FRAGMENT_OPTIONS.items() if options.get(option)
    }
    if not destinations:
        for name, text in fragments.items():
            if text:
                click.echo(f"// --- {name} ---")
                click.echo(text)
                click.echo()
        return

    known_locations: dict[str, str] = {}
    if "model" in destinations:
        for name in _DECLARED_NAME.findall(fragments.get("model", "")):
            known_locations[name] = str(destinations["model"])

    index = WorkspaceSymbolIndex(options["workspace"], skip_dirs=(*config.excluded_dirs, ".git"))
    written, errors = append_fragments(fragments, destinations, index, known_locations, config)
    for name in written:
        click.echo(f"Appended {name} to {destinations[name]}")
    for name, exc in errors.items():
        click.echo(f"Failed to append {name}: {exc}", err=True)
    if errors:
        raise click.exceptions.Exit(1)


def _payload(text: str | None, schema_file: Path | None, what: str) -> Example | Schema | None:
    if text is not None and schema_file is not None:
        raise click.UsageError(f"Give either an example or a schema for the {what}, not both.")
    if schema_file is not None:
        return Schema(schema_file.read_text(encoding="utf-8"))
    if text is not None:
        return Example(text)
    return None


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log pipeline details.")
@click.option(
    "--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML settings file (default: ./hookgen.yaml when present).",
)
@click.pass_context
@_handle_errors
def main(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """Generate React Query hooks, accessors and types for HTTP endpoints."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)-8s | %(name)s | %(message)s",
    )
    ctx.obj = load_config(config_path) if config_path else find_config(Path.cwd())


@main.command()
@click.argument("feature_name")
@click.option("--url", "api_url", required=True, help="Endpoint URL with {var} or ${var} placeholders.")
@click.option(
    "--method", default="GET", show_default=True,
    type=click.Choice([m.value for m in HttpMethod], case_sensitive=False),
)
@click.option(
    "--hook", "hook_type", default=HookKind.QUERY.value, show_default=True,
    type=click.Choice(_HOOK_CHOICES), help="Interaction kind to generate.",
)
@click.option("--response", help="Example JSON response.")
@click.option("--response-schema", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="JSON Schema file for the response.")
@click.option("--params", help="Example JSON params or payload.")
@click.option("--params-schema", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="JSON Schema file for the params.")
@click.option("--wrapper", help="Envelope wrapper type applied around the response type.")
@_output_options
@click.pass_obj
@_handle_errors
def feature(config: GeneratorConfig, **options: Any) -> None:
    """Generate the fragments of a single feature."""
    spec = FeatureSpec(
        feature_name=options["feature_name"],
        method=HttpMethod.parse(options["method"]),
        api_url=options["api_url"],
        hook_kind=HookKind.parse(options["hook_type"]),
        response=_payload(options["response"], options["response_schema"], "response"),
        params=_payload(options["params"], options["params_schema"], "params"),
        wrapper_args=options["wrapper"],
    )
    generated = generate_files(spec, config)
    _emit(generated.fragments(), options, config)


@main.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_handle_errors
def operations(document: Path) -> None:
    """List the operations of an OpenAPI document."""
    for op in get_operations(load_document(document)):
        if op.description:
            click.echo(f"{op.label}\t{op.description}")
        else:
            click.echo(op.label)


@main.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--select", "labels", multiple=True,
    help='Operation to generate, e.g. "GET /api/users". Repeatable; defaults to all.',
)
@_output_options
@click.pass_obj
@_handle_errors
def openapi(config: GeneratorConfig, document: Path, labels: tuple[str, ...], **options: Any) -> None:
    """Generate fragments for operations of an OpenAPI document."""
    spec = load_document(document)
    selected = select_operations(spec, list(labels)) if labels else get_operations(spec)
    if not selected:
        raise click.UsageError("The document has no operations to generate.")
    result = generate_batch(selected, spec, config)
    _emit(result.fragments(), options, config)
