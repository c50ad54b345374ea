"""Derive type declarations and type references for a feature.

Response side (schema always wins over example):
  - schema                 -> {F}Response, or {F}Data under an envelope wrapper
  - example, success+data  -> unwrapped; paginated payloads get an item type
  - other example          -> {F}Response, unwrapped
Variables side:
  - params schema          -> {F}Variables
  - params example         -> {F}Variables, with URL variables injected
  - nothing                -> void
"""

from __future__ import annotations

import logging
import re
from typing import Any

from .config import DEFAULT_CONFIG, GeneratorConfig
from .errors import InputParseError, SchemaSynthesisError
from .feature import Example, FeatureSpec, ModelResult, Schema
from .relaxed_json import parse_json
from .sample_parser import compile_sample
from .schema_parser import compile_schema, compile_schemas, parse_schema

logger = logging.getLogger(__name__)

# Matches both {name} and ${name} placeholders
URL_VAR_PATTERN = re.compile(r"(\$?)\{(\w+)\}")

NO_VARIABLES = "void"
ANY_VARIABLES = "any"


def extract_url_vars(api_url: str) -> list[str]:
    """Placeholder names in first-seen order, without duplicates."""
    names: list[str] = []
    for match in URL_VAR_PATTERN.finditer(api_url):
        if match.group(2) not in names:
            names.append(match.group(2))
    return names


def response_type_name(pascal_name: str, wrapper_args: str | None) -> str:
    """Name of the schema-derived response type."""
    return f"{pascal_name}Data" if wrapper_args else f"{pascal_name}Response"


def variables_type_name(pascal_name: str) -> str:
    return f"{pascal_name}Variables"


class _Response:
    def __init__(self, model: str, return_type: str, records_key: str = "data") -> None:
        self.model = model
        self.return_type = return_type
        self.records_key = records_key


def _build_response(spec: FeatureSpec, config: GeneratorConfig) -> _Response:
    pascal = spec.pascal_name
    skip = spec.skip_model_generation

    if isinstance(spec.response, Schema):
        name = response_type_name(pascal, spec.wrapper_args)
        if skip:
            return _Response("", name)
        try:
            return _Response(compile_schema(spec.response.text, name), name)
        except SchemaSynthesisError as exc:
            raise SchemaSynthesisError(
                f"Failed to generate response types from schema: {exc}", artifact="response",
            ) from exc

    if isinstance(spec.response, Example) and spec.response.text.strip():
        try:
            parsed = parse_json(spec.response.text)
        except InputParseError as exc:
            raise InputParseError(
                f"Failed to generate response types: {exc}",
                original_error=exc.original_error,
                repair_error=exc.repair_error,
            ) from exc
        return _response_from_example(parsed, pascal, skip, config)

    name = f"{pascal}Response"
    return _Response("" if skip else f"export type {name} = any;", name)


def _response_from_example(
    parsed: Any, pascal: str, skip: bool, config: GeneratorConfig,
) -> _Response:
    def declare(value: Any, name: str) -> str:
        return "" if skip else compile_sample(value, name)

    if isinstance(parsed, dict) and parsed.get("success") is True and "data" in parsed:
        payload = parsed["data"]
        paginated = isinstance(payload, dict) and all(
            marker in payload for marker in config.pagination_markers
        )
        if paginated:
            records_key = next(
                (k for k, v in payload.items() if isinstance(v, list) and v), None,
            )
            if records_key is not None:
                item_name = f"{pascal}Item"
                model = declare(payload[records_key][0], item_name)
                if records_key == "data":
                    return_type = f"{config.record_wrapper}<{item_name}[]>"
                else:
                    return_type = (
                        f"{config.custom_record_wrapper}<'{records_key}', {item_name}>"
                    )
                return _Response(model, return_type, records_key)

            name = f"{pascal}Data"
            return _Response(declare(payload, name), f"{config.response_wrapper}<{name}>")

        name = f"{pascal}Response"
        return _Response(declare(payload, name), f"{config.response_wrapper}<{name}>")

    name = f"{pascal}Response"
    return _Response(declare(parsed, name), name)


def _schema_properties(params_schema: str) -> list[str]:
    schema = parse_schema(params_schema, artifact="variables")
    properties = schema.get("properties")
    return list(properties) if isinstance(properties, dict) else []


def generate_models(spec: FeatureSpec, config: GeneratorConfig = DEFAULT_CONFIG) -> ModelResult:
    """Build the ModelResult of one feature."""
    response = _build_response(spec, config)

    url_vars = extract_url_vars(spec.api_url)
    variables_name = variables_type_name(spec.pascal_name)
    params_json: dict[str, Any] = {}
    schema_properties: list[str] = []
    variables_definition = ""

    if isinstance(spec.params, Schema):
        schema_properties = _schema_properties(spec.params.text)
        if not spec.skip_model_generation:
            try:
                variables_definition = compile_schema(spec.params.text, variables_name)
            except SchemaSynthesisError as exc:
                raise SchemaSynthesisError(
                    f"Failed to generate variables types from schema: {exc}",
                    artifact="variables",
                ) from exc
        variables_type = variables_name
    else:
        if isinstance(spec.params, Example) and spec.params.text.strip():
            try:
                parsed = parse_json(spec.params.text)
            except InputParseError as exc:
                raise InputParseError(
                    f"Failed to parse params JSON: {exc}",
                    original_error=exc.original_error,
                    repair_error=exc.repair_error,
                ) from exc
            if isinstance(parsed, list):
                parsed = parsed[0] if parsed else {}
            if not isinstance(parsed, dict):
                raise InputParseError(
                    f"Params example must be a JSON object, got {type(parsed).__name__}",
                )
            params_json = dict(parsed)

        for var in url_vars:
            if var not in params_json:
                params_json[var] = config.url_placeholder

        if params_json:
            if not spec.skip_model_generation:
                variables_definition = compile_sample(params_json, variables_name)
            variables_type = variables_name
        else:
            variables_type = NO_VARIABLES

    logger.debug(
        "Models for %s: returns %s, variables %s",
        spec.feature_name, response.return_type, variables_type,
    )
    return ModelResult(
        response_model=response.model,
        api_return_type=response.return_type,
        variables_definition=variables_definition,
        variables_type=variables_type,
        params_json=params_json,
        url_vars=url_vars,
        variables_interface_name=variables_name,
        schema_properties=schema_properties,
        records_key=response.records_key,
    )


def generate_batch_models(
    items: list[tuple[str, str | None, str | None, str | None]],
) -> tuple[str, list[str]]:
    """Compile the schemas of several features in one shared pass.

    Each item is (feature name, response schema, params schema, wrapper).
    Returns the declaration block and the root type names it declares.
    """
    sources: list[tuple[str, str]] = []
    for feature_name, response_schema, params_schema, wrapper_args in items:
        pascal = feature_name[:1].upper() + feature_name[1:]
        if response_schema:
            sources.append((response_type_name(pascal, wrapper_args), response_schema))
        if params_schema:
            sources.append((variables_type_name(pascal), params_schema))

    if not sources:
        return "", []
    return compile_schemas(sources), [name for name, _ in sources]

