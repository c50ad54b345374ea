"""Build the Jinja2 template context for one feature.

Collects everything the accessor, cache-key and hook templates need:
generated identifiers, the normalized URL, collision-free variable
bindings, the body/query split and the envelope handling flags.
"""

from __future__ import annotations

from typing import Any

from .config import DEFAULT_CONFIG, GeneratorConfig
from .feature import FeatureSpec, HookKind, ModelResult, Schema
from .model_builder import URL_VAR_PATTERN
from .naming import VarBinding, is_identifier, quote, unique_var_mapping

HOOK_OPTIONS_TYPE = "options?: { enabled?: boolean }"


def normalize_url(api_url: str, bindings: dict[str, str]) -> str:
    """Rewrite {var} and ${var} placeholders into ${safeName} interpolations."""
    return URL_VAR_PATTERN.sub(
        lambda m: "${" + bindings.get(m.group(2), m.group(2)) + "}", api_url,
    )


def collect_variables(spec: FeatureSpec, model: ModelResult) -> list[str]:
    """URL variables first, then params keys or schema properties, deduplicated."""
    if isinstance(spec.params, Schema):
        extra = model.schema_properties
    else:
        extra = list(model.params_json)
    names = list(model.url_vars)
    for name in extra:
        if name not in names:
            names.append(name)
    return names


def _object_literal(bindings: list[VarBinding]) -> str:
    if not bindings:
        return "{}"
    return "{ " + ", ".join(b.pattern() for b in bindings) + " }"


def _paged_literal(bindings: list[VarBinding], page_param: str) -> str:
    entries = []
    for b in bindings:
        if b.key == page_param:
            key = quote(b.key) if b.renamed else b.key
            entries.append(f"{key}: {b.safe} ?? pageParam ?? 1")
        else:
            entries.append(b.pattern())
    return "{ " + ", ".join(entries) + " }"


def _member_access(key: str) -> str:
    """Optional-chained access to a property of `one`."""
    if is_identifier(key):
        return f"?.{key}"
    return f"?.[{quote(key)}]"


def _direct_signature(model: ModelResult, mapping: list[VarBinding]) -> str:
    """Parameter list of a direct-call accessor."""
    if model.has_variables and mapping:
        return f"{_object_literal(mapping)}: {model.variables_type}"
    return ""


def build_context(
    spec: FeatureSpec,
    model: ModelResult,
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> dict[str, Any]:
    """Assemble the template context for all fragments of a feature."""
    all_vars = collect_variables(spec, model)
    mapping = unique_var_mapping(all_vars)
    safe_names = {b.key: b.safe for b in mapping}
    body_bindings = [b for b in mapping if b.key not in model.url_vars]

    has_variables = isinstance(spec.params, Schema) or bool(model.params_json)
    variables_pattern = ", ".join(b.pattern() for b in mapping)

    if has_variables:
        hook_props_type = f"{model.variables_interface_name} & {{ {HOOK_OPTIONS_TYPE} }}"
    else:
        hook_props_type = f"{{ {HOOK_OPTIONS_TYPE} }}"

    keys_object = f"scope: '{spec.camel_name}'"
    if variables_pattern:
        keys_object += f", {variables_pattern}"

    response_type = model.api_return_type
    if spec.wrapper_args:
        response_type = f"{spec.wrapper_args}<{model.api_return_type}>"

    has_page_param = any(b.key == config.page_param for b in body_bindings)
    data = _object_literal(body_bindings)
    if spec.hook_kind is HookKind.INFINITE_QUERY and has_page_param:
        data = _paged_literal(body_bindings, config.page_param)

    return {
        "feature_name": spec.feature_name,
        "camel_name": spec.camel_name,
        "pascal_name": spec.pascal_name,
        "function_name": spec.camel_name,
        "query_key_name": spec.query_key_name,
        "hook_name": spec.hook_name,
        "hook_kind": spec.hook_kind.value,
        "method": spec.method.client_method,
        "sends_query": spec.method.sends_query,
        "url": normalize_url(spec.api_url, safe_names),
        "client_accessor": config.client_accessor,
        "return_type": model.api_return_type,
        "response_type": response_type,
        "unwrap": bool(spec.wrapper_args),
        "destructure": variables_pattern,
        "has_body": bool(body_bindings),
        "data": data,
        "direct_signature": _direct_signature(model, mapping),
        "has_variables": has_variables,
        "variables_interface_name": model.variables_interface_name,
        "variables_type": model.variables_type,
        "hook_destructure": "{ " + (f"{variables_pattern}, " if variables_pattern else "") + "options }",
        "hook_props_type": hook_props_type,
        "keys_object": keys_object,
        "records_access": _member_access(model.records_key),
        "infinite": spec.hook_kind is HookKind.INFINITE_QUERY,
        "pagination_markers": list(config.pagination_markers),
        "invalidate_hook": config.invalidate_hook,
        "error_notifier": config.error_notifier,
    }
