"""Turn OpenAPI operations into feature inputs.

Handles:
- Operation listing in document order (five HTTP methods only)
- Path-level parameters merged under operation-level ones
- OpenAPI 3 requestBody and Swagger 2 `in: body` parameters
- Success response selection (lowest 2xx, JSON content preferred)
- success/data envelope unwrapping and pagination detection
- Synthetic titles so nested declarations get deterministic names
- Feature naming from operationId or path
"""

from __future__ import annotations

import copy
import json
import logging
from typing import Any

from .config import DEFAULT_CONFIG, GeneratorConfig
from .errors import SchemaSynthesisError
from .feature import HttpMethod, NormalizedOperation, OperationDescriptor
from .loader import get_paths, get_shared_schemas
from .model_builder import extract_url_vars
from .naming import feature_name_from_path, pascal_case, sanitize_feature_name
from .schema_parser import resolve_ref

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "post", "put", "delete", "patch")

# Path-item keys that are not operations
_PATH_ITEM_FIELDS = {"parameters", "summary", "description", "servers", "$ref"}

JSON_SCHEMA_DRAFT = "http://json-schema.org/draft-07/schema#"


def _resolve(document: dict[str, Any], node: Any) -> Any:
    """Follow a $ref if the node is one; unresolvable refs are returned as-is."""
    if isinstance(node, dict) and "$ref" in node:
        try:
            return resolve_ref(document, node["$ref"])
        except SchemaSynthesisError:
            logger.warning("Cannot resolve %s", node["$ref"])
    return node


def _pick_content_schema(content: dict[str, Any]) -> dict[str, Any] | None:
    """Schema of the first JSON content type, else of the first one."""
    if not content:
        return None
    content_type = next((ct for ct in content if "json" in ct), next(iter(content)))
    media = content.get(content_type) or {}
    return media.get("schema")


def _merge_parameters(
    document: dict[str, Any], shared: list[Any], own: list[Any],
) -> list[dict[str, Any]]:
    """Path-level parameters overridden by operation-level ones (name + location)."""
    merged: dict[tuple[str, str], dict[str, Any]] = {}
    for raw in [*shared, *own]:
        param = _resolve(document, raw)
        if not isinstance(param, dict) or "name" not in param:
            continue
        merged[(param["name"], param.get("in", "query"))] = param
    return list(merged.values())


def get_operations(document: dict[str, Any]) -> list[OperationDescriptor]:
    """List every operation of a document in declaration order."""
    operations: list[OperationDescriptor] = []

    for path, path_item in get_paths(document).items():
        if not isinstance(path_item, dict):
            logger.warning("Skipping path %s: not a path item", path)
            continue
        shared = path_item.get("parameters") or []

        for method, operation in path_item.items():
            if method.lower() not in HTTP_METHODS:
                if method not in _PATH_ITEM_FIELDS:
                    logger.warning("Skipping unsupported method %s on %s", method, path)
                continue
            if not isinstance(operation, dict):
                continue

            parameters = _merge_parameters(document, shared, operation.get("parameters") or [])
            request_body = None
            body = _resolve(document, operation.get("requestBody"))
            if isinstance(body, dict):
                request_body = _pick_content_schema(body.get("content") or {})
            for param in parameters:
                if param.get("in") == "body" and request_body is None:
                    request_body = param.get("schema")

            responses: dict[str, dict[str, Any] | None] = {}
            for code, response in (operation.get("responses") or {}).items():
                response = _resolve(document, response)
                if not isinstance(response, dict):
                    responses[str(code)] = None
                elif "content" in response:
                    responses[str(code)] = _pick_content_schema(response["content"] or {})
                else:
                    responses[str(code)] = response.get("schema")

            operations.append(OperationDescriptor(
                path=path,
                method=method.lower(),
                operation_id=operation.get("operationId"),
                summary=operation.get("summary", ""),
                parameters=[p for p in parameters if p.get("in") != "body"],
                request_body=request_body,
                responses=responses,
            ))

    return operations


def enrich_schema_titles(
    schema: Any, base_name: str, visited: set[int] | None = None,
) -> None:
    """Set titles recursively so nested types are named after their position.

    Objects under a property get {Base}{Property}, array items
    {Base}{Property}Item, and map values {Base}Value. Mutates `schema`.
    """
    if not isinstance(schema, dict):
        return
    visited = set() if visited is None else visited
    if id(schema) in visited:
        return
    visited.add(id(schema))

    schema["title"] = base_name

    properties = schema.get("properties")
    if isinstance(properties, dict):
        for key, prop in properties.items():
            if not isinstance(prop, dict):
                continue
            if prop.get("properties") or prop.get("additionalProperties"):
                enrich_schema_titles(prop, f"{base_name}{pascal_case(key)}", visited)
            elif isinstance(prop.get("items"), dict):
                enrich_schema_titles(prop["items"], f"{base_name}{pascal_case(key)}Item", visited)

    additional = schema.get("additionalProperties")
    if isinstance(additional, dict):
        enrich_schema_titles(additional, f"{base_name}Value", visited)


def operation_feature_name(operation: OperationDescriptor) -> str:
    """operationId, else method + last non-parameter path segment; sanitized."""
    name = operation.operation_id or feature_name_from_path(operation.method, operation.path)
    return sanitize_feature_name(name)


def success_schema(operation: OperationDescriptor) -> dict[str, Any] | None:
    """Schema of the lowest 2xx response."""
    codes = sorted(
        (code for code in operation.responses if code.startswith("2")),
        key=lambda code: (not code.isdigit(), code),
    )
    if not codes:
        return None
    return operation.responses[codes[0]]


def _serialize(schema: dict[str, Any], shared: dict[str, Any], what: str) -> str | None:
    try:
        return json.dumps({**schema, **shared})
    except (TypeError, ValueError) as exc:
        logger.warning("Failed to serialize %s schema: %s", what, exc)
        return None


def _is_object_schema(schema: Any) -> bool:
    return isinstance(schema, dict) and (
        schema.get("type") == "object" or isinstance(schema.get("properties"), dict)
    )


def _params_schema(
    operation: OperationDescriptor, document: dict[str, Any], feature_name: str,
) -> dict[str, Any] | None:
    properties: dict[str, Any] = {}
    required: list[str] = []

    for param in operation.parameters:
        if param.get("in") in ("query", "path"):
            properties[param["name"]] = copy.deepcopy(param.get("schema") or {})
            if param.get("required"):
                required.append(param["name"])

    # Path template variables the document never declared
    for var in extract_url_vars(operation.path):
        if var not in properties:
            properties[var] = {"type": "string"}
            required.append(var)

    if operation.request_body is not None:
        body = copy.deepcopy(operation.request_body)
        resolved = _resolve(document, body)
        if _is_object_schema(resolved) and resolved.get("properties"):
            properties.update(copy.deepcopy(resolved["properties"]))
            required.extend(resolved.get("required") or [])
        else:
            properties["body"] = body
            required.append("body")

    if not properties:
        return None

    schema = {
        "$schema": JSON_SCHEMA_DRAFT,
        "type": "object",
        "properties": properties,
        "required": list(dict.fromkeys(required)),
    }
    enrich_schema_titles(schema, f"{pascal_case(feature_name)}Variables")
    return schema


def normalize_operation(
    operation: OperationDescriptor,
    document: dict[str, Any],
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> NormalizedOperation:
    """Reduce one operation to feature inputs. The document is not mutated."""
    feature_name = operation_feature_name(operation)
    pascal = pascal_case(feature_name)
    shared = get_shared_schemas(document)

    response_schema: str | None = None
    wrapper_args: str | None = None

    schema = success_schema(operation)
    if isinstance(schema, dict):
        envelope = copy.deepcopy(_resolve(document, schema))
        schema = copy.deepcopy(schema)
        properties = envelope.get("properties") if isinstance(envelope, dict) else None
        properties = properties if isinstance(properties, dict) else {}
        if _is_object_schema(envelope) and "success" in properties and "data" in properties:
            inner = properties["data"] if isinstance(properties["data"], dict) else {}
            inner_properties = _resolve(document, inner)
            inner_properties = (
                inner_properties.get("properties") or {} if isinstance(inner_properties, dict) else {}
            )
            markers = config.pagination_markers
            paginated = any(m in properties for m in markers) or all(
                m in inner_properties for m in markers
            )
            wrapper_args = config.record_wrapper if paginated else config.response_wrapper
            enrich_schema_titles(inner, f"{pascal}Data")
            response_schema = _serialize(inner, shared, "response")
        else:
            enrich_schema_titles(schema, f"{pascal}Response")
            response_schema = _serialize(schema, shared, "response")

    params = _params_schema(operation, document, feature_name)
    params_schema = _serialize(params, shared, "params") if params else None

    logger.debug("Normalized %s as %s (wrapper=%s)", operation.label, feature_name, wrapper_args)
    return NormalizedOperation(
        feature_name=feature_name,
        method=HttpMethod.parse(operation.method),
        path=operation.path,
        response_schema=response_schema,
        params_schema=params_schema,
        wrapper_args=wrapper_args,
    )
