"""Compile JSON Schema documents into TypeScript declarations.

Handles:
- Primitive types, type lists and `nullable`
- enum / const (literal unions)
- Objects with properties/required, and additionalProperties maps
- Arrays (single item schema or tuple lists)
- allOf composition (merged object), oneOf/anyOf (unions)
- Local $ref pointers (#/components/schemas/..., #/definitions/...),
  declared once under the last pointer segment, recursion-safe
- `title` naming nested objects
- Several roots sharing one namespace (batch compilation)
"""

from __future__ import annotations

import json
import logging
from typing import Any

from .declarations import (
    INDEX_SIGNATURE_ANY,
    Declaration,
    DeclarationSet,
    Member,
    array_of,
    index_signature,
    union,
)
from .errors import SchemaSynthesisError
from .naming import type_name

logger = logging.getLogger(__name__)

_OBJECT_KEYWORDS = ("properties", "additionalProperties", "required")


def resolve_ref(document: dict[str, Any], ref: str) -> Any:
    """Resolve a local JSON pointer such as #/components/schemas/User."""
    if not ref.startswith("#"):
        raise SchemaSynthesisError(f"Unsupported external reference: {ref}")
    node: Any = document
    for raw in ref[1:].lstrip("/").split("/"):
        if not raw:
            continue
        part = raw.replace("~1", "/").replace("~0", "~")
        if isinstance(node, dict) and part in node:
            node = node[part]
        elif isinstance(node, list) and part.isdigit() and int(part) < len(node):
            node = node[int(part)]
        else:
            raise SchemaSynthesisError(f"Unresolved reference: {ref}")
    return node


def _literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    return "any"


def parse_schema(text: str, artifact: str | None = None) -> dict[str, Any]:
    """Parse schema text, raising SchemaSynthesisError when it is not an object."""
    try:
        schema = json.loads(text)
    except ValueError as exc:
        raise SchemaSynthesisError(f"Malformed schema: {exc}", artifact=artifact) from exc
    if not isinstance(schema, dict):
        raise SchemaSynthesisError(
            f"Schema must be a JSON object, got {type(schema).__name__}", artifact=artifact,
        )
    return schema


class SchemaCompiler:
    """Compile schemas into declarations of one DeclarationSet."""

    def __init__(self, declarations: DeclarationSet | None = None) -> None:
        self.declarations = declarations or DeclarationSet()
        self._refs: dict[str, str] = {}
        # id(node) -> (node, name); holding the node keeps its id from being reused
        self._inline: dict[int, tuple[dict[str, Any], str]] = {}

    def compile_root(self, document: dict[str, Any], name: str) -> None:
        """Declare an already reserved `name` for a root schema."""
        if "$ref" in document:
            self.declarations.define(
                Declaration(name, alias=self._ref(document["$ref"], document)),
            )
            return
        merged = self._merge_all_of(document, document)
        if merged.get("properties"):
            self._inline[id(document)] = (document, name)
            self._declare_object(merged, document, name)
            return
        alias = self._type_of(document, document, name)
        self.declarations.define(Declaration(name, alias=alias))

    def _type_of(self, schema: Any, document: dict[str, Any], hint: str) -> str:
        if schema is True or schema == {}:
            return "any"
        if schema is False:
            return "never"
        if not isinstance(schema, dict):
            raise SchemaSynthesisError(f"Invalid schema node at {hint}: {schema!r}")
        if "$ref" in schema:
            expr = self._ref(schema["$ref"], document)
        else:
            expr = self._base_type(schema, document, hint)
        if schema.get("nullable") is True:
            expr = union([expr, "null"])
        return expr

    def _base_type(self, schema: dict[str, Any], document: dict[str, Any], hint: str) -> str:
        if "const" in schema:
            return _literal(schema["const"])
        if "enum" in schema:
            return union([_literal(v) for v in schema["enum"]])
        if "allOf" in schema:
            return self._object_type(schema, document, hint)
        for key in ("oneOf", "anyOf"):
            if key in schema:
                return union([
                    self._type_of(sub, document, f"{hint}Option{i}")
                    for i, sub in enumerate(schema[key], start=1)
                ])

        schema_type = schema.get("type")
        if isinstance(schema_type, list):
            scalar = {k: v for k, v in schema.items() if k not in _OBJECT_KEYWORDS}
            return union([
                self._object_type(schema, document, hint) if t == "object"
                else self._base_type({**scalar, "type": t}, document, hint)
                for t in schema_type
            ])
        if schema_type == "string":
            return "string"
        if schema_type in ("integer", "number"):
            return "number"
        if schema_type == "boolean":
            return "boolean"
        if schema_type == "null":
            return "null"
        if schema_type == "array" or "items" in schema:
            items = schema.get("items")
            if items is None:
                return "any[]"
            if isinstance(items, list):
                return array_of(union([
                    self._type_of(sub, document, f"{hint}Item") for sub in items
                ]))
            return array_of(self._type_of(items, document, f"{hint}Item"))
        if schema_type == "object" or "properties" in schema or "additionalProperties" in schema:
            return self._object_type(schema, document, hint)
        return "any"

    def _object_type(self, schema: dict[str, Any], document: dict[str, Any], hint: str) -> str:
        key = id(schema)
        if key in self._inline:
            return self._inline[key][1]

        merged = self._merge_all_of(schema, document)
        if not merged.get("properties"):
            additional = merged.get("additionalProperties")
            if isinstance(additional, dict) and additional:
                return index_signature(self._type_of(additional, document, f"{hint}Value"))
            return INDEX_SIGNATURE_ANY

        name = self.declarations.reserve(type_name(schema.get("title") or hint))
        self._inline[key] = (schema, name)
        self._declare_object(merged, document, name)
        return name

    def _declare_object(self, schema: dict[str, Any], document: dict[str, Any], name: str) -> None:
        required = set(schema.get("required") or [])
        members = []
        for prop_name, prop_schema in schema["properties"].items():
            description = ""
            if isinstance(prop_schema, dict):
                description = prop_schema.get("description", "")
            members.append(Member(
                name=prop_name,
                type_expr=self._type_of(prop_schema, document, name + type_name(prop_name, "Field")),
                optional=prop_name not in required,
                description=description,
            ))
        self.declarations.define(Declaration(name, members=members))

    def _ref(self, ref: str, document: dict[str, Any]) -> str:
        if ref in self._refs:
            return self._refs[ref]

        target = resolve_ref(document, ref)
        name = self.declarations.reserve(type_name(ref.rsplit("/", 1)[-1]))
        self._refs[ref] = name

        merged = self._merge_all_of(target, document) if isinstance(target, dict) else target
        if isinstance(merged, dict) and merged.get("properties"):
            self._inline[id(target)] = (target, name)
            self._declare_object(merged, document, name)
        else:
            self.declarations.define(
                Declaration(name, alias=self._type_of(target, document, name)),
            )
        return name

    def _merge_all_of(self, schema: dict[str, Any], document: dict[str, Any]) -> dict[str, Any]:
        """Flatten allOf members (following $refs) into one object schema."""
        if "allOf" not in schema:
            return schema

        properties: dict[str, Any] = dict(schema.get("properties") or {})
        required: list[str] = list(schema.get("required") or [])
        for sub in schema["allOf"]:
            seen: set[str] = set()
            while isinstance(sub, dict) and "$ref" in sub and sub["$ref"] not in seen:
                seen.add(sub["$ref"])
                sub = resolve_ref(document, sub["$ref"])
            if not isinstance(sub, dict):
                continue
            sub = self._merge_all_of(sub, document)
            properties.update(sub.get("properties") or {})
            required.extend(sub.get("required") or [])

        merged = {k: v for k, v in schema.items() if k != "allOf"}
        merged["type"] = "object"
        merged["properties"] = properties
        merged["required"] = required
        return merged


def compile_schemas(sources: list[tuple[str, str]]) -> str:
    """Compile several (root name, schema text) pairs into one declaration block.

    Root names are reserved before anything nested, and components referenced
    from several roots are declared once.
    """
    compiler = SchemaCompiler()
    documents = [(name, parse_schema(text, artifact=name)) for name, text in sources]
    reserved = [compiler.declarations.reserve(name) for name, _ in documents]
    for name, (_, document) in zip(reserved, documents):
        try:
            compiler.compile_root(document, name)
        except SchemaSynthesisError as exc:
            raise SchemaSynthesisError(f"{name}: {exc}", artifact=name) from exc
    logger.debug("Compiled %d schemas into %d declarations", len(sources), len(compiler.declarations))
    return compiler.declarations.render()


def compile_schema(text: str, name: str) -> str:
    """Return the declaration text for one schema rooted at `name`."""
    return compile_schemas([(name, text)])
