"""Infer TypeScript declarations from example JSON values.

Handles:
- Nested objects (named {Parent}{Key})
- Arrays of objects (elements merged; named {Parent}{SingularKey})
- Keys missing from some array elements (optional members)
- Mixed value types (unions)
- Empty arrays (any[]) and empty objects (index signature)
"""

from __future__ import annotations

import logging
from typing import Any

from .declarations import (
    INDEX_SIGNATURE_ANY,
    Declaration,
    DeclarationSet,
    Member,
    array_of,
    union,
)
from .naming import singularize, type_name

logger = logging.getLogger(__name__)

# Render order of primitive members of a union
_PRIMITIVE_ORDER = ("string", "number", "boolean", "null")


class _Shape:
    """Accumulated structure of every value seen at one position."""

    def __init__(self) -> None:
        self.primitives: set[str] = set()
        self.objects = 0
        self.fields: dict[str, _Shape] = {}
        self.field_counts: dict[str, int] = {}
        self.arrays = 0
        self.items: _Shape | None = None

    def observe(self, value: Any) -> None:
        if isinstance(value, bool):
            self.primitives.add("boolean")
        elif value is None:
            self.primitives.add("null")
        elif isinstance(value, (int, float)):
            self.primitives.add("number")
        elif isinstance(value, str):
            self.primitives.add("string")
        elif isinstance(value, dict):
            self.objects += 1
            for key, child in value.items():
                self.fields.setdefault(key, _Shape()).observe(child)
                self.field_counts[key] = self.field_counts.get(key, 0) + 1
        elif isinstance(value, list):
            self.arrays += 1
            for item in value:
                if self.items is None:
                    self.items = _Shape()
                self.items.observe(item)
        else:
            raise TypeError(f"Unsupported JSON value: {type(value).__name__}")

    @property
    def is_plain_object(self) -> bool:
        return self.objects > 0 and not self.arrays and not self.primitives


class SampleCompiler:
    """Compile sample values into declarations of one DeclarationSet."""

    def __init__(self, declarations: DeclarationSet | None = None) -> None:
        self.declarations = declarations or DeclarationSet()

    def compile_root(self, value: Any, name: str) -> str:
        """Declare `name` for a sample value; returns the declared name."""
        shape = _Shape()
        shape.observe(value)

        if shape.is_plain_object and shape.fields:
            return self._object(shape, name)

        root = self.declarations.reserve(name)
        alias = self._type_of(shape, f"{name}Item", f"{name}Item")
        self.declarations.define(Declaration(root, alias=alias))
        return root

    def _type_of(self, shape: _Shape, hint: str, item_hint: str) -> str:
        parts: list[str] = []
        if shape.objects:
            parts.append(self._object(shape, hint))
        if shape.arrays:
            if shape.items is None:
                parts.append("any[]")
            else:
                item = self._type_of(shape.items, item_hint, f"{item_hint}Item")
                parts.append(array_of(item))
        parts.extend(p for p in _PRIMITIVE_ORDER if p in shape.primitives)
        return union(parts)

    def _object(self, shape: _Shape, hint: str) -> str:
        if not shape.fields:
            return INDEX_SIGNATURE_ANY

        name = self.declarations.reserve(hint)
        members = []
        for key, child in shape.fields.items():
            child_hint = name + type_name(key, fallback="Field")
            item_hint = name + type_name(singularize(key), fallback="Field")
            members.append(Member(
                name=key,
                type_expr=self._type_of(child, child_hint, item_hint),
                optional=shape.field_counts[key] < shape.objects,
            ))
        self.declarations.define(Declaration(name, members=members))
        return name


def compile_sample(value: Any, name: str) -> str:
    """Return the declaration text for a sample value rooted at `name`."""
    compiler = SampleCompiler()
    compiler.compile_root(value, name)
    logger.debug("Inferred %d declarations for %s", len(compiler.declarations), name)
    return compiler.declarations.render()
