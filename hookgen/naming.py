"""Identifier helpers for generated TypeScript.

Rules for turning arbitrary JSON keys into local binding names:
  - a valid, non-reserved identifier is returned unchanged
  - separators (-, _, whitespace) are dropped and the next character upper-cased
  - remaining invalid characters are stripped
  - a leading digit gets a "var" prefix, a reserved word an "_" prefix
  - an empty result falls back to "variable"

Examples:
  user_id    -> user_id
  user-id    -> userId
  2fa code   -> var2faCode
  delete     -> _delete
  ???        -> variable
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

RESERVED_WORDS: frozenset[str] = frozenset({
    "interface", "class", "let", "var", "const", "import", "export", "type",
    "switch", "case", "break", "if", "else", "return", "new", "this", "void",
    "delete", "catch", "try", "throw", "typeof", "instanceof", "in", "of",
    "for", "while", "do", "continue", "default", "function", "enum",
    "extends", "finally", "null", "true", "false", "with", "yield", "await",
})

# Irregular plurals seen in REST resource names
_PLURALS: dict[str, str] = {
    "person": "people",
    "child": "children",
    "status": "statuses",
    "address": "addresses",
    "index": "indices",
}

_SINGULARS: dict[str, str] = {v: k for k, v in _PLURALS.items()}


@dataclass(frozen=True)
class VarBinding:
    """An original key and the local name it is bound to."""

    key: str
    safe: str

    @property
    def renamed(self) -> bool:
        return self.key != self.safe

    def pattern(self) -> str:
        """Destructuring / shorthand form: ``key`` or ``"key": safe``."""
        if not self.renamed:
            return self.key
        return f"{quote(self.key)}: {self.safe}"


def quote(value: str) -> str:
    """Render a string as a double-quoted TypeScript literal."""
    return json.dumps(value, ensure_ascii=False)


def is_identifier(name: str) -> bool:
    return bool(_IDENTIFIER.match(name)) and name not in RESERVED_WORDS


def safe_var_name(key: str) -> str:
    """Return a valid binding name for an arbitrary key."""
    if is_identifier(key):
        return key
    safe = re.sub(
        r"[-_\s]+(.)?",
        lambda m: m.group(1).upper() if m.group(1) else "",
        key,
    )
    safe = re.sub(r"[^A-Za-z0-9_$]", "", safe)
    if re.match(r"^\d", safe):
        safe = "var" + safe
    if safe in RESERVED_WORDS:
        safe = "_" + safe
    return safe or "variable"


def unique_var_mapping(keys: list[str]) -> list[VarBinding]:
    """Bind every key to a safe name, suffixing duplicates with _2, _3, ..."""
    seen: set[str] = set()
    mapping: list[VarBinding] = []
    for key in keys:
        base = safe_var_name(key)
        safe = base
        counter = 2
        while safe in seen:
            safe = f"{base}_{counter}"
            counter += 1
        seen.add(safe)
        mapping.append(VarBinding(key, safe))
    return mapping


def binding_list(keys: list[str]) -> str:
    """Comma-separated destructuring entries for the given keys."""
    return ", ".join(b.pattern() for b in unique_var_mapping(keys))


def pascal_case(name: str) -> str:
    """Upper-case the first character only (getUser -> GetUser)."""
    return name[:1].upper() + name[1:]


def type_name(text: str, fallback: str = "Type") -> str:
    """Turn a title or schema key into a PascalCase type identifier."""
    name = re.sub(
        r"[^A-Za-z0-9]+(.)?",
        lambda m: m.group(1).upper() if m.group(1) else "",
        text,
    )
    name = pascal_case(name)
    if not name:
        return fallback
    if name[0].isdigit():
        name = fallback + name
    return name


def singularize(word: str) -> str:
    """Return the singular form of a collection key."""
    lower = word.lower()
    if lower in _PLURALS:
        return word
    if lower in _SINGULARS:
        return _match_case(word, _SINGULARS[lower])
    if lower.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if lower.endswith(("sses", "shes", "ches", "xes")):
        return word[:-2]
    if lower.endswith("s") and not lower.endswith("ss") and len(word) > 1:
        return word[:-1]
    return word


def _match_case(original: str, replacement: str) -> str:
    if original[:1].isupper():
        return pascal_case(replacement)
    return replacement


def sanitize_feature_name(name: str) -> str:
    """Reduce an operation id or derived name to a valid feature identifier."""
    name = re.sub(r"[^A-Za-z0-9]", "", name)
    if re.match(r"^\d", name):
        name = f"Api{name}"
    return name or "ApiFeature"


def feature_name_from_path(method: str, path: str) -> str:
    """Build a feature name from the last non-parameter path segment.

    GET /users/{id}/orders -> getOrders
    """
    parts = [p for p in path.split("/") if p and not p.startswith("{")]
    resource = parts[-1] if parts else "feature"
    return method.lower() + pascal_case(resource)


def strip_gateway_prefix(path: str, prefix: str) -> str:
    """Remove a leading API-gateway segment such as /api from a path."""
    if not prefix:
        return path
    if path == prefix:
        return "/"
    if path.startswith(prefix + "/"):
        return path[len(prefix):]
    return path
