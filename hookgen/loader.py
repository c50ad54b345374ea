"""Load an already-bundled OpenAPI document from disk.

JSON and YAML are both accepted. Fetching documents over the network and
bundling external $refs are left to other tools.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from .errors import DocumentError


def parse_document(text: str) -> dict[str, Any]:
    """Parse OpenAPI text; JSON documents are tried first."""
    stripped = text.strip()
    try:
        if stripped.startswith("{"):
            document = json.loads(stripped)
        else:
            document = yaml.safe_load(stripped)
    except (ValueError, yaml.YAMLError) as exc:
        raise DocumentError(f"Failed to parse OpenAPI document: {exc}") from exc

    if not isinstance(document, dict):
        raise DocumentError("Invalid OpenAPI document: expected a mapping at the top level")
    if not isinstance(document.get("paths"), dict) or not document["paths"]:
        raise DocumentError("Invalid OpenAPI document: no paths found")
    return document


def load_document(path: Path) -> dict[str, Any]:
    """Load and validate an OpenAPI document file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise DocumentError(f"Cannot read OpenAPI document {path}: {exc}") from exc
    return parse_document(text)


def get_paths(document: dict[str, Any]) -> dict[str, Any]:
    return document.get("paths", {})


def get_shared_schemas(document: dict[str, Any]) -> dict[str, Any]:
    """The `components` and `definitions` sections a schema may reference."""
    return {
        key: document[key]
        for key in ("components", "definitions")
        if document.get(key) is not None
    }
