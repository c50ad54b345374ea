"""Append generated fragments to destination files.

The import prelude computed for a fragment is prepended to the file, the
fragment itself appended. Each destination is written independently: a
failed write is reported for that fragment only.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .config import DEFAULT_CONFIG, GeneratorConfig
from .errors import SinkError
from .imports import SymbolIndex, resolve_imports

logger = logging.getLogger(__name__)


def append_fragment(
    path: Path,
    content: str,
    index: SymbolIndex | None = None,
    known_locations: dict[str, str] | None = None,
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> bool:
    """Append one fragment; returns False when there was nothing to write."""
    if not content or not content.strip():
        return False

    path = Path(path)
    try:
        existing = path.read_text(encoding="utf-8") if path.exists() else ""
        imports = resolve_imports(
            content, str(path), existing, index=index,
            known_locations=known_locations, config=config,
        )
        parts = []
        if imports:
            parts.append("\n".join(imports))
        if existing.strip():
            parts.append(existing.rstrip("\n"))
        parts.append(content.rstrip())
        output = "\n\n".join(parts) + "\n"

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(output, encoding="utf-8")
    except OSError as exc:
        raise SinkError(f"Failed to write to {path}: {exc}", path=str(path)) from exc

    logger.info("Appended %d imports and %d characters to %s", len(imports), len(content), path)
    return True


def append_fragments(
    fragments: dict[str, str],
    destinations: dict[str, Path],
    index: SymbolIndex | None = None,
    known_locations: dict[str, str] | None = None,
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> tuple[list[str], dict[str, SinkError]]:
    """Write each fragment to its destination.

    Fragments are written in order model, api, query_key, hook, each with
    the same `known_locations`.
    Returns the written fragment names and the errors per fragment.
    """
    known = dict(known_locations or {})
    written: list[str] = []
    errors: dict[str, SinkError] = {}

    for name in ("model", "api", "query_key", "hook"):
        content = fragments.get(name, "")
        destination = destinations.get(name)
        if destination is None or not content.strip():
            continue
        try:
            if append_fragment(destination, content, index, known, config):
                written.append(name)
        except SinkError as exc:
            logger.error("%s", exc)
            errors[name] = exc
    return written, errors
