"""Compute the import statements a destination file needs for a fragment.

External symbols come from a fixed symbol -> module table; symbols of the
same module are merged into one statement. Project symbols are located
through a symbol index (exact name, allowed kind, outside dependency
directories) and imported with a path relative to the destination file.
A symbol that cannot be located is left out.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .config import DEFAULT_CONFIG, GeneratorConfig

logger = logging.getLogger(__name__)

_IMPORT_CLAUSE = re.compile(r"\bimport\s+([^;]*?)\s+from\s+['\"][^'\"]+['\"]", re.DOTALL)
_IDENTIFIER = re.compile(r"[A-Za-z_$][\w$]*")
_SCRIPT_EXTENSION = re.compile(r"(\.d\.ts|\.tsx?|\.jsx?)$")


@dataclass(frozen=True)
class SymbolLocation:
    """Where a symbol is declared."""

    name: str
    path: str
    kind: str


class SymbolIndex(Protocol):
    """Workspace-wide symbol lookup by exact name."""

    def lookup(self, name: str) -> list[SymbolLocation]:
        ...


def matches_symbol(content: str, symbol: str) -> bool:
    return re.search(rf"(?<![\w$]){re.escape(symbol)}(?![\w$])", content) is not None


def imported_symbols(content: str) -> set[str]:
    """Every identifier named inside an import clause of `content`."""
    names: set[str] = set()
    for clause in _IMPORT_CLAUSE.findall(content):
        names.update(_IDENTIFIER.findall(clause))
    return names


def relative_import_path(from_file: str, to_file: str) -> str:
    """Module specifier for `to_file` as seen from `from_file`."""
    rel = os.path.relpath(to_file, os.path.dirname(os.path.abspath(from_file)))
    rel = rel.replace(os.sep, "/")
    if not rel.startswith("."):
        rel = "./" + rel
    return _SCRIPT_EXTENSION.sub("", rel)


def _is_excluded(path: str, excluded_dirs: tuple[str, ...]) -> bool:
    return any(part in excluded_dirs for part in Path(path).parts)


def find_declaration(
    symbol: str, index: SymbolIndex, config: GeneratorConfig = DEFAULT_CONFIG,
) -> SymbolLocation | None:
    """First exact, allowed-kind match outside dependency directories."""
    for location in index.lookup(symbol):
        if (
            location.name == symbol
            and location.kind in config.symbol_kinds
            and not _is_excluded(location.path, config.excluded_dirs)
        ):
            return location
    return None


def _library_imports(
    content: str, already: set[str], config: GeneratorConfig,
) -> tuple[list[str], set[str]]:
    by_module: dict[str, list[str]] = {}
    for symbol, module in config.library_imports.items():
        if matches_symbol(content, symbol) and symbol not in already:
            by_module.setdefault(module, []).append(symbol)

    statements = []
    queued: set[str] = set()
    for module, symbols in by_module.items():
        default = next((s for s in symbols if s in config.default_imports), None)
        named = [s for s in symbols if s not in config.default_imports]
        if default and named:
            statements.append(f"import {default}, {{ {', '.join(named)} }} from '{module}';")
        elif default:
            statements.append(f"import {default} from '{module}';")
        else:
            statements.append(f"import {{ {', '.join(named)} }} from '{module}';")
        queued.update(symbols)
    return statements, queued


def resolve_imports(
    content: str,
    target_path: str,
    existing_content: str = "",
    index: SymbolIndex | None = None,
    known_locations: dict[str, str] | None = None,
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> list[str]:
    """Import statements to prepend to `target_path` before appending `content`.

    `known_locations` maps names (typically just-generated types) to the file
    they were written to; it is consulted before the index.
    """
    already = imported_symbols(existing_content)
    statements, queued = _library_imports(content, already, config)

    target = os.path.abspath(target_path)
    known = known_locations or {}
    candidates = list(config.project_symbols) + [n for n in known if n not in config.project_symbols]

    for symbol in candidates:
        if symbol in queued or symbol in already or not matches_symbol(content, symbol):
            continue

        if symbol in known:
            declared_in = known[symbol]
        elif index is not None and symbol in config.project_symbols:
            location = find_declaration(symbol, index, config)
            if location is None:
                logger.debug("No declaration found for %s", symbol)
                continue
            declared_in = location.path
        else:
            continue

        if os.path.abspath(declared_in) == target:
            continue
        statements.append(
            f"import {{ {symbol} }} from '{relative_import_path(target, declared_in)}';",
        )
        queued.add(symbol)

    return statements


# Top-level exported declarations -> symbol kind
_DECLARATION_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"^export\s+(?:default\s+)?(?:declare\s+)?(?:async\s+)?function\*?\s+([A-Za-z_$][\w$]*)", re.M), "function"),
    (re.compile(r"^export\s+(?:declare\s+)?const\s+(?!enum\b)([A-Za-z_$][\w$]*)", re.M), "constant"),
    (re.compile(r"^export\s+(?:declare\s+)?(?:let|var)\s+([A-Za-z_$][\w$]*)", re.M), "variable"),
    (re.compile(r"^export\s+(?:declare\s+)?interface\s+([A-Za-z_$][\w$]*)", re.M), "interface"),
    # Type aliases and enums are reported like classes by editor symbol providers
    (re.compile(r"^export\s+(?:declare\s+)?type\s+([A-Za-z_$][\w$]*)", re.M), "class"),
    (re.compile(r"^export\s+(?:declare\s+)?(?:const\s+)?enum\s+([A-Za-z_$][\w$]*)", re.M), "class"),
    (re.compile(r"^export\s+(?:default\s+)?(?:declare\s+)?(?:abstract\s+)?class\s+([A-Za-z_$][\w$]*)", re.M), "class"),
]

SCRIPT_SUFFIXES = (".ts", ".tsx", ".js", ".jsx")


class WorkspaceSymbolIndex:
    """Symbol index built by scanning script files under a root directory."""

    def __init__(
        self,
        root: Path,
        skip_dirs: tuple[str, ...] = ("node_modules", ".git"),
    ) -> None:
        self.root = Path(root)
        self.skip_dirs = skip_dirs
        self._symbols: dict[str, list[SymbolLocation]] | None = None

    def lookup(self, name: str) -> list[SymbolLocation]:
        if self._symbols is None:
            self._symbols = self._scan()
        return list(self._symbols.get(name, []))

    def _scan(self) -> dict[str, list[SymbolLocation]]:
        symbols: dict[str, list[SymbolLocation]] = {}
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if d not in self.skip_dirs)
            for filename in sorted(filenames):
                if not filename.endswith(SCRIPT_SUFFIXES):
                    continue
                path = os.path.join(dirpath, filename)
                try:
                    text = Path(path).read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError) as exc:
                    logger.warning("Skipping %s: %s", path, exc)
                    continue
                for pattern, kind in _DECLARATION_PATTERNS:
                    for match in pattern.finditer(text):
                        name = match.group(1)
                        symbols.setdefault(name, []).append(
                            SymbolLocation(name=name, path=os.path.abspath(path), kind=kind),
                        )
        logger.debug("Indexed %d symbols under %s", len(symbols), self.root)
        return symbols
