"""Named TypeScript declarations sharing one namespace.

Both the sample parser and the schema parser register interfaces and
type aliases here. Names are allocated in request order; a name already
taken gets a numeric suffix (Address, Address2, ...). Rendering keeps
allocation order, so output is a pure function of the input.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .naming import is_identifier, quote

INDENT = "    "


@dataclass
class Member:
    """One property of an interface."""

    name: str
    type_expr: str
    optional: bool = False
    description: str = ""

    def render(self) -> list[str]:
        lines = []
        if self.description:
            text = " ".join(self.description.split()).replace("*/", "* /")
            lines.append(f"{INDENT}/** {text} */")
        key = self.name if is_identifier(self.name) else quote(self.name)
        marker = "?" if self.optional else ""
        lines.append(f"{INDENT}{key}{marker}: {self.type_expr};")
        return lines


@dataclass
class Declaration:
    """An interface (members) or a type alias (alias)."""

    name: str
    members: list[Member] = field(default_factory=list)
    alias: str | None = None

    def render(self) -> str:
        if self.alias is not None:
            return f"export type {self.name} = {self.alias};"
        lines = [f"export interface {self.name} {{"]
        for member in self.members:
            lines.extend(member.render())
        lines.append("}")
        return "\n".join(lines)


class DeclarationSet:
    """Ordered collection of declarations with collision-free names."""

    def __init__(self) -> None:
        self._taken: list[str] = []
        self._declarations: dict[str, Declaration] = {}

    def reserve(self, name: str) -> str:
        """Claim a name, suffixing it if it is already taken."""
        candidate = name
        counter = 2
        while candidate in self._taken:
            candidate = f"{name}{counter}"
            counter += 1
        self._taken.append(candidate)
        return candidate

    def define(self, declaration: Declaration) -> None:
        """Attach a body to a reserved name."""
        self._declarations[declaration.name] = declaration

    def names(self) -> list[str]:
        """Defined names in reservation order."""
        return [name for name in self._taken if name in self._declarations]

    def __len__(self) -> int:
        return len(self._declarations)

    def render(self) -> str:
        return "\n\n".join(self._declarations[name].render() for name in self.names())


def union(parts: list[str]) -> str:
    """Join type expressions into a union, dropping duplicates."""
    unique: list[str] = []
    for part in parts:
        if part not in unique:
            unique.append(part)
    if not unique:
        return "any"
    if "any" in unique:
        return "any"
    return " | ".join(unique)


def array_of(item: str) -> str:
    """Array type of an item expression, parenthesizing unions."""
    if " | " in item or item.startswith("{"):
        return f"({item})[]"
    return f"{item}[]"


INDEX_SIGNATURE_ANY = "{ [key: string]: any }"


def index_signature(value: str) -> str:
    return f"{{ [key: string]: {value} }}"
