"""Render accessor, cache-key and hook fragments from a template context.

One render function per interaction kind; the HookKind of the feature
selects which ones run. Mutations get no cache key.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import jinja2

from .feature import HookKind

TEMPLATE_DIR = Path(__file__).parent / "templates"


def _environment() -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )


_ENV = _environment()


def render(template_name: str, context: dict[str, Any]) -> str:
    """Render one template, without trailing whitespace."""
    output = _ENV.get_template(template_name).render(**context)
    return output.rstrip()


# --- Accessors --------------------------------------------------------------

def render_query_accessor(context: dict[str, Any]) -> str:
    """Accessor reading variables from the query key, with abort wiring."""
    return render("api_query.ts.j2", context)


def render_direct_accessor(context: dict[str, Any]) -> str:
    """Accessor taking a plain variables object."""
    return render("api_direct.ts.j2", context)


# --- Cache key --------------------------------------------------------------

def render_query_key(context: dict[str, Any]) -> str:
    return render("query_key.ts.j2", context)


# --- Hooks ------------------------------------------------------------------

def render_query_hook(context: dict[str, Any]) -> str:
    return render("hook_query.ts.j2", context)


def render_infinite_query_hook(context: dict[str, Any]) -> str:
    return render("hook_infinite_query.ts.j2", context)


def render_mutation_hook(context: dict[str, Any]) -> str:
    return render("hook_mutation.ts.j2", context)


def render_generic_hook(context: dict[str, Any]) -> str:
    return render("hook_generic.ts.j2", context)


_Renderer = Callable[[dict[str, Any]], str]

_ACCESSOR_RENDERERS: dict[HookKind, _Renderer] = {
    HookKind.QUERY: render_query_accessor,
    HookKind.INFINITE_QUERY: render_query_accessor,
    HookKind.MUTATION: render_direct_accessor,
    HookKind.GENERIC: render_direct_accessor,
}

_HOOK_RENDERERS: dict[HookKind, _Renderer] = {
    HookKind.QUERY: render_query_hook,
    HookKind.INFINITE_QUERY: render_infinite_query_hook,
    HookKind.MUTATION: render_mutation_hook,
    HookKind.GENERIC: render_generic_hook,
}


def render_accessor(kind: HookKind, context: dict[str, Any]) -> str:
    return _ACCESSOR_RENDERERS[kind](context)


def render_cache_key(kind: HookKind, context: dict[str, Any]) -> str:
    """Cache-key factory, or "" for kinds that do not cache."""
    if not kind.emits_cache_key:
        return ""
    return render_query_key(context)


def render_hook(kind: HookKind, context: dict[str, Any]) -> str:
    return _HOOK_RENDERERS[kind](context)
