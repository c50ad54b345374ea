"""Shared fixtures for hookgen tests.

A small OpenAPI document exercising envelopes, pagination, path-level
parameters and request bodies, plus an in-memory symbol index.
"""

from __future__ import annotations

import copy
from typing import Any

import pytest

from hookgen.imports import SymbolLocation


# ---------------------------------------------------------------------------
# OpenAPI document
# ---------------------------------------------------------------------------

USERS_DOCUMENT: dict[str, Any] = {
    "openapi": "3.0.0",
    "info": {"title": "Users", "version": "1.0"},
    "paths": {
        "/api/users": {
            "parameters": [
                {"name": "tenant", "in": "query", "schema": {"type": "string"}},
            ],
            "get": {
                "operationId": "listUsers",
                "summary": "List users",
                "parameters": [
                    {"name": "pageNo", "in": "query", "required": True, "schema": {"type": "integer"}},
                ],
                "responses": {
                    "200": {
                        "description": "ok",
                        "content": {
                            "application/json": {"schema": {"$ref": "#/components/schemas/UserPage"}},
                        },
                    },
                },
            },
            "post": {
                "requestBody": {
                    "content": {
                        "application/json": {"schema": {"$ref": "#/components/schemas/NewUser"}},
                    },
                },
                "responses": {
                    "201": {
                        "description": "created",
                        "content": {
                            "application/json": {"schema": {"$ref": "#/components/schemas/UserEnvelope"}},
                        },
                    },
                },
            },
        },
        "/api/users/{id}": {
            "delete": {
                "parameters": [
                    {"name": "id", "in": "path", "required": True, "schema": {"type": "integer"}},
                ],
                "responses": {"204": {"description": "deleted"}},
            },
        },
    },
    "components": {
        "schemas": {
            "User": {
                "type": "object",
                "properties": {
                    "id": {"type": "integer"},
                    "name": {"type": "string"},
                },
                "required": ["id"],
            },
            "NewUser": {
                "type": "object",
                "properties": {"name": {"type": "string"}},
                "required": ["name"],
            },
            "UserEnvelope": {
                "type": "object",
                "properties": {
                    "success": {"type": "boolean"},
                    "data": {"$ref": "#/components/schemas/User"},
                },
            },
            "UserPage": {
                "type": "object",
                "properties": {
                    "success": {"type": "boolean"},
                    "data": {
                        "type": "object",
                        "properties": {
                            "totalRecords": {"type": "integer"},
                            "filteredRecords": {"type": "integer"},
                            "data": {
                                "type": "array",
                                "items": {"$ref": "#/components/schemas/User"},
                            },
                        },
                    },
                },
            },
        },
    },
}


@pytest.fixture
def users_document() -> dict[str, Any]:
    """A fresh copy of the users document, safe to inspect for mutation."""
    return copy.deepcopy(USERS_DOCUMENT)


# ---------------------------------------------------------------------------
# Symbol index
# ---------------------------------------------------------------------------

class FakeSymbolIndex:
    """Returns every location whose name contains the query, like an editor's fuzzy search."""

    def __init__(self, locations: list[SymbolLocation]) -> None:
        self.locations = locations
        self.queries: list[str] = []

    def lookup(self, name: str) -> list[SymbolLocation]:
        self.queries.append(name)
        return [loc for loc in self.locations if name in loc.name]


@pytest.fixture
def symbol_index() -> FakeSymbolIndex:
    return FakeSymbolIndex([
        SymbolLocation("getInstanceLegacy", "/proj/src/legacy/http.ts", "function"),
        SymbolLocation("getInstance", "/proj/node_modules/http/index.d.ts", "function"),
        SymbolLocation("getInstance", "/proj/src/lib/http.ts", "function"),
        SymbolLocation("WithResponse", "/proj/src/types/api.d.ts", "interface"),
        SymbolLocation("WithRecordResponse", "/proj/src/types/api.d.ts", "interface"),
        SymbolLocation("useInvalidateCommonQueries", "/proj/src/hooks/common.ts", "constant"),
        SymbolLocation("showSnackbarOnApiError", "/proj/src/lib/snackbar.tsx", "module"),
    ])
