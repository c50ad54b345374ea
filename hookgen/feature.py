"""Inputs and outputs of one generation run.

A FeatureSpec describes one endpoint to generate code for. The response
and params payloads are each either an example JSON document or a JSON
Schema; which one was supplied is carried by the PayloadSource type
instead of two nullable fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"

    @property
    def sends_query(self) -> bool:
        """GET and DELETE send non-path variables as query params."""
        return self in (HttpMethod.GET, HttpMethod.DELETE)

    @property
    def client_method(self) -> str:
        return self.value.lower()

    @classmethod
    def parse(cls, value: str) -> HttpMethod:
        try:
            return cls(value.upper())
        except ValueError:
            raise ValueError(f"Unsupported HTTP method: {value!r}") from None


class HookKind(str, Enum):
    """Interaction kinds a feature can be generated for."""

    QUERY = "useQuery"
    INFINITE_QUERY = "useInfiniteQuery"
    MUTATION = "useMutation"
    GENERIC = "generic"

    @property
    def is_query_style(self) -> bool:
        """Query-style accessors read their variables from the cache key."""
        return self in (HookKind.QUERY, HookKind.INFINITE_QUERY)

    @property
    def emits_cache_key(self) -> bool:
        return self is not HookKind.MUTATION

    @classmethod
    def parse(cls, value: str) -> HookKind:
        """Accept enum names (``infinite_query``) or hook names (``useInfiniteQuery``)."""
        for kind in cls:
            if value == kind.value or value.upper() == kind.name:
                return kind
        raise ValueError(f"Unsupported hook type: {value!r}")


@dataclass(frozen=True)
class Example:
    """Example JSON (or JSON5) text."""

    text: str


@dataclass(frozen=True)
class Schema:
    """JSON Schema text."""

    text: str


PayloadSource = Union[Example, Schema]


@dataclass(frozen=True)
class FeatureSpec:
    """Everything needed to generate the four fragments of one feature."""

    feature_name: str
    method: HttpMethod
    api_url: str
    hook_kind: HookKind
    response: PayloadSource | None = None
    params: PayloadSource | None = None
    # Envelope wrapper applied around the payload type, e.g. "WithResponse"
    wrapper_args: str | None = None
    # Declarations were emitted by a shared batch pass; only references are needed
    skip_model_generation: bool = False

    @property
    def pascal_name(self) -> str:
        return self.feature_name[:1].upper() + self.feature_name[1:]

    @property
    def camel_name(self) -> str:
        return self.feature_name[:1].lower() + self.feature_name[1:]

    @property
    def query_key_name(self) -> str:
        return f"{self.camel_name}Key"

    @property
    def hook_name(self) -> str:
        return f"use{self.pascal_name}"

    @property
    def params_schema(self) -> str | None:
        return self.params.text if isinstance(self.params, Schema) else None


@dataclass(frozen=True)
class ModelResult:
    """Type declarations and type references derived from a FeatureSpec."""

    response_model: str
    api_return_type: str
    variables_definition: str
    variables_type: str
    params_json: dict[str, Any]
    url_vars: list[str]
    variables_interface_name: str
    # Property names of the params schema, when one was supplied
    schema_properties: list[str] = field(default_factory=list)
    # Array key of a paginated example payload
    records_key: str = "data"

    @property
    def has_variables(self) -> bool:
        return self.variables_type not in ("void", "any")


@dataclass(frozen=True)
class GeneratedFiles:
    """The four fragments of one feature; an empty string means nothing to append."""

    model: str = ""
    api: str = ""
    query_key: str = ""
    hook: str = ""

    def fragments(self) -> dict[str, str]:
        return {
            "model": self.model,
            "api": self.api,
            "query_key": self.query_key,
            "hook": self.hook,
        }


@dataclass(frozen=True)
class OperationDescriptor:
    """One path + method of an OpenAPI document."""

    path: str
    method: str
    operation_id: str | None = None
    summary: str = ""
    parameters: list[dict[str, Any]] = field(default_factory=list)
    request_body: dict[str, Any] | None = None
    # status code -> response schema (None when the response has no body)
    responses: dict[str, dict[str, Any] | None] = field(default_factory=dict)

    @property
    def label(self) -> str:
        return f"{self.method.upper()} {self.path}"

    @property
    def description(self) -> str:
        return self.summary or self.operation_id or ""


@dataclass(frozen=True)
class NormalizedOperation:
    """An operation reduced to the inputs of a FeatureSpec."""

    feature_name: str
    method: HttpMethod
    path: str
    response_schema: str | None = None
    params_schema: str | None = None
    wrapper_args: str | None = None
