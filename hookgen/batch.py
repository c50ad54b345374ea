"""Generate fragments for several OpenAPI operations at once.

Two passes: every operation's response and params schemas are compiled
together into one declaration block (shared components declared once),
then each operation runs the normal pipeline with model generation
skipped, so it only references the names the shared pass declared.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any

from .config import DEFAULT_CONFIG, GeneratorConfig
from .errors import DocumentError
from .feature import (
    FeatureSpec,
    HookKind,
    HttpMethod,
    NormalizedOperation,
    OperationDescriptor,
    Schema,
)
from .model_builder import generate_batch_models
from .naming import pascal_case, strip_gateway_prefix
from .operations import get_operations, normalize_operation
from .pipeline import generate_files

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Fragments of a batch, in selection order."""

    model: str = ""
    api: list[str] = field(default_factory=list)
    query_key: list[str] = field(default_factory=list)
    hook: list[str] = field(default_factory=list)
    features: list[str] = field(default_factory=list)
    # Root type names declared in `model`
    type_names: list[str] = field(default_factory=list)

    def fragments(self) -> dict[str, str]:
        return {
            "model": self.model,
            "api": "\n\n".join(self.api),
            "query_key": "\n\n".join(self.query_key),
            "hook": "\n\n".join(self.hook),
        }


def select_operations(
    document: dict[str, Any], labels: list[str],
) -> list[OperationDescriptor]:
    """Pick operations by "METHOD /path" label, in the order given."""
    by_label = {op.label: op for op in get_operations(document)}
    selected = []
    for label in labels:
        method, _, path = label.strip().partition(" ")
        key = f"{method.upper()} {path.strip()}"
        if key not in by_label:
            raise DocumentError(f"Operation not found in document: {label}")
        selected.append(by_label[key])
    return selected


def _deduplicate_feature_names(
    operations: list[NormalizedOperation],
) -> list[NormalizedOperation]:
    """Suffix repeated feature names with 2, 3, ... in selection order."""
    seen: set[str] = set()
    result = []
    for op in operations:
        name = op.feature_name
        counter = 2
        while name in seen:
            name = f"{op.feature_name}{counter}"
            counter += 1
        seen.add(name)
        if name != op.feature_name:
            op = dataclasses.replace(op, feature_name=name)
        result.append(op)
    return result


def default_hook_kind(method: HttpMethod) -> HookKind:
    return HookKind.QUERY if method is HttpMethod.GET else HookKind.MUTATION


def generate_batch(
    operations: list[OperationDescriptor],
    document: dict[str, Any],
    config: GeneratorConfig = DEFAULT_CONFIG,
) -> BatchResult:
    """Run the shared type pass, then the per-operation passes in order."""
    normalized = _deduplicate_feature_names(
        [normalize_operation(op, document, config) for op in operations],
    )

    model, type_names = generate_batch_models([
        (op.feature_name, op.response_schema, op.params_schema, op.wrapper_args)
        for op in normalized
    ])
    model_parts = [model] if model else []

    result = BatchResult(type_names=list(type_names))
    for op in normalized:
        if op.response_schema is None:
            # No schema to compile; the accessor still references {F}Response
            name = f"{pascal_case(op.feature_name)}Response"
            model_parts.append(f"export type {name} = any;")
            result.type_names.append(name)

        spec = FeatureSpec(
            feature_name=op.feature_name,
            method=op.method,
            api_url=strip_gateway_prefix(op.path, config.gateway_prefix),
            hook_kind=default_hook_kind(op.method),
            response=Schema(op.response_schema) if op.response_schema else None,
            params=Schema(op.params_schema) if op.params_schema else None,
            wrapper_args=op.wrapper_args,
            skip_model_generation=True,
        )
        generated = generate_files(spec, config)

        result.features.append(op.feature_name)
        for attr in ("api", "query_key", "hook"):
            text = getattr(generated, attr)
            if text:
                getattr(result, attr).append(text)

    result.model = "\n\n".join(model_parts)
    logger.debug("Batch generated %d features, %d root types",
                 len(result.features), len(result.type_names))
    return result
