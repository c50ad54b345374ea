"""Generate the four fragments of one feature.

Models first, then the template context, then accessor, cache key and
hook. Any synthesis error aborts before a fragment is returned.
"""

from __future__ import annotations

import logging

from .codegen import render_accessor, render_cache_key, render_hook
from .config import DEFAULT_CONFIG, GeneratorConfig
from .context_builder import build_context
from .feature import FeatureSpec, GeneratedFiles
from .model_builder import generate_models

logger = logging.getLogger(__name__)


def generate_files(spec: FeatureSpec, config: GeneratorConfig = DEFAULT_CONFIG) -> GeneratedFiles:
    """Run the whole pipeline for one feature."""
    logger.debug("Generating %s (%s %s, %s)",
                 spec.feature_name, spec.method.value, spec.api_url, spec.hook_kind.value)

    model = generate_models(spec, config)
    context = build_context(spec, model, config)

    model_output = "\n\n".join(
        part for part in (model.variables_definition, model.response_model) if part
    )
    return GeneratedFiles(
        model=model_output,
        api=render_accessor(spec.hook_kind, context),
        query_key=render_cache_key(spec.hook_kind, context),
        hook=render_hook(spec.hook_kind, context),
    )
