"""Generate React Query hooks, axios accessors, cache keys and types."""

from __future__ import annotations

from .batch import BatchResult, generate_batch, select_operations
from .config import DEFAULT_CONFIG, GeneratorConfig, load_config
from .errors import (
    ConfigError,
    DocumentError,
    HookgenError,
    InputParseError,
    SchemaSynthesisError,
    SinkError,
)
from .feature import (
    Example,
    FeatureSpec,
    GeneratedFiles,
    HookKind,
    HttpMethod,
    PayloadSource,
    Schema,
)
from .imports import WorkspaceSymbolIndex, resolve_imports
from .loader import load_document
from .operations import get_operations
from .pipeline import generate_files
from .writer import append_fragment, append_fragments

__version__ = "0.1.0"
