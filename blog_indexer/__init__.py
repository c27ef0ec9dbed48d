"""Core package for the blog post indexer."""

from .config import ConfigError, IndexerConfig, build_synchronizer, load_config
from .data import IndexView, PersistenceError, Post, PostIndexStore, PostState
from .middleware import (
    CommitTimestampResolver,
    ExtractionError,
    PostMetadata,
    WorkingCopyMaterializer,
    classify_state,
    extract_metadata,
)
from .services import IndexSynchronizer, PostUpdateWorker, RebuildReport

__all__ = [
    "CommitTimestampResolver",
    "ConfigError",
    "ExtractionError",
    "IndexSynchronizer",
    "IndexView",
    "IndexerConfig",
    "PersistenceError",
    "Post",
    "PostIndexStore",
    "PostMetadata",
    "PostState",
    "PostUpdateWorker",
    "RebuildReport",
    "WorkingCopyMaterializer",
    "build_synchronizer",
    "classify_state",
    "extract_metadata",
    "load_config",
]
