"""Business logic layer for rebuilding and updating the post index."""

from .synchronizer import (
    DEFAULT_PRIMARY_DOCUMENT,
    IndexSynchronizer,
    MissingContentError,
    RebuildReport,
)
from .worker import PostUpdateWorker

__all__ = [
    "DEFAULT_PRIMARY_DOCUMENT",
    "IndexSynchronizer",
    "MissingContentError",
    "PostUpdateWorker",
    "RebuildReport",
]
