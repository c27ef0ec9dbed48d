"""Post records and the JSON-backed index store."""

from .models import Post, PostState
from .stores import IndexView, PersistenceError, PostIndexStore

__all__ = ["IndexView", "PersistenceError", "Post", "PostIndexStore", "PostState"]
