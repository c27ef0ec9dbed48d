"""In-memory post index with its JSON-backed persisted copy."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from blog_indexer.foundation.filesystem import atomic_write_text

from .models import Post, PostState

logger = logging.getLogger(__name__)

__all__ = ["IndexView", "PersistenceError", "PostIndexStore"]


class PersistenceError(RuntimeError):
    """Raised when the serialized index cannot be written."""


@dataclass(slots=True, frozen=True)
class IndexView:
    """Immutable pairing of the ordered index and its public subset."""

    posts: tuple[Post, ...] = ()
    public: tuple[Post, ...] = ()

    @classmethod
    def build(cls, posts: Iterable[Post]) -> "IndexView":
        # sorted() is stable, so equal timestamps keep their insertion order.
        ordered = tuple(
            sorted(posts, key=lambda post: post.last_modified, reverse=True)
        )
        return cls(posts=ordered, public=tuple(post for post in ordered if post.is_public))


class PostIndexStore:
    """Owns the ordered post index and the public subset derived from it.

    Readers get an ``IndexView`` that is swapped in whole after each
    mutation, so they never need the writer lock.
    """

    def __init__(self, index_path: Path | str) -> None:
        self.index_path = Path(index_path).expanduser().resolve()
        self._lock = threading.RLock()
        self._view = IndexView()

    def __len__(self) -> int:
        return len(self._view.posts)

    def __contains__(self, post_id: object) -> bool:
        return any(post.id == post_id for post in self._view.posts)

    def view(self) -> IndexView:
        return self._view

    def snapshot(self) -> tuple[Post, ...]:
        return self._view.posts

    def public_posts(self) -> tuple[Post, ...]:
        return self._view.public

    def recent_public(self, limit: int = 5) -> tuple[Post, ...]:
        """Return the newest ``limit`` public posts."""
        if limit < 0:
            raise ValueError("limit must be non-negative.")
        return self._view.public[:limit]

    def ids(self) -> list[str]:
        return [post.id for post in self._view.posts]

    def get(self, post_id: str) -> Post | None:
        for post in self._view.posts:
            if post.id == post_id:
                return post
        return None

    def upsert(self, post: Post) -> None:
        """Replace the entry with ``post.id`` in place, or append it."""
        if post.state is PostState.DELETE:
            raise ValueError(f"Refusing to store {post.id!r} in state 'delete'.")
        with self._lock:
            posts = list(self._view.posts)
            for position, existing in enumerate(posts):
                if existing.id == post.id:
                    posts[position] = post
                    break
            else:
                posts.append(post)
            self._publish(posts)

    def remove(self, post_id: str) -> bool:
        """Drop the entry for ``post_id``; return whether one existed."""
        with self._lock:
            posts = [post for post in self._view.posts if post.id != post_id]
            if len(posts) == len(self._view.posts):
                return False
            self._publish(posts)
            return True

    def replace_all(self, posts: Iterable[Post]) -> None:
        """Swap in a whole new collection; duplicate ids keep the last entry."""
        by_id: dict[str, Post] = {}
        for post in posts:
            if post.state is PostState.DELETE:
                raise ValueError(f"Refusing to store {post.id!r} in state 'delete'.")
            by_id.pop(post.id, None)
            by_id[post.id] = post
        with self._lock:
            self._publish(by_id.values())

    def persist(self) -> Path:
        """Atomically write the current snapshot to ``index_path``."""
        with self._lock:
            posts = self._view.posts
            payload = json.dumps(
                [post.to_record() for post in posts],
                indent=2,
                ensure_ascii=False,
            )
            try:
                atomic_write_text(self.index_path, payload + "\n")
            except OSError as exc:
                raise PersistenceError(
                    f"Unable to write post index to {self.index_path}: {exc}"
                ) from exc
        logger.debug("Persisted %d posts to %s", len(posts), self.index_path)
        return self.index_path

    def load(self) -> int:
        """Replace the in-memory index with the persisted copy.

        A missing or unreadable file leaves an empty index. Entries that fail
        validation are skipped.
        """
        try:
            raw = self.index_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No persisted index at %s; starting empty", self.index_path)
            self.replace_all([])
            return 0
        except OSError as exc:
            logger.warning("Unable to read %s: %s", self.index_path, exc)
            self.replace_all([])
            return 0

        try:
            records = json.loads(raw) if raw.strip() else []
        except json.JSONDecodeError as exc:
            logger.warning("Ignoring corrupt index %s: %s", self.index_path, exc)
            records = []
        if not isinstance(records, list):
            logger.warning("Ignoring index %s: expected a JSON array", self.index_path)
            records = []

        posts: list[Post] = []
        for record in records:
            try:
                posts.append(Post.from_record(record))
            except ValueError as exc:
                logger.warning("Skipping index entry: %s", exc)
        self.replace_all(posts)
        return len(self._view.posts)

    def _publish(self, posts: Iterable[Post]) -> None:
        self._view = IndexView.build(posts)
