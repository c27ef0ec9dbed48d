"""Post records and their visibility states."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

__all__ = ["Post", "PostState"]

# Keys written by deployments that predate the snake_case index format.
_LEGACY_KEYS = {
    "Name": "id",
    "Title": "title",
    "Body": "excerpt_html",
    "Banner": "banner_path",
    "Mtime": "last_modified",
    "State": "state",
}


class PostState(str, Enum):
    """Visibility of a post as declared by its first-line directive."""

    PUBLIC = "public"
    PRIVATE = "private"
    DELETE = "delete"


@dataclass(slots=True, frozen=True)
class Post:
    """One indexed post, keyed by its repository name."""

    id: str
    title: str
    excerpt_html: str
    banner_path: str
    last_modified: str
    state: PostState

    @property
    def is_public(self) -> bool:
        return self.state is PostState.PUBLIC

    @classmethod
    def stub(cls, post_id: str, last_modified: str) -> "Post":
        """Return the private placeholder used when a post has no document."""
        return cls(
            id=post_id,
            title="",
            excerpt_html="",
            banner_path="",
            last_modified=last_modified,
            state=PostState.PRIVATE,
        )

    def to_record(self) -> dict[str, str]:
        return {
            "id": self.id,
            "title": self.title,
            "excerpt_html": self.excerpt_html,
            "banner_path": self.banner_path,
            "last_modified": self.last_modified,
            "state": self.state.value,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Post":
        """Build a post from a serialized index entry.

        Both the current keys and the legacy capitalized keys are accepted.
        Entries without an id, or whose state is not ``public``/``private``,
        raise ``ValueError``.
        """
        if not isinstance(record, dict):
            raise ValueError(f"Index entry must be an object, got {type(record).__name__}.")
        values = {
            _LEGACY_KEYS.get(key, key): value
            for key, value in record.items()
            if key in _LEGACY_KEYS or key in _LEGACY_KEYS.values()
        }
        post_id = str(values.get("id") or "").strip()
        if not post_id:
            raise ValueError("Index entry is missing an id.")
        state = PostState(str(values.get("state") or ""))
        if state is PostState.DELETE:
            raise ValueError(f"Index entry {post_id!r} is marked for deletion.")
        return cls(
            id=post_id,
            title=str(values.get("title") or ""),
            excerpt_html=str(values.get("excerpt_html") or ""),
            banner_path=str(values.get("banner_path") or ""),
            last_modified=str(values.get("last_modified") or ""),
            state=state,
        )
