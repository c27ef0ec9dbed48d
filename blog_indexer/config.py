"""JSON configuration for the indexer and helpers that wire components from it."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from blog_indexer.data import PostIndexStore, PostState
from blog_indexer.middleware import CommitTimestampResolver, WorkingCopyMaterializer
from blog_indexer.services.synchronizer import DEFAULT_PRIMARY_DOCUMENT, IndexSynchronizer

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "IndexerConfig",
    "build_synchronizer",
    "index_lock_path",
    "load_config",
]

DEFAULT_CONFIG_PATH = Path("data/.config/config.json")

# Keys used by the config.json files of earlier deployments.
_LEGACY_KEYS = {
    "PostDefaultState": "default_state",
    "AnaylzePostsOnStart": "rebuild_on_start",
}


class ConfigError(ValueError):
    """Raised when the configuration file is unreadable or invalid."""


@dataclass(slots=True)
class IndexerConfig:
    """Locations and policies used to build the post index."""

    content_root: Path = field(default_factory=lambda: Path("data"))
    repository_root: Path = field(default_factory=lambda: Path("git"))
    index_path: Path = field(default_factory=lambda: Path("data/.pages/postsList.json"))
    default_state: PostState = PostState.PRIVATE
    rebuild_on_start: bool = True
    primary_document: str = DEFAULT_PRIMARY_DOCUMENT
    git_timeout: float = 10.0
    clone_timeout: float = 120.0

    def __post_init__(self) -> None:
        for name in ("content_root", "repository_root", "index_path"):
            value = getattr(self, name)
            if not isinstance(value, (str, Path)) or not str(value):
                raise ConfigError(f"{name} must be a non-empty path.")
            setattr(self, name, Path(value))
        try:
            self.default_state = PostState(self.default_state)
        except ValueError as exc:
            raise ConfigError(f"Unknown default_state {self.default_state!r}.") from exc
        if self.default_state is PostState.DELETE:
            raise ConfigError("default_state cannot be 'delete'.")
        if not isinstance(self.rebuild_on_start, bool):
            raise ConfigError("rebuild_on_start must be true or false.")
        if (
            not isinstance(self.primary_document, str)
            or not self.primary_document
            or "/" in self.primary_document
        ):
            raise ConfigError("primary_document must be a plain file name.")
        for name in ("git_timeout", "clone_timeout"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ConfigError(f"{name} must be a positive number.")
            setattr(self, name, float(value))

    @classmethod
    def from_mapping(cls, payload: dict[str, Any]) -> "IndexerConfig":
        known = {item.name for item in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in payload.items():
            name = _LEGACY_KEYS.get(key, key)
            if name in known:
                values[name] = value
        return cls(**values)


def load_config(path: Path | str | None = None) -> IndexerConfig:
    """Read ``path`` (or the default location when present) into a config.

    Unknown keys are ignored so the same file can carry settings for the
    web front end.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if path is None and not config_path.exists():
        return IndexerConfig()
    try:
        payload = json.loads(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Unable to read config {config_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config {config_path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigError(f"Config {config_path} must contain a JSON object.")
    return IndexerConfig.from_mapping(payload)


def index_lock_path(index_path: Path | str) -> Path:
    """Return the lock file guarding writes to ``index_path``."""
    path = Path(index_path)
    return path.with_name(f"{path.name}.lock")


def build_synchronizer(
    config: IndexerConfig, *, show_progress: bool = False
) -> IndexSynchronizer:
    """Create the store, git helpers and synchronizer described by ``config``."""
    store = PostIndexStore(config.index_path)
    materializer = WorkingCopyMaterializer(
        config.content_root,
        config.repository_root,
        timeout=config.clone_timeout,
    )
    resolver = CommitTimestampResolver(timeout=config.git_timeout)
    return IndexSynchronizer(
        store,
        materializer,
        resolver=resolver,
        default_state=config.default_state,
        primary_document=config.primary_document,
        show_progress=show_progress,
        lock_path=index_lock_path(config.index_path),
    )
