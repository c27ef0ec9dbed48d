"""Produce VCS-free working copies of post repositories."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Callable

from blog_indexer.foundation.filesystem import list_directories, remove_tree
from blog_indexer.foundation.git import clone_repository

logger = logging.getLogger(__name__)

__all__ = ["ExtractionError", "WorkingCopyMaterializer", "validate_post_id"]

Cloner = Callable[[Path, Path, float], None]


class ExtractionError(RuntimeError):
    """Raised when a post's working copy cannot be produced."""


def validate_post_id(post_id: str) -> str:
    """Reject ids that would escape the content or repository roots."""
    if (
        not post_id
        or post_id != post_id.strip()
        or "/" in post_id
        or "\\" in post_id
        or post_id.startswith(".")
    ):
        raise ValueError(f"Invalid post id {post_id!r}.")
    return post_id


class WorkingCopyMaterializer:
    """Clones ``repository_root/<id>`` into ``content_root/<id>`` without ``.git``."""

    def __init__(
        self,
        content_root: Path | str,
        repository_root: Path | str,
        *,
        binary: str = "git",
        timeout: float = 120.0,
        cloner: Cloner | None = None,
    ) -> None:
        self.content_root = Path(content_root).expanduser().resolve()
        self.repository_root = Path(repository_root).expanduser().resolve()
        self.binary = binary
        self.timeout = timeout
        self.cloner = cloner

    def working_copy(self, post_id: str) -> Path:
        return self.content_root / validate_post_id(post_id)

    def repository(self, post_id: str) -> Path:
        return self.repository_root / validate_post_id(post_id)

    def list_repositories(self) -> list[str]:
        return list_directories(self.repository_root)

    def list_working_copies(self) -> list[str]:
        return list_directories(self.content_root)

    def materialize(self, post_id: str) -> Path:
        """Replace the working copy of ``post_id`` with a fresh snapshot."""
        try:
            target = self.working_copy(post_id)
            source = self.repository(post_id)
        except ValueError as exc:
            raise ExtractionError(str(exc)) from exc
        if not source.is_dir():
            raise ExtractionError(f"No repository for {post_id!r} at {source}.")

        try:
            if remove_tree(target):
                logger.debug("Removed previous working copy %s", target)
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ExtractionError(
                f"Unable to clear working copy {target}: {exc}"
            ) from exc

        try:
            self._clone(source, target)
        except (RuntimeError, OSError, subprocess.TimeoutExpired) as exc:
            raise ExtractionError(f"Unable to clone {source}: {exc}") from exc
        if not target.is_dir():
            raise ExtractionError(f"Clone of {source} produced no working copy.")

        try:
            remove_tree(target / ".git")
        except OSError as exc:
            raise ExtractionError(
                f"Unable to strip git metadata from {target}: {exc}"
            ) from exc
        logger.info("Materialized %s into %s", post_id, target)
        return target

    def destroy(self, post_id: str) -> None:
        """Remove both the working copy and the backing repository.

        Safe to repeat: storage that is already gone is ignored.
        """
        for path in (self.working_copy(post_id), self.repository(post_id)):
            if remove_tree(path):
                logger.info("Removed %s", path)

    def _clone(self, source: Path, target: Path) -> None:
        if self.cloner is not None:
            self.cloner(source, target, self.timeout)
            return
        clone_repository(source, target, binary=self.binary, timeout=self.timeout)
