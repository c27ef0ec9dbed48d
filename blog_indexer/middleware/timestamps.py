"""Resolve a post's last-modified time from its repository history."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable

from blog_indexer.foundation.git import COMMIT_DATE_FORMAT, latest_commit_date

logger = logging.getLogger(__name__)

__all__ = ["CommitTimestampResolver", "TimestampResolutionError"]


class TimestampResolutionError(RuntimeError):
    """Raised internally when the history query cannot produce a timestamp."""


class CommitTimestampResolver:
    """Ask git for the newest commit date, falling back to the wall clock.

    ``resolve`` never raises: a missing repository, an empty history, a
    timeout or a malformed answer all produce the current time instead.
    """

    def __init__(
        self,
        *,
        binary: str = "git",
        timeout: float = 10.0,
        runner: Callable[[Path, float], str] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive.")
        self.binary = binary
        self.timeout = timeout
        self.runner = runner
        self.clock = clock or datetime.now

    def resolve(self, repo_path: Path | str) -> str:
        """Return the last change time of ``repo_path`` as ``YYYY-MM-DD HH:MM:SS``."""
        path = Path(repo_path)
        try:
            return self._query(path)
        except TimestampResolutionError as exc:
            fallback = self.now()
            logger.warning(
                "Using current time %s for %s: %s", fallback, path.name, exc
            )
            return fallback

    def now(self) -> str:
        return self.clock().strftime(COMMIT_DATE_FORMAT)

    def _query(self, path: Path) -> str:
        if not path.is_dir():
            raise TimestampResolutionError(f"repository {path} does not exist")
        try:
            if self.runner is not None:
                output = self.runner(path, self.timeout)
            else:
                output = latest_commit_date(
                    path, binary=self.binary, timeout=self.timeout
                )
        except Exception as exc:
            raise TimestampResolutionError(str(exc) or type(exc).__name__) from exc

        value = output.strip()
        if not value:
            raise TimestampResolutionError("repository has no commits")
        try:
            datetime.strptime(value, COMMIT_DATE_FORMAT)
        except ValueError as exc:
            raise TimestampResolutionError(f"unexpected date {value!r}") from exc
        return value
