"""Background execution of index updates triggered by repository pushes."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor

from blog_indexer.data import Post
from blog_indexer.middleware import validate_post_id

from .synchronizer import IndexSynchronizer, RebuildReport

logger = logging.getLogger(__name__)

__all__ = ["PostUpdateWorker"]


class PostUpdateWorker:
    """Queue of pending post updates drained by one dedicated thread.

    The push handler only enqueues, so slow git calls never block the thread
    that accepted the push. Requests for an id that is still waiting in the
    queue share the already pending future.
    """

    def __init__(
        self,
        synchronizer: IndexSynchronizer,
        *,
        executor: ThreadPoolExecutor | None = None,
    ) -> None:
        self.synchronizer = synchronizer
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="post-update"
        )
        self._pending: dict[str, Future[Post | None]] = {}
        self._lock = threading.Lock()

    def __enter__(self) -> "PostUpdateWorker":
        return self

    def __exit__(self, *_: object) -> None:
        self.shutdown(wait=True)

    def submit(self, post_id: str) -> Future[Post | None]:
        """Schedule an incremental update of ``post_id``."""
        validate_post_id(post_id)
        with self._lock:
            pending = self._pending.get(post_id)
            if pending is not None:
                logger.debug("Update of %s already queued", post_id)
                return pending
            future = self._executor.submit(self._run_update, post_id)
            self._pending[post_id] = future
        return future

    def submit_rebuild(self) -> Future[RebuildReport]:
        return self._executor.submit(self._run_rebuild)

    def pending(self) -> list[str]:
        with self._lock:
            return sorted(self._pending)

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _run_update(self, post_id: str) -> Post | None:
        with self._lock:
            # Once running, a new push for the same id needs its own run.
            self._pending.pop(post_id, None)
        try:
            return self.synchronizer.update(post_id)
        except Exception:
            logger.exception("Update of %s failed", post_id)
            raise

    def _run_rebuild(self) -> RebuildReport:
        try:
            return self.synchronizer.rebuild()
        except Exception:
            logger.exception("Index rebuild failed")
            raise
