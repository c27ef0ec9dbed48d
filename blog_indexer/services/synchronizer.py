"""Business logic that keeps the post index in step with the post repositories."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Iterator

from filelock import FileLock
from tqdm import tqdm

from blog_indexer.data import PersistenceError, Post, PostIndexStore, PostState
from blog_indexer.foundation.rendering import render_markdown
from blog_indexer.middleware import (
    CommitTimestampResolver,
    ExtractionError,
    PostMetadata,
    WorkingCopyMaterializer,
    classify_state,
    extract_metadata,
    validate_post_id,
)

logger = logging.getLogger(__name__)

DEFAULT_PRIMARY_DOCUMENT = "README.md"

__all__ = [
    "DEFAULT_PRIMARY_DOCUMENT",
    "IndexSynchronizer",
    "MissingContentError",
    "RebuildReport",
]


class MissingContentError(FileNotFoundError):
    """Raised internally when a working copy has no primary document."""


@dataclass(slots=True)
class RebuildReport:
    """Per-post outcome of a full rebuild."""

    updated: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class IndexSynchronizer:
    """Runs full rebuilds and single-post updates against a ``PostIndexStore``.

    Every mutation holds one lock, so a rebuild and the updates triggered by
    pushes never interleave. Each mutating call ends with the index re-sorted
    and persisted; a failed write raises ``PersistenceError``.

    With ``lock_path`` set, mutations also hold an exclusive file lock and
    re-read the persisted index first, which serializes separate processes
    (one per post-receive hook) sharing the same index file.
    """

    def __init__(
        self,
        store: PostIndexStore,
        materializer: WorkingCopyMaterializer,
        *,
        resolver: CommitTimestampResolver | None = None,
        renderer: Callable[[str], str] | None = None,
        default_state: PostState | str = PostState.PRIVATE,
        primary_document: str = DEFAULT_PRIMARY_DOCUMENT,
        show_progress: bool = False,
        lock_path: Path | str | None = None,
    ) -> None:
        self.store = store
        self.materializer = materializer
        self.resolver = resolver or CommitTimestampResolver()
        self.renderer = renderer or render_markdown
        self.default_state = PostState(default_state)
        if self.default_state is PostState.DELETE:
            raise ValueError("The default state cannot be 'delete'.")
        self.primary_document = primary_document
        self.show_progress = show_progress
        self._lock = threading.Lock()
        self.lock_path = Path(lock_path).expanduser().resolve() if lock_path else None
        self._file_lock = FileLock(str(self.lock_path)) if self.lock_path else None

    def bootstrap(self, *, rebuild_on_start: bool) -> int:
        """Populate the index at startup and return how many posts it holds."""
        if rebuild_on_start:
            report = self.rebuild()
            logger.info(
                "Rebuilt index: %d updated, %d removed, %d failed",
                len(report.updated),
                len(report.removed),
                len(report.failed),
            )
        else:
            with self._lock:
                count = self.store.load()
            logger.info("Loaded %d posts from %s", count, self.store.index_path)
        return len(self.store)

    def update(self, post_id: str) -> Post | None:
        """Re-process ``post_id`` after its repository changed.

        Returns the stored post, or ``None`` when the post was removed because
        it is marked for deletion or its working copy could not be produced.
        """
        validate_post_id(post_id)
        with self._exclusive():
            try:
                post = self._refresh(post_id)
            except ExtractionError as exc:
                logger.warning("Removed %s: %s", post_id, exc)
                post = None
            self.store.persist()
        return post

    def rebuild(self) -> RebuildReport:
        """Reconcile every post directory with the index, then persist once."""
        report = RebuildReport()
        with self._exclusive():
            candidates = sorted(
                set(self.materializer.list_working_copies())
                | set(self.materializer.list_repositories())
            )
            indexed = set(self.store.ids())

            for post_id in sorted(indexed.difference(candidates)):
                self.store.remove(post_id)
                report.removed.append(post_id)
                logger.info("Dropped %s: its directory is gone", post_id)

            existing = [post_id for post_id in candidates if post_id in indexed]
            for post_id in self._progress(existing, "Refreshing posts"):
                self._rebuild_one(post_id, report, known=True)

            discovered = [post_id for post_id in candidates if post_id not in indexed]
            for post_id in self._progress(discovered, "Discovering posts"):
                self._rebuild_one(post_id, report, known=False)

            self.store.persist()
        return report

    def build_post(self, post_id: str) -> Post:
        """Derive the record for an already materialized working copy.

        The result may carry ``PostState.DELETE``; callers must not store it.
        """
        last_modified = self.resolver.resolve(self.materializer.repository(post_id))
        try:
            raw_content = self._read_primary_document(post_id)
        except MissingContentError:
            logger.info("%s has no %s; indexing a private stub", post_id, self.primary_document)
            return Post.stub(post_id, last_modified)

        state = classify_state(raw_content, self.default_state)
        metadata = PostMetadata()
        if state is not PostState.DELETE:
            metadata = extract_metadata(self.renderer(raw_content))
        return Post(
            id=post_id,
            title=metadata.title,
            excerpt_html=metadata.excerpt_html,
            banner_path=metadata.banner_path,
            last_modified=last_modified,
            state=state,
        )

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        with self._lock:
            if self._file_lock is None:
                yield
                return
            try:
                self.lock_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise PersistenceError(
                    f"Unable to create lock file {self.lock_path}: {exc}"
                ) from exc
            with self._file_lock:
                # Another process may have persisted since this one last read.
                self.store.load()
                yield

    def _refresh(self, post_id: str, *, discard_on_failure: bool = True) -> Post | None:
        try:
            self.materializer.materialize(post_id)
        except ExtractionError:
            if discard_on_failure:
                self._discard(post_id)
            raise
        post = self.build_post(post_id)
        if post.state is PostState.DELETE:
            logger.info("Deleting %s as requested by its directive", post_id)
            self._discard(post_id)
            return None
        self.store.upsert(post)
        logger.info("Indexed %s (%s, %s)", post_id, post.state.value, post.last_modified)
        return post

    def _rebuild_one(self, post_id: str, report: RebuildReport, *, known: bool) -> None:
        try:
            post = self._refresh(post_id, discard_on_failure=known)
        except ExtractionError as exc:
            logger.warning("Unable to index %s: %s", post_id, exc)
            report.failed.append(post_id)
            if known:
                report.removed.append(post_id)
            return
        except (OSError, ValueError) as exc:
            logger.warning("Skipping %s: %s", post_id, exc)
            report.failed.append(post_id)
            return
        if post is None:
            report.removed.append(post_id)
        else:
            report.updated.append(post_id)

    def _discard(self, post_id: str) -> None:
        # Storage goes first so an interrupted removal is finished by the next
        # update of the same id.
        self.materializer.destroy(post_id)
        self.store.remove(post_id)

    def _read_primary_document(self, post_id: str) -> str:
        path = self.materializer.working_copy(post_id) / self.primary_document
        try:
            data = path.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise MissingContentError(str(path)) from exc
        return data.decode("utf-8", errors="replace")

    def _progress(self, post_ids: list[str], description: str) -> Iterable[str]:
        if self.show_progress and post_ids:
            return tqdm(post_ids, desc=description, unit="post", leave=False)
        return post_ids
