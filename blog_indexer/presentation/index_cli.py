"""CLI helpers for driving the synchronizer and printing the index."""

from __future__ import annotations

from typing import Iterable

from blog_indexer.config import IndexerConfig, build_synchronizer
from blog_indexer.data import Post, PostIndexStore
from blog_indexer.services import IndexSynchronizer, RebuildReport

__all__ = [
    "format_post",
    "print_posts",
    "print_rebuild_report",
    "run_boot_cli",
    "run_list_cli",
    "run_rebuild_cli",
    "run_update_cli",
]


def run_boot_cli(config: IndexerConfig, *, show_progress: bool = True) -> IndexSynchronizer:
    """Apply the configured startup policy and return the ready synchronizer."""
    synchronizer = build_synchronizer(config, show_progress=show_progress)
    synchronizer.bootstrap(rebuild_on_start=config.rebuild_on_start)
    return synchronizer


def run_rebuild_cli(config: IndexerConfig, *, show_progress: bool = True) -> RebuildReport:
    # The synchronizer re-reads the persisted index under its file lock, so
    # removals of known posts are detected.
    return build_synchronizer(config, show_progress=show_progress).rebuild()


def run_update_cli(config: IndexerConfig, post_ids: Iterable[str]) -> list[tuple[str, Post | None]]:
    """Incrementally update each id in turn, as a post-receive hook would."""
    synchronizer = build_synchronizer(config)
    return [(post_id, synchronizer.update(post_id)) for post_id in post_ids]


def run_list_cli(
    config: IndexerConfig, *, public_only: bool = False, limit: int | None = None
) -> list[Post]:
    if limit is not None and limit < 0:
        raise ValueError("limit must be non-negative.")
    store = PostIndexStore(config.index_path)
    store.load()
    posts = store.public_posts() if public_only else store.snapshot()
    return list(posts if limit is None else posts[:limit])


def format_post(post: Post) -> str:
    title = post.title or "(untitled)"
    return f"{post.last_modified}  {post.state.value:<7}  {post.id}  {title}"


def print_posts(posts: Iterable[Post]) -> None:
    posts = list(posts)
    if not posts:
        print("The post index is empty.")
        return
    for post in posts:
        print(format_post(post))


def print_rebuild_report(report: RebuildReport) -> None:
    print(
        f"Indexed {len(report.updated)} posts, removed {len(report.removed)}, "
        f"failed {len(report.failed)}."
    )
    for post_id in report.failed:
        print(f"- failed: {post_id}")
