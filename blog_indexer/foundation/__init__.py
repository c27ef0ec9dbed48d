"""Low-level helpers that interact with external tools (git, markdown, filesystem)."""

from .filesystem import atomic_write_text, list_directories, remove_tree
from .git import COMMIT_DATE_FORMAT, clone_repository, latest_commit_date, run_git
from .rendering import DEFAULT_MARKDOWN_EXTENSIONS, render_markdown

__all__ = [
    "COMMIT_DATE_FORMAT",
    "DEFAULT_MARKDOWN_EXTENSIONS",
    "atomic_write_text",
    "clone_repository",
    "latest_commit_date",
    "list_directories",
    "remove_tree",
    "render_markdown",
    "run_git",
]
