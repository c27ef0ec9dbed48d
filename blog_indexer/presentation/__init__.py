"""Presentation helpers for the command line."""

from .index_cli import (
    format_post,
    print_posts,
    print_rebuild_report,
    run_boot_cli,
    run_list_cli,
    run_rebuild_cli,
    run_update_cli,
)

__all__ = [
    "format_post",
    "print_posts",
    "print_rebuild_report",
    "run_boot_cli",
    "run_list_cli",
    "run_rebuild_cli",
    "run_update_cli",
]
