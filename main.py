"""CLI entry point for the blog post indexer."""

from __future__ import annotations

import argparse
import logging
import sys

from blog_indexer.config import ConfigError, load_config
from blog_indexer.data import PersistenceError
from blog_indexer.presentation.index_cli import (
    print_posts,
    print_rebuild_report,
    run_boot_cli,
    run_list_cli,
    run_rebuild_cli,
    run_update_cli,
)


def non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if number < 0:
        raise argparse.ArgumentTypeError("must be non-negative")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Maintain the post index built from per-post git repositories.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.json (default: data/.config/config.json when present).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("boot", help="Run the configured startup policy.")
    commands.add_parser("rebuild", help="Re-materialize and re-index every post.")

    update = commands.add_parser(
        "update", help="Re-index specific posts, e.g. from a post-receive hook."
    )
    update.add_argument("post_ids", nargs="+", metavar="ID")

    listing = commands.add_parser("list", help="Print the persisted index.")
    listing.add_argument(
        "--public", action="store_true", help="Only show public posts."
    )
    listing.add_argument(
        "--limit",
        type=non_negative_int,
        default=None,
        help="Maximum number of posts to print (default: all).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        config = load_config(args.config)
        if args.command == "boot":
            synchronizer = run_boot_cli(config)
            print_posts(synchronizer.store.public_posts())
        elif args.command == "rebuild":
            report = run_rebuild_cli(config)
            print_rebuild_report(report)
        elif args.command == "update":
            for post_id, post in run_update_cli(config, args.post_ids):
                print(f"{post_id}: {'removed' if post is None else post.state.value}")
        else:
            print_posts(run_list_cli(config, public_only=args.public, limit=args.limit))
    except ConfigError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2
    except PersistenceError as exc:
        print(f"Failed to write the post index: {exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"Invalid request: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
