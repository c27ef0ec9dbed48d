"""Visibility classification from the first-line directive of a post."""

from __future__ import annotations

from blog_indexer.data.models import PostState

__all__ = ["DIRECTIVE_PREFIX", "classify_state", "first_line"]

DIRECTIVE_PREFIX = "<!--"

# Checked in this order; the first keyword present on the line wins.
_KEYWORD_PRIORITY: tuple[PostState, ...] = (
    PostState.PUBLIC,
    PostState.PRIVATE,
    PostState.DELETE,
)


def first_line(raw_content: str) -> str:
    return raw_content.split("\n", 1)[0].rstrip("\r")


def classify_state(raw_content: str, default_state: PostState | str) -> PostState:
    """Return the state declared on the first line of ``raw_content``.

    Only an HTML comment on the very first line counts as a directive, e.g.
    ``<!-- public -->``. Without a recognised keyword ``default_state`` is
    returned.
    """
    default = PostState(default_state)
    if default is PostState.DELETE:
        raise ValueError("The default state cannot be 'delete'.")

    line = first_line(raw_content).lstrip("\ufeff").lstrip()
    if not line.startswith(DIRECTIVE_PREFIX):
        return default
    for state in _KEYWORD_PRIORITY:
        if state.value in line:
            return state
    return default
