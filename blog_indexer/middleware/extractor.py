"""Derive listing metadata (title, excerpt, banner) from rendered post HTML."""

from __future__ import annotations

from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

__all__ = ["PostMetadata", "extract_metadata"]

# Serializes void elements as `<br>` and escapes only what the renderer
# escaped, so excerpts match the rendered markup.
_EXCERPT_FORMATTER = HTMLFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
)


@dataclass(slots=True, frozen=True)
class PostMetadata:
    """Display fields scraped from a rendered document."""

    title: str = ""
    excerpt_html: str = ""
    banner_path: str = ""


def extract_metadata(html: str) -> PostMetadata:
    """Scan ``html`` in document order for the first heading, paragraph and image.

    Paragraphs that embed an image are skipped when choosing the excerpt; the
    chosen paragraph is returned with its own markup.
    """
    soup = BeautifulSoup(html, "html.parser")
    return PostMetadata(
        title=_first_heading_text(soup),
        excerpt_html=_first_text_paragraph(soup),
        banner_path=_first_image_src(soup),
    )


def _first_heading_text(soup: BeautifulSoup) -> str:
    heading = soup.find("h1")
    if heading is None:
        return ""
    return heading.get_text().strip()


def _first_text_paragraph(soup: BeautifulSoup) -> str:
    for paragraph in soup.find_all("p"):
        if paragraph.find("img") is None:
            return paragraph.decode(formatter=_EXCERPT_FORMATTER).strip()
    return ""


def _first_image_src(soup: BeautifulSoup) -> str:
    image = soup.find("img")
    if not isinstance(image, Tag):
        return ""
    src = image.get("src")
    if isinstance(src, list):  # pragma: no cover - src is not multi-valued.
        src = " ".join(src)
    return (src or "").strip()
