"""HTML post body to Markdown conversion."""

import re
from typing import Dict

from bs4 import BeautifulSoup, Comment
from markdownify import MarkdownConverter

from wpexport.models.config import RunConfig
from wpexport.services.reader import ExportItem

# WordPress stores paragraphs as blank-line separated text (wpautop runs on render)
_DOUBLE_BREAK_RE = re.compile(r"(?:\r?\n){2}")

# Points scraped image references at the images/ folder saved next to the post
_IMG_SRC_RE = re.compile(
    r'(<img[^>]*src=").*?([^/"]+\.(?:gif|jpe?g|png))("[^>]*>)', re.IGNORECASE
)

# markdownify pads list markers to align continuation lines
_LIST_MARKER_RE = re.compile(r"^(\s*)(-|\d+\.) +", re.MULTILINE)

_REMOVE_TAGS = ("script", "style", "noscript")

_IFRAME_TOKEN = "WPEXPORTIFRAME{}X"


def init_converter() -> MarkdownConverter:
    """Return the converter shared by every post of a run."""
    return MarkdownConverter(heading_style="ATX", bullets="-")


def _clean(html: str) -> tuple[str, Dict[str, str]]:
    """Drop non-content nodes and swap iframes for placeholder tokens.

    markdownify has no Markdown form for embeds, so iframes are re-inserted as
    raw HTML after conversion.
    """
    soup = BeautifulSoup(html, "lxml")

    for tag in soup.find_all(_REMOVE_TAGS):
        tag.decompose()

    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    iframes: Dict[str, str] = {}
    for index, iframe in enumerate(soup.find_all("iframe")):
        token = _IFRAME_TOKEN.format(index)
        iframes[token] = str(iframe)
        iframe.replace_with(token)

    body = soup.body
    return (body.decode_contents() if body else str(soup)), iframes


def convert_html(html: str, converter: MarkdownConverter, save_scraped_images: bool = False) -> str:
    content = _DOUBLE_BREAK_RE.sub("\n<div></div>\n", html)

    if save_scraped_images:
        content = _IMG_SRC_RE.sub(r"\1images/\2\3", content)

    content, iframes = _clean(content)
    markdown = converter.convert(content)

    markdown = _LIST_MARKER_RE.sub(r"\1\2 ", markdown)
    for token, iframe in iframes.items():
        markdown = markdown.replace(token, iframe)

    return markdown.strip()


def get_post_content(item: ExportItem, converter: MarkdownConverter, config: RunConfig) -> str:
    return convert_html(item.content, converter, config.save_scraped_images)
