"""Image discovery and image-to-post correlation."""

import logging
import re
from typing import List
from urllib.parse import urljoin

from wpexport.models.asset import Asset
from wpexport.models.record import Record
from wpexport.services.reader import Export

logger = logging.getLogger(__name__)

_IMAGE_URL_RE = re.compile(r"\.(gif|jpe?g|png)$", re.IGNORECASE)

# <img> tags whose src points at an image file, e.g. <img class="x" src="/a.png" />
_IMG_TAG_RE = re.compile(r'<img[^>]*src="(.+?\.(?:gif|jpe?g|png))"[^>]*>', re.IGNORECASE)


def get_filename_from_url(url: str) -> str:
    return url.split("/")[-1]


def collect_attached_images(export: Export) -> List[Asset]:
    """Return one :class:`Asset` per attachment item whose URL is an image file."""
    images: List[Asset] = []
    for attachment in export.items_of_type("attachment"):
        url = attachment.text("attachment_url") or ""
        post_id = attachment.post_id
        if post_id is None or not _IMAGE_URL_RE.search(url):
            continue
        images.append(Asset(id=post_id, post_id=attachment.text("post_parent") or "", url=url))

    logger.info("%d attached images found.", len(images))
    return images


def collect_scraped_images(export: Export, post_types: List[str]) -> List[Asset]:
    """Return one :class:`Asset` per ``<img>`` found in the bodies of *post_types* items.

    Relative and protocol-relative ``src`` values are resolved against the
    post's own permalink.
    """
    images: List[Asset] = []
    for post_type in post_types:
        for item in export.items_of_type(post_type):
            post_id = item.post_id
            if post_id is None:
                continue
            link = item.text("link") or ""
            for match in _IMG_TAG_RE.finditer(item.content):
                images.append(Asset(post_id=post_id, url=urljoin(link, match.group(1))))

    logger.info("%d images scraped from post body content.", len(images))
    return images


def merge_images_into_posts(images: List[Asset], posts: List[Record]) -> None:
    """Attach every image to the post(s) it belongs to, in place.

    An image belongs to a post when it was uploaded to it (``post_id``) or
    when it is the post's featured image (``cover_image_id``); the latter also
    sets ``frontmatter.cover_image``.  Each URL is added to a post at most once.
    """
    for image in images:
        for post in posts:
            should_attach = image.post_id == post.meta.id

            if image.id is not None and image.id == post.meta.cover_image_id:
                should_attach = True
                post.frontmatter.cover_image = get_filename_from_url(image.url)

            if should_attach and image.url not in post.meta.image_urls:
                post.meta.image_urls.append(image.url)
