"""Building normalized :class:`Record` objects from export items."""

import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import List, Optional, Tuple
from urllib.parse import unquote

from markdownify import MarkdownConverter

from wpexport.exceptions import MalformedRecordError
from wpexport.models.config import RunConfig
from wpexport.models.record import Frontmatter, PostMeta, Record
from wpexport.services.reader import Export, ExportItem
from wpexport.services.translator import get_post_content, init_converter

logger = logging.getLogger(__name__)

_SKIPPED_STATUSES = ("trash", "draft")
_THUMBNAIL_META_KEY = "_thumbnail_id"


def get_post_id(item: ExportItem) -> str:
    return item.require("post_id")


def get_post_slug(item: ExportItem) -> str:
    return unquote(item.text("post_name") or "")


def get_post_cover_image_id(item: ExportItem) -> Optional[str]:
    """Return the featured image attachment id, or *None* when the post has none."""
    postmeta = item.postmeta()
    if postmeta is None:
        return None
    for entry in postmeta:
        if entry.key == _THUMBNAIL_META_KEY:
            return entry.value
    return None


def get_post_title(item: ExportItem) -> str:
    return item.text("title") or ""


def parse_pub_date(value: str) -> Optional[datetime]:
    """Parse an RFC 2822 date into an aware UTC datetime, or *None* if unreadable.

    Dates without a zone offset are taken to be UTC.
    """
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_date(value: datetime, config: RunConfig) -> str:
    if config.custom_date_formatting:
        return value.strftime(config.custom_date_formatting)
    if config.include_time_with_date:
        return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return value.date().isoformat()


def get_post_published(item: ExportItem) -> Optional[datetime]:
    raw = item.text("pubDate")
    parsed = parse_pub_date(raw) if raw else None
    if parsed is None:
        logger.debug("Post %s has no usable pubDate (%r)", item.post_id, raw)
    return parsed


def get_post_date(item: ExportItem, config: RunConfig) -> str:
    parsed = get_post_published(item)
    return format_date(parsed, config) if parsed is not None else ""


def _process_category_tags(item: ExportItem, domain: str) -> List[str]:
    names = [unquote(entry.nicename) for entry in item.categories() if entry.domain == domain]
    return list(dict.fromkeys(names))


def get_categories(item: ExportItem, config: RunConfig) -> List[str]:
    excluded = set(config.filter_categories)
    return [name for name in _process_category_tags(item, "category") if name not in excluded]


def get_tags(item: ExportItem) -> List[str]:
    return _process_category_tags(item, "post_tag")


def get_post_creator(item: ExportItem) -> str:
    return item.require("creator")


def build_record(
    item: ExportItem,
    post_type: str,
    converter: MarkdownConverter,
    config: RunConfig,
) -> Record:
    """Assemble a :class:`Record` from one export item.

    Raises:
        MalformedRecordError: if ``post_id`` or ``dc:creator`` is missing.
    """
    post_id = get_post_id(item)
    slug = get_post_slug(item)
    published = get_post_published(item)

    meta = PostMeta(
        id=post_id,
        slug=slug,
        cover_image_id=get_post_cover_image_id(item),
        type=post_type,
        published=published,
    )
    frontmatter = Frontmatter(
        title=get_post_title(item),
        date=format_date(published, config) if published is not None else "",
        categories=get_categories(item, config),
        tags=get_tags(item),
        wp_id=post_id,
        wp_type=post_type,
        wp_slug=slug,
        creator=get_post_creator(item),
    )
    return Record(meta=meta, frontmatter=frontmatter, content=get_post_content(item, converter, config))


def collect_posts(
    export: Export,
    post_types: List[str],
    config: RunConfig,
    converter: Optional[MarkdownConverter] = None,
) -> Tuple[List[Record], List[MalformedRecordError]]:
    """Build records for every publishable item of *post_types*.

    Items with status ``trash`` or ``draft`` are ignored.  Items missing a
    required field are skipped; their errors are returned alongside the
    records so the caller can report them.
    """
    converter = converter or init_converter()
    records: List[Record] = []
    skipped: List[MalformedRecordError] = []

    for post_type in post_types:
        items = [item for item in export.items_of_type(post_type) if item.status not in _SKIPPED_STATUSES]
        for item in items:
            try:
                records.append(build_record(item, post_type, converter, config))
            except MalformedRecordError as exc:
                logger.warning("Skipping malformed %s item: %s", post_type, exc)
                skipped.append(exc)

        if len(post_types) > 1:
            logger.info('%d "%s" posts found.', len(items), post_type)

    return records, skipped
