"""Export conversion orchestration.

Order of operations:
1. Read the export and decide which post types to process.
2. Build one record per publishable item (event posts are enriched).
3. Collect attached and scraped images.
4. Merge images into the records that own them.
"""

import logging
from collections import Counter
from typing import List, Optional, Union

import httpx

from wpexport.models.config import EnrichmentSettings, RunConfig
from wpexport.models.record import Record
from wpexport.models.result import ConversionResult
from wpexport.services.classifier import get_post_types
from wpexport.services.events import EventSource, HttpEventSource, enrich_events
from wpexport.services.images import (
    collect_attached_images,
    collect_scraped_images,
    merge_images_into_posts,
)
from wpexport.services.reader import Export, read_export
from wpexport.services.records import collect_posts

logger = logging.getLogger(__name__)


async def _enrich(
    records: List[Record],
    config: RunConfig,
    settings: EnrichmentSettings,
    event_source: Optional[EventSource],
) -> List[Record]:
    if event_source is not None:
        return await enrich_events(records, event_source, config, settings)

    # Redirects are not followed: the endpoint is the only host ever contacted
    async with httpx.AsyncClient(timeout=settings.request_timeout, follow_redirects=False) as client:
        source = HttpEventSource(client, settings.events_endpoint, settings.request_timeout)
        return await enrich_events(records, source, config, settings)


async def parse_export(
    export: Union[Export, str, bytes],
    config: Optional[RunConfig] = None,
    event_source: Optional[EventSource] = None,
    settings: Optional[EnrichmentSettings] = None,
) -> ConversionResult:
    """Convert a WordPress export into ordered, image-correlated records.

    Args:
        export:       A parsed :class:`Export` or raw WXR markup.
        config:       Run options; defaults to :class:`RunConfig` defaults.
        event_source: Where event posts are enriched from.  When omitted, the
                      events REST endpoint in *settings* is queried.
        settings:     Server-side lookup settings (endpoint, timeout, pacing).
                      Defaults to :class:`EnrichmentSettings` defaults.

    Raises:
        ExportParseError: if *export* is raw markup that cannot be read.
    """
    config = config or RunConfig()
    settings = settings or EnrichmentSettings()
    if not isinstance(export, Export):
        export = read_export(export)

    post_types = get_post_types(export, config.include_other_types)
    records, skipped = collect_posts(export, post_types, config)

    if config.enrich_events and any(r.meta.type == config.event_post_type for r in records):
        records = await _enrich(records, config, settings, event_source)

    attached = collect_attached_images(export) if config.save_attached_images else []
    scraped = collect_scraped_images(export, post_types) if config.save_scraped_images else []
    merge_images_into_posts(attached + scraped, records)

    posts_by_type = Counter(record.meta.type for record in records)
    if len(post_types) == 1:
        logger.info("%d posts found.", len(records))
    if skipped:
        logger.warning("%d malformed posts skipped.", len(skipped))

    return ConversionResult(
        post_types=post_types,
        records=records,
        posts_by_type={post_type: posts_by_type[post_type] for post_type in post_types},
        attached_images_found=len(attached),
        scraped_images_found=len(scraped),
        skipped_records=len(skipped),
    )
