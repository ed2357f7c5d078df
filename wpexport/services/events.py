"""Event post enrichment from the events REST endpoint.

Event posts (``ai1ec_event`` by default) only carry their description in the
export.  Start/end times, venue and address live behind the site's REST API
and are fetched one request per post.  The remote side rate-limits, so
dispatches are paced at a fixed interval; a failed lookup leaves the post
unenriched and never removes it from the run.
"""

import asyncio
import logging
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Protocol
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from wpexport.exceptions import (
    EnrichmentError,
    EnrichmentResponseShapeError,
    EnrichmentTimeoutError,
    EnrichmentTransportError,
)
from wpexport.models.config import EnrichmentSettings, RunConfig
from wpexport.models.event import EventData
from wpexport.models.record import Record

logger = logging.getLogger(__name__)

_ADDRESS_FIELDS = ("address", "city", "province", "postal_code")


class EventSource(Protocol):
    async def fetch(self, post_id: str) -> Dict[str, Any]:
        """Return the raw event payload for *post_id* or raise :class:`EnrichmentError`."""
        ...


class HttpEventSource:
    """Looks events up one GET at a time on a shared :class:`httpx.AsyncClient`."""

    def __init__(self, client: httpx.AsyncClient, endpoint: str, timeout: float) -> None:
        self._client = client
        self._endpoint = endpoint
        self._timeout = timeout

    async def fetch(self, post_id: str) -> Dict[str, Any]:
        url = self._endpoint.format(id=quote(post_id, safe=""))
        try:
            # wait_for cancels the in-flight request when the deadline passes
            response = await asyncio.wait_for(self._client.get(url), timeout=self._timeout)
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise EnrichmentTimeoutError(post_id, f"no response within {self._timeout:g}s") from exc
        except httpx.HTTPError as exc:
            raise EnrichmentTransportError(post_id, str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            raise EnrichmentResponseShapeError(post_id, f"HTTP error! status: {response.status_code}")
        try:
            return response.json()
        except ValueError as exc:
            raise EnrichmentResponseShapeError(post_id, "response body is not JSON") from exc


class StaticEventSource:
    """Serves events from a mapping loaded once before the run (offline exports)."""

    def __init__(self, events: Mapping[str, Dict[str, Any]]) -> None:
        self._events = MappingProxyType(dict(events))

    async def fetch(self, post_id: str) -> Dict[str, Any]:
        try:
            return self._events[post_id]
        except KeyError:
            raise EnrichmentResponseShapeError(post_id, "no event payload loaded") from None


class DispatchPacer:
    """Spaces successive dispatches at least *interval* seconds apart.

    Callers are released in the order they arrive; the first one is never
    delayed.
    """

    def __init__(self, interval: float) -> None:
        self._interval = interval
        self._lock = asyncio.Lock()
        self._next_slot: Optional[float] = None

    async def wait(self) -> None:
        async with self._lock:
            loop = asyncio.get_running_loop()
            if self._next_slot is not None:
                delay = self._next_slot - loop.time()
                if delay > 0:
                    await asyncio.sleep(delay)
            self._next_slot = loop.time() + self._interval


def compose_address(event_data: Mapping[str, Any]) -> str:
    """Join the non-blank address parts as ``address, city, province, postal_code``."""
    parts = [str(event_data.get(field) or "").strip() for field in _ADDRESS_FIELDS]
    return ", ".join(part for part in parts if part)


def get_event_data(post_id: str, payload: Any) -> EventData:
    event_data = payload.get("event_data") if isinstance(payload, dict) else None
    if not isinstance(event_data, dict):
        raise EnrichmentResponseShapeError(post_id, "eventMetadata or event_data is missing")
    try:
        return EventData.model_validate(event_data)
    except ValidationError as exc:
        raise EnrichmentResponseShapeError(post_id, f"event_data has unexpected field types: {exc}") from exc


def apply_event_data(record: Record, event: EventData) -> Record:
    """Return a copy of *record* whose frontmatter carries the event fields."""
    frontmatter = record.frontmatter.model_copy(
        update={
            "start_datetime": event.start_datetime,
            "end_datetime": event.end_datetime,
            "venue": event.venue,
            "address": compose_address(event.model_dump()),
            "ical_source_url": event.ical_source_url,
        }
    )
    return record.model_copy(update={"frontmatter": frontmatter})


async def enrich_record(
    record: Record,
    source: EventSource,
    pacer: DispatchPacer,
    semaphore: asyncio.Semaphore,
) -> Record:
    """Fetch and merge event data for one post; return it unchanged on failure."""
    post_id = record.meta.id
    async with semaphore:
        await pacer.wait()
        logger.debug("Fetching event metadata for post %s", post_id)
        try:
            payload = await source.fetch(post_id)
            event = get_event_data(post_id, payload)
        except EnrichmentError as exc:
            logger.warning("Event enrichment failed, keeping post unenriched: %s", exc)
            return record
        except Exception as exc:
            logger.warning(
                "Unexpected error enriching post %s, keeping it unenriched: %r", post_id, exc
            )
            return record
    return apply_event_data(record, event)


async def enrich_events(
    records: List[Record],
    source: EventSource,
    config: RunConfig,
    settings: Optional[EnrichmentSettings] = None,
) -> List[Record]:
    """Enrich every record of ``config.event_post_type``.

    Returns a new list in the same order as *records*.  Each enrichment unit
    writes only to its own slot, so completion order never reorders output.
    """
    enriched = list(records)
    indexes = [i for i, record in enumerate(records) if record.meta.type == config.event_post_type]
    if not indexes:
        return enriched

    settings = settings or EnrichmentSettings()
    pacer = DispatchPacer(settings.request_spacing)
    semaphore = asyncio.Semaphore(settings.max_concurrent_requests)

    async def _run(index: int) -> None:
        enriched[index] = await enrich_record(records[index], source, pacer, semaphore)

    logger.info(
        "Enriching %d event posts (%.1fs spacing)", len(indexes), settings.request_spacing
    )
    await asyncio.gather(*(_run(i) for i in indexes))
    return enriched
