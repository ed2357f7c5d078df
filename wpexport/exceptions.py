"""Error taxonomy for export conversion.

Only :class:`ExportParseError` is fatal to a run.  Everything else is scoped
to a single record and degrades to a best-effort result.
"""

from typing import Optional


class ExportParseError(ValueError):
    """The export document itself could not be read (bad XML, no channel)."""


class MalformedRecordError(ValueError):
    """A required field is absent on one export item."""

    def __init__(self, field: str, post_id: Optional[str] = None) -> None:
        self.field = field
        self.post_id = post_id
        hint = f" (post {post_id})" if post_id else ""
        super().__init__(f"Required field '{field}' is missing{hint}")


class EnrichmentError(RuntimeError):
    """Base class for per-record event enrichment failures."""

    def __init__(self, post_id: str, message: str) -> None:
        self.post_id = post_id
        super().__init__(f"Event metadata for post {post_id}: {message}")


class EnrichmentTimeoutError(EnrichmentError):
    pass


class EnrichmentTransportError(EnrichmentError):
    pass


class EnrichmentResponseShapeError(EnrichmentError):
    """Non-OK status, undecodable body, or no ``event_data`` object."""
