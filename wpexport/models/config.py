from typing import List

from pydantic import BaseModel, ConfigDict, Field

EVENTS_ENDPOINT = "https://dssg.fas.harvard.edu/wp-json/wp/v2/events/{id}"


class RunConfig(BaseModel):
    """Options controlling a single export conversion run.

    This is the ``options`` body of ``POST /convert``; unknown keys are
    rejected.  Outbound request settings live in :class:`EnrichmentSettings`.
    """

    model_config = ConfigDict(extra="forbid")

    include_other_types: bool = Field(
        default=False,
        description="Process pages and custom post types, not only plain posts.",
    )
    save_attached_images: bool = True
    save_scraped_images: bool = True
    custom_date_formatting: str = Field(
        default="",
        description="strftime format for the frontmatter date. Takes precedence over include_time_with_date.",
        examples=["%B %d, %Y"],
    )
    include_time_with_date: bool = False
    filter_categories: List[str] = Field(default_factory=lambda: ["uncategorized"])

    event_post_type: str = "ai1ec_event"
    enrich_events: bool = True

    post_folders: bool = Field(
        default=True,
        description="Write each post as <slug>/index.md instead of <slug>.md.",
    )
    prefix_date: bool = False


class EnrichmentSettings(BaseModel):
    """Server-side settings for event lookups. Never taken from a request."""

    events_endpoint: str = EVENTS_ENDPOINT
    request_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Seconds to wait for one event lookup before abandoning it.",
    )
    request_spacing: float = Field(
        default=5.0,
        ge=0,
        description="Seconds between consecutive event lookups (remote rate limit).",
    )
    max_concurrent_requests: int = Field(default=4, ge=1, le=16)
