from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PostMeta(BaseModel):
    """Bookkeeping for a post that is not written into its frontmatter."""

    id: str
    slug: str
    cover_image_id: Optional[str] = None
    type: str
    published: Optional[datetime] = None
    image_urls: List[str] = Field(default_factory=list)


class Frontmatter(BaseModel):
    title: str = ""
    date: str = ""
    categories: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    wp_id: str
    wp_type: str
    wp_slug: str
    creator: str
    # Only populated for enriched event posts
    start_datetime: Optional[str] = None
    end_datetime: Optional[str] = None
    venue: Optional[str] = None
    address: Optional[str] = None
    ical_source_url: Optional[str] = None
    # Set by the image correlator
    cover_image: Optional[str] = Field(default=None, serialization_alias="coverImage")


class Record(BaseModel):
    """Unified internal model representing one exported post, page or custom type."""

    meta: PostMeta
    frontmatter: Frontmatter
    content: str  # body content (markdown, without frontmatter)
