from typing import Dict, List

from pydantic import BaseModel, Field

from wpexport.models.record import Record


class ConversionResult(BaseModel):
    """Outcome of one export conversion run."""

    post_types: List[str]
    records: List[Record]
    posts_by_type: Dict[str, int] = Field(default_factory=dict)
    attached_images_found: int = 0
    scraped_images_found: int = 0
    skipped_records: int = 0
