from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from wpexport.models.config import RunConfig


class ConvertRequest(BaseModel):
    export_xml: str = Field(
        min_length=1,
        description="Contents of a WordPress WXR export file.",
    )
    options: RunConfig = Field(default_factory=RunConfig)
    events: Optional[Dict[str, Dict[str, Any]]] = Field(
        default=None,
        description=(
            "Pre-fetched event payloads keyed by post id. When given, event posts "
            "are enriched from this mapping instead of the events REST endpoint."
        ),
    )
