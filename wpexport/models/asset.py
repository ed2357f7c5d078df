from typing import Optional

from pydantic import BaseModel, ConfigDict


class Asset(BaseModel):
    """An image discovered in the export and the post it belongs to.

    ``id`` is ``None`` for images scraped from post bodies; only declared
    attachments carry their own identity.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    post_id: str
    url: str
