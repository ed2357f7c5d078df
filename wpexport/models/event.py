from typing import Any, Optional

from pydantic import BaseModel, field_validator


class EventData(BaseModel):
    """The ``event_data`` object returned by the events REST endpoint.

    Numbers are accepted and stored as strings; unknown keys are ignored.
    """

    start_datetime: Optional[str] = None
    end_datetime: Optional[str] = None
    venue: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    postal_code: Optional[str] = None
    ical_source_url: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _numbers_to_str(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value
