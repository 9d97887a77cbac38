"""UTC timestamp type shared by the data and response models."""

from datetime import datetime, timezone
from typing import Annotated

from pydantic import PlainSerializer


def to_utc_isoformat(value: datetime) -> str:
    """ISO 8601 with a ``Z`` suffix. Naive values are taken to be UTC already."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


# Stored naive (SQLite keeps no offset); rendered with an explicit offset in JSON.
UTCDateTime = Annotated[datetime, PlainSerializer(to_utc_isoformat, return_type=str, when_used="json")]
