"""Domain model for stream reconciliation."""

from __future__ import annotations

from .enums import FixupField
from .stream import (
    COLUMN_BY_FIELD,
    PROVIDERS_TABLE,
    STREAMS_TABLE,
    UNSET_CHANNEL,
    Provider,
    StreamRecord,
)

__all__ = [
    "COLUMN_BY_FIELD",
    "PROVIDERS_TABLE",
    "STREAMS_TABLE",
    "UNSET_CHANNEL",
    "FixupField",
    "Provider",
    "StreamRecord",
]
