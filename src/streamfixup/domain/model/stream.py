"""Stream and provider rows as seen by the reconciliation engine."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 # pydantic resolves the annotation at runtime
from typing import Final

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)

from .enums import FixupField

STREAMS_TABLE: Final[str] = "streams"
PROVIDERS_TABLE: Final[str] = "stream_providers"

UNSET_CHANNEL: Final[str] = "0"

# Storage column backing each field the engine is allowed to write.
COLUMN_BY_FIELD: Final[dict[FixupField, str]] = {
    FixupField.NAME: "s_name",
    FixupField.CHANNEL: "s_channel",
    FixupField.LOGO: "s_tvg_logo",
    FixupField.TVG_ID: "s_tvg_id",
}


def _none_to_blank(value: object) -> object:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return value


def _none_to_empty(value: object) -> object:
    return "" if value is None else value


class StorageRow(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class StreamRecord(StorageRow):
    """One ingested stream row.

    Only ``id`` is required: each reconciliation pass loads a subset of columns and
    the remaining fields fall back to their "unset" values. ``None`` becomes the
    empty string and text columns are trimmed, except ``orig_name`` which keeps the
    provider's exact value because it takes part in the grouping key. A row with
    anomalous data simply fails to qualify as customised instead of raising.
    """

    id: int
    user_id: int | None = Field(default=None, alias="u_id")
    provider_id: int | None = Field(default=None, alias="p_id")
    orig_name: str = Field(default="", alias="s_orig_name")
    name: str = Field(default="", alias="s_name")
    type_id: int = Field(default=0, alias="s_type_id")
    channel: str = Field(default=UNSET_CHANNEL, alias="s_channel")
    tvg_logo: str = Field(default="", alias="s_tvg_logo")
    tvg_id: str = Field(default="", alias="s_tvg_id")
    active: bool = Field(default=False, alias="s_active")
    updated_at: datetime | None = Field(default=None, alias="s_updated")

    _normalize_text = field_validator("name", "tvg_logo", "tvg_id", mode="before")(_none_to_blank)
    _normalize_orig_name = field_validator("orig_name", mode="before")(_none_to_empty)

    @field_validator("channel", mode="before")
    @classmethod
    def _normalize_channel(cls, value: object) -> str:
        if value is None:
            return UNSET_CHANNEL
        return str(value).strip()

    @field_validator("type_id", mode="before")
    @classmethod
    def _normalize_type(cls, value: object) -> object:
        return 0 if value is None else value

    @field_validator("active", mode="before")
    @classmethod
    def _normalize_active(cls, value: object) -> object:
        return False if value is None else value

    @field_validator("updated_at", mode="wrap")
    @classmethod
    def _lenient_timestamp(
        cls,
        value: object,
        handler: ValidatorFunctionWrapHandler,
    ) -> datetime | None:
        # zero dates and other unparseable values read as unset
        try:
            return handler(value)
        except ValidationError:
            return None

    @property
    def has_custom_name(self) -> bool:
        """A non-empty name that differs from what the provider supplied."""

        return self.name != "" and self.name != self.orig_name.strip()

    @property
    def has_channel(self) -> bool:
        return self.channel not in ("", UNSET_CHANNEL)


class Provider(StorageRow):
    """Upstream provider subscription owned by a user."""

    id: int
    user_id: int = Field(alias="u_id")
    name: str = Field(default="", alias="sp_name")
    last_synced: datetime | None = Field(default=None, alias="sp_last_synced")

    _normalize_name = field_validator("name", mode="before")(_none_to_blank)
