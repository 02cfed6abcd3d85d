"""Reconciliation run configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from streamfixup.domain.model import FixupField
from streamfixup.domain.reconciliation.engine import DEFAULT_BATCH_SIZE

from .env import optional_int_env
from .errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass(frozen=True, slots=True)
class FixupConfig:
    """Which fields to leave alone and how many row updates to commit at once."""

    ignore_fields: frozenset[FixupField] = field(default_factory=frozenset)
    batch_size: int = DEFAULT_BATCH_SIZE

    def __post_init__(self) -> None:
        if self.batch_size <= 0:
            raise ConfigurationError(f"Batch size must be positive, got {self.batch_size}")


def parse_ignore_fields(value: str | Iterable[str] | None) -> frozenset[FixupField]:
    """Parse ``"name, logo"`` (or an iterable of names) into a set of fields.

    Blank entries are dropped. Unknown names raise ``ConfigurationError`` listing
    every offending entry along with the accepted values.
    """

    if value is None:
        return frozenset()
    raw_items = value.split(",") if isinstance(value, str) else list(value)
    items = [item.strip().lower() for item in raw_items if item.strip()]

    valid = {member.value for member in FixupField}
    invalid = sorted({item for item in items if item not in valid})
    if invalid:
        accepted = ", ".join(member.value for member in FixupField)
        raise ConfigurationError(
            f"Invalid ignore fields: {', '.join(invalid)} (available: {accepted})"
        )
    return frozenset(FixupField(item) for item in items)


def get_fixup_config(
    *,
    ignore: str | Iterable[str] | None = None,
    batch_size: int | None = None,
) -> FixupConfig:
    """Build the run configuration, with explicit arguments taking precedence over env."""

    ignore_source = ignore if ignore is not None else os.getenv("STREAMFIXUP_IGNORE")
    resolved_batch_size = (
        batch_size
        if batch_size is not None
        else optional_int_env("STREAMFIXUP_BATCH_SIZE", DEFAULT_BATCH_SIZE)
    )
    return FixupConfig(
        ignore_fields=parse_ignore_fields(ignore_source),
        batch_size=resolved_batch_size,
    )
