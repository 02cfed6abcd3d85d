"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class FixupField(StrEnum):
    """Fields the reconciliation engine can converge (and the CLI can ignore)."""

    NAME = "name"
    CHANNEL = "channel"
    LOGO = "logo"
    TVG_ID = "tvg_id"
