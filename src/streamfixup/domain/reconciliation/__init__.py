"""Stream metadata reconciliation.

Flow for one user:
1) load the user's stream rows newest-first
2) select a winner per identity key (see :mod:`.policy`)
3) plan per-row updates toward the winners
4) apply them in committed batches
"""

from __future__ import annotations

from .engine import DEFAULT_BATCH_SIZE, FixupResult, ReconciliationEngine
from .policy import (
    FieldUpdate,
    MetadataPlan,
    plan_channel_updates,
    plan_metadata_updates,
    plan_name_updates,
)
from .scope import ProviderScope, ReconcileTarget

__all__ = [
    "DEFAULT_BATCH_SIZE",
    "FieldUpdate",
    "FixupResult",
    "MetadataPlan",
    "ProviderScope",
    "ReconcileTarget",
    "ReconciliationEngine",
    "plan_channel_updates",
    "plan_metadata_updates",
    "plan_name_updates",
]
