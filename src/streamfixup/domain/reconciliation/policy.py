"""Winner selection and update planning for each reconciled field.

Every planner receives one snapshot of a user's stream rows ordered newest-first
(``updated DESC`` with NULLs last, then ``id DESC``). Because of that ordering the
first qualifying value seen for a key is the most recent one, so selection is a
single "first wins" scan followed by a second scan that emits the updates.

Policies:

- names: grouped by original name and stream type. Only rows that were never
  customised (blank, or still equal to the provider's name) are filled in.
- channels: grouped by the current display name. Only rows without a usable
  channel (blank or ``"0"``) are filled in.
- metadata: grouped by the current display name. Logo and EPG id winners are
  chosen independently and every row in the group converges to them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from streamfixup.domain.model import StreamRecord


@dataclass(frozen=True, slots=True)
class FieldUpdate:
    """Set one field of one stream row to ``value``."""

    row_id: int
    value: str


@dataclass(slots=True)
class MetadataPlan:
    logos: list[FieldUpdate] = field(default_factory=list)
    tvg_ids: list[FieldUpdate] = field(default_factory=list)


def source_key(record: StreamRecord) -> str:
    """Identity of a logical channel as the provider named it, ignoring case only."""

    return f"{record.orig_name.lower()}||{record.type_id}"


def display_key(record: StreamRecord) -> str | None:
    """Identity of a logical channel by its current display name, if it has one."""

    return record.name.lower() or None


def select_winners(
    records: Iterable[StreamRecord],
    *,
    key: Callable[[StreamRecord], str | None],
    candidate: Callable[[StreamRecord], str | None],
) -> dict[str, str]:
    """Return the first non-empty candidate value per key, in iteration order."""

    winners: dict[str, str] = {}
    for record in records:
        group = key(record)
        if group is None or group in winners:
            continue
        value = candidate(record)
        if value:
            winners[group] = value
    return winners


def plan_name_updates(records: Sequence[StreamRecord]) -> list[FieldUpdate]:
    winners = select_winners(
        records,
        key=source_key,
        candidate=lambda record: record.name if record.has_custom_name else None,
    )
    updates: list[FieldUpdate] = []
    for record in records:
        if record.has_custom_name:
            continue
        best = winners.get(source_key(record))
        if best is not None and record.name != best:
            updates.append(FieldUpdate(record.id, best))
    return updates


def plan_channel_updates(records: Sequence[StreamRecord]) -> list[FieldUpdate]:
    winners = select_winners(
        records,
        key=display_key,
        candidate=lambda record: record.channel if record.has_channel else None,
    )
    updates: list[FieldUpdate] = []
    for record in records:
        group = display_key(record)
        if group is None or record.has_channel:
            continue
        best = winners.get(group)
        if best is not None and record.channel != best:
            updates.append(FieldUpdate(record.id, best))
    return updates


def _plan_convergence(
    records: Sequence[StreamRecord],
    value_of: Callable[[StreamRecord], str],
) -> list[FieldUpdate]:
    winners = select_winners(records, key=display_key, candidate=value_of)
    updates: list[FieldUpdate] = []
    for record in records:
        group = display_key(record)
        if group is None:
            continue
        best = winners.get(group)
        if best is not None and value_of(record) != best:
            updates.append(FieldUpdate(record.id, best))
    return updates


def plan_metadata_updates(
    records: Sequence[StreamRecord],
    *,
    logos: bool = True,
    tvg_ids: bool = True,
) -> MetadataPlan:
    plan = MetadataPlan()
    if logos:
        plan.logos = _plan_convergence(records, lambda record: record.tvg_logo)
    if tvg_ids:
        plan.tvg_ids = _plan_convergence(records, lambda record: record.tvg_id)
    return plan
