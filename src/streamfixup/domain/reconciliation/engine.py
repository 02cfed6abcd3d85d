"""Reconciliation engine converging duplicate stream rows of one user.

The engine runs three independent passes (names, channels, metadata). Each pass
reads the user's full row snapshot, plans updates with the pure functions in
:mod:`streamfixup.domain.reconciliation.policy`, and only then writes. A pass
never observes its own writes; later passes observe earlier ones.

Writes are issued one ``UPDATE`` per row and committed per batch. Storage errors
are not caught here: they propagate to the driver, which isolates failures per
user. Re-running after a partial failure converges to the same end state.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import batched
from logging import getLogger
from typing import TYPE_CHECKING, Final

from streamfixup.domain.model import COLUMN_BY_FIELD, STREAMS_TABLE, FixupField, StreamRecord
from streamfixup.domain.ports import OrderBy

from .policy import plan_channel_updates, plan_metadata_updates, plan_name_updates

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

    from streamfixup.domain.ports import FixupUnitOfWork

    from .policy import FieldUpdate

DEFAULT_BATCH_SIZE: Final[int] = 1000

NEWEST_FIRST: Final[tuple[OrderBy, ...]] = (OrderBy.desc("s_updated"), OrderBy.desc("id"))

log = getLogger(__name__)


@dataclass(slots=True)
class FixupResult:
    """Rows updated per field during one ``reconcile_all`` run."""

    names: int = 0
    channels: int = 0
    logos: int = 0
    tvg_ids: int = 0

    @property
    def total(self) -> int:
        return self.names + self.channels + self.logos + self.tvg_ids

    def merge(self, other: FixupResult) -> FixupResult:
        return FixupResult(
            names=self.names + other.names,
            channels=self.channels + other.channels,
            logos=self.logos + other.logos,
            tvg_ids=self.tvg_ids + other.tvg_ids,
        )


class ReconciliationEngine:
    """Converge name, channel, logo and EPG id across a user's duplicate streams."""

    def __init__(
        self,
        uow: FixupUnitOfWork,
        *,
        ignore_fields: Collection[FixupField] = (),
        batch_size: int = DEFAULT_BATCH_SIZE,
        dry_run: bool = False,
    ) -> None:
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.uow = uow
        self.ignore_fields = frozenset(ignore_fields)
        self.batch_size = batch_size
        self.dry_run = dry_run

    def should_fix(self, fixup_field: FixupField) -> bool:
        return fixup_field not in self.ignore_fields

    def reconcile_all(self, user_id: int, *, provider_id: int | None = None) -> FixupResult:
        """Run names, channels and metadata passes in order and return the counts."""

        result = FixupResult()
        if self.should_fix(FixupField.NAME):
            result.names = self.reconcile_names(user_id, provider_id=provider_id)
        else:
            log.debug("Skipping name reconciliation for user %s", user_id)

        if self.should_fix(FixupField.CHANNEL):
            result.channels = self.reconcile_channels(user_id, provider_id=provider_id)
        else:
            log.debug("Skipping channel reconciliation for user %s", user_id)

        result.logos, result.tvg_ids = self.reconcile_metadata(user_id, provider_id=provider_id)

        log.info(
            "Reconciled user %s: names=%s, channels=%s, logos=%s, tvg_ids=%s%s",
            user_id,
            result.names,
            result.channels,
            result.logos,
            result.tvg_ids,
            " (dry run)" if self.dry_run else "",
        )
        return result

    def reconcile_names(self, user_id: int, *, provider_id: int | None = None) -> int:
        records = self._load(
            user_id,
            provider_id,
            ("id", "s_orig_name", "s_name", "s_type_id", "s_updated"),
        )
        return self.chunked_update(plan_name_updates(records), FixupField.NAME)

    def reconcile_channels(self, user_id: int, *, provider_id: int | None = None) -> int:
        records = self._load(user_id, provider_id, ("id", "s_name", "s_channel", "s_updated"))
        return self.chunked_update(plan_channel_updates(records), FixupField.CHANNEL)

    def reconcile_metadata(
        self,
        user_id: int,
        *,
        provider_id: int | None = None,
    ) -> tuple[int, int]:
        """Return ``(logos, tvg_ids)`` updated; reads nothing when both are ignored."""

        fix_logos = self.should_fix(FixupField.LOGO)
        fix_tvg_ids = self.should_fix(FixupField.TVG_ID)
        if not fix_logos and not fix_tvg_ids:
            log.debug("Skipping metadata reconciliation for user %s", user_id)
            return 0, 0

        columns = ["id", "s_name", "s_updated"]
        if fix_logos:
            columns.append(COLUMN_BY_FIELD[FixupField.LOGO])
        if fix_tvg_ids:
            columns.append(COLUMN_BY_FIELD[FixupField.TVG_ID])

        records = self._load(user_id, provider_id, columns)
        plan = plan_metadata_updates(records, logos=fix_logos, tvg_ids=fix_tvg_ids)
        return (
            self.chunked_update(plan.logos, FixupField.LOGO),
            self.chunked_update(plan.tvg_ids, FixupField.TVG_ID),
        )

    def chunked_update(self, updates: Sequence[FieldUpdate], fixup_field: FixupField) -> int:
        """Write ``updates`` one row at a time, committing after every batch."""

        if not updates:
            return 0

        column = COLUMN_BY_FIELD[fixup_field]
        store = self.uow.repositories.rows
        total = 0
        for batch in batched(updates, self.batch_size):
            if not self.dry_run:
                for update in batch:
                    store.update_row(STREAMS_TABLE, {"id": update.row_id}, {column: update.value})
                self.uow.commit()
            total += len(batch)
            log.debug("Applied %s %s updates (%s/%s)", len(batch), column, total, len(updates))
        return total

    def _load(
        self,
        user_id: int,
        provider_id: int | None,
        columns: Sequence[str],
    ) -> list[StreamRecord]:
        where: dict[str, object] = {"u_id": user_id}
        if provider_id is not None:
            where["p_id"] = provider_id
        rows = self.uow.repositories.rows.select_rows(
            STREAMS_TABLE,
            columns,
            where,
            order_by=NEWEST_FIRST,
        )
        return [StreamRecord.model_validate(dict(row)) for row in rows]
