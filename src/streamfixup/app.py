"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from streamfixup.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyFixupUnitOfWork,
    is_started,
    startup,
)
from streamfixup.config import get_fixup_config
from streamfixup.domain.ports import FixupUnitOfWork
from streamfixup.domain.reconciliation import FixupResult, ProviderScope, ReconciliationEngine

if TYPE_CHECKING:
    from collections.abc import Iterable

    from streamfixup.config import FixupConfig
    from streamfixup.domain.reconciliation import ReconcileTarget

UnitOfWorkFactory = Callable[[], FixupUnitOfWork]


log = getLogger(__name__)


@dataclass(slots=True)
class FixupSummary:
    """Outcome of a fixup run across every resolved user."""

    targets: int = 0
    results_by_user: dict[int, FixupResult] = field(default_factory=dict)
    failed_users: list[int] = field(default_factory=list)

    @property
    def totals(self) -> FixupResult:
        combined = FixupResult()
        for result in self.results_by_user.values():
            combined = combined.merge(result)
        return combined

    @property
    def updated(self) -> int:
        return self.totals.total

    @property
    def ok(self) -> bool:
        return not self.failed_users


def fixup_streams(
    *,
    user_id: int | None = None,
    provider_id: int | None = None,
    ignore: str | Iterable[str] | None = None,
    batch_size: int | None = None,
    dry_run: bool = False,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> FixupSummary:
    """Reconcile stream metadata for every user selected by the filters.

    A failure while reconciling one user is logged and recorded in the summary;
    the remaining users are still processed.
    """

    config = get_fixup_config(ignore=ignore, batch_size=batch_size)
    if unit_of_work_factory is None and not is_started():
        startup()
    effective_uow = unit_of_work_factory or SqlAlchemyFixupUnitOfWork

    log.info(
        "Starting fixup: user_id=%s, provider_id=%s, ignore=%s, batch_size=%s, dry_run=%s",
        user_id,
        provider_id,
        ",".join(sorted(config.ignore_fields)) or "-",
        config.batch_size,
        dry_run,
    )

    with effective_uow() as uow:
        targets = ProviderScope(uow.repositories.providers).resolve(user_id, provider_id)

    summary = FixupSummary(targets=len(targets))
    if not targets:
        log.warning("No providers found")
        return summary

    for target in targets:
        try:
            summary.results_by_user[target.user_id] = _fixup_target(
                target,
                config=config,
                dry_run=dry_run,
                unit_of_work_factory=effective_uow,
            )
        except Exception:
            log.exception("Error reconciling streams for user %s", target.user_id)
            summary.failed_users.append(target.user_id)

    totals = summary.totals
    log.info(
        "Finished fixup: targets=%s, updated=%s (names=%s, channels=%s, logos=%s, tvg_ids=%s), "
        "errors=%s",
        summary.targets,
        totals.total,
        totals.names,
        totals.channels,
        totals.logos,
        totals.tvg_ids,
        len(summary.failed_users),
    )
    return summary


def _fixup_target(
    target: ReconcileTarget,
    *,
    config: FixupConfig,
    dry_run: bool,
    unit_of_work_factory: UnitOfWorkFactory,
) -> FixupResult:
    log.info(
        "Reconciling user %s (providers: %s)",
        target.user_id,
        ", ".join(str(provider_id) for provider_id in target.provider_ids),
    )
    with unit_of_work_factory() as uow:
        engine = ReconciliationEngine(
            uow,
            ignore_fields=config.ignore_fields,
            batch_size=config.batch_size,
            dry_run=dry_run,
        )
        return engine.reconcile_all(target.user_id)
