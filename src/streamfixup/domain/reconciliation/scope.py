"""Resolve which users a fixup run should reconcile."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from streamfixup.domain.ports import ProviderRepository

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReconcileTarget:
    """A user whose streams are reconciled, with the providers that selected them."""

    user_id: int
    provider_ids: tuple[int, ...]


class ProviderScope:
    """Translate ``--user-id`` / ``--provider-id`` filters into reconcile targets.

    Duplicates span every provider a user subscribes to, so targets are always
    whole users; the provider filter only narrows which users are selected.
    """

    def __init__(self, providers: ProviderRepository) -> None:
        self.providers = providers

    def resolve(
        self,
        user_id: int | None = None,
        provider_id: int | None = None,
    ) -> list[ReconcileTarget]:
        providers = self.providers.find(user_id=user_id, provider_id=provider_id)
        provider_ids_by_user: dict[int, list[int]] = {}
        for provider in providers:
            provider_ids_by_user.setdefault(provider.user_id, []).append(provider.id)

        targets = [
            ReconcileTarget(user_id=owner, provider_ids=tuple(sorted(ids)))
            for owner, ids in sorted(provider_ids_by_user.items())
        ]
        log.debug(
            "Resolved %s target(s) from %s provider(s) (user_id=%s, provider_id=%s)",
            len(targets),
            len(providers),
            user_id,
            provider_id,
        )
        return targets
