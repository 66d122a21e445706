"""
Invalidation of cached costs after writes.

Handlers report what they changed, together with the parent ids they already
know. The dispatcher resolves that to tags and purges them once the
transaction has committed. It never reads the database.

A failed purge never fails the write. It is logged, tracked and handed to the
``purge_cost_cache_tags`` task to retry.
"""

import logging
from typing import FrozenSet, Iterable, Optional

from django.db import transaction

from gangrate.core.cost.errors import CacheTransportError
from gangrate.core.cost.tags import (
    ALL_COMPUTED,
    EntityKind,
    ParentIds,
    tags_for_change,
)
from gangrate.core.tasks import purge_cost_cache_tags
from gangrate.tracing import traced
from gangrate.tracker import track

logger = logging.getLogger(__name__)


class InvalidationDispatcher:
    def __init__(self, cache, retry_task=purge_cost_cache_tags):
        self.cache = cache
        self.retry_task = retry_task

    @traced("cost_cache_invalidate")
    def invalidate(
        self, kind: EntityKind, entity_id, parents: Optional[ParentIds] = None
    ) -> FrozenSet[str]:
        """Purge the tags for a change now. Returns the tags purged."""
        tags = tags_for_change(kind, entity_id, parents)
        self.purge(tags, reason=kind.value)
        return tags

    def on_commit(
        self, kind: EntityKind, entity_id, parents: Optional[ParentIds] = None
    ) -> None:
        """
        Purge the tags for a change once the current transaction commits.

        Outside a transaction this runs straight away. The tags are resolved
        now, so a bad change description raises in the caller.
        """
        tags = tags_for_change(kind, entity_id, parents)
        transaction.on_commit(
            lambda: self.purge(tags, reason=kind.value), robust=True
        )

    def purge(self, tags: Iterable[str], reason: str = "") -> None:
        tags = frozenset(tags)
        try:
            self.cache.purge(tags)
        except CacheTransportError as e:
            logger.error(
                f"Failed to purge {len(tags)} cost cache tags ({reason}): {e}",
                exc_info=True,
            )
            track("cost_cache_purge_failed", reason=reason, tags=len(tags))
            self._defer(tags)
            return
        logger.debug(f"Purged {len(tags)} cost cache tags ({reason})")

    def _defer(self, tags: FrozenSet[str]) -> None:
        try:
            self.retry_task.enqueue(sorted(tags))
        except Exception as e:
            logger.error(
                f"Failed to enqueue cost cache purge retry: {e}", exc_info=True
            )

    # Entry points used by handlers

    def invalidate_gang(self, gang_id, campaign_ids: Iterable = ()) -> None:
        self.on_commit(
            EntityKind.GANG,
            gang_id,
            ParentIds(gang_id=gang_id, campaign_ids=tuple(campaign_ids)),
        )

    def invalidate_fighter(
        self,
        fighter_id,
        gang_id,
        owner_fighter_id=None,
        campaign_ids: Iterable = (),
    ) -> None:
        self.on_commit(
            EntityKind.FIGHTER,
            fighter_id,
            ParentIds(
                gang_id=gang_id,
                owner_fighter_id=owner_fighter_id,
                campaign_ids=tuple(campaign_ids),
            ),
        )

    def invalidate_vehicle(
        self, vehicle_id, gang_id, fighter_id=None, campaign_ids: Iterable = ()
    ) -> None:
        self.on_commit(
            EntityKind.VEHICLE,
            vehicle_id,
            ParentIds(
                gang_id=gang_id,
                fighter_id=fighter_id,
                campaign_ids=tuple(campaign_ids),
            ),
        )

    def invalidate_equipment(
        self,
        assignment_id,
        gang_id,
        fighter_id=None,
        vehicle_id=None,
        owner_fighter_id=None,
        campaign_ids: Iterable = (),
    ) -> None:
        self.on_commit(
            EntityKind.EQUIPMENT,
            assignment_id,
            ParentIds(
                gang_id=gang_id,
                fighter_id=fighter_id,
                vehicle_id=vehicle_id,
                owner_fighter_id=owner_fighter_id,
                campaign_ids=tuple(campaign_ids),
            ),
        )

    def invalidate_skill(
        self,
        skill_id,
        fighter_id,
        gang_id,
        owner_fighter_id=None,
        campaign_ids: Iterable = (),
    ) -> None:
        self.on_commit(
            EntityKind.SKILL,
            skill_id,
            ParentIds(
                gang_id=gang_id,
                fighter_id=fighter_id,
                owner_fighter_id=owner_fighter_id,
                campaign_ids=tuple(campaign_ids),
            ),
        )

    def invalidate_effect(
        self,
        effect_id,
        gang_id,
        fighter_id=None,
        vehicle_id=None,
        owner_fighter_id=None,
        campaign_ids: Iterable = (),
    ) -> None:
        self.on_commit(
            EntityKind.EFFECT,
            effect_id,
            ParentIds(
                gang_id=gang_id,
                fighter_id=fighter_id,
                vehicle_id=vehicle_id,
                owner_fighter_id=owner_fighter_id,
                campaign_ids=tuple(campaign_ids),
            ),
        )

    def invalidate_campaign(self, campaign_id, gang_ids: Iterable = ()) -> None:
        self.on_commit(
            EntityKind.CAMPAIGN,
            campaign_id,
            ParentIds(campaign_ids=(campaign_id,), gang_ids=tuple(gang_ids)),
        )

    def invalidate_campaign_membership(self, campaign_id, gang_id) -> None:
        self.on_commit(
            EntityKind.CAMPAIGN_MEMBERSHIP,
            campaign_id,
            ParentIds(gang_id=gang_id, campaign_ids=(campaign_id,)),
        )

    def invalidate_territory(self, territory_id, campaign_id) -> None:
        self.on_commit(
            EntityKind.TERRITORY, territory_id, ParentIds(campaign_ids=(campaign_id,))
        )

    def invalidate_battle(self, battle_id, campaign_id) -> None:
        self.on_commit(
            EntityKind.BATTLE, battle_id, ParentIds(campaign_ids=(campaign_id,))
        )

    def invalidate_computed(self) -> None:
        """Make every computed value stale. Runs immediately."""
        self.purge({ALL_COMPUTED}, reason="computed")
