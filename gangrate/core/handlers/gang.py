"""Handlers for creating and updating gangs."""

from dataclasses import dataclass
from typing import Optional

from django.db import transaction

from gangrate.core.cost.services import get_cost_services
from gangrate.core.cost.store import campaign_ids_for_gang
from gangrate.core.models import Gang
from gangrate.tracing import traced


@dataclass
class GangResult:
    gang: Gang
    description: str


@traced("handle_gang_creation")
@transaction.atomic
def handle_gang_creation(*, user, name: str, credits: int = 0) -> GangResult:
    gang = Gang(name=name, credits=credits, owner=user)
    gang.save_with_user(user=user)

    # A read of this id before it existed cached a zero
    get_cost_services().dispatcher.invalidate_gang(gang.id)
    return GangResult(gang=gang, description=f"Created {name}")


@traced("handle_gang_update")
@transaction.atomic
def handle_gang_update(
    *,
    user,
    gang: Gang,
    name: Optional[str] = None,
    credits: Optional[int] = None,
) -> GangResult:
    """
    Update a gang's name or unspent credits.

    Neither changes the rating, but both show on pages cached under the gang.
    """
    if name is not None:
        gang.name = name
    if credits is not None:
        gang.credits = credits
    gang.save_with_user(user=user)

    get_cost_services().dispatcher.invalidate_gang(
        gang.id, campaign_ids=campaign_ids_for_gang(gang.id)
    )
    return GangResult(gang=gang, description=f"Updated {gang.name}")
