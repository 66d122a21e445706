"""Handler for deleting a fighter."""

from dataclasses import dataclass
from typing import List
from uuid import UUID

from django.db import transaction

from gangrate.core.cost.services import get_cost_services
from gangrate.core.cost.store import campaign_ids_for_gang
from gangrate.core.models import Fighter
from gangrate.tracing import traced


@dataclass
class FighterDeletionResult:
    """Result of deleting a fighter."""

    fighter_id: UUID
    fighter_name: str
    beast_ids: List[UUID]
    released_vehicle_ids: List[UUID]
    description: str


@traced("handle_fighter_deletion")
@transaction.atomic
def handle_fighter_deletion(*, user, fighter: Fighter) -> FighterDeletionResult:
    """
    Delete a fighter.

    The fighter's beasts are deleted with it. Vehicles it crewed stay with the
    gang as stored vehicles, so they now count towards the rating directly.
    """
    fighter_id = fighter.id
    gang_id = fighter.gang_id
    owner_fighter_id = fighter.owner_fighter_id
    name = fighter.name
    beast_ids = list(fighter.beasts.values_list("id", flat=True))
    vehicle_ids = list(fighter.vehicles.values_list("id", flat=True))
    campaign_ids = campaign_ids_for_gang(gang_id)

    fighter.delete()

    dispatcher = get_cost_services().dispatcher
    dispatcher.invalidate_fighter(
        fighter_id,
        gang_id,
        owner_fighter_id=owner_fighter_id,
        campaign_ids=campaign_ids,
    )
    for beast_id in beast_ids:
        dispatcher.invalidate_fighter(
            beast_id, gang_id, owner_fighter_id=fighter_id, campaign_ids=campaign_ids
        )
    for vehicle_id in vehicle_ids:
        dispatcher.invalidate_vehicle(
            vehicle_id, gang_id, fighter_id=fighter_id, campaign_ids=campaign_ids
        )

    return FighterDeletionResult(
        fighter_id=fighter_id,
        fighter_name=name,
        beast_ids=beast_ids,
        released_vehicle_ids=vehicle_ids,
        description=f"Removed {name}",
    )
