"""Parent ids of the rows handlers write, for cost cache invalidation."""

from typing import Optional

from gangrate.core.cost.store import campaign_ids_for_gang
from gangrate.core.models import Fighter, Vehicle


def check_single_holder(fighter: Optional[Fighter], vehicle: Optional[Vehicle]):
    if (fighter is None) == (vehicle is None):
        raise ValueError("Exactly one of fighter or vehicle must be given")


def fighter_parents(fighter: Fighter) -> dict:
    return {
        "gang_id": fighter.gang_id,
        "owner_fighter_id": fighter.owner_fighter_id,
        "campaign_ids": campaign_ids_for_gang(fighter.gang_id),
    }


def vehicle_parents(vehicle: Vehicle) -> dict:
    return {
        "gang_id": vehicle.gang_id,
        "fighter_id": vehicle.fighter_id,
        "campaign_ids": campaign_ids_for_gang(vehicle.gang_id),
    }


def holder_parents(
    fighter: Optional[Fighter] = None, vehicle: Optional[Vehicle] = None
) -> dict:
    """Parents of an equipment assignment or effect held by a fighter or vehicle."""
    check_single_holder(fighter, vehicle)
    if vehicle is not None:
        parents = vehicle_parents(vehicle)
        parents["vehicle_id"] = vehicle.id
        return parents

    parents = fighter_parents(fighter)
    parents["fighter_id"] = fighter.id
    return parents
