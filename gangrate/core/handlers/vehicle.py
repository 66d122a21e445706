"""Handlers for buying, crewing and removing vehicles."""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.db import transaction

from gangrate.core.cost.services import get_cost_services
from gangrate.core.cost.store import campaign_ids_for_gang
from gangrate.core.models import Fighter, Gang, Vehicle
from gangrate.models import format_cost_display
from gangrate.tracing import traced


@dataclass
class VehiclePurchaseResult:
    vehicle: Vehicle
    vehicle_cost: int
    description: str


@dataclass
class VehicleAssignmentResult:
    vehicle: Vehicle
    previous_fighter_id: Optional[UUID]
    description: str


@dataclass
class VehicleRemovalResult:
    vehicle_id: UUID
    vehicle_name: str
    description: str


def _check_crew(gang_id, fighter: Optional[Fighter]) -> None:
    if fighter is None:
        return
    if fighter.gang_id != gang_id:
        raise ValueError("A vehicle can only be crewed by a fighter in its gang")
    if fighter.is_beast:
        raise ValueError("A beast cannot crew a vehicle")


@traced("handle_vehicle_purchase")
@transaction.atomic
def handle_vehicle_purchase(
    *,
    user,
    gang: Gang,
    name: str,
    cost: int,
    fighter: Optional[Fighter] = None,
) -> VehiclePurchaseResult:
    """
    Buy a vehicle for a gang, optionally crewed by one of its fighters.

    Raises:
        ValueError: If the crew is not a fighter in the gang
    """
    _check_crew(gang.id, fighter)

    vehicle = Vehicle.objects.create(
        gang=gang, fighter=fighter, name=name, cost=cost, owner=user
    )
    get_cost_services().dispatcher.invalidate_vehicle(
        vehicle.id,
        gang.id,
        fighter_id=vehicle.fighter_id,
        campaign_ids=campaign_ids_for_gang(gang.id),
    )

    crew = f" crewed by {fighter.name}" if fighter else ""
    return VehiclePurchaseResult(
        vehicle=vehicle,
        vehicle_cost=cost,
        description=f"Bought {name}{crew} ({format_cost_display(cost)})",
    )


@traced("handle_vehicle_assignment")
@transaction.atomic
def handle_vehicle_assignment(
    *,
    user,
    vehicle: Vehicle,
    fighter: Optional[Fighter] = None,
) -> VehicleAssignmentResult:
    """
    Move a vehicle to a new crew, or back to the gang when ``fighter`` is None.

    Both the previous and the new crew's costs change.
    """
    _check_crew(vehicle.gang_id, fighter)

    previous_fighter_id = vehicle.fighter_id
    new_fighter_id = fighter.id if fighter else None
    if previous_fighter_id == new_fighter_id:
        return VehicleAssignmentResult(
            vehicle=vehicle,
            previous_fighter_id=previous_fighter_id,
            description=f"{vehicle.name} unchanged",
        )

    vehicle.fighter = fighter
    vehicle.save()

    dispatcher = get_cost_services().dispatcher
    campaign_ids = campaign_ids_for_gang(vehicle.gang_id)
    for fighter_id in (previous_fighter_id, new_fighter_id):
        dispatcher.invalidate_vehicle(
            vehicle.id, vehicle.gang_id, fighter_id=fighter_id, campaign_ids=campaign_ids
        )

    target = fighter.name if fighter else "the gang"
    return VehicleAssignmentResult(
        vehicle=vehicle,
        previous_fighter_id=previous_fighter_id,
        description=f"{vehicle.name} moved to {target}",
    )


@traced("handle_vehicle_removal")
@transaction.atomic
def handle_vehicle_removal(*, user, vehicle: Vehicle) -> VehicleRemovalResult:
    """Delete a vehicle along with its equipment and effects."""
    vehicle_id = vehicle.id
    gang_id = vehicle.gang_id
    fighter_id = vehicle.fighter_id
    name = vehicle.name

    vehicle.delete()

    get_cost_services().dispatcher.invalidate_vehicle(
        vehicle_id,
        gang_id,
        fighter_id=fighter_id,
        campaign_ids=campaign_ids_for_gang(gang_id),
    )
    return VehicleRemovalResult(
        vehicle_id=vehicle_id, vehicle_name=name, description=f"Removed {name}"
    )
