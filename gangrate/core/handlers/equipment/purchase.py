"""
Handler for buying equipment for a fighter or a vehicle.

Equipment costs are opaque numbers here; the caller decides what an item costs.
"""

from dataclasses import dataclass
from typing import Optional

from django.db import transaction

from gangrate.core.cost.services import get_cost_services
from gangrate.core.handlers.holders import holder_parents
from gangrate.core.models import EquipmentAssignment, Fighter, Vehicle
from gangrate.models import format_cost_display
from gangrate.tracing import traced


@dataclass
class EquipmentPurchaseResult:
    """Result of a successful equipment purchase."""

    assignment: EquipmentAssignment
    equipment_cost: int
    description: str


@traced("handle_equipment_purchase")
@transaction.atomic
def handle_equipment_purchase(
    *,
    user,
    name: str,
    cost: int,
    fighter: Optional[Fighter] = None,
    vehicle: Optional[Vehicle] = None,
) -> EquipmentPurchaseResult:
    """
    Assign a new item of equipment to a fighter or a vehicle.

    The cached cost of the holder, its gang's rating and anything built on
    them are invalidated once the transaction commits.

    Args:
        user: The user buying the equipment
        name: Name of the item
        cost: Purchase cost in credits (may be negative)
        fighter: The fighter receiving the item
        vehicle: The vehicle receiving the item

    Returns:
        EquipmentPurchaseResult with the new assignment

    Raises:
        ValueError: If neither or both of fighter and vehicle are given
    """
    parents = holder_parents(fighter, vehicle)

    assignment = EquipmentAssignment.objects.create(
        fighter=fighter, vehicle=vehicle, name=name, purchase_cost=cost
    )

    get_cost_services().dispatcher.invalidate_equipment(assignment.id, **parents)

    holder = fighter or vehicle
    return EquipmentPurchaseResult(
        assignment=assignment,
        equipment_cost=cost,
        description=f"Bought {name} for {holder.name} ({format_cost_display(cost)})",
    )
