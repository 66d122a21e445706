"""Handler for removing equipment from a fighter or a vehicle."""

from dataclasses import dataclass
from uuid import UUID

from django.db import transaction

from gangrate.core.cost.services import get_cost_services
from gangrate.core.handlers.holders import holder_parents
from gangrate.core.models import EquipmentAssignment
from gangrate.models import format_cost_display
from gangrate.tracing import traced


@dataclass
class EquipmentRemovalResult:
    """Result of removing equipment."""

    assignment_id: UUID
    equipment_name: str
    equipment_cost: int
    description: str


@traced("handle_equipment_removal")
@transaction.atomic
def handle_equipment_removal(
    *,
    user,
    assignment: EquipmentAssignment,
) -> EquipmentRemovalResult:
    """
    Delete an equipment assignment.

    Args:
        user: The user removing the equipment
        assignment: The assignment to delete

    Returns:
        EquipmentRemovalResult describing what was removed
    """
    parents = holder_parents(assignment.fighter, assignment.vehicle)
    holder = assignment.fighter or assignment.vehicle
    assignment_id = assignment.id
    name = assignment.name
    cost = assignment.purchase_cost

    assignment.delete()

    get_cost_services().dispatcher.invalidate_equipment(assignment_id, **parents)

    return EquipmentRemovalResult(
        assignment_id=assignment_id,
        equipment_name=name,
        equipment_cost=cost,
        description=f"Removed {name} from {holder.name} ({format_cost_display(cost)})",
    )
