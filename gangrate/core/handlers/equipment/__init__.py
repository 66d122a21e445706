"""Equipment operation handlers."""

from gangrate.core.handlers.equipment.purchase import (
    EquipmentPurchaseResult,
    handle_equipment_purchase,
)
from gangrate.core.handlers.equipment.removal import (
    EquipmentRemovalResult,
    handle_equipment_removal,
)

__all__ = [
    "EquipmentPurchaseResult",
    "EquipmentRemovalResult",
    "handle_equipment_purchase",
    "handle_equipment_removal",
]
