"""Handler for editing a fighter's cost fields."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from django.db import transaction

from gangrate.core.cost.services import get_cost_services
from gangrate.core.handlers.holders import fighter_parents
from gangrate.core.models import Fighter
from gangrate.tracing import traced


@dataclass
class FighterEditResult:
    """Result of editing a fighter."""

    fighter: Fighter
    changes: Dict[str, Tuple[Any, Any]] = field(default_factory=dict)

    @property
    def has_changes(self) -> bool:
        return bool(self.changes)


@traced("handle_fighter_edit")
@transaction.atomic
def handle_fighter_edit(
    *,
    user,
    fighter: Fighter,
    name: Optional[str] = None,
    credits: Optional[int] = None,
    cost_adjustment: Optional[int] = None,
) -> FighterEditResult:
    """
    Update a fighter's name, base credits or cost adjustment.

    Fields left as None are unchanged. Nothing is saved or invalidated when
    no field actually changes.
    """
    requested = {
        "name": name,
        "credits": credits,
        "cost_adjustment": cost_adjustment,
    }
    changes = {}
    for attr, value in requested.items():
        if value is None:
            continue
        old = getattr(fighter, attr)
        if old != value:
            changes[attr] = (old, value)
            setattr(fighter, attr, value)

    if not changes:
        return FighterEditResult(fighter=fighter)

    fighter.save_with_user(user=user)
    get_cost_services().dispatcher.invalidate_fighter(
        fighter.id, **fighter_parents(fighter)
    )
    return FighterEditResult(fighter=fighter, changes=changes)
