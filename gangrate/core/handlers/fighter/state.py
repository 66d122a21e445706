"""Handler for lifecycle changes: killed, retired, enslaved, captured."""

from dataclasses import dataclass
from typing import Dict, Optional

from django.db import transaction

from gangrate.core.cost.services import get_cost_services
from gangrate.core.handlers.holders import fighter_parents
from gangrate.core.models import Fighter
from gangrate.tracing import traced
from gangrate.tracker import track


@dataclass
class FighterStateResult:
    """Result of a lifecycle change."""

    fighter: Fighter
    changed: Dict[str, bool]
    description: str


@traced("handle_fighter_state_change")
@transaction.atomic
def handle_fighter_state_change(
    *,
    user,
    fighter: Fighter,
    killed: Optional[bool] = None,
    retired: Optional[bool] = None,
    enslaved: Optional[bool] = None,
    captured: Optional[bool] = None,
) -> FighterStateResult:
    """
    Set or clear lifecycle flags on a fighter.

    Excluded fighters drop out of the gang rating, so every flag change
    invalidates the gang's rating and fighter count.

    Raises:
        ValueError: If no flag is given
    """
    requested = {
        "killed": killed,
        "retired": retired,
        "enslaved": enslaved,
        "captured": captured,
    }
    requested = {k: v for k, v in requested.items() if v is not None}
    if not requested:
        raise ValueError("No lifecycle flag given")

    changed = {}
    for flag, value in requested.items():
        if getattr(fighter, flag) != value:
            setattr(fighter, flag, value)
            changed[flag] = value

    if changed:
        fighter.save_with_user(user=user)
        get_cost_services().dispatcher.invalidate_fighter(
            fighter.id, **fighter_parents(fighter)
        )
        track("fighter_state_changed", fighter_id=fighter.id, **changed)

    description = ", ".join(
        f"{flag} {'set' if value else 'cleared'}" for flag, value in changed.items()
    )
    return FighterStateResult(
        fighter=fighter,
        changed=changed,
        description=f"{fighter.name}: {description or 'no change'}",
    )
