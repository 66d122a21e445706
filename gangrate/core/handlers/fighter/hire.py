"""Handler for hiring fighters and exotic beasts."""

from dataclasses import dataclass
from typing import Optional

from django.db import transaction

from gangrate.core.cost.services import get_cost_services
from gangrate.core.handlers.holders import fighter_parents
from gangrate.core.models import Fighter, Gang
from gangrate.models import format_cost_display
from gangrate.tracing import traced
from gangrate.tracker import track


@dataclass
class FighterHireResult:
    """Result of hiring a fighter."""

    fighter: Fighter
    fighter_cost: int
    description: str


@traced("handle_fighter_hire")
@transaction.atomic
def handle_fighter_hire(
    *,
    user,
    gang: Gang,
    name: str,
    credits: int,
    cost_adjustment: int = 0,
    owner_fighter: Optional[Fighter] = None,
) -> FighterHireResult:
    """
    Add a fighter to a gang.

    Passing ``owner_fighter`` hires an exotic beast: its cost is carried by
    the owning fighter.

    Raises:
        ValueError: If the owning fighter is in another gang or is itself a beast
    """
    if owner_fighter is not None:
        if owner_fighter.gang_id != gang.id:
            raise ValueError("A beast must belong to a fighter in the same gang")
        if owner_fighter.is_beast:
            raise ValueError("A beast cannot own another beast")

    fighter = Fighter(
        gang=gang,
        name=name,
        credits=credits,
        cost_adjustment=cost_adjustment,
        owner_fighter=owner_fighter,
        owner=user,
    )
    fighter.save_with_user(user=user)

    get_cost_services().dispatcher.invalidate_fighter(
        fighter.id, **fighter_parents(fighter)
    )

    track("fighter_hired", gang_id=gang.id, beast=owner_fighter is not None)

    return FighterHireResult(
        fighter=fighter,
        fighter_cost=credits + cost_adjustment,
        description=f"Hired {name} ({format_cost_display(credits + cost_adjustment)})",
    )
