"""Handlers for adding and removing effects on fighters and vehicles."""

from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from django.db import transaction

from gangrate.core.cost.services import get_cost_services
from gangrate.core.handlers.holders import holder_parents
from gangrate.core.models import Effect, Fighter, Vehicle
from gangrate.tracing import traced


@dataclass
class EffectResult:
    effect: Effect
    credits_increase: int
    description: str


@dataclass
class EffectRemovalResult:
    effect_id: UUID
    effect_name: str
    description: str


@traced("handle_effect_add")
@transaction.atomic
def handle_effect_add(
    *,
    user,
    name: str,
    type_specific_data: Any = None,
    fighter: Optional[Fighter] = None,
    vehicle: Optional[Vehicle] = None,
) -> EffectResult:
    """
    Apply an effect to a fighter or a vehicle.

    ``type_specific_data`` is stored as given. Only a numeric
    ``credits_increase`` in it changes cost; anything else is kept as is.

    Raises:
        ValueError: If neither or both of fighter and vehicle are given
    """
    parents = holder_parents(fighter, vehicle)

    effect = Effect.objects.create(
        fighter=fighter,
        vehicle=vehicle,
        name=name,
        type_specific_data=type_specific_data if type_specific_data is not None else {},
    )
    get_cost_services().dispatcher.invalidate_effect(effect.id, **parents)

    holder = fighter or vehicle
    return EffectResult(
        effect=effect,
        credits_increase=effect.payload.credits_increase or 0,
        description=f"{name} applied to {holder.name}",
    )


@traced("handle_effect_removal")
@transaction.atomic
def handle_effect_removal(*, user, effect: Effect) -> EffectRemovalResult:
    parents = holder_parents(effect.fighter, effect.vehicle)
    effect_id = effect.id
    name = effect.name

    effect.delete()

    get_cost_services().dispatcher.invalidate_effect(effect_id, **parents)
    return EffectRemovalResult(
        effect_id=effect_id, effect_name=name, description=f"{name} removed"
    )
