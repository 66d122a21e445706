"""
Cost aggregation over immutable fact slices.

Pure functions: no database access, no cache access. The same slices always
give the same totals.

A fighter's total is its base credits plus cost adjustment, plus the cost of
its equipment, skills and effects, plus the cost of every vehicle it crews.
An exotic beast costs nothing on its own line. Its cost is carried by the
fighter that owns it, unless the beast is excluded.

A gang's rating is the sum of its non-excluded fighters plus every vehicle
stored by the gang.
"""

import math
from dataclasses import dataclass
from typing import Any, FrozenSet, Iterable

from gangrate.core.models.facts import (
    EffectFacts,
    EquipmentFacts,
    FighterFacts,
    FighterSlice,
    GangFacts,
    SkillFacts,
    VehicleFacts,
    VehicleSlice,
)
from gangrate.tracing import traced

LIFECYCLE_FLAGS = ("killed", "retired", "enslaved", "captured")


@dataclass(frozen=True)
class ExclusionPolicy:
    """Which lifecycle flags remove a fighter from a rating."""

    name: str
    flags: FrozenSet[str]

    def __post_init__(self):
        unknown = set(self.flags) - set(LIFECYCLE_FLAGS)
        if unknown:
            raise ValueError(f"Unknown lifecycle flags: {sorted(unknown)}")

    def excludes(self, fighter: FighterFacts) -> bool:
        return any(getattr(fighter, flag) for flag in self.flags)


# The gang sheet leaves out anyone who cannot currently fight.
GANG_SHEET_EXCLUSIONS = ExclusionPolicy(
    "gang_sheet", frozenset({"killed", "retired", "enslaved", "captured"})
)
# Campaign standings still count captured fighters; they can be rescued.
CAMPAIGN_EXCLUSIONS = ExclusionPolicy(
    "campaign", frozenset({"killed", "retired", "enslaved"})
)

POLICIES = {p.name: p for p in (GANG_SHEET_EXCLUSIONS, CAMPAIGN_EXCLUSIONS)}


def coerce_credits(value: Any) -> int:
    """
    Turn a credit field from stored data into an int.

    Missing and malformed values count as 0. Never raises.

    >>> coerce_credits(25)
    25
    >>> coerce_credits(12.9)
    12
    >>> coerce_credits(None)
    0
    >>> coerce_credits("lots")
    0
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return 0


def _sum_equipment(equipment: Iterable[EquipmentFacts]) -> int:
    return sum(coerce_credits(e.purchase_cost) for e in equipment)


def _sum_effects(effects: Iterable[EffectFacts]) -> int:
    return sum(coerce_credits(e.payload.credits_increase) for e in effects)


def _sum_skills(skills: Iterable[SkillFacts]) -> int:
    return sum(coerce_credits(s.credits_increase) for s in skills)


def compute_vehicle_cost(
    vehicle: VehicleFacts,
    equipment: Iterable[EquipmentFacts],
    effects: Iterable[EffectFacts],
) -> int:
    """Base cost plus all the vehicle's equipment and effect deltas."""
    return (
        coerce_credits(vehicle.cost) + _sum_equipment(equipment) + _sum_effects(effects)
    )


def vehicle_slice_cost(vehicle_slice: VehicleSlice) -> int:
    return compute_vehicle_cost(
        vehicle_slice.vehicle, vehicle_slice.equipment, vehicle_slice.effects
    )


def _own_cost(
    fighter: FighterFacts,
    equipment: Iterable[EquipmentFacts],
    skills: Iterable[SkillFacts],
    effects: Iterable[EffectFacts],
) -> int:
    return (
        coerce_credits(fighter.credits)
        + coerce_credits(fighter.cost_adjustment)
        + _sum_equipment(equipment)
        + _sum_skills(skills)
        + _sum_effects(effects)
    )


def compute_fighter_cost(
    fighter: FighterFacts,
    equipment: Iterable[EquipmentFacts],
    skills: Iterable[SkillFacts],
    effects: Iterable[EffectFacts],
    vehicles: Iterable[VehicleSlice],
    beasts: Iterable[FighterSlice] = (),
    exclusions: ExclusionPolicy = GANG_SHEET_EXCLUSIONS,
) -> int:
    """
    Total cost of a fighter.

    Args:
        fighter: The fighter's own facts
        equipment: Equipment assigned directly to the fighter
        skills: The fighter's skills
        effects: Effects applied to the fighter
        vehicles: Slices of every vehicle the fighter crews
        beasts: Slices of the exotic beasts this fighter owns
        exclusions: Policy deciding which beasts still count

    Returns:
        The total in credits. A beast's own total is always 0.
    """
    if fighter.is_beast:
        return 0

    total = _own_cost(fighter, equipment, skills, effects)
    total += sum(vehicle_slice_cost(v) for v in vehicles)
    for beast in beasts:
        if exclusions.excludes(beast.fighter):
            continue
        total += _own_cost(beast.fighter, beast.equipment, beast.skills, beast.effects)
    return total


def fighter_slice_cost(
    fighter_slice: FighterSlice, exclusions: ExclusionPolicy = GANG_SHEET_EXCLUSIONS
) -> int:
    return compute_fighter_cost(
        fighter_slice.fighter,
        fighter_slice.equipment,
        fighter_slice.skills,
        fighter_slice.effects,
        fighter_slice.vehicles,
        fighter_slice.beasts,
        exclusions=exclusions,
    )


@traced("compute_gang_rating")
def compute_gang_rating(
    gang: GangFacts,
    fighters: Iterable[FighterSlice],
    gang_vehicles: Iterable[VehicleSlice],
    exclusions: ExclusionPolicy = GANG_SHEET_EXCLUSIONS,
) -> int:
    """
    Rating of a gang: every fighter the policy keeps plus every stored vehicle.

    Vehicles crewed by a fighter are counted through that fighter, so any
    crewed vehicle passed in ``gang_vehicles`` is skipped here.
    """
    rating = 0
    for fighter_slice in fighters:
        if fighter_slice.fighter.gang_id != gang.id:
            continue
        if exclusions.excludes(fighter_slice.fighter):
            continue
        rating += fighter_slice_cost(fighter_slice, exclusions)

    for vehicle_slice in gang_vehicles:
        if not vehicle_slice.vehicle.is_gang_stored:
            continue
        rating += vehicle_slice_cost(vehicle_slice)

    return rating


def count_active_fighters(
    fighters: Iterable[FighterFacts],
    exclusions: ExclusionPolicy = GANG_SHEET_EXCLUSIONS,
) -> int:
    """Number of fighters the policy keeps. Beasts are not counted."""
    return sum(1 for f in fighters if not f.is_beast and not exclusions.excludes(f))
