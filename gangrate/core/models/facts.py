"""Immutable facts dataclasses for cost-bearing models.

These are the only inputs the cost aggregator sees. They are built from model
instances by the store and never touch the database themselves.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple
from uuid import UUID


@dataclass(frozen=True)
class EffectPayload:
    """The part of an effect's type-specific data that affects cost.

    Every other key is carried through untouched in ``extra``.
    """

    credits_increase: Optional[int] = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def parse(cls, data: Any) -> "EffectPayload":
        if not isinstance(data, Mapping):
            return cls()

        extra = {k: v for k, v in data.items() if k != "credits_increase"}
        raw = data.get("credits_increase")

        # bool is an int subclass but never a credit amount
        if isinstance(raw, bool):
            return cls(None, extra)
        if isinstance(raw, int):
            return cls(raw, extra)
        if isinstance(raw, float) and math.isfinite(raw):
            return cls(int(raw), extra)
        return cls(None, extra)

    def as_data(self) -> dict:
        data = dict(self.extra)
        if self.credits_increase is not None:
            data["credits_increase"] = self.credits_increase
        return data


@dataclass(frozen=True)
class EquipmentFacts:
    """Immutable facts about an equipment assignment."""

    id: UUID
    purchase_cost: Any = 0


@dataclass(frozen=True)
class SkillFacts:
    """Immutable facts about a skill grant."""

    id: UUID
    credits_increase: Any = 0


@dataclass(frozen=True)
class EffectFacts:
    """Immutable facts about an effect."""

    id: UUID
    payload: EffectPayload = field(default_factory=EffectPayload)


@dataclass(frozen=True)
class VehicleFacts:
    """Immutable facts about a vehicle.

    ``fighter_id`` is None for a vehicle stored by the gang.
    """

    id: UUID
    gang_id: UUID
    fighter_id: Optional[UUID] = None
    cost: Any = 0

    @property
    def is_gang_stored(self) -> bool:
        return self.fighter_id is None


@dataclass(frozen=True)
class FighterFacts:
    """Immutable facts about a fighter."""

    id: UUID
    gang_id: UUID
    credits: Any = 0
    cost_adjustment: Any = 0
    killed: bool = False
    retired: bool = False
    enslaved: bool = False
    captured: bool = False
    owner_fighter_id: Optional[UUID] = None

    @property
    def is_beast(self) -> bool:
        return self.owner_fighter_id is not None


@dataclass(frozen=True)
class GangFacts:
    """Immutable facts about a gang."""

    id: UUID
    rating: int = 0


@dataclass(frozen=True)
class VehicleSlice:
    """A vehicle together with everything attached to it."""

    vehicle: VehicleFacts
    equipment: Tuple[EquipmentFacts, ...] = ()
    effects: Tuple[EffectFacts, ...] = ()


@dataclass(frozen=True)
class FighterSlice:
    """A fighter together with everything that contributes to its cost."""

    fighter: FighterFacts
    equipment: Tuple[EquipmentFacts, ...] = ()
    skills: Tuple[SkillFacts, ...] = ()
    effects: Tuple[EffectFacts, ...] = ()
    vehicles: Tuple[VehicleSlice, ...] = ()
    beasts: Tuple["FighterSlice", ...] = ()
