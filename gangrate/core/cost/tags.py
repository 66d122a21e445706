"""
Cache tags for derived costs.

Every cached value is stored with the tags of everything it read. A write
purges the tags of everything it touched. Tags come in four classes:

- BASE: one entity's own rows, or one of its child lists
- SHARED: values read by several screens (a gang's rating, a fighter's cost)
- COMPUTED: the output of an aggregation
- COMPOSITE: a page-level bundle built out of other cached values

Tag strings are ``<class>-<entity>-<aspect>-<id>``. They are deterministic, so
any process can rebuild the tag of any entity from its id alone.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Tuple
from uuid import UUID

ALL_COMPUTED = "computed-all"


class TagClass(Enum):
    BASE = "base"
    SHARED = "shared"
    COMPOSITE = "composite"
    COMPUTED = "computed"


def tag_class(tag: str) -> TagClass:
    return TagClass(tag.split("-", 1)[0])


def _tag(cls: TagClass, entity: str, aspect: str, entity_id) -> str:
    return f"{cls.value}-{entity}-{aspect}-{entity_id}"


class CacheTags:
    """Tag builders. Each one is a pure function of an entity id."""

    # BASE
    @staticmethod
    def gang_basic(gang_id) -> str:
        return _tag(TagClass.BASE, "gang", "basic", gang_id)

    @staticmethod
    def gang_vehicles(gang_id) -> str:
        return _tag(TagClass.BASE, "gang", "vehicles", gang_id)

    @staticmethod
    def fighter_basic(fighter_id) -> str:
        return _tag(TagClass.BASE, "fighter", "basic", fighter_id)

    @staticmethod
    def fighter_equipment(fighter_id) -> str:
        return _tag(TagClass.BASE, "fighter", "equipment", fighter_id)

    @staticmethod
    def fighter_skills(fighter_id) -> str:
        return _tag(TagClass.BASE, "fighter", "skills", fighter_id)

    @staticmethod
    def fighter_effects(fighter_id) -> str:
        return _tag(TagClass.BASE, "fighter", "effects", fighter_id)

    @staticmethod
    def fighter_vehicles(fighter_id) -> str:
        return _tag(TagClass.BASE, "fighter", "vehicles", fighter_id)

    @staticmethod
    def fighter_beasts(fighter_id) -> str:
        return _tag(TagClass.BASE, "fighter", "beasts", fighter_id)

    @staticmethod
    def vehicle_basic(vehicle_id) -> str:
        return _tag(TagClass.BASE, "vehicle", "basic", vehicle_id)

    @staticmethod
    def vehicle_equipment(vehicle_id) -> str:
        return _tag(TagClass.BASE, "vehicle", "equipment", vehicle_id)

    @staticmethod
    def vehicle_effects(vehicle_id) -> str:
        return _tag(TagClass.BASE, "vehicle", "effects", vehicle_id)

    @staticmethod
    def campaign_basic(campaign_id) -> str:
        return _tag(TagClass.BASE, "campaign", "basic", campaign_id)

    @staticmethod
    def campaign_members(campaign_id) -> str:
        return _tag(TagClass.BASE, "campaign", "members", campaign_id)

    @staticmethod
    def campaign_territories(campaign_id) -> str:
        return _tag(TagClass.BASE, "campaign", "territories", campaign_id)

    @staticmethod
    def campaign_battles(campaign_id) -> str:
        return _tag(TagClass.BASE, "campaign", "battles", campaign_id)

    # SHARED
    @staticmethod
    def shared_gang_rating(gang_id) -> str:
        return _tag(TagClass.SHARED, "gang", "rating", gang_id)

    @staticmethod
    def shared_gang_fighter_list(gang_id) -> str:
        return _tag(TagClass.SHARED, "gang", "fighter-list", gang_id)

    @staticmethod
    def shared_fighter_cost(fighter_id) -> str:
        return _tag(TagClass.SHARED, "fighter", "cost", fighter_id)

    @staticmethod
    def shared_campaign_gang_list(campaign_id) -> str:
        return _tag(TagClass.SHARED, "campaign", "gang-list", campaign_id)

    # COMPUTED
    @staticmethod
    def computed_gang_rating(gang_id) -> str:
        return _tag(TagClass.COMPUTED, "gang", "rating", gang_id)

    @staticmethod
    def computed_gang_fighter_count(gang_id) -> str:
        return _tag(TagClass.COMPUTED, "gang", "fighter-count", gang_id)

    @staticmethod
    def computed_fighter_cost(fighter_id) -> str:
        return _tag(TagClass.COMPUTED, "fighter", "cost", fighter_id)

    @staticmethod
    def computed_vehicle_cost(vehicle_id) -> str:
        return _tag(TagClass.COMPUTED, "vehicle", "cost", vehicle_id)

    # COMPOSITE
    @staticmethod
    def composite_campaign_overview(campaign_id) -> str:
        return _tag(TagClass.COMPOSITE, "campaign", "overview", campaign_id)

    @staticmethod
    def composite_gang_campaigns(gang_id) -> str:
        return _tag(TagClass.COMPOSITE, "gang", "campaigns", gang_id)


# Unions: the full tag set of each cached read


def vehicle_cost_tags(vehicle_id) -> FrozenSet[str]:
    return frozenset(
        {
            CacheTags.vehicle_basic(vehicle_id),
            CacheTags.vehicle_equipment(vehicle_id),
            CacheTags.vehicle_effects(vehicle_id),
            CacheTags.computed_vehicle_cost(vehicle_id),
            ALL_COMPUTED,
        }
    )


def _fighter_own_tags(fighter_id) -> FrozenSet[str]:
    return frozenset(
        {
            CacheTags.fighter_basic(fighter_id),
            CacheTags.fighter_equipment(fighter_id),
            CacheTags.fighter_skills(fighter_id),
            CacheTags.fighter_effects(fighter_id),
        }
    )


def fighter_cost_tags(
    fighter_id, vehicle_ids: Iterable = (), beast_ids: Iterable = ()
) -> FrozenSet[str]:
    """Tags for a fighter's total cost, including the vehicles and beasts it read.

    The vehicle and beast list tags are always present, even when the fighter
    has none, so that adding the first one invalidates the cost.
    """
    tags = set(_fighter_own_tags(fighter_id))
    tags |= {
        CacheTags.fighter_vehicles(fighter_id),
        CacheTags.fighter_beasts(fighter_id),
        CacheTags.shared_fighter_cost(fighter_id),
        CacheTags.computed_fighter_cost(fighter_id),
        ALL_COMPUTED,
    }
    for vehicle_id in vehicle_ids:
        tags |= vehicle_cost_tags(vehicle_id)
    for beast_id in beast_ids:
        tags |= _fighter_own_tags(beast_id)
    return frozenset(tags)


def gang_rating_tags(
    gang_id, fighter_ids: Iterable = (), vehicle_ids: Iterable = ()
) -> FrozenSet[str]:
    """Tags for a gang rating. Pass the fighters and stored vehicles it read."""
    tags = {
        CacheTags.gang_basic(gang_id),
        CacheTags.gang_vehicles(gang_id),
        CacheTags.shared_gang_fighter_list(gang_id),
        CacheTags.shared_gang_rating(gang_id),
        CacheTags.computed_gang_rating(gang_id),
        ALL_COMPUTED,
    }
    for fighter_id in fighter_ids:
        tags |= fighter_cost_tags(fighter_id)
    for vehicle_id in vehicle_ids:
        tags |= vehicle_cost_tags(vehicle_id)
    return frozenset(tags)


def gang_fighter_count_tags(gang_id) -> FrozenSet[str]:
    return frozenset(
        {
            CacheTags.gang_basic(gang_id),
            CacheTags.shared_gang_fighter_list(gang_id),
            CacheTags.computed_gang_fighter_count(gang_id),
            ALL_COMPUTED,
        }
    )


def gang_campaigns_tags(gang_id) -> FrozenSet[str]:
    return frozenset(
        {
            CacheTags.gang_basic(gang_id),
            CacheTags.composite_gang_campaigns(gang_id),
        }
    )


def campaign_overview_tags(campaign_id, gang_ids: Iterable = ()) -> FrozenSet[str]:
    """Tags for a campaign overview, plus the rating tags of each member gang."""
    tags = {
        CacheTags.campaign_basic(campaign_id),
        CacheTags.campaign_members(campaign_id),
        CacheTags.campaign_territories(campaign_id),
        CacheTags.campaign_battles(campaign_id),
        CacheTags.shared_campaign_gang_list(campaign_id),
        CacheTags.composite_campaign_overview(campaign_id),
    }
    for gang_id in gang_ids:
        tags |= {CacheTags.gang_basic(gang_id), CacheTags.shared_gang_rating(gang_id)}
    return frozenset(tags)


# What changed -> which tags


class EntityKind(Enum):
    GANG = "gang"
    FIGHTER = "fighter"
    VEHICLE = "vehicle"
    EQUIPMENT = "equipment"
    SKILL = "skill"
    EFFECT = "effect"
    CAMPAIGN = "campaign"
    CAMPAIGN_MEMBERSHIP = "campaign_membership"
    TERRITORY = "territory"
    BATTLE = "battle"


@dataclass(frozen=True)
class ParentIds:
    """
    The ids above a changed entity, as known by the caller.

    ``fighter_id`` is the fighter holding a child row, or the crew of a
    vehicle. ``owner_fighter_id`` is set when the fighter is a beast.
    ``campaign_ids`` lists campaigns whose overview shows the affected gang.
    ``gang_ids`` lists the gangs entered in a changed campaign.
    """

    gang_id: Optional[UUID] = None
    fighter_id: Optional[UUID] = None
    vehicle_id: Optional[UUID] = None
    owner_fighter_id: Optional[UUID] = None
    campaign_ids: Tuple[UUID, ...] = ()
    gang_ids: Tuple[UUID, ...] = ()


def _fighter_cost_change(fighter_id) -> set:
    return {
        CacheTags.shared_fighter_cost(fighter_id),
        CacheTags.computed_fighter_cost(fighter_id),
    }


def _gang_rating_change(gang_id) -> set:
    if gang_id is None:
        return set()
    return {
        CacheTags.shared_gang_rating(gang_id),
        CacheTags.computed_gang_rating(gang_id),
    }


def _beast_owner_change(owner_fighter_id) -> set:
    if owner_fighter_id is None:
        return set()
    return {CacheTags.fighter_beasts(owner_fighter_id)} | _fighter_cost_change(
        owner_fighter_id
    )


_FIGHTER_CHILD_TAG = {
    EntityKind.EQUIPMENT: CacheTags.fighter_equipment,
    EntityKind.SKILL: CacheTags.fighter_skills,
    EntityKind.EFFECT: CacheTags.fighter_effects,
}

_VEHICLE_CHILD_TAG = {
    EntityKind.EQUIPMENT: CacheTags.vehicle_equipment,
    EntityKind.EFFECT: CacheTags.vehicle_effects,
}


def _child_change(kind: EntityKind, parents: ParentIds) -> set:
    tags = set()
    if parents.vehicle_id is not None:
        if kind not in _VEHICLE_CHILD_TAG:
            raise ValueError(f"A {kind.value} cannot belong to a vehicle")
        tags.add(_VEHICLE_CHILD_TAG[kind](parents.vehicle_id))
        tags.add(CacheTags.computed_vehicle_cost(parents.vehicle_id))
        if parents.fighter_id is not None:
            tags |= _fighter_cost_change(parents.fighter_id)
    elif parents.fighter_id is not None:
        tags.add(_FIGHTER_CHILD_TAG[kind](parents.fighter_id))
        tags |= _fighter_cost_change(parents.fighter_id)
        tags |= _beast_owner_change(parents.owner_fighter_id)
    else:
        raise ValueError(f"A {kind.value} change needs a fighter_id or vehicle_id")
    tags |= _gang_rating_change(parents.gang_id)
    return tags


def tags_for_change(
    kind: EntityKind, entity_id, parents: Optional[ParentIds] = None
) -> FrozenSet[str]:
    """
    Resolve a change to the tags that must be purged.

    Pure: uses only the ids passed in. The caller knows the parents of what it
    wrote; nothing here reads the database.
    """
    parents = parents or ParentIds()
    tags = set()

    if kind in (EntityKind.EQUIPMENT, EntityKind.SKILL, EntityKind.EFFECT):
        tags |= _child_change(kind, parents)

    elif kind is EntityKind.VEHICLE:
        tags |= {
            CacheTags.vehicle_basic(entity_id),
            CacheTags.computed_vehicle_cost(entity_id),
        }
        if parents.gang_id is not None:
            tags.add(CacheTags.gang_vehicles(parents.gang_id))
        if parents.fighter_id is not None:
            tags.add(CacheTags.fighter_vehicles(parents.fighter_id))
            tags |= _fighter_cost_change(parents.fighter_id)
        tags |= _gang_rating_change(parents.gang_id)

    elif kind is EntityKind.FIGHTER:
        tags.add(CacheTags.fighter_basic(entity_id))
        tags |= _fighter_cost_change(entity_id)
        tags |= _beast_owner_change(parents.owner_fighter_id)
        if parents.gang_id is not None:
            tags |= {
                CacheTags.shared_gang_fighter_list(parents.gang_id),
                CacheTags.computed_gang_fighter_count(parents.gang_id),
            }
        tags |= _gang_rating_change(parents.gang_id)

    elif kind is EntityKind.GANG:
        tags |= {
            CacheTags.gang_basic(entity_id),
            CacheTags.composite_gang_campaigns(entity_id),
        }
        tags |= _gang_rating_change(entity_id)

    elif kind is EntityKind.CAMPAIGN_MEMBERSHIP:
        if not parents.campaign_ids:
            raise ValueError("A campaign membership change needs campaign_ids")
        for campaign_id in parents.campaign_ids:
            tags |= {
                CacheTags.campaign_members(campaign_id),
                CacheTags.shared_campaign_gang_list(campaign_id),
            }
        if parents.gang_id is not None:
            tags.add(CacheTags.composite_gang_campaigns(parents.gang_id))

    elif kind is EntityKind.CAMPAIGN:
        tags.add(CacheTags.campaign_basic(entity_id))
        tags.add(CacheTags.composite_campaign_overview(entity_id))
        # Gang campaign lists embed the campaign name
        for gang_id in parents.gang_ids:
            tags.add(CacheTags.composite_gang_campaigns(gang_id))

    elif kind is EntityKind.TERRITORY:
        if not parents.campaign_ids:
            raise ValueError("A territory change needs campaign_ids")
        for campaign_id in parents.campaign_ids:
            tags.add(CacheTags.campaign_territories(campaign_id))

    elif kind is EntityKind.BATTLE:
        if not parents.campaign_ids:
            raise ValueError("A battle change needs campaign_ids")
        for campaign_id in parents.campaign_ids:
            tags.add(CacheTags.campaign_battles(campaign_id))

    for campaign_id in parents.campaign_ids:
        tags.add(CacheTags.composite_campaign_overview(campaign_id))

    return frozenset(tags)


def make_cache_key(name: str, *ids, **params) -> str:
    """
    Build the cache key of a read.

    >>> make_cache_key("gang-rating", "abc", exclusions="gang_sheet")
    'gang-rating:abc:exclusions=gang_sheet'
    """
    parts = [name, *(str(i) for i in ids)]
    parts.extend(f"{k}={params[k]}" for k in sorted(params))
    return ":".join(parts)
