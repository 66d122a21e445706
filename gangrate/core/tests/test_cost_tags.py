import uuid

import pytest

from gangrate.core.cost.tags import (
    ALL_COMPUTED,
    CacheTags,
    EntityKind,
    ParentIds,
    TagClass,
    campaign_overview_tags,
    fighter_cost_tags,
    gang_rating_tags,
    make_cache_key,
    tag_class,
    tags_for_change,
    vehicle_cost_tags,
)

GANG = uuid.uuid4()
FIGHTER = uuid.uuid4()
OWNER = uuid.uuid4()
VEHICLE = uuid.uuid4()
CAMPAIGN = uuid.uuid4()


def test_tags_are_deterministic_strings():
    assert CacheTags.gang_basic(GANG) == f"base-gang-basic-{GANG}"
    assert CacheTags.shared_gang_rating(GANG) == f"shared-gang-rating-{GANG}"
    assert CacheTags.computed_fighter_cost(FIGHTER) == f"computed-fighter-cost-{FIGHTER}"
    assert (
        CacheTags.composite_campaign_overview(CAMPAIGN)
        == f"composite-campaign-overview-{CAMPAIGN}"
    )
    # UUIDs and their string form give the same tag
    assert CacheTags.fighter_basic(FIGHTER) == CacheTags.fighter_basic(str(FIGHTER))


def test_tag_class():
    assert tag_class(CacheTags.vehicle_equipment(VEHICLE)) is TagClass.BASE
    assert tag_class(CacheTags.shared_fighter_cost(FIGHTER)) is TagClass.SHARED
    assert tag_class(CacheTags.computed_gang_rating(GANG)) is TagClass.COMPUTED
    assert tag_class(CacheTags.composite_gang_campaigns(GANG)) is TagClass.COMPOSITE
    assert tag_class(ALL_COMPUTED) is TagClass.COMPUTED


def test_fighter_cost_tags_include_empty_list_tags():
    """A fighter with no vehicles or beasts still depends on those lists."""
    tags = fighter_cost_tags(FIGHTER)

    assert CacheTags.fighter_vehicles(FIGHTER) in tags
    assert CacheTags.fighter_beasts(FIGHTER) in tags
    assert CacheTags.fighter_equipment(FIGHTER) in tags
    assert CacheTags.fighter_skills(FIGHTER) in tags
    assert CacheTags.fighter_effects(FIGHTER) in tags
    assert ALL_COMPUTED in tags


def test_fighter_cost_tags_include_what_was_read():
    beast = uuid.uuid4()
    tags = fighter_cost_tags(FIGHTER, vehicle_ids=[VEHICLE], beast_ids=[beast])

    assert vehicle_cost_tags(VEHICLE) <= tags
    assert CacheTags.fighter_equipment(beast) in tags


def test_gang_rating_tags_union():
    tags = gang_rating_tags(GANG, fighter_ids=[FIGHTER], vehicle_ids=[VEHICLE])

    assert CacheTags.gang_vehicles(GANG) in tags
    assert CacheTags.shared_gang_fighter_list(GANG) in tags
    assert fighter_cost_tags(FIGHTER) <= tags
    assert vehicle_cost_tags(VEHICLE) <= tags


def test_campaign_overview_tags_include_member_gang_ratings():
    tags = campaign_overview_tags(CAMPAIGN, gang_ids=[GANG])

    assert CacheTags.campaign_battles(CAMPAIGN) in tags
    assert CacheTags.shared_gang_rating(GANG) in tags


def test_equipment_on_fighter():
    tags = tags_for_change(
        EntityKind.EQUIPMENT,
        uuid.uuid4(),
        ParentIds(gang_id=GANG, fighter_id=FIGHTER),
    )

    assert tags == {
        CacheTags.fighter_equipment(FIGHTER),
        CacheTags.shared_fighter_cost(FIGHTER),
        CacheTags.computed_fighter_cost(FIGHTER),
        CacheTags.shared_gang_rating(GANG),
        CacheTags.computed_gang_rating(GANG),
    }


def test_equipment_on_crewed_vehicle():
    tags = tags_for_change(
        EntityKind.EQUIPMENT,
        uuid.uuid4(),
        ParentIds(gang_id=GANG, vehicle_id=VEHICLE, fighter_id=FIGHTER),
    )

    assert CacheTags.vehicle_equipment(VEHICLE) in tags
    assert CacheTags.computed_vehicle_cost(VEHICLE) in tags
    assert CacheTags.shared_fighter_cost(FIGHTER) in tags
    assert CacheTags.shared_gang_rating(GANG) in tags
    assert CacheTags.fighter_equipment(FIGHTER) not in tags


def test_skill_on_beast_reaches_owner():
    tags = tags_for_change(
        EntityKind.SKILL,
        uuid.uuid4(),
        ParentIds(gang_id=GANG, fighter_id=FIGHTER, owner_fighter_id=OWNER),
    )

    assert CacheTags.fighter_skills(FIGHTER) in tags
    assert CacheTags.fighter_beasts(OWNER) in tags
    assert CacheTags.shared_fighter_cost(OWNER) in tags


def test_skill_on_vehicle_is_rejected():
    with pytest.raises(ValueError):
        tags_for_change(
            EntityKind.SKILL, uuid.uuid4(), ParentIds(gang_id=GANG, vehicle_id=VEHICLE)
        )


def test_child_change_needs_a_holder():
    with pytest.raises(ValueError):
        tags_for_change(EntityKind.EFFECT, uuid.uuid4(), ParentIds(gang_id=GANG))


def test_vehicle_change():
    tags = tags_for_change(
        EntityKind.VEHICLE, VEHICLE, ParentIds(gang_id=GANG, fighter_id=FIGHTER)
    )

    assert {
        CacheTags.vehicle_basic(VEHICLE),
        CacheTags.gang_vehicles(GANG),
        CacheTags.fighter_vehicles(FIGHTER),
        CacheTags.shared_fighter_cost(FIGHTER),
        CacheTags.shared_gang_rating(GANG),
    } <= tags


def test_fighter_change():
    tags = tags_for_change(
        EntityKind.FIGHTER, FIGHTER, ParentIds(gang_id=GANG, campaign_ids=(CAMPAIGN,))
    )

    assert {
        CacheTags.fighter_basic(FIGHTER),
        CacheTags.shared_fighter_cost(FIGHTER),
        CacheTags.shared_gang_fighter_list(GANG),
        CacheTags.computed_gang_fighter_count(GANG),
        CacheTags.shared_gang_rating(GANG),
        CacheTags.composite_campaign_overview(CAMPAIGN),
    } <= tags


def test_gang_change():
    tags = tags_for_change(EntityKind.GANG, GANG)

    assert tags == {
        CacheTags.gang_basic(GANG),
        CacheTags.composite_gang_campaigns(GANG),
        CacheTags.shared_gang_rating(GANG),
        CacheTags.computed_gang_rating(GANG),
    }


def test_campaign_membership_change():
    tags = tags_for_change(
        EntityKind.CAMPAIGN_MEMBERSHIP,
        CAMPAIGN,
        ParentIds(gang_id=GANG, campaign_ids=(CAMPAIGN,)),
    )

    assert tags == {
        CacheTags.campaign_members(CAMPAIGN),
        CacheTags.shared_campaign_gang_list(CAMPAIGN),
        CacheTags.composite_campaign_overview(CAMPAIGN),
        CacheTags.composite_gang_campaigns(GANG),
    }



def test_campaign_change_reaches_member_gang_campaign_lists():
    tags = tags_for_change(
        EntityKind.CAMPAIGN,
        CAMPAIGN,
        ParentIds(campaign_ids=(CAMPAIGN,), gang_ids=(GANG,)),
    )

    assert tags == {
        CacheTags.campaign_basic(CAMPAIGN),
        CacheTags.composite_campaign_overview(CAMPAIGN),
        CacheTags.composite_gang_campaigns(GANG),
    }

@pytest.mark.parametrize(
    "kind,tag",
    [
        (EntityKind.TERRITORY, CacheTags.campaign_territories),
        (EntityKind.BATTLE, CacheTags.campaign_battles),
    ],
)
def test_campaign_child_change(kind, tag):
    tags = tags_for_change(kind, uuid.uuid4(), ParentIds(campaign_ids=(CAMPAIGN,)))

    assert tags == {tag(CAMPAIGN), CacheTags.composite_campaign_overview(CAMPAIGN)}


def test_campaign_child_change_needs_campaign():
    with pytest.raises(ValueError):
        tags_for_change(EntityKind.BATTLE, uuid.uuid4(), ParentIds())


def test_make_cache_key_sorts_params():
    assert make_cache_key("gang-rating", GANG, exclusions="campaign", b=1) == (
        f"gang-rating:{GANG}:b=1:exclusions=campaign"
    )
    assert make_cache_key("x", 1, b=2, a=1) == make_cache_key("x", 1, a=1, b=2)
