import uuid

import pytest

from gangrate.core.cost.aggregator import CAMPAIGN_EXCLUSIONS
from gangrate.core.cost.errors import ComputationInputError
from gangrate.core.cost.tags import CacheTags, EntityKind, ParentIds
from gangrate.core.handlers.equipment import handle_equipment_purchase
from gangrate.core.handlers.fighter import (
    handle_fighter_hire,
    handle_fighter_state_change,
)
from gangrate.core.handlers.vehicle import handle_vehicle_purchase
from gangrate.core.models import CampaignBattle, CampaignTerritory, Gang


@pytest.mark.django_db
def test_worked_example_through_the_cache(
    user,
    gang,
    make_fighter,
    make_equipment,
    make_skill,
    reader,
    django_capture_on_commit_callbacks,
):
    """135 for the fighter, 200 with a crewed vehicle, 0 once killed."""
    fighter = make_fighter(gang, "Rask", credits=100)
    make_equipment("Lasgun", 25, fighter=fighter)
    make_skill(fighter, "Nerves of Steel", credits_increase=10)

    assert reader.get_fighter_total_cost(fighter.id) == 135

    with django_capture_on_commit_callbacks(execute=True):
        result = handle_vehicle_purchase(
            user=user, gang=gang, name="Ridgehauler", cost=50, fighter=fighter
        )
        handle_equipment_purchase(
            user=user, vehicle=result.vehicle, name="Ram", cost=15
        )

    assert reader.get_fighter_total_cost(fighter.id) == 200
    assert reader.get_gang_rating(gang.id) == 200

    with django_capture_on_commit_callbacks(execute=True):
        handle_fighter_state_change(user=user, fighter=fighter, killed=True)

    assert reader.get_gang_rating(gang.id) == 0


@pytest.mark.django_db
def test_cache_hit_makes_no_queries(gang, make_fighter, reader, django_assert_num_queries):
    fighter = make_fighter(gang, "Rask", credits=100)
    reader.get_gang_rating(gang.id)
    reader.get_fighter_total_cost(fighter.id)

    with django_assert_num_queries(0):
        assert reader.get_gang_rating(gang.id) == 100
        assert reader.get_fighter_total_cost(fighter.id) == 100


@pytest.mark.django_db
def test_cached_value_survives_unreported_writes(gang, make_fighter, reader):
    """Writes that skip the dispatcher are not seen; handlers must report them."""
    fighter = make_fighter(gang, "Rask", credits=100)
    assert reader.get_fighter_total_cost(fighter.id) == 100

    fighter.credits = 300
    fighter.save()
    assert reader.get_fighter_total_cost(fighter.id) == 100

    reader.cache.purge({CacheTags.shared_fighter_cost(fighter.id)})
    assert reader.get_fighter_total_cost(fighter.id) == 300


@pytest.mark.django_db
def test_rating_includes_gang_stored_vehicles(
    gang, make_fighter, make_vehicle, make_equipment, make_effect, reader
):
    make_fighter(gang, "Rask", credits=100)
    stored = make_vehicle(gang, "Cargo-8", cost=80)
    make_equipment("Armour", 20, vehicle=stored)
    make_effect("Damaged", {"credits_increase": -10, "location": "hull"}, vehicle=stored)

    assert reader.get_vehicle_cost(stored.id) == 90
    assert reader.get_gang_rating(gang.id) == 190
    assert reader.compute_gang_rating_direct(gang.id) == 190


@pytest.mark.django_db
def test_effect_payloads(gang, make_fighter, make_effect, reader):
    fighter = make_fighter(gang, "Rask", credits=100)
    make_effect("Scar", {"note": "no cost"}, fighter=fighter)
    make_effect("Bionic eye", {"credits_increase": 25}, fighter=fighter)
    make_effect("Bad data", {"credits_increase": "lots"}, fighter=fighter)
    make_effect("Crippled", {"credits_increase": -50}, fighter=fighter)

    assert reader.get_fighter_total_cost(fighter.id) == 75


@pytest.mark.django_db
def test_beast_cost_is_carried_by_owner(
    gang, make_fighter, make_equipment, reader
):
    owner = make_fighter(gang, "Beastmaster", credits=100)
    beast = make_fighter(gang, "Cyber-mastiff", credits=40, owner_fighter=owner)
    make_equipment("Collar", 10, fighter=beast)

    assert reader.get_fighter_total_cost(owner.id) == 150
    assert reader.get_fighter_total_cost(beast.id) == 0
    assert reader.get_gang_rating(gang.id) == 150
    assert reader.get_gang_fighter_count(gang.id) == 1


@pytest.mark.django_db
def test_missing_gang_reads_as_zero_until_created(
    user, reader, caplog_json, django_capture_on_commit_callbacks
):
    gang_id = uuid.uuid4()

    assert reader.get_gang_rating(gang_id) == 0
    assert caplog_json.events("cost_input_missing")[0]["labels"] == {
        "kind": "gang",
        "entity_id": str(gang_id),
    }

    gang = Gang.objects.create(id=gang_id, name="Late Arrivals", owner=user)
    with django_capture_on_commit_callbacks(execute=True):
        handle_fighter_hire(user=user, gang=gang, name="Rask", credits=110)

    assert reader.get_gang_rating(gang_id) == 110


@pytest.mark.django_db
def test_direct_reads_raise_for_missing_input(reader):
    with pytest.raises(ComputationInputError):
        reader.compute_gang_rating_direct(uuid.uuid4())
    with pytest.raises(ComputationInputError):
        reader.compute_fighter_cost_direct(uuid.uuid4())
    with pytest.raises(ComputationInputError):
        reader.compute_vehicle_cost_direct(uuid.uuid4())


@pytest.mark.django_db
def test_rating_write_back(gang, make_fighter, reader, caplog_json):
    make_fighter(gang, "Rask", credits=120)

    assert reader.get_gang_rating(gang.id) == 120

    gang.refresh_from_db()
    assert gang.rating == 120
    events = caplog_json.events("gang_rating_out_of_sync")
    assert events[0]["labels"]["stored"] == 0
    assert events[0]["labels"]["computed"] == 120


@pytest.mark.django_db
def test_rating_write_back_disabled(gang, make_fighter, reader):
    reader.write_back = False
    make_fighter(gang, "Rask", credits=120)

    assert reader.get_gang_rating(gang.id) == 120

    gang.refresh_from_db()
    assert gang.rating == 0


@pytest.mark.django_db
def test_exclusion_policies_are_cached_separately(gang, make_fighter, reader):
    make_fighter(gang, "Rask", credits=100)
    make_fighter(gang, "Vex", credits=60, captured=True)

    assert reader.get_gang_rating(gang.id) == 100
    assert reader.get_gang_rating(gang.id, CAMPAIGN_EXCLUSIONS) == 160
    assert reader.get_gang_fighter_count(gang.id) == 1
    assert reader.get_gang_fighter_count(gang.id, CAMPAIGN_EXCLUSIONS) == 2


@pytest.mark.django_db
def test_campaign_overview(make_gang, make_fighter, make_campaign, reader):
    iron = make_gang("Iron Ghosts")
    ash = make_gang("Ash Wolves")
    make_fighter(iron, "Rask", credits=100)
    make_fighter(iron, "Vex", credits=50, captured=True)
    make_fighter(ash, "Dorn", credits=90)
    campaign = make_campaign(gangs=[iron, ash])
    CampaignTerritory.objects.create(campaign=campaign, name="Old Ruins", gang=ash)
    for i in range(3):
        CampaignBattle.objects.create(
            campaign=campaign, scenario=f"Skirmish {i}", attacker=iron, defender=ash
        )

    overview = reader.get_campaign_overview(campaign.id, battles_limit=2)

    # Captured fighters still count in campaign standings
    assert overview["ratings"] == {str(iron.id): 150, str(ash.id): 90}
    assert [t["name"] for t in overview["territories"]] == ["Old Ruins"]
    assert len(overview["battles"]) == 2
    assert {g["name"] for g in overview["gangs"]} == {"Iron Ghosts", "Ash Wolves"}


@pytest.mark.django_db
def test_campaign_overview_follows_member_ratings(
    gang, make_fighter, make_campaign, reader, dispatcher
):
    """The overview goes stale with an embedded rating, even without campaign ids."""
    fighter = make_fighter(gang, "Rask", credits=100)
    campaign = make_campaign(gangs=[gang])
    assert reader.get_campaign_overview(campaign.id)["ratings"] == {str(gang.id): 100}

    fighter.credits = 140
    fighter.save()
    dispatcher.invalidate(EntityKind.FIGHTER, fighter.id, ParentIds(gang_id=gang.id))

    assert reader.get_campaign_overview(campaign.id)["ratings"] == {str(gang.id): 140}


@pytest.mark.django_db
def test_missing_campaign_overview_is_empty(reader):
    overview = reader.get_campaign_overview(uuid.uuid4())

    assert overview["members"] == []
    assert overview["ratings"] == {}


@pytest.mark.django_db
def test_gang_campaigns(gang, make_campaign, reader):
    make_campaign("Dust Falls", gangs=[gang])
    make_campaign("Hive Wars", gangs=[gang])

    campaigns = reader.get_gang_campaigns(gang.id)

    assert [c["name"] for c in campaigns] == ["Dust Falls", "Hive Wars"]
