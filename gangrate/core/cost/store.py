"""Load fact slices from the database for the cost aggregator."""

from collections import defaultdict
from typing import Dict, List, Tuple

from django.db.models import Prefetch

from gangrate.core.cost.errors import ComputationInputError
from gangrate.core.models import (
    Campaign,
    CampaignBattle,
    CampaignGang,
    CampaignMember,
    CampaignTerritory,
    Fighter,
    Gang,
    Vehicle,
)
from gangrate.core.models.facts import FighterSlice, GangFacts, VehicleSlice
from gangrate.tracing import traced

VEHICLE_PREFETCH = ("equipment", "effects")
FIGHTER_PREFETCH = (
    "equipment",
    "skills",
    "effects",
    Prefetch(
        "vehicles",
        queryset=Vehicle.objects.prefetch_related(*VEHICLE_PREFETCH),
    ),
)


def vehicle_slice(vehicle: Vehicle) -> VehicleSlice:
    """Build a slice from a vehicle with its equipment and effects prefetched."""
    return VehicleSlice(
        vehicle=vehicle.facts(),
        equipment=tuple(e.facts() for e in vehicle.equipment.all()),
        effects=tuple(e.facts() for e in vehicle.effects.all()),
    )


def fighter_slice(fighter: Fighter, beasts: Tuple[Fighter, ...] = ()) -> FighterSlice:
    """Build a slice from a fighter loaded with FIGHTER_PREFETCH."""
    return FighterSlice(
        fighter=fighter.facts(),
        equipment=tuple(e.facts() for e in fighter.equipment.all()),
        skills=tuple(s.facts() for s in fighter.skills.all()),
        effects=tuple(e.facts() for e in fighter.effects.all()),
        vehicles=tuple(vehicle_slice(v) for v in fighter.vehicles.all()),
        beasts=tuple(fighter_slice(b) for b in beasts),
    )


def load_gang(gang_id) -> Gang:
    try:
        return Gang.objects.get(pk=gang_id)
    except Gang.DoesNotExist:
        raise ComputationInputError("gang", gang_id)


@traced("load_fighter_slice")
def load_fighter_slice(fighter_id) -> FighterSlice:
    try:
        fighter = Fighter.objects.prefetch_related(
            *FIGHTER_PREFETCH,
            Prefetch(
                "beasts",
                queryset=Fighter.objects.prefetch_related(*FIGHTER_PREFETCH),
            ),
        ).get(pk=fighter_id)
    except Fighter.DoesNotExist:
        raise ComputationInputError("fighter", fighter_id)
    return fighter_slice(fighter, tuple(fighter.beasts.all()))


@traced("load_vehicle_slice")
def load_vehicle_slice(vehicle_id) -> VehicleSlice:
    try:
        vehicle = Vehicle.objects.prefetch_related(*VEHICLE_PREFETCH).get(
            pk=vehicle_id
        )
    except Vehicle.DoesNotExist:
        raise ComputationInputError("vehicle", vehicle_id)
    return vehicle_slice(vehicle)


@traced("load_gang_slices")
def load_gang_slices(
    gang_id,
) -> Tuple[GangFacts, List[FighterSlice], List[VehicleSlice]]:
    """
    Load everything a gang rating reads.

    Returns:
        The gang, a slice per fighter (beasts included, attached to their
        owners), and a slice per gang-stored vehicle.
    """
    gang = load_gang(gang_id)
    fighters = list(
        Fighter.objects.filter(gang_id=gang_id).prefetch_related(*FIGHTER_PREFETCH)
    )

    beasts_by_owner: Dict = defaultdict(list)
    for fighter in fighters:
        if fighter.owner_fighter_id is not None:
            beasts_by_owner[fighter.owner_fighter_id].append(fighter)

    fighter_slices = [
        fighter_slice(f, tuple(beasts_by_owner.get(f.id, ()))) for f in fighters
    ]
    stored_vehicles = [
        vehicle_slice(v)
        for v in Vehicle.objects.filter(
            gang_id=gang_id, fighter__isnull=True
        ).prefetch_related(*VEHICLE_PREFETCH)
    ]
    return gang.facts(), fighter_slices, stored_vehicles


def load_gang_fighters(gang_id):
    gang = load_gang(gang_id)
    return gang, [f.facts() for f in Fighter.objects.filter(gang_id=gang_id)]


def campaign_ids_for_gang(gang_id) -> Tuple:
    """Campaigns whose overview shows this gang."""
    return tuple(
        CampaignGang.objects.filter(gang_id=gang_id)
        .order_by("campaign_id")
        .values_list("campaign_id", flat=True)
    )


def load_gang_campaigns(gang_id) -> List[dict]:
    load_gang(gang_id)
    entries = (
        CampaignGang.objects.filter(gang_id=gang_id)
        .select_related("campaign")
        .order_by("campaign__name")
    )
    return [
        {
            "campaign_id": str(entry.campaign_id),
            "name": entry.campaign.name,
            "status": entry.status,
        }
        for entry in entries
    ]


@traced("load_campaign_overview")
def load_campaign_overview(campaign_id, battles_limit: int) -> dict:
    """
    Load the rows of a campaign overview.

    Gang ratings are not part of this; the caller reads them through the cache.
    """
    try:
        campaign = Campaign.objects.get(pk=campaign_id)
    except Campaign.DoesNotExist:
        raise ComputationInputError("campaign", campaign_id)

    members = CampaignMember.objects.filter(campaign=campaign).select_related("user")
    entries = CampaignGang.objects.filter(campaign=campaign).select_related(
        "gang", "member__user"
    )
    territories = CampaignTerritory.objects.filter(campaign=campaign)
    battles = CampaignBattle.objects.filter(campaign=campaign).order_by("-created")[
        :battles_limit
    ]

    return {
        "campaign": {"id": str(campaign.id), "name": campaign.name},
        "members": [
            {"user": m.user.username, "role": m.role} for m in members
        ],
        "gangs": [
            {
                "gang_id": str(e.gang_id),
                "name": e.gang.name,
                "status": e.status,
                "player": e.member.user.username if e.member else None,
            }
            for e in entries
        ],
        "territories": [
            {
                "name": t.name,
                "gang_id": str(t.gang_id) if t.gang_id else None,
                "ruined": t.ruined,
            }
            for t in territories
        ],
        "battles": [
            {
                "id": str(b.id),
                "scenario": b.scenario,
                "attacker_id": str(b.attacker_id) if b.attacker_id else None,
                "defender_id": str(b.defender_id) if b.defender_id else None,
                "winner_id": str(b.winner_id) if b.winner_id else None,
                "created": b.created.isoformat(),
            }
            for b in battles
        ],
    }
