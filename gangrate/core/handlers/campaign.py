"""Handlers for campaign membership, territories and battles."""

from dataclasses import dataclass
from typing import Optional

from django.db import transaction

from gangrate.core.cost.services import get_cost_services
from gangrate.core.models import (
    Campaign,
    CampaignBattle,
    CampaignGang,
    CampaignMember,
    CampaignTerritory,
    Gang,
)
from gangrate.tracing import traced
from gangrate.tracker import track


@dataclass
class CampaignResult:
    campaign: Campaign
    description: str


@dataclass
class CampaignGangResult:
    entry: Optional[CampaignGang]
    description: str


@dataclass
class TerritoryResult:
    territory: CampaignTerritory
    previous_gang_id: Optional[str]
    description: str


@dataclass
class BattleResult:
    battle: CampaignBattle
    description: str


@traced("handle_campaign_creation")
@transaction.atomic
def handle_campaign_creation(*, user, name: str, summary: str = "") -> CampaignResult:
    """Create a campaign with ``user`` as its owning member."""
    campaign = Campaign(name=name, summary=summary, owner=user)
    campaign.save_with_user(user=user)
    CampaignMember.objects.create(
        campaign=campaign, user=user, role=CampaignMember.OWNER
    )
    get_cost_services().dispatcher.invalidate_campaign(campaign.id)
    return CampaignResult(campaign=campaign, description=f"Created {name}")


@traced("handle_campaign_update")
@transaction.atomic
def handle_campaign_update(
    *, user, campaign: Campaign, name: Optional[str] = None, summary: Optional[str] = None
) -> CampaignResult:
    if name is not None:
        campaign.name = name
    if summary is not None:
        campaign.summary = summary
    campaign.save_with_user(user=user)
    gang_ids = campaign.campaign_gangs.values_list("gang_id", flat=True)
    get_cost_services().dispatcher.invalidate_campaign(campaign.id, gang_ids)
    return CampaignResult(campaign=campaign, description=f"Updated {campaign.name}")


@traced("handle_campaign_gang_add")
@transaction.atomic
def handle_campaign_gang_add(
    *,
    user,
    campaign: Campaign,
    gang: Gang,
    member: Optional[CampaignMember] = None,
) -> CampaignGangResult:
    """
    Enter a gang into a campaign.

    Raises:
        ValueError: If the gang is already in the campaign, or the member
            belongs to another campaign
    """
    if member is not None and member.campaign_id != campaign.id:
        raise ValueError("The member is not part of this campaign")
    if CampaignGang.objects.filter(campaign=campaign, gang=gang).exists():
        raise ValueError(f"{gang.name} is already in {campaign.name}")

    entry = CampaignGang.objects.create(campaign=campaign, gang=gang, member=member)
    get_cost_services().dispatcher.invalidate_campaign_membership(campaign.id, gang.id)
    track("campaign_gang_added", campaign_id=campaign.id, gang_id=gang.id)
    return CampaignGangResult(
        entry=entry, description=f"{gang.name} joined {campaign.name}"
    )


@traced("handle_campaign_gang_removal")
@transaction.atomic
def handle_campaign_gang_removal(
    *, user, campaign: Campaign, gang: Gang
) -> CampaignGangResult:
    deleted, _ = CampaignGang.objects.filter(campaign=campaign, gang=gang).delete()
    if not deleted:
        raise ValueError(f"{gang.name} is not in {campaign.name}")

    get_cost_services().dispatcher.invalidate_campaign_membership(campaign.id, gang.id)
    return CampaignGangResult(
        entry=None, description=f"{gang.name} left {campaign.name}"
    )


@traced("handle_territory_assignment")
@transaction.atomic
def handle_territory_assignment(
    *,
    user,
    territory: CampaignTerritory,
    gang: Optional[Gang] = None,
    ruined: Optional[bool] = None,
) -> TerritoryResult:
    """Give a territory to a gang (or nobody) and optionally mark it ruined."""
    if gang is not None:
        if not CampaignGang.objects.filter(
            campaign_id=territory.campaign_id, gang=gang
        ).exists():
            raise ValueError(f"{gang.name} is not in this campaign")

    previous_gang_id = territory.gang_id
    territory.gang = gang
    if ruined is not None:
        territory.ruined = ruined
    territory.save()

    get_cost_services().dispatcher.invalidate_territory(
        territory.id, territory.campaign_id
    )
    holder = gang.name if gang else "nobody"
    return TerritoryResult(
        territory=territory,
        previous_gang_id=str(previous_gang_id) if previous_gang_id else None,
        description=f"{territory.name} now held by {holder}",
    )


@traced("handle_battle_log")
@transaction.atomic
def handle_battle_log(
    *,
    user,
    campaign: Campaign,
    scenario: str,
    attacker: Optional[Gang] = None,
    defender: Optional[Gang] = None,
    winner: Optional[Gang] = None,
    note: str = "",
) -> BattleResult:
    """
    Record a battle.

    Raises:
        ValueError: If the winner did not take part
    """
    if winner is not None and winner not in (attacker, defender):
        raise ValueError("The winner must be the attacker or the defender")

    battle = CampaignBattle.objects.create(
        campaign=campaign,
        scenario=scenario,
        attacker=attacker,
        defender=defender,
        winner=winner,
        note=note,
    )
    get_cost_services().dispatcher.invalidate_battle(battle.id, campaign.id)
    return BattleResult(battle=battle, description=f"Logged {scenario}")
