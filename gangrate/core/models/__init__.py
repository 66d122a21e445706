from .base import AppBase
from .campaign import (
    Campaign,
    CampaignBattle,
    CampaignGang,
    CampaignMember,
    CampaignTerritory,
)
from .fighter import EquipmentAssignment, Effect, Fighter, SkillGrant
from .gang import Gang
from .vehicle import Vehicle

__all__ = [
    "AppBase",
    "Campaign",
    "CampaignBattle",
    "CampaignGang",
    "CampaignMember",
    "CampaignTerritory",
    "Effect",
    "EquipmentAssignment",
    "Fighter",
    "Gang",
    "SkillGrant",
    "Vehicle",
]
