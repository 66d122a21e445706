"""Handlers for granting and removing skills."""

from dataclasses import dataclass
from uuid import UUID

from django.db import transaction

from gangrate.core.cost.services import get_cost_services
from gangrate.core.handlers.holders import fighter_parents
from gangrate.core.models import Fighter, SkillGrant
from gangrate.tracing import traced


@dataclass
class SkillGrantResult:
    skill: SkillGrant
    description: str


@dataclass
class SkillRemovalResult:
    skill_id: UUID
    skill_name: str
    description: str


@traced("handle_skill_grant")
@transaction.atomic
def handle_skill_grant(
    *, user, fighter: Fighter, name: str, credits_increase: int = 0
) -> SkillGrantResult:
    """Give a fighter a skill. ``credits_increase`` may be 0 or negative."""
    skill = SkillGrant.objects.create(
        fighter=fighter, name=name, credits_increase=credits_increase
    )
    get_cost_services().dispatcher.invalidate_skill(
        skill.id, fighter.id, **fighter_parents(fighter)
    )
    return SkillGrantResult(skill=skill, description=f"{fighter.name} learned {name}")


@traced("handle_skill_removal")
@transaction.atomic
def handle_skill_removal(*, user, skill: SkillGrant) -> SkillRemovalResult:
    fighter = skill.fighter
    parents = fighter_parents(fighter)
    skill_id = skill.id
    name = skill.name

    skill.delete()

    get_cost_services().dispatcher.invalidate_skill(skill_id, fighter.id, **parents)
    return SkillRemovalResult(
        skill_id=skill_id,
        skill_name=name,
        description=f"{fighter.name} lost {name}",
    )
