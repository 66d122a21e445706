"""Fighter operation handlers."""

from gangrate.core.handlers.fighter.edit import (
    FighterEditResult,
    handle_fighter_edit,
)
from gangrate.core.handlers.fighter.effect import (
    EffectRemovalResult,
    EffectResult,
    handle_effect_add,
    handle_effect_removal,
)
from gangrate.core.handlers.fighter.hire import (
    FighterHireResult,
    handle_fighter_hire,
)
from gangrate.core.handlers.fighter.removal import (
    FighterDeletionResult,
    handle_fighter_deletion,
)
from gangrate.core.handlers.fighter.skill import (
    SkillGrantResult,
    SkillRemovalResult,
    handle_skill_grant,
    handle_skill_removal,
)
from gangrate.core.handlers.fighter.state import (
    FighterStateResult,
    handle_fighter_state_change,
)

__all__ = [
    "EffectRemovalResult",
    "EffectResult",
    "FighterDeletionResult",
    "FighterEditResult",
    "FighterHireResult",
    "FighterStateResult",
    "SkillGrantResult",
    "SkillRemovalResult",
    "handle_effect_add",
    "handle_effect_removal",
    "handle_fighter_deletion",
    "handle_fighter_edit",
    "handle_fighter_hire",
    "handle_fighter_state_change",
    "handle_skill_grant",
    "handle_skill_removal",
]
