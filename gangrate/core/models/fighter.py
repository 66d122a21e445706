from django.core import validators
from django.db import models
from simple_history.models import HistoricalRecords

from gangrate.models import Base, format_cost_display

from .base import AppBase
from .facts import (
    EffectFacts,
    EffectPayload,
    EquipmentFacts,
    FighterFacts,
    SkillFacts,
)


class Fighter(AppBase):
    """A Fighter is a member of a Gang."""

    help_text = "A Fighter is a member of a Gang."
    gang = models.ForeignKey(
        "Gang", on_delete=models.CASCADE, related_name="fighters", null=False
    )
    name = models.CharField(
        max_length=255, validators=[validators.MinLengthValidator(1)]
    )
    credits = models.IntegerField(default=0, help_text="Base hiring cost.")
    cost_adjustment = models.IntegerField(
        default=0,
        help_text="Signed adjustment applied on top of the base cost.",
    )

    killed = models.BooleanField(default=False, db_index=True)
    retired = models.BooleanField(default=False, db_index=True)
    enslaved = models.BooleanField(default=False, db_index=True)
    captured = models.BooleanField(default=False, db_index=True)

    # Exotic beasts belong to another fighter, whose cost they add to
    owner_fighter = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="beasts",
        help_text="The fighter that owns this beast, if this fighter is a beast.",
    )

    history = HistoricalRecords()

    class Meta:
        verbose_name = "Fighter"
        verbose_name_plural = "Fighters"
        ordering = ["created"]

    def __str__(self):
        return self.name

    @property
    def is_beast(self) -> bool:
        return self.owner_fighter_id is not None

    def facts(self) -> FighterFacts:
        return FighterFacts(
            id=self.id,
            gang_id=self.gang_id,
            credits=self.credits,
            cost_adjustment=self.cost_adjustment,
            killed=self.killed,
            retired=self.retired,
            enslaved=self.enslaved,
            captured=self.captured,
            owner_fighter_id=self.owner_fighter_id,
        )


class EquipmentAssignment(Base):
    """An item of equipment bought for a fighter or a vehicle."""

    fighter = models.ForeignKey(
        "Fighter",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="equipment",
    )
    vehicle = models.ForeignKey(
        "Vehicle",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="equipment",
    )
    name = models.CharField(max_length=255)
    purchase_cost = models.IntegerField(default=0)

    class Meta:
        verbose_name = "Equipment Assignment"
        verbose_name_plural = "Equipment Assignments"
        ordering = ["created"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(fighter__isnull=False, vehicle__isnull=True)
                    | models.Q(fighter__isnull=True, vehicle__isnull=False)
                ),
                name="equipment_has_exactly_one_holder",
            )
        ]

    def __str__(self):
        return f"{self.name} ({format_cost_display(self.purchase_cost)})"

    def facts(self) -> EquipmentFacts:
        return EquipmentFacts(id=self.id, purchase_cost=self.purchase_cost)


class SkillGrant(Base):
    """A skill held by a fighter. Some skills change the fighter's cost."""

    fighter = models.ForeignKey(
        "Fighter", on_delete=models.CASCADE, related_name="skills"
    )
    name = models.CharField(max_length=255)
    credits_increase = models.IntegerField(default=0)

    class Meta:
        verbose_name = "Skill Grant"
        verbose_name_plural = "Skill Grants"
        ordering = ["created"]

    def __str__(self):
        return self.name

    def facts(self) -> SkillFacts:
        return SkillFacts(id=self.id, credits_increase=self.credits_increase)


class Effect(Base):
    """
    A game effect applied to a fighter or a vehicle.

    ``type_specific_data`` is free-form game data. Only its ``credits_increase``
    key matters for cost; see :class:`EffectPayload`.
    """

    fighter = models.ForeignKey(
        "Fighter",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="effects",
    )
    vehicle = models.ForeignKey(
        "Vehicle",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="effects",
    )
    name = models.CharField(max_length=255)
    type_specific_data = models.JSONField(default=dict, blank=True)

    class Meta:
        verbose_name = "Effect"
        verbose_name_plural = "Effects"
        ordering = ["created"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(fighter__isnull=False, vehicle__isnull=True)
                    | models.Q(fighter__isnull=True, vehicle__isnull=False)
                ),
                name="effect_has_exactly_one_target",
            )
        ]

    def __str__(self):
        return self.name

    @property
    def payload(self) -> EffectPayload:
        return EffectPayload.parse(self.type_specific_data)

    def facts(self) -> EffectFacts:
        return EffectFacts(id=self.id, payload=self.payload)
