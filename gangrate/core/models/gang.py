from django.core import validators
from django.db import models
from simple_history.models import HistoricalRecords

from .base import AppBase
from .facts import GangFacts


class Gang(AppBase):
    """A Gang is a player's collection of fighters and vehicles."""

    help_text = "A Gang is a player's collection of fighters and vehicles."
    name = models.CharField(
        max_length=255, validators=[validators.MinLengthValidator(1)]
    )
    credits = models.IntegerField(
        default=0, help_text="Unspent credits held by the gang."
    )
    rating = models.IntegerField(
        default=0,
        help_text="Last computed gang rating. The cost cache keeps this up to date; "
        "the computed value is authoritative.",
    )

    history = HistoricalRecords()

    class Meta:
        verbose_name = "Gang"
        verbose_name_plural = "Gangs"
        ordering = ["name"]

    def __str__(self):
        return self.name

    def facts(self) -> GangFacts:
        return GangFacts(id=self.id, rating=self.rating)
