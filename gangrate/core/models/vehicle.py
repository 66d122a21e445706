from django.db import models

from .base import AppBase
from .facts import VehicleFacts


class Vehicle(AppBase):
    """
    A Vehicle belongs to a Gang and is either crewed by a fighter or stored.

    A crewed vehicle's cost is part of its fighter's cost. A stored vehicle
    (no fighter) counts directly towards the gang rating.
    """

    gang = models.ForeignKey(
        "Gang", on_delete=models.CASCADE, related_name="vehicles", null=False
    )
    fighter = models.ForeignKey(
        "Fighter",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="vehicles",
        help_text="The fighter crewing this vehicle. Empty means gang-stored.",
    )
    name = models.CharField(max_length=255)
    cost = models.IntegerField(default=0, help_text="Base cost of the vehicle.")

    class Meta:
        verbose_name = "Vehicle"
        verbose_name_plural = "Vehicles"
        ordering = ["created"]

    def __str__(self):
        return self.name

    @property
    def is_gang_stored(self) -> bool:
        return self.fighter_id is None

    def facts(self) -> VehicleFacts:
        return VehicleFacts(
            id=self.id,
            gang_id=self.gang_id,
            fighter_id=self.fighter_id,
            cost=self.cost,
        )
