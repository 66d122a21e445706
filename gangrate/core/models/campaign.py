from django.core import validators
from django.db import models
from simple_history.models import HistoricalRecords

from gangrate.models import Base

from .base import AppBase


class Campaign(AppBase):
    """A Campaign is a series of battles between gangs."""

    name = models.CharField(
        max_length=255, validators=[validators.MinLengthValidator(1)]
    )
    summary = models.TextField(blank=True, default="")

    history = HistoricalRecords()

    class Meta:
        verbose_name = "Campaign"
        verbose_name_plural = "Campaigns"
        ordering = ["-created"]

    def __str__(self):
        return self.name


class CampaignMember(Base):
    """A user taking part in a campaign."""

    OWNER = "owner"
    ARBITRATOR = "arbitrator"
    MEMBER = "member"

    ROLE_CHOICES = [
        (OWNER, "Owner"),
        (ARBITRATOR, "Arbitrator"),
        (MEMBER, "Member"),
    ]

    campaign = models.ForeignKey(
        "Campaign", on_delete=models.CASCADE, related_name="members"
    )
    user = models.ForeignKey(
        "auth.User", on_delete=models.CASCADE, related_name="campaign_memberships"
    )
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=MEMBER)

    class Meta:
        verbose_name = "Campaign Member"
        verbose_name_plural = "Campaign Members"
        ordering = ["created"]
        unique_together = [("campaign", "user")]

    def __str__(self):
        return f"{self.user} ({self.get_role_display()})"


class CampaignGang(Base):
    """A gang entered into a campaign."""

    ACTIVE = "active"
    WITHDRAWN = "withdrawn"

    STATUS_CHOICES = [
        (ACTIVE, "Active"),
        (WITHDRAWN, "Withdrawn"),
    ]

    campaign = models.ForeignKey(
        "Campaign", on_delete=models.CASCADE, related_name="campaign_gangs"
    )
    gang = models.ForeignKey(
        "Gang", on_delete=models.CASCADE, related_name="campaign_entries"
    )
    member = models.ForeignKey(
        "CampaignMember",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="gangs",
    )
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=ACTIVE)

    class Meta:
        verbose_name = "Campaign Gang"
        verbose_name_plural = "Campaign Gangs"
        ordering = ["created"]
        unique_together = [("campaign", "gang")]

    def __str__(self):
        return f"{self.gang} in {self.campaign}"


class CampaignTerritory(Base):
    """A territory in a campaign, optionally held by a gang."""

    campaign = models.ForeignKey(
        "Campaign", on_delete=models.CASCADE, related_name="territories"
    )
    name = models.CharField(max_length=255)
    gang = models.ForeignKey(
        "Gang",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="territories",
    )
    ruined = models.BooleanField(default=False)

    class Meta:
        verbose_name = "Campaign Territory"
        verbose_name_plural = "Campaign Territories"
        ordering = ["name"]

    def __str__(self):
        return self.name


class CampaignBattle(Base):
    """A battle fought between two gangs in a campaign."""

    campaign = models.ForeignKey(
        "Campaign", on_delete=models.CASCADE, related_name="battles"
    )
    scenario = models.CharField(max_length=255)
    attacker = models.ForeignKey(
        "Gang",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="battles_attacking",
    )
    defender = models.ForeignKey(
        "Gang",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="battles_defending",
    )
    winner = models.ForeignKey(
        "Gang",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="battles_won",
    )
    note = models.TextField(blank=True, default="")

    class Meta:
        verbose_name = "Campaign Battle"
        verbose_name_plural = "Campaign Battles"
        ordering = ["-created"]

    def __str__(self):
        return f"{self.scenario} ({self.campaign})"
