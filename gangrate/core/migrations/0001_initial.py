import uuid

import django.core.validators
import django.db.models.deletion
import simple_history.models
from django.conf import settings
from django.db import migrations, models

HISTORY_TYPE_CHOICES = [("+", "Created"), ("~", "Changed"), ("-", "Deleted")]


def base_fields():
    return [
        (
            "id",
            models.UUIDField(
                default=uuid.uuid4, editable=False, primary_key=True, serialize=False
            ),
        ),
        ("created", models.DateTimeField(auto_now_add=True, db_index=True)),
        ("modified", models.DateTimeField(auto_now=True, db_index=True)),
    ]


def app_base_fields():
    return base_fields() + [
        ("archived", models.BooleanField(db_index=True, default=False)),
        ("archived_at", models.DateTimeField(blank=True, null=True)),
        (
            "owner",
            models.ForeignKey(
                null=True,
                on_delete=django.db.models.deletion.CASCADE,
                to=settings.AUTH_USER_MODEL,
            ),
        ),
    ]


def historical_fields():
    return [
        (
            "id",
            models.UUIDField(db_index=True, default=uuid.uuid4, editable=False),
        ),
        (
            "created",
            models.DateTimeField(blank=True, db_index=True, editable=False),
        ),
        (
            "modified",
            models.DateTimeField(blank=True, db_index=True, editable=False),
        ),
        ("archived", models.BooleanField(db_index=True, default=False)),
        ("archived_at", models.DateTimeField(blank=True, null=True)),
    ]


def history_tracking_fields():
    return [
        ("history_id", models.AutoField(primary_key=True, serialize=False)),
        ("history_date", models.DateTimeField(db_index=True)),
        ("history_change_reason", models.CharField(max_length=100, null=True)),
        (
            "history_type",
            models.CharField(choices=HISTORY_TYPE_CHOICES, max_length=1),
        ),
        (
            "history_user",
            models.ForeignKey(
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
        (
            "owner",
            models.ForeignKey(
                blank=True,
                db_constraint=False,
                null=True,
                on_delete=django.db.models.deletion.DO_NOTHING,
                related_name="+",
                to=settings.AUTH_USER_MODEL,
            ),
        ),
    ]


def historical_options(name, plural):
    return {
        "verbose_name": f"historical {name}",
        "verbose_name_plural": f"historical {plural}",
        "ordering": ("-history_date", "-history_id"),
        "get_latest_by": ("history_date", "history_id"),
    }


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Gang",
            fields=app_base_fields()
            + [
                (
                    "name",
                    models.CharField(
                        max_length=255,
                        validators=[django.core.validators.MinLengthValidator(1)],
                    ),
                ),
                (
                    "credits",
                    models.IntegerField(
                        default=0, help_text="Unspent credits held by the gang."
                    ),
                ),
                (
                    "rating",
                    models.IntegerField(
                        default=0,
                        help_text="Last computed gang rating. The cost cache keeps this up to date; the computed value is authoritative.",
                    ),
                ),
            ],
            options={
                "verbose_name": "Gang",
                "verbose_name_plural": "Gangs",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Campaign",
            fields=app_base_fields()
            + [
                (
                    "name",
                    models.CharField(
                        max_length=255,
                        validators=[django.core.validators.MinLengthValidator(1)],
                    ),
                ),
                ("summary", models.TextField(blank=True, default="")),
            ],
            options={
                "verbose_name": "Campaign",
                "verbose_name_plural": "Campaigns",
                "ordering": ["-created"],
            },
        ),
        migrations.CreateModel(
            name="Fighter",
            fields=app_base_fields()
            + [
                (
                    "name",
                    models.CharField(
                        max_length=255,
                        validators=[django.core.validators.MinLengthValidator(1)],
                    ),
                ),
                ("credits", models.IntegerField(default=0, help_text="Base hiring cost.")),
                (
                    "cost_adjustment",
                    models.IntegerField(
                        default=0,
                        help_text="Signed adjustment applied on top of the base cost.",
                    ),
                ),
                ("killed", models.BooleanField(db_index=True, default=False)),
                ("retired", models.BooleanField(db_index=True, default=False)),
                ("enslaved", models.BooleanField(db_index=True, default=False)),
                ("captured", models.BooleanField(db_index=True, default=False)),
                (
                    "gang",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="fighters",
                        to="core.gang",
                    ),
                ),
                (
                    "owner_fighter",
                    models.ForeignKey(
                        blank=True,
                        help_text="The fighter that owns this beast, if this fighter is a beast.",
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="beasts",
                        to="core.fighter",
                    ),
                ),
            ],
            options={
                "verbose_name": "Fighter",
                "verbose_name_plural": "Fighters",
                "ordering": ["created"],
            },
        ),
        migrations.CreateModel(
            name="Vehicle",
            fields=app_base_fields()
            + [
                ("name", models.CharField(max_length=255)),
                (
                    "cost",
                    models.IntegerField(default=0, help_text="Base cost of the vehicle."),
                ),
                (
                    "gang",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="vehicles",
                        to="core.gang",
                    ),
                ),
                (
                    "fighter",
                    models.ForeignKey(
                        blank=True,
                        help_text="The fighter crewing this vehicle. Empty means gang-stored.",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="vehicles",
                        to="core.fighter",
                    ),
                ),
            ],
            options={
                "verbose_name": "Vehicle",
                "verbose_name_plural": "Vehicles",
                "ordering": ["created"],
            },
        ),
        migrations.CreateModel(
            name="EquipmentAssignment",
            fields=base_fields()
            + [
                ("name", models.CharField(max_length=255)),
                ("purchase_cost", models.IntegerField(default=0)),
                (
                    "fighter",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="equipment",
                        to="core.fighter",
                    ),
                ),
                (
                    "vehicle",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="equipment",
                        to="core.vehicle",
                    ),
                ),
            ],
            options={
                "verbose_name": "Equipment Assignment",
                "verbose_name_plural": "Equipment Assignments",
                "ordering": ["created"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(fighter__isnull=False, vehicle__isnull=True),
                            models.Q(fighter__isnull=True, vehicle__isnull=False),
                            _connector="OR",
                        ),
                        name="equipment_has_exactly_one_holder",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="SkillGrant",
            fields=base_fields()
            + [
                ("name", models.CharField(max_length=255)),
                ("credits_increase", models.IntegerField(default=0)),
                (
                    "fighter",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="skills",
                        to="core.fighter",
                    ),
                ),
            ],
            options={
                "verbose_name": "Skill Grant",
                "verbose_name_plural": "Skill Grants",
                "ordering": ["created"],
            },
        ),
        migrations.CreateModel(
            name="Effect",
            fields=base_fields()
            + [
                ("name", models.CharField(max_length=255)),
                ("type_specific_data", models.JSONField(blank=True, default=dict)),
                (
                    "fighter",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="effects",
                        to="core.fighter",
                    ),
                ),
                (
                    "vehicle",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="effects",
                        to="core.vehicle",
                    ),
                ),
            ],
            options={
                "verbose_name": "Effect",
                "verbose_name_plural": "Effects",
                "ordering": ["created"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(fighter__isnull=False, vehicle__isnull=True),
                            models.Q(fighter__isnull=True, vehicle__isnull=False),
                            _connector="OR",
                        ),
                        name="effect_has_exactly_one_target",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="CampaignMember",
            fields=base_fields()
            + [
                (
                    "role",
                    models.CharField(
                        choices=[
                            ("owner", "Owner"),
                            ("arbitrator", "Arbitrator"),
                            ("member", "Member"),
                        ],
                        default="member",
                        max_length=20,
                    ),
                ),
                (
                    "campaign",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="members",
                        to="core.campaign",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="campaign_memberships",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Campaign Member",
                "verbose_name_plural": "Campaign Members",
                "ordering": ["created"],
                "unique_together": {("campaign", "user")},
            },
        ),
        migrations.CreateModel(
            name="CampaignGang",
            fields=base_fields()
            + [
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("withdrawn", "Withdrawn")],
                        default="active",
                        max_length=20,
                    ),
                ),
                (
                    "campaign",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="campaign_gangs",
                        to="core.campaign",
                    ),
                ),
                (
                    "gang",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="campaign_entries",
                        to="core.gang",
                    ),
                ),
                (
                    "member",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="gangs",
                        to="core.campaignmember",
                    ),
                ),
            ],
            options={
                "verbose_name": "Campaign Gang",
                "verbose_name_plural": "Campaign Gangs",
                "ordering": ["created"],
                "unique_together": {("campaign", "gang")},
            },
        ),
        migrations.CreateModel(
            name="CampaignTerritory",
            fields=base_fields()
            + [
                ("name", models.CharField(max_length=255)),
                ("ruined", models.BooleanField(default=False)),
                (
                    "campaign",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="territories",
                        to="core.campaign",
                    ),
                ),
                (
                    "gang",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="territories",
                        to="core.gang",
                    ),
                ),
            ],
            options={
                "verbose_name": "Campaign Territory",
                "verbose_name_plural": "Campaign Territories",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="CampaignBattle",
            fields=base_fields()
            + [
                ("scenario", models.CharField(max_length=255)),
                ("note", models.TextField(blank=True, default="")),
                (
                    "campaign",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="battles",
                        to="core.campaign",
                    ),
                ),
                (
                    "attacker",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="battles_attacking",
                        to="core.gang",
                    ),
                ),
                (
                    "defender",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="battles_defending",
                        to="core.gang",
                    ),
                ),
                (
                    "winner",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="battles_won",
                        to="core.gang",
                    ),
                ),
            ],
            options={
                "verbose_name": "Campaign Battle",
                "verbose_name_plural": "Campaign Battles",
                "ordering": ["-created"],
            },
        ),
        migrations.CreateModel(
            name="HistoricalGang",
            fields=historical_fields()
            + [
                (
                    "name",
                    models.CharField(
                        max_length=255,
                        validators=[django.core.validators.MinLengthValidator(1)],
                    ),
                ),
                (
                    "credits",
                    models.IntegerField(
                        default=0, help_text="Unspent credits held by the gang."
                    ),
                ),
                (
                    "rating",
                    models.IntegerField(
                        default=0,
                        help_text="Last computed gang rating. The cost cache keeps this up to date; the computed value is authoritative.",
                    ),
                ),
            ]
            + history_tracking_fields(),
            options=historical_options("Gang", "Gangs"),
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        migrations.CreateModel(
            name="HistoricalCampaign",
            fields=historical_fields()
            + [
                (
                    "name",
                    models.CharField(
                        max_length=255,
                        validators=[django.core.validators.MinLengthValidator(1)],
                    ),
                ),
                ("summary", models.TextField(blank=True, default="")),
            ]
            + history_tracking_fields(),
            options=historical_options("Campaign", "Campaigns"),
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        migrations.CreateModel(
            name="HistoricalFighter",
            fields=historical_fields()
            + [
                (
                    "name",
                    models.CharField(
                        max_length=255,
                        validators=[django.core.validators.MinLengthValidator(1)],
                    ),
                ),
                ("credits", models.IntegerField(default=0, help_text="Base hiring cost.")),
                (
                    "cost_adjustment",
                    models.IntegerField(
                        default=0,
                        help_text="Signed adjustment applied on top of the base cost.",
                    ),
                ),
                ("killed", models.BooleanField(db_index=True, default=False)),
                ("retired", models.BooleanField(db_index=True, default=False)),
                ("enslaved", models.BooleanField(db_index=True, default=False)),
                ("captured", models.BooleanField(db_index=True, default=False)),
                (
                    "gang",
                    models.ForeignKey(
                        blank=True,
                        db_constraint=False,
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to="core.gang",
                    ),
                ),
                (
                    "owner_fighter",
                    models.ForeignKey(
                        blank=True,
                        db_constraint=False,
                        help_text="The fighter that owns this beast, if this fighter is a beast.",
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to="core.fighter",
                    ),
                ),
            ]
            + history_tracking_fields(),
            options=historical_options("Fighter", "Fighters"),
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
    ]
