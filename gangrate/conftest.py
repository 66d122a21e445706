import json
import logging
from typing import Callable

import pytest
from django.apps import apps
from django.core.cache import caches

from gangrate.core.cost.services import build_cost_services
from gangrate.core.models import (
    Campaign,
    CampaignGang,
    Effect,
    EquipmentAssignment,
    Fighter,
    Gang,
    SkillGrant,
    Vehicle,
)


@pytest.fixture(autouse=True)
def cost_services(monkeypatch):
    """
    Give every test its own cost services over an empty cost cache.

    Tests that need a different cache or dispatcher can monkeypatch the
    attributes of the returned bundle.
    """
    caches["cost_cache"].clear()
    services = build_cost_services()
    monkeypatch.setattr(apps.get_app_config("core"), "cost", services)
    yield services
    caches["cost_cache"].clear()


@pytest.fixture
def caplog_json(caplog):
    """Fixture that parses JSON logs from the gangrate.tracker logger.

    Adds caplog's handler to the tracker logger directly so events are seen
    whatever the propagation settings. A record that reaches the handler
    twice is only counted once.
    """
    logger = logging.getLogger("gangrate.tracker")
    logger.addHandler(caplog.handler)
    original_level = logger.level
    logger.setLevel(logging.INFO)

    def get_json_logs():
        logs = []
        seen = set()
        for record in caplog.records:
            if record.name != "gangrate.tracker" or id(record) in seen:
                continue
            seen.add(id(record))
            try:
                logs.append(json.loads(record.getMessage()))
            except json.JSONDecodeError:
                pass
        return logs

    def events(name):
        return [log for log in get_json_logs() if log["event"] == name]

    caplog.get_json_logs = get_json_logs
    caplog.events = events
    yield caplog

    logger.removeHandler(caplog.handler)
    logger.setLevel(original_level)


@pytest.fixture
def make_user(django_user_model) -> Callable[[str, str], object]:
    def make_user_(username: str, password: str) -> object:
        return django_user_model.objects.create_user(
            username=username, password=password
        )

    return make_user_


@pytest.fixture
def user(make_user):
    return make_user("testuser", "password")


@pytest.fixture
def reader(cost_services):
    return cost_services.reader


@pytest.fixture
def dispatcher(cost_services):
    return cost_services.dispatcher


@pytest.fixture
def make_gang(user) -> Callable[..., Gang]:
    def make_gang_(name: str = "Iron Ghosts", **kwargs) -> Gang:
        return Gang.objects.create(name=name, owner=user, **kwargs)

    return make_gang_


@pytest.fixture
def gang(make_gang) -> Gang:
    return make_gang()


@pytest.fixture
def make_fighter(user) -> Callable[..., Fighter]:
    def make_fighter_(gang: Gang, name: str, credits: int = 100, **kwargs) -> Fighter:
        return Fighter.objects.create(
            gang=gang, name=name, credits=credits, owner=user, **kwargs
        )

    return make_fighter_


@pytest.fixture
def make_vehicle(user) -> Callable[..., Vehicle]:
    def make_vehicle_(gang: Gang, name: str, cost: int = 50, **kwargs) -> Vehicle:
        return Vehicle.objects.create(
            gang=gang, name=name, cost=cost, owner=user, **kwargs
        )

    return make_vehicle_


@pytest.fixture
def make_equipment() -> Callable[..., EquipmentAssignment]:
    def make_equipment_(name: str, cost: int, **holder) -> EquipmentAssignment:
        return EquipmentAssignment.objects.create(
            name=name, purchase_cost=cost, **holder
        )

    return make_equipment_


@pytest.fixture
def make_skill() -> Callable[..., SkillGrant]:
    def make_skill_(fighter: Fighter, name: str, credits_increase: int = 0):
        return SkillGrant.objects.create(
            fighter=fighter, name=name, credits_increase=credits_increase
        )

    return make_skill_


@pytest.fixture
def make_effect() -> Callable[..., Effect]:
    def make_effect_(name: str, data=None, **holder) -> Effect:
        return Effect.objects.create(
            name=name, type_specific_data=data if data is not None else {}, **holder
        )

    return make_effect_


@pytest.fixture
def make_campaign(user) -> Callable[..., Campaign]:
    def make_campaign_(name: str = "Dust Falls", gangs=()) -> Campaign:
        campaign = Campaign.objects.create(name=name, owner=user)
        for g in gangs:
            CampaignGang.objects.create(campaign=campaign, gang=g)
        return campaign

    return make_campaign_
