from unittest.mock import Mock

import pytest
from django.core.management import call_command

from gangrate.core.cost.errors import CacheTransportError


@pytest.mark.django_db
def test_invalidates_all_computed_costs(gang, make_fighter, reader, capsys):
    fighter = make_fighter(gang, "Rask", credits=100)
    assert reader.get_gang_rating(gang.id) == 100

    fighter.credits = 150
    fighter.save()
    assert reader.get_gang_rating(gang.id) == 100

    call_command("bustcomputed")

    assert "Invalidated all computed costs" in capsys.readouterr().out
    assert reader.get_gang_rating(gang.id) == 150


@pytest.mark.django_db
def test_invalidates_single_gang(make_gang, make_fighter, reader, capsys):
    iron = make_gang("Iron Ghosts")
    ash = make_gang("Ash Wolves")
    iron_fighter = make_fighter(iron, "Rask", credits=100)
    ash_fighter = make_fighter(ash, "Dorn", credits=90)
    reader.get_gang_rating(iron.id)
    reader.get_gang_rating(ash.id)

    iron_fighter.credits = 120
    iron_fighter.save()
    ash_fighter.credits = 110
    ash_fighter.save()

    call_command("bustcomputed", gang=[str(iron.id)])

    assert f"Invalidated gang {iron.id}" in capsys.readouterr().out
    assert reader.get_gang_rating(iron.id) == 120
    # Verify the other gang's cached rating is untouched
    assert reader.get_gang_rating(ash.id) == 90


@pytest.mark.django_db
def test_clear(gang, make_fighter, reader, capsys):
    fighter = make_fighter(gang, "Rask", credits=100)
    reader.get_fighter_total_cost(fighter.id)
    fighter.credits = 80
    fighter.save()

    call_command("bustcomputed", clear=True)

    assert "Cleared the cost cache" in capsys.readouterr().out
    assert reader.get_fighter_total_cost(fighter.id) == 80


@pytest.mark.django_db
def test_verify_reports_stale_ratings(gang, make_fighter, reader, capsys):
    fighter = make_fighter(gang, "Rask", credits=100)
    reader.get_gang_rating(gang.id)
    fighter.credits = 130
    fighter.save()

    call_command("bustcomputed", verify=True)

    out = capsys.readouterr().out
    assert "Stale rating for Iron Ghosts: 100¢ != 130¢" in out
    assert "Verified ratings: 1 stale" in out
    # The purge that follows the report fixes the rating
    assert reader.get_gang_rating(gang.id) == 130


def test_exits_when_the_cache_is_down(cost_services, monkeypatch, capsys):
    cache = Mock()
    cache.purge.side_effect = CacheTransportError("cache down")
    monkeypatch.setattr(cost_services, "cache", cache)

    with pytest.raises(SystemExit) as exc_info:
        call_command("bustcomputed")

    assert exc_info.value.code == 1
    assert "Error invalidating cost cache: cache down" in capsys.readouterr().out
