import pytest

from gangrate.core.models import EquipmentAssignment
from gangrate.models import format_cost_display, is_int


class TestFormatCostDisplay:
    """Test the format_cost_display function."""

    def test_positive_cost(self):
        assert format_cost_display(5) == "5¢"
        assert format_cost_display(135) == "135¢"

    def test_positive_cost_with_sign(self):
        assert format_cost_display(5, show_sign=True) == "+5¢"

    def test_negative_cost_with_sign(self):
        """Negative costs keep a single minus sign."""
        assert format_cost_display(-50) == "-50¢"
        assert format_cost_display(-50, show_sign=True) == "-50¢"

    def test_zero_cost(self):
        assert format_cost_display(0) == "0¢"
        assert format_cost_display(0, show_sign=True) == "+0¢"

    def test_string_input(self):
        assert format_cost_display("5") == "5¢"
        assert format_cost_display("-5", show_sign=True) == "-5¢"

    def test_non_numeric_string(self):
        """Test non-numeric string returns as-is."""
        assert format_cost_display("2D6X10") == "2D6X10"


def test_is_int():
    assert is_int(3)
    assert is_int("-3")
    assert not is_int("ten")
    assert not is_int(None)


@pytest.mark.django_db
def test_equipment_str_shows_cost(gang, make_fighter, make_equipment):
    fighter = make_fighter(gang, "Rask")
    make_equipment("Lasgun", 25, fighter=fighter)

    assert str(EquipmentAssignment.objects.get()) == "Lasgun (25¢)"


@pytest.mark.django_db
def test_archive_and_unarchive(gang):
    gang.archive()
    gang.refresh_from_db()
    assert gang.archived
    assert gang.archived_at is not None

    gang.unarchive()
    gang.refresh_from_db()
    assert not gang.archived
    assert gang.archived_at is None
