import uuid

from django.db import models
from django.utils import timezone


def is_int(value):
    """Check if a value is a number."""
    try:
        int(value)
        return True
    except (ValueError, TypeError):
        return False


def format_cost_display(cost_value, show_sign=False):
    """
    Format a cost value for display with proper sign handling.

    Parameters
    ----------
    cost_value : int or str
        The cost value to format
    show_sign : bool
        Whether to show '+' for positive values (default: False)

    Returns
    -------
    str
        Formatted cost string with '¢' suffix

    Examples
    --------
    >>> format_cost_display(135)
    '135¢'
    >>> format_cost_display(10, show_sign=True)
    '+10¢'
    >>> format_cost_display(-50, show_sign=True)
    '-50¢'
    """
    if isinstance(cost_value, str):
        if not is_int(cost_value):
            return cost_value
        cost_value = int(cost_value)

    if show_sign and cost_value >= 0:
        return f"+{cost_value}¢"

    return f"{cost_value}¢"


class Archived(models.Model):
    """An Archived object is no longer in use."""

    archived = models.BooleanField(default=False, db_index=True)
    archived_at = models.DateTimeField(null=True, blank=True)

    def archive(self):
        self.archived = True
        self.archived_at = timezone.now()
        self.save()

    def unarchive(self):
        self.archived = False
        self.archived_at = None
        self.save()

    class Meta:
        abstract = True


class Owned(models.Model):
    """An Owned object is owned by a User."""

    owner = models.ForeignKey(
        "auth.User", on_delete=models.CASCADE, null=True, blank=False, db_index=True
    )

    class Meta:
        abstract = True


class Base(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created = models.DateTimeField(auto_now_add=True, db_index=True)
    modified = models.DateTimeField(auto_now=True, db_index=True)

    class Meta:
        abstract = True
