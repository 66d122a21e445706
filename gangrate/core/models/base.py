from django.db import models

from gangrate.models import Archived, Base, Owned


class HistoryMixin(models.Model):
    """
    Mixin for models that keep a `history = HistoricalRecords()`.

    Records the acting user on the latest history row when saving outside a
    request, where the history middleware cannot see the user.
    """

    class Meta:
        abstract = True

    def save_with_user(self, user=None, **kwargs):
        """
        Save the model and explicitly set the history user.

        If no user is provided and the object has an owner, the owner is used.
        """
        if user is None and getattr(self, "owner", None):
            user = self.owner

        super().save(**kwargs)

        if user and hasattr(self, "history"):
            history_record = self.history.first()
            if history_record and not history_record.history_user:
                history_record.history_user = user
                history_record.save()


class AppBase(HistoryMixin, Base, Owned, Archived):
    """An AppBase object is a base class for all application models.

    This base class provides:
    - UUID primary key (from Base)
    - Owner tracking (from Owned)
    - Archive functionality (from Archived)
    - History user tracking (from HistoryMixin)
    """

    class Meta:
        abstract = True
