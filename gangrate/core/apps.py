import atexit
import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class CoreConfig(AppConfig):
    """App configuration for gangs, campaigns and the cost cache."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "gangrate.core"
    label = "core"
    verbose_name = "Core"

    cost = None

    def ready(self):
        from gangrate.core.cost.services import build_cost_services

        self.cost = build_cost_services()
        atexit.register(self.cost.close)
        logger.debug(f"Cost services ready ({type(self.cost.cache).__name__})")
