"""Wiring for the cost cache: one cache, reader and dispatcher per process."""

import logging
from dataclasses import dataclass

from django.apps import apps
from django.conf import settings
from django.core.cache import caches

from gangrate.core.cost.cache import NullTaggedCache, TaggedCache
from gangrate.core.cost.invalidation import InvalidationDispatcher
from gangrate.core.cost.reads import DEFAULT_BATTLES_LIMIT, CostReader

logger = logging.getLogger(__name__)


@dataclass
class CostServices:
    cache: object
    reader: CostReader
    dispatcher: InvalidationDispatcher

    def close(self) -> None:
        self.cache.close()


def build_cost_services() -> CostServices:
    """Build the cost services from settings."""
    if getattr(settings, "COST_CACHE_ENABLED", True):
        cache = TaggedCache(
            caches[getattr(settings, "COST_CACHE_ALIAS", "cost_cache")],
            namespace=getattr(settings, "COST_CACHE_NAMESPACE", "cost"),
        )
    else:
        logger.info("Cost cache disabled, every cost read will recompute")
        cache = NullTaggedCache()

    reader = CostReader(
        cache,
        write_back=getattr(settings, "COST_RATING_WRITE_BACK", True),
        battles_limit=getattr(
            settings, "COST_CAMPAIGN_BATTLES_LIMIT", DEFAULT_BATTLES_LIMIT
        ),
    )
    return CostServices(
        cache=cache, reader=reader, dispatcher=InvalidationDispatcher(cache)
    )


def get_cost_services() -> CostServices:
    return apps.get_app_config("core").cost
