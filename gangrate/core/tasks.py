import logging

from django.tasks import task

logger = logging.getLogger(__name__)


@task
def purge_cost_cache_tags(tags: list):
    """
    Retry a cost cache purge that failed during a mutation.

    Raises CacheTransportError again if the backend is still down, so the
    task backend records the failure.
    """
    from gangrate.core.cost.services import get_cost_services

    get_cost_services().cache.purge(tags)
    logger.info(f"Purged {len(tags)} cost cache tags on retry")
    return len(tags)
