"""Cache invalidation for read models derived from orders."""

import structlog
from protean.utils.globals import current_domain

logger = structlog.get_logger(__name__)


def invalidate(namespace: str, cache_name: str = "default") -> None:
    """Drop every cached entry whose key belongs to ``namespace``."""
    current_domain.caches[cache_name].remove_by_key_pattern(f"^{namespace}:::")
    logger.debug("cache.invalidated", namespace=namespace, cache=cache_name)
