"""Cache: Redis service and cache key utilities.

Used by the rule store for rules-by-trigger lookups. CacheService uses
app.core.config; key format is in keys.py (DRY).
"""

from app.infrastructure.cache.cache_protocol import CacheProtocol
from app.infrastructure.cache.keys import workflow_rules_by_trigger_key
from app.infrastructure.cache.redis_cache import CacheService

__all__ = [
    "CacheProtocol",
    "CacheService",
    "workflow_rules_by_trigger_key",
]
