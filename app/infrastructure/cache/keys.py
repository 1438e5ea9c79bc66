"""Cache key builders. Single place for key format (DRY).

Key components must not contain CACHE_KEY_SEP to avoid ambiguous or
colliding keys.
"""

from app.core.constants import CACHE_KEY_SEP, CACHE_PREFIX_WORKFLOW_RULES


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value contains the cache key separator."""
    if CACHE_KEY_SEP in value:
        raise ValueError(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
        )


def workflow_rules_by_trigger_key(trigger: str) -> str:
    """Cache key for the enabled, priority-ordered rules of one trigger."""
    _validate_key_component(trigger, "trigger")
    return f"{CACHE_PREFIX_WORKFLOW_RULES}{CACHE_KEY_SEP}trigger{CACHE_KEY_SEP}{trigger}"
