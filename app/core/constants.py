"""Core constants: cache key prefixes and shared literal values."""

# Cache key prefixes
CACHE_PREFIX_WORKFLOW_RULES = "workflow_rules"

# Delimiter for composite keys
CACHE_KEY_SEP = ":"

# Header name defaults for outbound webhooks
WEBHOOK_DEFAULT_CONTENT_TYPE = "application/json"
WEBHOOK_DEFAULT_METHOD = "POST"

# Actor recorded on records the engine creates on its own behalf
SYSTEM_ACTOR = "system"
