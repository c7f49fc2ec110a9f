"""Cache TTL and key prefix constants."""

# Cache TTL constants (in seconds)
TTL_DEFAULT = 300  # 5 minutes
TTL_CATALOG = 300  # 5 minutes - catalog projection
TTL_USER_DATA = 900  # 15 minutes - vendor records used by auth

# Cache key prefixes
KEY_PREFIX_CATALOG = "guindastes"  # guindastes:{"no_pagination": true, ...}
KEY_PREFIX_USER = "user"  # user:{"id": 1}
