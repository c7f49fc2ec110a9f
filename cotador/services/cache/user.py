"""Vendor record cache operations."""

from typing import Any

from cotador.services.cache.base import BaseCacheOperations
from cotador.services.cache.constants import KEY_PREFIX_USER, TTL_USER_DATA


class UserCacheMixin(BaseCacheOperations):
    """Vendor data caching used by the authentication dependency."""

    def _user_key(self, user_id: int) -> str:
        return self.make_key(KEY_PREFIX_USER, {"id": user_id})

    def get_user_data(self, user_id: int) -> dict[str, Any] | None:
        """Get a cached vendor record."""
        data = self.get(self._user_key(user_id))
        return data if isinstance(data, dict) else None

    def set_user_data(self, user_id: int, user_data: dict[str, Any]) -> None:
        """Cache a vendor record, minus its password hash."""
        public = {k: v for k, v in user_data.items() if k != "senha"}
        self.set(self._user_key(user_id), public, TTL_USER_DATA)

    def invalidate_user_data(self, user_id: int) -> None:
        """Forget a cached vendor record."""
        self.invalidate(self._user_key(user_id))
