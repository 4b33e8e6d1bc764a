import time
from typing import Callable, Dict, Optional, Tuple

from app.models.user import User


class UserCache:
    """
    Short-lived in-process cache of user lookups.

    Entries are keyed both by (platform, platform user id) and by internal id.
    Only hits are cached; registration must call invalidate() for the identity
    it touched. Expired entries are dropped when read and on every put().
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._by_platform: Dict[Tuple[str, str], Tuple[float, User]] = {}
        self._by_id: Dict[str, Tuple[float, User]] = {}

    def _fresh(self, entry: Optional[Tuple[float, User]]) -> Optional[User]:
        if entry is None:
            return None
        expires_at, user = entry
        if self._clock() >= expires_at:
            return None
        return user

    def get_by_platform(self, platform: str, platform_user_id: str) -> Optional[User]:
        key = (platform, platform_user_id)
        user = self._fresh(self._by_platform.get(key))
        if user is None:
            self._by_platform.pop(key, None)
        return user

    def get_by_id(self, user_id) -> Optional[User]:
        key = str(user_id)
        user = self._fresh(self._by_id.get(key))
        if user is None:
            self._by_id.pop(key, None)
        return user

    def _evict_expired(self, now: float) -> None:
        for index in (self._by_id, self._by_platform):
            stale = [key for key, (expires_at, _) in index.items() if now >= expires_at]
            for key in stale:
                del index[key]

    def put(self, user: User) -> None:
        now = self._clock()
        self._evict_expired(now)
        expires_at = now + self.ttl_seconds
        self._by_id[str(user.id)] = (expires_at, user)
        for platform, platform_user_id in user.platform_ids.items():
            self._by_platform[(platform, platform_user_id)] = (expires_at, user)

    def invalidate(self, platform: Optional[str] = None, platform_user_id: Optional[str] = None,
                   user_id=None) -> None:
        if platform is not None and platform_user_id is not None:
            entry = self._by_platform.pop((platform, platform_user_id), None)
            if entry is not None:
                self._by_id.pop(str(entry[1].id), None)
        if user_id is not None:
            entry = self._by_id.pop(str(user_id), None)
            if entry is not None:
                for key in entry[1].platform_ids.items():
                    self._by_platform.pop(key, None)

    def clear(self) -> None:
        self._by_platform.clear()
        self._by_id.clear()

    def __len__(self) -> int:
        return len(self._by_id)
