import logging
from typing import Dict, Iterable, List
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.exceptions import UserNotFound
from app.models.user import User
from app.repositories.user_cache import UserCache
from app.repositories.user_repo import UserRepository

logger = logging.getLogger(__name__)


class IdentityService:
    """Identity store fronted by an explicit user cache."""

    def __init__(self, db: AsyncIOMotorDatabase, cache: UserCache):
        self.users = UserRepository(db)
        self.cache = cache

    async def resolve_or_register(self, platform: str, platform_user_id: str, username: str) -> User:
        cached = self.cache.get_by_platform(platform, platform_user_id)
        if cached is not None:
            return cached

        user = await self.users.resolve_or_register(platform, platform_user_id, username)
        self.cache.invalidate(platform, platform_user_id)
        self.cache.put(user)
        return user

    async def register(self, platform: str, platform_user_id: str, username: str) -> User:
        """Register a new platform identity; fails if it is already known."""
        user = await self.users.create_user(platform, platform_user_id, username)
        self.cache.invalidate(platform, platform_user_id)
        self.cache.put(user)
        return user

    async def find_by_platform_id(self, platform: str, platform_user_id: str) -> User:
        cached = self.cache.get_by_platform(platform, platform_user_id)
        if cached is not None:
            return cached

        user = await self.users.get_user_by_platform_id(platform, platform_user_id)
        self.cache.put(user)
        return user

    async def find_by_username(self, platform: str, username: str) -> User:
        # Usernames are not unique keys, so they are never served from cache.
        return await self.users.get_user_by_username(platform, username)

    async def get_user(self, user_id) -> User:
        cached = self.cache.get_by_id(user_id)
        if cached is not None:
            return cached

        user = await self.users.get_user_by_id(user_id)
        self.cache.put(user)
        return user

    async def list_users(self) -> List[User]:
        return await self.users.list_users()

    async def display_names(self, user_ids: Iterable, platform: str) -> Dict[str, str]:
        """Map str(user id) -> username on `platform`, skipping unknown ids."""
        names = {}
        for user_id in user_ids:
            if str(user_id) in names:
                continue
            try:
                user = await self.get_user(user_id)
            except UserNotFound:
                logger.warning("User %s referenced by the ledger was not found", user_id)
                continue
            names[str(user_id)] = user.display_name(platform)
        return names
