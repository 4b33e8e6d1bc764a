import logging
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
from datetime import datetime, timezone

from app.core.exceptions import IdentityConflict, UserAlreadyExists, UserNotFound
from app.models.base import to_object_id
from app.models.user import User

logger = logging.getLogger(__name__)

class UserRepository:
    """User database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db["users"]

    async def create_user(self, platform: str, platform_user_id: str, username: str) -> User:
        """
        Register a new user with a single platform mapping.

        Raises UserAlreadyExists if the platform identity is already known, and
        IdentityConflict if another registration won the race for it.
        """
        existing = await self.collection.find_one({f"platform_ids.{platform}": platform_user_id})
        if existing:
            raise UserAlreadyExists()

        now = datetime.now(timezone.utc)
        user = User(
            platform_ids={platform: platform_user_id},
            platform_usernames={platform: username.lower()},
            created_at=now,
            updated_at=now
        )

        try:
            await self.collection.insert_one(user.to_document())
        except DuplicateKeyError:
            logger.warning("Concurrent registration for %s:%s", platform, platform_user_id)
            raise IdentityConflict(platform, platform_user_id)

        return user

    async def get_user_by_platform_id(self, platform: str, platform_user_id: str) -> User:
        """Get user by their id on a chat platform."""
        doc = await self.collection.find_one({f"platform_ids.{platform}": platform_user_id})
        if not doc:
            raise UserNotFound()
        return User(**doc)

    async def get_user_by_username(self, platform: str, username: str) -> User:
        """Get user by (case-insensitive) username on a chat platform."""
        doc = await self.collection.find_one({f"platform_usernames.{platform}": username.lower()})
        if not doc:
            raise UserNotFound(f"User {username} not found")
        return User(**doc)

    async def get_user_by_id(self, user_id) -> User:
        """Get user by ID."""
        try:
            oid = to_object_id(user_id)
        except ValueError:
            raise UserNotFound()

        doc = await self.collection.find_one({"_id": oid})
        if not doc:
            raise UserNotFound()
        return User(**doc)

    async def list_users(self) -> list[User]:
        """All registered users, oldest first."""
        cursor = self.collection.find({}).sort("_id", 1)
        docs = await cursor.to_list(None)
        return [User(**doc) for doc in docs]

    async def resolve_or_register(self, platform: str, platform_user_id: str, username: str) -> User:
        """Find the user for a platform identity, registering it on first contact."""
        try:
            return await self.get_user_by_platform_id(platform, platform_user_id)
        except UserNotFound:
            pass

        try:
            user = await self.create_user(platform, platform_user_id, username)
        except UserAlreadyExists:
            # registered between our lookup and insert
            raise IdentityConflict(platform, platform_user_id)

        logger.info("Registered user %s for %s:%s", user.id, platform, platform_user_id)
        return user
