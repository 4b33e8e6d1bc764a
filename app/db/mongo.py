import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from app.core.config import settings

logger = logging.getLogger(__name__)

class MongoDatabase:
    """MongoDB connection manager."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB."""
    mongodb.client = AsyncIOMotorClient(settings.MONGODB_URL)
    mongodb.db = mongodb.client[settings.DATABASE_NAME]

    # Create indexes
    await create_indexes(mongodb.db)
    logger.info("Connected to MongoDB: %s", settings.DATABASE_NAME)

async def close_mongo_connection():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
    logger.info("Disconnected from MongoDB")

async def create_indexes(db: AsyncIOMotorDatabase):
    """Create database indexes."""
    # One user per platform identity
    for platform in settings.PLATFORMS:
        await db["users"].create_index(f"platform_ids.{platform}", unique=True, sparse=True)
        await db["users"].create_index(f"platform_usernames.{platform}")

    # One account per unordered pair
    await db["accounts"].create_index("pair_key", unique=True)
    await db["accounts"].create_index("creator_id")
    await db["accounts"].create_index("subject_id")

    # Ledger indexes
    await db["transactions"].create_index([("created_by", 1), ("created_at", -1)])
    await db["transactions"].create_index([("participants", 1), ("created_at", -1)])

def get_db() -> AsyncIOMotorDatabase:
    """Get database instance."""
    return mongodb.db
