"""

ziora/core/database.py

"""


from motor.motor_asyncio import AsyncIOMotorClient
from ziora.core.config import settings
import logging

logger = logging.getLogger(__name__)

class Database:
    client: AsyncIOMotorClient = None
    db = None

db = Database()

async def connect_to_mongo():
    """Create database connection."""
    try:
        db.client = AsyncIOMotorClient(settings.MONGODB_URL)
        db.db = db.client[settings.DATABASE_NAME]

        await create_comment_indexes(db.db)

        logger.info("Connected to MongoDB")
    except Exception as e:
        logger.error(f"Could not connect to MongoDB: {e}")
        raise

async def close_mongo_connection():
    """Close database connection."""
    if db.client:
        db.client.close()
        logger.info("Disconnected from MongoDB")

async def create_comment_indexes(database):
    """Create indexes for the canonical comments collection"""
    try:
        comments = database[settings.COMMENTS_COLLECTION]

        # Locator fast path for replies
        await comments.create_index("replies.id")

        # Per-content listing
        await comments.create_index([
            ("type", 1),
            ("subject", 1),
            ("module", 1),
            ("contentId", 1),
            ("status", 1),
            ("timestamp", -1)
        ])

        await comments.create_index("userId")

        logger.info("Database indexes created")
    except Exception as e:
        logger.error(f"Error creating indexes: {e}")

def get_database():
    """Get database instance"""
    return db.db
