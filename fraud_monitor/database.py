# fraud_monitor/database.py
import logging
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import OperationFailure

from fraud_monitor import config

logger = logging.getLogger(__name__)

# Async client for FastAPI
async_client = None
database = None


def get_async_database():
    """Get async database connection, or None when MongoDB is not configured"""
    global async_client, database
    if async_client is None:
        if not config.MONGODB_URL:
            return None
        try:
            async_client = AsyncIOMotorClient(
                config.MONGODB_URL,
                serverSelectionTimeoutMS=5000,
            )
            database = async_client[config.MONGODB_DB_NAME]
            logger.info(f"✅ Async MongoDB client initialized for: {config.MONGODB_DB_NAME}")

        except Exception as e:
            logger.error(f"❌ Error creating async MongoDB connection: {e}")
            async_client = None
            database = None

    return database


async def ping_database(db=None):
    """Ping MongoDB; returns (ok, error message)"""
    db = db if db is not None else get_async_database()
    if db is None:
        return False, "not configured"
    try:
        await db.command("ping")
        return True, None
    except OperationFailure as e:
        logger.error(f"❌ MongoDB authentication failed: {e}")
        return False, str(e)
    except Exception as e:
        logger.error(f"❌ MongoDB connection error: {e}")
        return False, str(e)


async def close_async_connection():
    """Close async database connection"""
    global async_client, database
    if async_client is not None:
        async_client.close()
        async_client = None
        database = None
        logger.info("✅ Async MongoDB connection closed")
