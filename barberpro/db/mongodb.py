from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, DESCENDING
from barberpro.core.config import settings
import logging

logger = logging.getLogger(__name__)

class Database:
    client: AsyncIOMotorClient = None
    db = None

db = Database()

async def connect_to_mongo():
    """Connect to MongoDB."""
    try:
        logger.info("Connecting to MongoDB...")
        db.client = AsyncIOMotorClient(settings.MONGO_URI)
        db.db = db.client[settings.DB_NAME]
        logger.info("Connected to MongoDB.")

        # Create indexes for collections
        await create_indexes()

    except Exception as e:
        logger.error(f"Could not connect to MongoDB: {e}")
        raise e

async def close_mongo_connection():
    """Close MongoDB connection."""
    if db.client:
        logger.info("Closing MongoDB connection...")
        db.client.close()
        logger.info("MongoDB connection closed.")

async def get_database():
    """Get MongoDB database instance."""
    return db.db

async def create_indexes():
    """Create indexes for collections."""
    try:
        # Users collection indexes
        await db.db.users.create_index("email", unique=True)

        # Catalog indexes
        await db.db.barbers.create_index([("isActive", ASCENDING), ("name", ASCENDING)])
        await db.db.services.create_index([("isActive", ASCENDING), ("name", ASCENDING)])

        # Appointments collection indexes
        await db.db.appointments.create_index("clientId")
        await db.db.appointments.create_index([("barberId", ASCENDING), ("appointmentDate", ASCENDING)])
        await db.db.appointments.create_index(
            [("appointmentDate", ASCENDING), ("status", ASCENDING), ("reminderEmailSent", ASCENDING)]
        )
        # One live appointment per (barber, date, time); cancelled rows are exempt.
        # $in inside partialFilterExpression needs MongoDB 6.0+.
        await db.db.appointments.create_index(
            [("barberId", ASCENDING), ("appointmentDate", ASCENDING), ("appointmentTime", ASCENDING)],
            unique=True,
            name="unique_live_slot",
            partialFilterExpression={"status": {"$in": ["scheduled", "completed"]}},
        )

        # Notifications collection indexes
        await db.db.notifications.create_index([("createdAt", DESCENDING)])
        await db.db.notifications.create_index("isRead")

        logger.info("MongoDB indexes created successfully.")
    except Exception as e:
        logger.error(f"Failed to create MongoDB indexes: {e}")
