from typing import Dict, Any, Optional
from barberpro.db.mongodb import db
from barberpro.schemas.user import UserCreate, UserUpdate, UserRole
from barberpro.core.auth import get_password_hash, verify_password
from barberpro.core.config import settings
from datetime import datetime
from bson import ObjectId
from bson.errors import InvalidId
import logging

logger = logging.getLogger(__name__)

async def create_user(user_in: UserCreate) -> Dict[str, Any]:
    """
    Create a new user in the database
    """
    # Create user with hashed password
    user_data = user_in.model_dump()
    user_data["email"] = user_data["email"].lower()
    user_data["password"] = get_password_hash(user_data["password"])
    admin_emails = {email.lower() for email in settings.ADMIN_EMAILS}
    user_data["role"] = UserRole.ADMIN.value if user_data["email"] in admin_emails else UserRole.CLIENT.value
    user_data["createdAt"] = datetime.utcnow()
    user_data["isActive"] = True

    # Insert user into database
    result = await db.db.users.insert_one(user_data)

    # Get the created user
    created_user = await db.db.users.find_one({"_id": result.inserted_id})

    # Transform the _id field to string
    created_user["id"] = str(created_user["_id"])

    logger.info(f"Registered {created_user['role']} account {created_user['email']}")
    return created_user

async def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    """
    Get a user by email
    """
    user = await db.db.users.find_one({"email": email.lower()})
    if user:
        user["id"] = str(user["_id"])
    return user

async def get_user_by_id(user_id: str) -> Optional[Dict[str, Any]]:
    """
    Get a user by ID
    """
    try:
        user = await db.db.users.find_one({"_id": ObjectId(user_id)})
    except InvalidId:
        return None
    if user:
        user["id"] = str(user["_id"])
    return user

async def authenticate_user(email: str, password: str) -> Optional[Dict[str, Any]]:
    """
    Return the user if the credentials match an active account
    """
    user = await get_user_by_email(email)
    if not user or not user.get("isActive", True):
        return None
    if not verify_password(password, user["password"]):
        return None
    return user

async def update_user(user_id: str, user_update: UserUpdate) -> Optional[Dict[str, Any]]:
    """
    Update profile fields of a user
    """
    update_data = user_update.model_dump(exclude_unset=True)

    if update_data:
        update_data["updatedAt"] = datetime.utcnow()
        await db.db.users.update_one(
            {"_id": ObjectId(user_id)},
            {"$set": update_data}
        )

    return await get_user_by_id(user_id)
