from fastapi import APIRouter, HTTPException, status, Depends
from fastapi.security import OAuth2PasswordRequestForm
from typing import Any, Dict
from datetime import timedelta
from barberpro.core.auth import create_access_token, get_current_user
from barberpro.core.config import settings
from barberpro.schemas.user import Token, UserCreate, UserResponse, UserUpdate
from barberpro.services.user_service import (
    authenticate_user, create_user, get_user_by_email, update_user
)

router = APIRouter()

def _user_response(user: Dict[str, Any]) -> Dict[str, Any]:
    # Transform MongoDB _id to id for Pydantic schema compatibility
    user_response = dict(user)
    user_response["id"] = str(user_response.pop("_id"))
    user_response.pop("password", None)
    return user_response

def _token_for(user: Dict[str, Any]) -> Dict[str, Any]:
    access_token = create_access_token(
        data={"sub": str(user["_id"])},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": _user_response(user)
    }

@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(user_in: UserCreate) -> Any:
    """Create a client account and log it in"""
    if await get_user_by_email(user_in.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    user = await create_user(user_in)
    return _token_for(user)

@router.post("/login", response_model=Token)
async def login(form_data: OAuth2PasswordRequestForm = Depends()) -> Any:
    """OAuth2 password login; the username field carries the email"""
    user = await authenticate_user(form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _token_for(user)

@router.get("/me", response_model=UserResponse)
async def read_users_me(current_user: Dict[str, Any] = Depends(get_current_user)):
    """Get current user profile"""
    return _user_response(current_user)

@router.put("/me", response_model=UserResponse)
async def update_user_profile(
    user_update: UserUpdate,
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    """Update name and phone used to prefill bookings"""
    updated_user = await update_user(str(current_user["_id"]), user_update)

    if not updated_user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    return _user_response(updated_user)
