from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional
from datetime import datetime
from enum import Enum

class UserRole(str, Enum):
    CLIENT = "client"
    ADMIN = "admin"

class UserBase(BaseModel):
    email: EmailStr
    fullName: str = ""
    phone: str = ""

class UserCreate(UserBase):
    password: str = Field(..., min_length=6)

class UserUpdate(BaseModel):
    fullName: Optional[str] = None
    phone: Optional[str] = None

class UserResponse(BaseModel):
    id: str
    email: EmailStr
    fullName: str = ""
    phone: str = ""
    role: UserRole
    isActive: bool = True
    createdAt: datetime

    model_config = ConfigDict(populate_by_name=True)

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
