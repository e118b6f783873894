# services/file_portal/schemas/users.py
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    TEACHER = "teacher"


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=6, max_length=72)
    role: UserRole = UserRole.TEACHER
    assigned_classes: List[str] = Field(default_factory=list)


class UserOut(BaseModel):
    id: int
    username: str
    role: UserRole
    assigned_classes: List[str]
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    username: str
    role: UserRole
    access_token: str
    token_type: str = "bearer"
