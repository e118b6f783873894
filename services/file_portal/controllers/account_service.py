from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.auth import create_access_token, get_password_hash
from shared.db import get_db
from services.file_portal.controllers.dependencies import get_active_user
from services.file_portal.core import catalog
from services.file_portal.core.access_gate import Action, require, role_of
from services.file_portal.models.users import UserRole as AccountRole
from services.file_portal.schemas.users import LoginRequest, LoginResponse, UserCreate, UserOut

router = APIRouter(prefix="/account", tags=["Account"])


# --- LOGIN (admin and teacher) ---
@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    user = await catalog.authenticate_user(db, payload.username, payload.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password"
        )

    token_data = {
        "sub": user.username,
        "user_id": user.id,
        "role": user.role.value,
        "assigned_classes": user.assigned_classes
    }

    return LoginResponse(
        username=user.username,
        role=user.role.value,
        access_token=create_access_token(token_data)
    )


# --- CURRENT USER ---
@router.get("/me", response_model=UserOut)
async def get_me(
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_active_user)
):
    return await catalog.get_user(db, current_user["user_id"])


# --- CREATE USER (admin only) ---
@router.post("/users", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_active_user)
):
    require(role_of(current_user), Action.MANAGE_USERS)

    return await catalog.create_user(
        db,
        username=payload.username,
        hashed_password=get_password_hash(payload.password),
        role=AccountRole(payload.role.value),
        assigned_classes=payload.assigned_classes
    )


# --- LIST TEACHERS (admin only) ---
@router.get("/teachers", response_model=List[UserOut])
async def get_teachers(
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_active_user)
):
    require(role_of(current_user), Action.MANAGE_USERS)
    return await catalog.list_teachers(db)


# --- DEACTIVATE USER (admin only) ---
@router.delete("/users/{user_id}", response_model=UserOut)
async def deactivate_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_active_user)
):
    require(role_of(current_user), Action.MANAGE_USERS)

    if user_id == current_user["user_id"]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot deactivate your own account"
        )

    return await catalog.deactivate_user(db, user_id)
