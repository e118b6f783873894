from typing import Optional

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.auth import get_current_user, get_optional_user
from shared.db import get_db
from services.file_portal.models.users import UserAccount


async def _load_active_account(db: AsyncSession, identity: dict) -> Optional[UserAccount]:
    user = await db.get(UserAccount, identity["user_id"])
    if not user or not user.is_active:
        return None
    return user


def _identity_for(user: UserAccount) -> dict:
    # Role and classes come from the account, not the token, so changes apply at once.
    return {
        "user_id": user.id,
        "username": user.username,
        "role": user.role.value,
        "assigned_classes": user.assigned_classes
    }


async def get_active_user(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Token holder, rejected when the account was deactivated or removed after login."""
    user = await _load_active_account(db, current_user)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is inactive or no longer exists",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _identity_for(user)


async def get_optional_active_user(
    current_user: Optional[dict] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    if not current_user:
        return None
    user = await _load_active_account(db, current_user)
    return _identity_for(user) if user else None
