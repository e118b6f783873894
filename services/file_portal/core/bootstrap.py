# services/file_portal/core/bootstrap.py
import logging
from typing import Iterable

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from shared.auth import get_password_hash
from services.file_portal.core import catalog
from services.file_portal.models.classes import SchoolClass
from services.file_portal.models.users import UserRole

logger = logging.getLogger(__name__)


async def ensure_default_classes(db: AsyncSession, codes: Iterable[str]) -> int:
    """Seed the default classes into an empty class table. Returns how many were added."""
    result = await db.execute(select(func.count(SchoolClass.id)))
    if result.scalar_one() > 0:
        return 0

    added = 0
    for order, code in enumerate(codes, start=1):
        db.add(SchoolClass(code=code, display_name=f"Class {code}", sort_order=order, is_active=True))
        added += 1
    await db.commit()
    logger.info(f"Seeded {added} default classes")
    return added


async def ensure_default_admin(db: AsyncSession, username: str, password: str, classes: Iterable[str] = ()):
    """Create the first admin account unless an active admin already exists."""
    if await catalog.any_active_admin(db):
        return None

    admin = await catalog.create_user(
        db,
        username=username,
        hashed_password=get_password_hash(password),
        role=UserRole.ADMIN,
        assigned_classes=classes
    )
    logger.info(f"Created default admin account: {username}")
    return admin
