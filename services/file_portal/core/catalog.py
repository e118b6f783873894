# services/file_portal/core/catalog.py
"""
Metadata repository for files, classes, subjects and user accounts.

Everything here takes the request's AsyncSession. Entities reference each
other by id or class code only; joins are done in queries when needed.
"""

import logging
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from shared.auth import verify_password
from shared.exceptions import ConflictError, NotFoundError
from services.file_portal.core.path_policy import class_directory
from services.file_portal.models.classes import SchoolClass
from services.file_portal.models.files import FileRecord
from services.file_portal.models.subjects import Subject
from services.file_portal.models.users import UserAccount, UserRole

logger = logging.getLogger(__name__)

_FILE_ORDER = (FileRecord.class_name, FileRecord.subject, FileRecord.file_name, FileRecord.id)


# --- FILES ---

async def get_file(db: AsyncSession, file_id: int) -> FileRecord:
    record = await db.get(FileRecord, file_id)
    if not record:
        raise NotFoundError("File", file_id)
    return record


async def add_file(db: AsyncSession, record: FileRecord) -> FileRecord:
    db.add(record)
    await db.commit()
    await db.refresh(record)
    return record


async def remove_file(db: AsyncSession, record: FileRecord) -> None:
    await db.delete(record)
    await db.commit()


async def list_files(
    db: AsyncSession,
    class_name: Optional[str] = None,
    subject: Optional[str] = None
) -> List[FileRecord]:
    stmt = select(FileRecord)
    if class_name:
        stmt = stmt.where(FileRecord.class_name == class_name)
    if subject:
        stmt = stmt.where(FileRecord.subject == subject)

    result = await db.execute(stmt.order_by(*_FILE_ORDER))
    return result.scalars().all()


async def search_files(db: AsyncSession, term: Optional[str]) -> List[FileRecord]:
    """Case-insensitive substring match on name, subject or description."""
    if not term or not term.strip():
        return await list_files(db)

    needle = term.strip().lower()
    result = await db.execute(
        select(FileRecord)
        .where(
            or_(
                func.lower(FileRecord.file_name).contains(needle, autoescape=True),
                func.lower(FileRecord.subject).contains(needle, autoescape=True),
                func.lower(func.coalesce(FileRecord.description, "")).contains(needle, autoescape=True),
            )
        )
        .order_by(*_FILE_ORDER)
    )
    return result.scalars().all()


async def adjacent_files(
    db: AsyncSession,
    file_id: int,
    class_name: str,
    subject: str
) -> Tuple[Optional[int], Optional[int]]:
    """
    Previous and next file ids within one (class, subject) bucket ordered by
    name. (None, None) when the id is not in that bucket.
    """
    result = await db.execute(
        select(FileRecord.id)
        .where(FileRecord.class_name == class_name, FileRecord.subject == subject)
        .order_by(FileRecord.file_name, FileRecord.id)
    )
    ids = list(result.scalars().all())

    if file_id not in ids:
        return None, None

    index = ids.index(file_id)
    previous_id = ids[index - 1] if index > 0 else None
    next_id = ids[index + 1] if index < len(ids) - 1 else None
    return previous_id, next_id


async def recent_files(db: AsyncSession, limit: int = 12) -> List[FileRecord]:
    result = await db.execute(
        select(FileRecord)
        .order_by(FileRecord.upload_date.desc(), FileRecord.id.desc())
        .limit(limit)
    )
    return result.scalars().all()


async def storage_summary(db: AsyncSession) -> Tuple[int, int]:
    """(file count, total bytes) across the whole catalog."""
    result = await db.execute(
        select(func.count(FileRecord.id), func.coalesce(func.sum(FileRecord.file_size), 0))
    )
    count, total = result.one()
    return int(count), int(total)


async def count_files_for_class(db: AsyncSession, class_code: str) -> int:
    result = await db.execute(
        select(func.count(FileRecord.id)).where(FileRecord.class_name == class_code)
    )
    return result.scalar_one()


async def files_for_class(db: AsyncSession, class_code: str) -> List[FileRecord]:
    result = await db.execute(select(FileRecord).where(FileRecord.class_name == class_code))
    return result.scalars().all()


# --- CLASSES ---

async def get_class(db: AsyncSession, class_id: int) -> SchoolClass:
    school_class = await db.get(SchoolClass, class_id)
    if not school_class:
        raise NotFoundError("Class", class_id)
    return school_class


async def get_class_by_code(
    db: AsyncSession,
    code: str,
    exclude_id: Optional[int] = None
) -> Optional[SchoolClass]:
    stmt = select(SchoolClass).where(func.lower(SchoolClass.code) == code.strip().lower())
    if exclude_id is not None:
        stmt = stmt.where(SchoolClass.id != exclude_id)
    result = await db.execute(stmt)
    return result.scalars().first()


async def get_class_sharing_directory(
    db: AsyncSession,
    code: str,
    exclude_id: Optional[int] = None
) -> Optional[SchoolClass]:
    """Any class, active or not, whose directory is the one ``code`` maps to."""
    target = class_directory(code).lower()
    stmt = select(SchoolClass)
    if exclude_id is not None:
        stmt = stmt.where(SchoolClass.id != exclude_id)
    result = await db.execute(stmt)
    for school_class in result.scalars().all():
        if class_directory(school_class.code).lower() == target:
            return school_class
    return None


async def list_active_classes(db: AsyncSession) -> List[SchoolClass]:
    result = await db.execute(
        select(SchoolClass)
        .where(SchoolClass.is_active == True)
        .order_by(SchoolClass.sort_order, SchoolClass.code)
    )
    return result.scalars().all()


# --- SUBJECTS ---

async def _find_subject(db: AsyncSession, class_id: int, name: str) -> Optional[Subject]:
    result = await db.execute(
        select(Subject).where(Subject.class_id == class_id, Subject.name == name)
    )
    return result.scalars().first()


async def create_subject_if_absent(
    db: AsyncSession,
    school_class: SchoolClass,
    subject_name: str,
    creator_id: int
) -> Subject:
    """
    Return the subject, inserting it first if needed.

    Two first uploads racing on the same new subject both see it as absent;
    the unique (class_id, name) constraint rejects the slower insert and that
    caller just reads back the winner's row. Commits on its own, so call it
    before adding anything else to the session.
    """
    subject_name = subject_name.strip()
    # rollback() expires loaded instances; keep plain values for the retry path.
    class_id, class_code = school_class.id, school_class.code

    existing = await _find_subject(db, class_id, subject_name)
    if existing:
        return existing

    subject = Subject(name=subject_name, class_id=class_id, created_by=creator_id, is_active=True)
    db.add(subject)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info(f"Subject '{subject_name}' for class {class_code} created concurrently")
        existing = await _find_subject(db, class_id, subject_name)
        if existing is None:
            raise
        return existing

    await db.refresh(subject)
    logger.info(f"Created subject '{subject_name}' for class {class_code}")
    return subject


async def list_subjects(db: AsyncSession, class_code: str) -> List[str]:
    result = await db.execute(
        select(Subject.name)
        .join(SchoolClass, Subject.class_id == SchoolClass.id)
        .where(SchoolClass.code == class_code, Subject.is_active == True)
        .distinct()
        .order_by(Subject.name)
    )
    return result.scalars().all()


# --- USERS ---

async def get_user(db: AsyncSession, user_id: int) -> UserAccount:
    user = await db.get(UserAccount, user_id)
    if not user:
        raise NotFoundError("User", user_id)
    return user


async def get_user_by_username(db: AsyncSession, username: str) -> Optional[UserAccount]:
    # Usernames follow the class-code policy: unique and matched case-insensitively.
    result = await db.execute(
        select(UserAccount).where(func.lower(UserAccount.username) == username.strip().lower())
    )
    return result.scalars().first()


async def authenticate_user(db: AsyncSession, username: str, password: str) -> Optional[UserAccount]:
    user = await get_user_by_username(db, username)

    if not user or not user.is_active:
        logger.warning(f"Authentication failed for user: {username}")
        return None

    if not verify_password(password, user.hashed_password):
        logger.warning(f"Invalid password for user: {username}")
        return None

    logger.info(f"User authenticated successfully: {username}")
    return user


async def create_user(
    db: AsyncSession,
    username: str,
    hashed_password: str,
    role: UserRole,
    assigned_classes: Iterable[str] = ()
) -> UserAccount:
    username = username.strip()
    if await get_user_by_username(db, username):
        raise ConflictError("Username already exists", details={"username": username})

    user = UserAccount(
        username=username,
        hashed_password=hashed_password,
        role=role,
        is_active=True
    )
    user.assigned_classes = assigned_classes
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Username already exists", details={"username": username})

    await db.refresh(user)
    logger.info(f"User created successfully: {username}")
    return user


async def list_teachers(db: AsyncSession) -> List[UserAccount]:
    result = await db.execute(
        select(UserAccount)
        .where(UserAccount.role == UserRole.TEACHER, UserAccount.is_active == True)
        .order_by(UserAccount.username)
    )
    return result.scalars().all()


async def deactivate_user(db: AsyncSession, user_id: int) -> UserAccount:
    user = await get_user(db, user_id)
    user.is_active = False
    await db.commit()
    logger.info(f"User deactivated: {user_id}")
    return user


async def any_active_admin(db: AsyncSession) -> bool:
    result = await db.execute(
        select(func.count(UserAccount.id))
        .where(UserAccount.role == UserRole.ADMIN, UserAccount.is_active == True)
    )
    return result.scalar_one() > 0
