# services/file_portal/core/class_lifecycle.py
"""
Create, rename, deactivate and delete classes while keeping the
``uploads/Class <code>`` directory layout in step with the catalog.

Known limitation: an upload into a class that is being renamed at the same
moment can land in the old directory. Nothing here locks against that.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete
from starlette.concurrency import run_in_threadpool

from shared.exceptions import ConflictError, StorageIOError, ValidationError
from services.file_portal.core import catalog
from services.file_portal.core.file_store import FileStore
from services.file_portal.core.path_policy import is_clean_class_code, rebase_stored_path
from services.file_portal.models.classes import SchoolClass
from services.file_portal.models.subjects import Subject

logger = logging.getLogger(__name__)


def _clean_code(code: str, require_clean: bool = True) -> str:
    code = (code or "").strip()
    if not code:
        raise ValidationError("Class code is required")
    if len(code) > 10:
        raise ValidationError("Class code must be at most 10 characters", details={"code": code})
    if require_clean and not is_clean_class_code(code):
        raise ValidationError(
            "Class code cannot contain characters that are not allowed in folder names",
            details={"code": code}
        )
    return code


async def _ensure_directory_free(db: AsyncSession, code: str, exclude_id: int = None) -> None:
    # Two codes must never share "uploads/Class <code>".
    owner = await catalog.get_class_sharing_directory(db, code, exclude_id=exclude_id)
    if owner:
        raise ConflictError(
            "Another class already uses the folder for this name.",
            details={"code": code, "existing_code": owner.code}
        )


async def create_class(
    db: AsyncSession,
    store: FileStore,
    code: str,
    display_name: str,
    sort_order: int = 0
) -> SchoolClass:
    code = _clean_code(code)
    if await catalog.get_class_by_code(db, code):
        raise ConflictError("A class with this name already exists.", details={"code": code})
    await _ensure_directory_free(db, code)

    school_class = SchoolClass(
        code=code,
        display_name=(display_name or "").strip() or f"Class {code}",
        sort_order=sort_order,
        is_active=True
    )
    db.add(school_class)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("A class with this name already exists.", details={"code": code})
    await db.refresh(school_class)

    try:
        await run_in_threadpool(store.ensure_class_directory, code)
        logger.info(f"Created directory for class: {code}")
    except StorageIOError as e:
        # The directory is created again on the first upload.
        logger.warning(f"Could not create directory for class {code}: {e.message}")

    return school_class


async def rename_class(
    db: AsyncSession,
    store: FileStore,
    class_id: int,
    new_code: str,
    new_display_name: str,
    new_sort_order: int,
    is_active: bool = True
) -> SchoolClass:
    """
    Update a class. When the code changes, every file record of the class
    follows it: class field, stored path and the physical directory.

    Either all of that happens or none of it does. The directory is moved
    before any record is touched, so a failed move leaves the session clean;
    if the commit fails after the move, the directory is moved back.
    """
    school_class = await catalog.get_class(db, class_id)
    old_code = school_class.code
    new_code = _clean_code(new_code, require_clean=(new_code or "").strip() != old_code)
    code_changed = new_code != old_code

    if code_changed and await catalog.get_class_by_code(db, new_code, exclude_id=class_id):
        raise ConflictError("A class with this name already exists.", details={"code": new_code})
    if code_changed:
        await _ensure_directory_free(db, new_code, exclude_id=class_id)

    file_count = await catalog.count_files_for_class(db, old_code)
    if file_count and school_class.is_active and not is_active:
        raise ConflictError(
            "Cannot deactivate class that contains files. Please move or delete all files first.",
            details={"class_id": class_id, "file_count": file_count}
        )

    files = await catalog.files_for_class(db, old_code) if code_changed and file_count else []

    # A directory still shared with another class stays where it is.
    sharing = await catalog.get_class_sharing_directory(db, old_code, exclude_id=class_id) if code_changed else None
    if sharing and files:
        raise ConflictError(
            "This class shares its folder with another class and cannot be renamed while it has files.",
            details={"class_id": class_id, "shared_with": sharing.code}
        )

    moved = False
    if code_changed and sharing:
        logger.warning(f"Class directory of {old_code} is also used by class {sharing.code}, not moved")
    elif code_changed:
        try:
            moved = await run_in_threadpool(store.move_class_directory, old_code, new_code)
        except StorageIOError:
            if files:
                logger.error(f"Rename of class {old_code} to {new_code} aborted: directory move failed")
                raise
            # No file lives there; the directory is recreated on the next upload.
            logger.warning(f"Could not move empty class directory {old_code} -> {new_code}")

    school_class.code = new_code
    school_class.display_name = (new_display_name or "").strip() or school_class.display_name
    school_class.sort_order = new_sort_order
    school_class.is_active = is_active

    for record in files:
        record.class_name = new_code
        record.file_path = rebase_stored_path(record.file_path, old_code, new_code)

    try:
        await db.commit()
    except Exception as e:
        await db.rollback()
        if moved:
            try:
                await run_in_threadpool(store.move_class_directory, new_code, old_code)
            except StorageIOError as move_error:
                logger.error(
                    f"Could not move class directory back from {new_code} to {old_code} "
                    f"after a failed rename: {move_error.message}"
                )
        if isinstance(e, IntegrityError):
            raise ConflictError("A class with this name already exists.", details={"code": new_code}) from e
        raise

    await db.refresh(school_class)
    if code_changed:
        logger.info(f"Renamed class {old_code} to {new_code} ({len(files)} files updated)")
    return school_class


async def deactivate_class(db: AsyncSession, class_id: int) -> SchoolClass:
    school_class = await catalog.get_class(db, class_id)

    if await catalog.count_files_for_class(db, school_class.code):
        raise ConflictError(
            "Cannot deactivate class that contains files. Please move or delete all files first.",
            details={"class_id": class_id}
        )

    school_class.is_active = False
    await db.commit()
    await db.refresh(school_class)
    logger.info(f"Class deactivated: {school_class.code}")
    return school_class


async def delete_class(db: AsyncSession, store: FileStore, class_id: int) -> None:
    school_class = await catalog.get_class(db, class_id)
    code = school_class.code

    if await catalog.count_files_for_class(db, code):
        raise ConflictError(
            "Cannot delete class that contains files. Please move or delete all files first.",
            details={"class_id": class_id}
        )

    sharing = await catalog.get_class_sharing_directory(db, code, exclude_id=class_id)
    sharing_code = sharing.code if sharing else None

    await db.execute(delete(Subject).where(Subject.class_id == class_id))
    await db.delete(school_class)
    await db.commit()
    logger.info(f"Class deleted: {code}")

    if sharing_code:
        logger.warning(f"Directory of deleted class {code} is also used by class {sharing_code}, left in place")
        return
    await run_in_threadpool(store.remove_class_directory_if_empty, code)
