# services/file_portal/core/file_workflows.py
"""
Upload, delete and locate: the steps the web layer runs for each file
request, in order. The store and the catalog are not transactional together;
a crash between writing bytes and inserting the record leaves an orphaned
file on disk.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Optional, Tuple, Union

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from shared.exceptions import ForbiddenError, NotFoundError, ValidationError
from services.file_portal.core import catalog
from services.file_portal.core.access_gate import Action, can_delete_file, require, role_of
from services.file_portal.core.file_store import FileStore
from services.file_portal.core.file_types import content_type_for
from services.file_portal.core.file_validator import validate_upload
from services.file_portal.models.files import FileRecord

logger = logging.getLogger(__name__)


async def upload_file(
    db: AsyncSession,
    store: FileStore,
    identity: dict,
    content: Union[bytes, BinaryIO],
    file_name: str,
    size: int,
    class_code: str,
    subject: str,
    description: Optional[str] = None
) -> FileRecord:
    require(role_of(identity), Action.UPLOAD)
    user_id = identity["user_id"]

    subject = (subject or "").strip()
    if not subject:
        raise ValidationError("Subject is required")
    if len(subject) > 100:
        raise ValidationError("Subject must be at most 100 characters")
    description = (description or "").strip() or None
    if description and len(description) > 500:
        raise ValidationError("Description must be at most 500 characters")

    school_class = await catalog.get_class_by_code(db, class_code or "")
    if not school_class or not school_class.is_active:
        raise NotFoundError("Class", class_code)
    class_code = school_class.code

    if not validate_upload(file_name, size):
        raise ValidationError(
            "Invalid file. Please check file type and size.",
            details={"file_name": file_name, "size": size}
        )

    await catalog.create_subject_if_absent(db, school_class, subject, user_id)

    stored_path = await run_in_threadpool(store.save, content, file_name, class_code, subject, user_id)

    record = FileRecord(
        file_name=file_name[:255],
        file_path=stored_path,
        file_type=os.path.splitext(file_name)[1].lower(),
        class_name=class_code,
        subject=subject,
        uploaded_by=user_id,
        upload_date=datetime.utcnow(),
        file_size=size,
        description=description
    )
    try:
        record = await catalog.add_file(db, record)
    except Exception:
        logger.error(f"File record insert failed, stored bytes orphaned at {stored_path}", exc_info=True)
        raise

    logger.info(f"Upload complete: file {record.id} in {class_code}/{subject} by user {user_id}")
    return record


async def delete_file(db: AsyncSession, store: FileStore, identity: Optional[dict], file_id: int) -> FileRecord:
    record = await catalog.get_file(db, file_id)

    user_id = identity["user_id"] if identity else None
    if not can_delete_file(role_of(identity), user_id, record.uploaded_by):
        raise ForbiddenError("You can only delete files you uploaded")

    await run_in_threadpool(store.delete, record.file_path)
    await catalog.remove_file(db, record)

    logger.info(f"File deleted successfully: {file_id} by user {user_id}")
    return record


async def locate_file(db: AsyncSession, store: FileStore, file_id: int) -> Tuple[FileRecord, Path, str]:
    """Record, on-disk path and content type; NotFound if either side is missing."""
    record = await catalog.get_file(db, file_id)
    path = await run_in_threadpool(store.locate, record.file_path)
    return record, path, content_type_for(record.file_type)
