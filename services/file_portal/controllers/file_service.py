from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from shared.db import get_db
from services.file_portal.controllers.dependencies import get_active_user, get_optional_active_user
from services.file_portal.core import catalog
from services.file_portal.core.access_gate import can_delete_file, role_of
from services.file_portal.core.file_store import FileStore, get_file_store
from services.file_portal.core.file_types import content_type_for, format_file_size, viewer_kind
from services.file_portal.core.file_workflows import delete_file, locate_file, upload_file
from services.file_portal.schemas.browse import FileBrowseOut
from services.file_portal.schemas.classes import SchoolClassOut
from services.file_portal.schemas.files import FileDetailOut, FileOut, FileUploadOut

router = APIRouter(prefix="/files", tags=["Files"])


def _measure(stream) -> int:
    stream.seek(0, 2)
    size = stream.tell()
    stream.seek(0)
    return size


# --- BROWSE / SEARCH (public) ---
@router.get("", response_model=FileBrowseOut)
async def browse_files(
    class_name: Optional[str] = Query(None, description="Class code like 'VI'"),
    subject: Optional[str] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    classes = await catalog.list_active_classes(db)
    subjects = await catalog.list_subjects(db, class_name) if class_name else []

    if search and search.strip():
        files = await catalog.search_files(db, search)
    else:
        files = await catalog.list_files(db, class_name, subject)

    return FileBrowseOut(
        selected_class=class_name,
        selected_subject=subject,
        search_term=search or "",
        classes=[SchoolClassOut.model_validate(c) for c in classes],
        subjects=subjects,
        files=[FileOut.model_validate(f) for f in files]
    )


# --- RECENT UPLOADS (public) ---
@router.get("/recent", response_model=List[FileOut])
async def get_recent_files(
    limit: int = Query(12, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    return await catalog.recent_files(db, limit)


# --- SUBJECTS FOR A CLASS (public, used by the upload form) ---
@router.get("/subjects", response_model=List[str])
async def get_subjects(
    class_name: str = Query(..., description="Class code like 'VI'"),
    db: AsyncSession = Depends(get_db)
):
    return await catalog.list_subjects(db, class_name)


# --- UPLOAD ---
@router.post("/upload", response_model=FileUploadOut, status_code=status.HTTP_201_CREATED)
async def upload(
    file: UploadFile = File(...),
    class_name: str = Form(...),
    subject: str = Form(...),
    description: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
    store: FileStore = Depends(get_file_store),
    current_user: dict = Depends(get_active_user)
):
    size = file.size
    if size is None:
        size = await run_in_threadpool(_measure, file.file)

    return await upload_file(
        db,
        store,
        current_user,
        content=file.file,
        file_name=file.filename or "",
        size=size,
        class_code=class_name,
        subject=subject,
        description=description
    )


# --- FILE DETAIL WITH PREVIOUS/NEXT (public) ---
@router.get("/{file_id}", response_model=FileDetailOut)
async def get_file_detail(
    file_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[dict] = Depends(get_optional_active_user)
):
    record = await catalog.get_file(db, file_id)
    previous_id, next_id = await catalog.adjacent_files(db, record.id, record.class_name, record.subject)

    user_id = current_user["user_id"] if current_user else None
    return FileDetailOut(
        file=FileOut.model_validate(record),
        content_type=content_type_for(record.file_type),
        viewer=viewer_kind(record.file_type),
        size_display=format_file_size(record.file_size),
        previous_id=previous_id,
        next_id=next_id,
        can_delete=can_delete_file(role_of(current_user), user_id, record.uploaded_by)
    )


# --- INLINE VIEW (public) ---
@router.get("/{file_id}/view")
async def view_file_inline(
    file_id: int,
    db: AsyncSession = Depends(get_db),
    store: FileStore = Depends(get_file_store)
):
    record, path, content_type = await locate_file(db, store, file_id)
    # No filename, so browsers render it in place.
    return FileResponse(path, media_type=content_type)


# --- DOWNLOAD (public) ---
@router.get("/{file_id}/download")
async def download_file(
    file_id: int,
    db: AsyncSession = Depends(get_db),
    store: FileStore = Depends(get_file_store)
):
    record, path, content_type = await locate_file(db, store, file_id)
    return FileResponse(path, media_type=content_type, filename=record.file_name)


# --- DELETE ---
@router.delete("/{file_id}")
async def remove_file(
    file_id: int,
    db: AsyncSession = Depends(get_db),
    store: FileStore = Depends(get_file_store),
    current_user: dict = Depends(get_active_user)
):
    record = await delete_file(db, store, current_user, file_id)
    return {
        "status": "deleted",
        "detail": "File deleted successfully.",
        "class_name": record.class_name,
        "subject": record.subject
    }
