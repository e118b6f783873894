from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.db import get_db
from services.file_portal.controllers.dependencies import get_active_user
from services.file_portal.core import catalog
from services.file_portal.core.access_gate import Action, require, role_of
from services.file_portal.core.class_lifecycle import create_class, deactivate_class, delete_class, rename_class
from services.file_portal.core.file_store import FileStore, get_file_store
from services.file_portal.core.file_types import format_file_size
from services.file_portal.schemas.classes import (
    AdminDashboardOut,
    SchoolClassCreate,
    SchoolClassDetailOut,
    SchoolClassOut,
    SchoolClassUpdate
)
from services.file_portal.schemas.files import FileOut
from services.file_portal.schemas.users import UserOut

router = APIRouter(prefix="/classes", tags=["Classes"])


# --- LIST ACTIVE CLASSES (public) ---
@router.get("", response_model=List[SchoolClassOut])
async def list_classes(db: AsyncSession = Depends(get_db)):
    return await catalog.list_active_classes(db)


# --- ADMIN DASHBOARD ---
@router.get("/dashboard", response_model=AdminDashboardOut)
async def get_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_active_user)
):
    require(role_of(current_user), Action.VIEW_DASHBOARD)

    teachers = await catalog.list_teachers(db)
    classes = await catalog.list_active_classes(db)
    total_files, total_size = await catalog.storage_summary(db)
    recent = await catalog.recent_files(db, 10)

    return AdminDashboardOut(
        teachers=[UserOut.model_validate(t) for t in teachers],
        classes=[SchoolClassOut.model_validate(c) for c in classes],
        total_files=total_files,
        total_file_size=total_size,
        total_file_size_display=format_file_size(total_size),
        recent_files=[FileOut.model_validate(f) for f in recent]
    )


# --- CLASS DETAIL ---
@router.get("/{class_id}", response_model=SchoolClassDetailOut)
async def get_class_detail(
    class_id: int,
    db: AsyncSession = Depends(get_db)
):
    school_class = await catalog.get_class(db, class_id)
    file_count = await catalog.count_files_for_class(db, school_class.code)

    return SchoolClassDetailOut(
        id=school_class.id,
        code=school_class.code,
        display_name=school_class.display_name,
        is_active=school_class.is_active,
        sort_order=school_class.sort_order,
        file_count=file_count
    )


# --- CREATE CLASS ---
@router.post("", response_model=SchoolClassOut, status_code=status.HTTP_201_CREATED)
async def add_class(
    payload: SchoolClassCreate,
    db: AsyncSession = Depends(get_db),
    store: FileStore = Depends(get_file_store),
    current_user: dict = Depends(get_active_user)
):
    require(role_of(current_user), Action.MANAGE_CLASSES)
    return await create_class(db, store, payload.code, payload.display_name, payload.sort_order)


# --- UPDATE / RENAME CLASS ---
@router.put("/{class_id}", response_model=SchoolClassOut)
async def update_class(
    class_id: int,
    payload: SchoolClassUpdate,
    db: AsyncSession = Depends(get_db),
    store: FileStore = Depends(get_file_store),
    current_user: dict = Depends(get_active_user)
):
    require(role_of(current_user), Action.MANAGE_CLASSES)
    return await rename_class(
        db,
        store,
        class_id,
        new_code=payload.code,
        new_display_name=payload.display_name,
        new_sort_order=payload.sort_order,
        is_active=payload.is_active
    )


# --- DEACTIVATE CLASS ---
@router.post("/{class_id}/deactivate", response_model=SchoolClassOut)
async def deactivate(
    class_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: dict = Depends(get_active_user)
):
    require(role_of(current_user), Action.MANAGE_CLASSES)
    return await deactivate_class(db, class_id)


# --- DELETE CLASS ---
@router.delete("/{class_id}")
async def remove_class(
    class_id: int,
    db: AsyncSession = Depends(get_db),
    store: FileStore = Depends(get_file_store),
    current_user: dict = Depends(get_active_user)
):
    require(role_of(current_user), Action.MANAGE_CLASSES)
    await delete_class(db, store, class_id)
    return {"status": "deleted", "detail": "Class deleted successfully."}
