# services/file_portal/schemas/classes.py
from pydantic import BaseModel, Field
from typing import List

from services.file_portal.schemas.files import FileOut
from services.file_portal.schemas.users import UserOut


class SchoolClassCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=10)
    display_name: str = Field("", max_length=100)
    sort_order: int = 0


class SchoolClassUpdate(BaseModel):
    code: str = Field(..., min_length=1, max_length=10)
    display_name: str = Field("", max_length=100)
    sort_order: int = 0
    is_active: bool = True


class SchoolClassOut(BaseModel):
    id: int
    code: str
    display_name: str
    is_active: bool
    sort_order: int

    class Config:
        from_attributes = True


class SchoolClassDetailOut(SchoolClassOut):
    file_count: int


class AdminDashboardOut(BaseModel):
    teachers: List[UserOut]
    classes: List[SchoolClassOut]
    total_files: int
    total_file_size: int
    total_file_size_display: str
    recent_files: List[FileOut]
