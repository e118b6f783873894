# services/file_portal/schemas/files.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class FileOut(BaseModel):
    id: int
    file_name: str
    file_type: str
    class_name: str
    subject: str
    uploaded_by: int
    upload_date: datetime
    file_size: int
    description: Optional[str] = None

    class Config:
        from_attributes = True


class FileDetailOut(BaseModel):
    file: FileOut
    content_type: str
    viewer: str                 # image | video | audio | pdf | text | office | other
    size_display: str
    previous_id: Optional[int] = None
    next_id: Optional[int] = None
    can_delete: bool = False


class FileUploadOut(BaseModel):
    id: int
    file_path: str
    class_name: str
    subject: str

    class Config:
        from_attributes = True
