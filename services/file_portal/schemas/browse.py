# services/file_portal/schemas/browse.py
from pydantic import BaseModel
from typing import List, Optional

from services.file_portal.schemas.classes import SchoolClassOut
from services.file_portal.schemas.files import FileOut


class FileBrowseOut(BaseModel):
    selected_class: Optional[str] = None
    selected_subject: Optional[str] = None
    search_term: str = ""
    classes: List[SchoolClassOut]
    subjects: List[str]
    files: List[FileOut]
