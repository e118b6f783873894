# services/file_portal/models/classes.py
from sqlalchemy import Column, Integer, String, Boolean, Index, func
from shared.db import Base


class SchoolClass(Base):
    __tablename__ = "school_classes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(10), nullable=False)             # E.g., "VI", "X"
    display_name = Column(String(100), nullable=False, default="")
    is_active = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)

    __table_args__ = (
        Index("uq_school_class_code_lower", func.lower(code), unique=True),
        Index("ix_school_class_sort", "is_active", "sort_order"),
    )
