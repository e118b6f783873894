# services/file_portal/models/files.py
from sqlalchemy import Column, Integer, BigInteger, String, DateTime, ForeignKey, Index
from shared.db import Base
from datetime import datetime


class FileRecord(Base):
    __tablename__ = "files"

    id = Column(Integer, primary_key=True, autoincrement=True)
    file_name = Column(String(255), nullable=False)      # original upload name, shown to users
    file_path = Column(String(500), nullable=False)      # relative to the storage root
    file_type = Column(String(10), nullable=False)       # extension, e.g. ".pdf"
    class_name = Column(String(10), nullable=False)      # class code at upload time, kept in sync on rename
    subject = Column(String(100), nullable=False)
    uploaded_by = Column(Integer, ForeignKey("user_accounts.id"), nullable=False)
    upload_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    file_size = Column(BigInteger, nullable=False, default=0)
    description = Column(String(500), nullable=True)

    __table_args__ = (
        Index("idx_file_class_subject", "class_name", "subject"),
        Index("idx_file_upload_date", "upload_date"),
        Index("idx_file_uploaded_by", "uploaded_by"),
    )
