# services/file_portal/models/users.py
from sqlalchemy import Column, Integer, String, Text, Enum, DateTime, Boolean, Index, func
from shared.db import Base
import enum
import json


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    TEACHER = "teacher"


class UserAccount(Base):
    __tablename__ = "user_accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(Enum(UserRole), nullable=False)
    assigned_classes_json = Column("assigned_classes", Text, nullable=False, default="[]")   # JSON array of class codes
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("uq_user_username_lower", func.lower(username), unique=True),
        Index("idx_user_role_active", "role", "is_active"),
    )

    @property
    def assigned_classes(self) -> list:
        return json.loads(self.assigned_classes_json or "[]")

    @assigned_classes.setter
    def assigned_classes(self, codes) -> None:
        self.assigned_classes_json = json.dumps(sorted(set(codes or [])))
