from datetime import datetime
from typing import Optional

from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text
from sqlalchemy.sql import func
from app.core.database import Base, generate_uuid
from app.core.datetime_utils import as_utc, utcnow

ADMIN_ROLES = ("admin", "super_admin")


def is_account_locked(lock_until: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """An account is locked while its lock timestamp lies in the future."""
    if lock_until is None:
        return False
    return as_utc(lock_until) > (now or utcnow())


class Admin(Base):
    __tablename__ = "admins"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)
    role = Column(String(20), nullable=False, default="admin")  # admin, super_admin
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime(timezone=True))
    login_attempts = Column(Integer, nullable=False, default=0)
    lock_until = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def is_locked(self) -> bool:
        return is_account_locked(self.lock_until)
