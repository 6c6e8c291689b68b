from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.exceptions import MissingTokenError, InsufficientPermissionsError
from app.auth.service import AuthService
from app.auth.models import Admin, ADMIN_ROLES

# Security scheme; missing headers are reported by get_current_admin
security = HTTPBearer(auto_error=False)


def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Admin:
    """Get the admin account behind the bearer token."""
    if credentials is None or not credentials.credentials:
        raise MissingTokenError()

    return AuthService(db).authenticate(credentials.credentials)


def get_current_admin_user(current_admin: Admin = Depends(get_current_admin)) -> Admin:
    """Get current authenticated admin, rejecting any non-admin role."""
    if current_admin.role not in ADMIN_ROLES:
        raise InsufficientPermissionsError()
    return current_admin
