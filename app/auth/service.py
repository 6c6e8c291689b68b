from datetime import datetime, timedelta
from typing import Callable, Optional, Tuple

from sqlalchemy.orm import Session
from app.auth.models import Admin, is_account_locked
from app.core.config import settings
from app.core.datetime_utils import as_utc, utcnow
from app.core.logging_config import log_security_event
from app.core.security import verify_password, create_access_token, decode_access_token
from app.core.service_base import BaseService
from app.core.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    AccountDeactivatedError,
    AccountLockedError,
    AccountNotFoundError
)


class AuthService(BaseService):
    """
    Credential checks, account lockout and bearer tokens for admin accounts.

    Lockout is a two-state machine driven by failed logins: an account is
    unlocked while fewer than ``max_login_attempts`` consecutive failures
    have been recorded and locked while ``lock_until`` lies in the future.
    A successful login, or the first failure after a lock has expired,
    returns it to a clean unlocked state.
    """

    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow):
        super().__init__(db)
        self.clock = clock

    def login(self, username: str, password: str) -> Tuple[Admin, str]:
        """Verify credentials and return the admin with a fresh access token."""
        admin = self.get_admin_by_username(username)

        if admin is None:
            log_security_event("failed_login", username, success=False, details={"reason": "unknown_user"})
            raise InvalidCredentialsError()

        now = self.clock()

        if is_account_locked(admin.lock_until, now):
            log_security_event("login_while_locked", username, success=False)
            raise AccountLockedError(lock_until=as_utc(admin.lock_until).isoformat())

        if not admin.is_active:
            log_security_event("failed_login", username, success=False, details={"reason": "deactivated"})
            raise AccountDeactivatedError()

        if not verify_password(password, admin.password_hash):
            self.register_failed_attempt(admin)
            raise InvalidCredentialsError()

        self.reset_login_attempts(admin)
        token = self.create_token(admin)

        self.log_service_action("successful_login", "Admin", admin.id)
        return admin, token

    def register_failed_attempt(self, admin: Admin):
        """Count a failed login and lock the account once the limit is hit."""
        now = self.clock()
        lock_applied = False

        if admin.lock_until is not None and not is_account_locked(admin.lock_until, now):
            # Previous lock has run out: start a fresh count
            values = {"login_attempts": 1, "lock_until": None}
        else:
            # Increment in the UPDATE itself so concurrent failures are all counted
            values = {"login_attempts": Admin.login_attempts + 1}
            if (admin.login_attempts or 0) + 1 >= settings.max_login_attempts and not is_account_locked(admin.lock_until, now):
                values["lock_until"] = now + timedelta(minutes=settings.account_lock_minutes)
                lock_applied = True

        self.db.query(Admin).filter(Admin.id == admin.id).update(values, synchronize_session=False)
        self.safe_commit("Error recording failed login", resource_type="Admin")
        self.db.refresh(admin)

        log_security_event(
            "account_locked" if lock_applied else "failed_login",
            admin.username,
            success=False,
            details={"attempts": admin.login_attempts}
        )

    def reset_login_attempts(self, admin: Admin):
        """Clear the failure counter and lock, and stamp the login time."""
        self.db.query(Admin).filter(Admin.id == admin.id).update(
            {"login_attempts": 0, "lock_until": None, "last_login": self.clock()},
            synchronize_session=False
        )
        self.safe_commit("Error recording login", resource_type="Admin")
        self.db.refresh(admin)

    def create_token(self, admin: Admin) -> str:
        return create_access_token(
            data={"sub": admin.id, "username": admin.username, "role": admin.role},
            now=self.clock()
        )

    def authenticate(self, token: str) -> Admin:
        """Resolve a bearer token to an active admin account."""
        payload = decode_access_token(token)

        admin_id = payload.get("sub")
        if not admin_id:
            raise InvalidTokenError()

        admin = self.get_admin_by_id(admin_id)
        if admin is None:
            raise AccountNotFoundError()

        if not admin.is_active:
            raise AccountDeactivatedError()

        return admin

    def get_admin_by_id(self, admin_id: str) -> Optional[Admin]:
        return self.db.query(Admin).filter(Admin.id == admin_id).first()

    def get_admin_by_username(self, username: str) -> Optional[Admin]:
        return self.db.query(Admin).filter(Admin.username == username).first()
