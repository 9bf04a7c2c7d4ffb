import logging
from datetime import timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import func
from sqlmodel import Session, select

from app.core.clock import utcnow
from app.core.config import settings
from app.core.security import create_access_token, get_password_hash, verify_password
from app.models.admin_user import AdminUser
from app.services.errors import store_errors

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class AuthService:
    def __init__(self, session: Session):
        self.session = session

    def get_user_by_email(self, email: str) -> Optional[AdminUser]:
        # Exact match first, then case-insensitive; no LIKE, so % and _ stay literal
        return self.session.exec(select(AdminUser).where(AdminUser.email == email)).first() or \
               self.session.exec(select(AdminUser).where(func.lower(AdminUser.email) == email.lower())).first()

    def create_user(self, email: str, password: str, name: Optional[str] = None) -> AdminUser:
        if self.get_user_by_email(email):
            raise HTTPException(status_code=400, detail="Email already registered")
        user = AdminUser(email=email, name=name, password_hash=get_password_hash(password))
        with store_errors(self.session):
            self.session.add(user)
            self.session.commit()
            self.session.refresh(user)
        return user

    def ensure_admin(self) -> Optional[AdminUser]:
        """Create the configured operator account if no admin exists yet."""
        if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
            return None
        if self.session.exec(select(AdminUser)).first():
            return None
        logger.info("Creating initial admin account %s", settings.ADMIN_EMAIL)
        return self.create_user(settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD, name=settings.ADMIN_NAME)

    def authenticate_user(self, email: str, password: str) -> tuple[Optional[AdminUser], Optional[str]]:
        user = self.get_user_by_email(email)
        if not user:
            return None, "User not found. Please check your email."
        if not user.is_active:
            return None, "This account is inactive."
        if not verify_password(password, user.password_hash):
            return None, "Incorrect password. Please try again."
        return user, None

    def issue_token(self, user: AdminUser, expires_delta: Optional[timedelta] = None) -> str:
        return create_access_token(data={"sub": user.email}, expires_delta=expires_delta)

    def change_password(self, user: AdminUser, current_password: str, new_password: str, confirm_password: str) -> None:
        if new_password != confirm_password:
            raise HTTPException(status_code=400, detail="The new passwords do not match")
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise HTTPException(
                status_code=400,
                detail=f"The password must be at least {MIN_PASSWORD_LENGTH} characters",
            )
        # Re-authenticate before changing
        if not verify_password(current_password, user.password_hash):
            raise HTTPException(status_code=400, detail="The current password is incorrect")

        user.password_hash = get_password_hash(new_password)
        user.updated_at = utcnow()
        with store_errors(self.session):
            self.session.add(user)
            self.session.commit()
        logger.info("Password changed for %s", user.email)
