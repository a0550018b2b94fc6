"""
User Service

Registration, email activation and credential verification.
"""

import logging
import secrets
from datetime import timedelta
from typing import Any, Dict, Optional

from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from app.config import ACTIVATION_CODE_TTL_HOURS, BCRYPT_ROUNDS
from app.exceptions import (
    AuthError,
    DuplicateError,
    InactiveAccountError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from app.models.user import User
from app.services.mail_service import MailService
from app.utils.timestamps import as_utc, utc_now

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)

PROFILE_FIELDS = (
    "name", "first_name", "middle_name", "last_name",
    "phone", "address", "avatar_url", "account_type",
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def generate_activation_code() -> str:
    """Random 6-digit code, zero padded."""
    return f"{secrets.randbelow(1_000_000):06d}"


class UserService:
    """Service class for user accounts."""

    def __init__(self, session: Session, mailer: MailService):
        self.session = session
        self.mailer = mailer

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"User store commit failed: {str(e)}")
            raise PersistenceError("Failed to save user")

    def get_by_email(self, email: str) -> Optional[User]:
        statement = select(User).where(User.email == email)
        return self.session.exec(statement).first()

    def get_user(self, user_id: str) -> User:
        user = self.session.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def register(self, email: str, password: str, name: Optional[str] = None) -> User:
        """
        Create an inactive account and mail its activation code.

        Raises:
            DuplicateError: If the email is already registered
        """
        if self.get_by_email(email):
            raise DuplicateError(f"Email {email} already exists")

        code = generate_activation_code()
        user = User(
            email=email,
            password=hash_password(password),
            name=name,
            is_active=False,
            code_id=code,
            code_expire=utc_now() + timedelta(hours=ACTIVATION_CODE_TTL_HOURS),
        )
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            self.session.rollback()
            raise DuplicateError(f"Email {email} already exists")
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"User store commit failed: {str(e)}")
            raise PersistenceError("Failed to save user")
        self.session.refresh(user)

        logger.info(f"Registered user {user.id}")
        self.mailer.send_activation_code(user.email, user.name, code, user.code_expire)
        return user

    def activate(self, user_id: str, code: str) -> User:
        """
        Activate an account with its emailed code.

        The code is not consumed; it stays valid until it expires.

        Raises:
            ValidationError: Unknown user, wrong code or expired code
        """
        user = self.session.get(User, user_id)
        if not user:
            raise ValidationError("User not found", code="USER_NOT_FOUND")
        if user.code_id != code:
            raise ValidationError("Invalid code", code="INVALID_CODE")
        if user.code_expire is None or as_utc(user.code_expire) < utc_now():
            raise ValidationError("Code expired", code="CODE_EXPIRED")

        user.is_active = True
        user.updated_at = utc_now()
        self.session.add(user)
        self._commit()
        self.session.refresh(user)
        logger.info(f"Activated user {user.id}")
        return user

    def resend_activation_code(self, email: str) -> User:
        """Issue a fresh code and expiry for an account that is still inactive."""
        user = self.get_by_email(email)
        if not user:
            raise ValidationError("User not found", code="USER_NOT_FOUND")
        if user.is_active:
            raise ValidationError("Account is already active", code="ALREADY_ACTIVE")

        code = generate_activation_code()
        user.code_id = code
        user.code_expire = utc_now() + timedelta(hours=ACTIVATION_CODE_TTL_HOURS)
        user.updated_at = utc_now()
        self.session.add(user)
        self._commit()
        self.session.refresh(user)

        self.mailer.send_activation_code(user.email, user.name, code, user.code_expire)
        return user

    def login(self, email: str, password: str) -> User:
        """
        Verify credentials.

        Unknown email and wrong password fail identically. A correct password
        on an inactive account fails separately with InactiveAccountError.
        """
        user = self.get_by_email(email)
        if not user:
            # Burn a hash comparison so unknown emails take as long as bad passwords
            pwd_context.dummy_verify()
        if not user or not verify_password(password, user.password):
            logger.info("Login rejected: invalid credentials")
            raise AuthError("Email or password is incorrect", code="INVALID_CREDENTIALS")

        if not user.is_active:
            raise InactiveAccountError(
                "Your account is not active, please check your email for activation"
            )
        return user

    def update_profile(self, user_id: str, changes: Dict[str, Any]) -> User:
        user = self.get_user(user_id)
        for field, value in changes.items():
            if field in PROFILE_FIELDS:
                setattr(user, field, value)
        user.updated_at = utc_now()
        self.session.add(user)
        self._commit()
        self.session.refresh(user)
        return user
