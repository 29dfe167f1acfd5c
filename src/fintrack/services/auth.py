"""Sign-up and sign-in services; sign-up provisions the profile."""

from __future__ import annotations

from typing import Callable, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..errors import AuthenticationError, ValidationError
from ..logging_config import get_logger
from ..models._columns import utcnow
from ..models.profile import Profile
from ..models.user import User
from .accounts import clean_currency

SessionFactory = Callable[[], Session]

logger = get_logger("auth")

_hasher = PasswordHasher()
USERNAME_MAX_LENGTH = 64
MIN_PASSWORD_LENGTH = 6


def _clean_username(username: Optional[str]) -> str:
    cleaned = (username or "").strip()
    if not cleaned:
        raise ValidationError("Username is required", field="username")
    if len(cleaned) > USERNAME_MAX_LENGTH:
        raise ValidationError(
            f"Username must be at most {USERNAME_MAX_LENGTH} characters", field="username"
        )
    return cleaned


def _username_taken(session: Session, username: str) -> bool:
    return session.exec(select(User.id).where(User.username == username)).first() is not None


def get_user_by_username(username: str, session_factory: SessionFactory) -> Optional[User]:
    """Fetch a user by username."""
    username = username.strip()
    with session_factory() as session:
        user = session.exec(select(User).where(User.username == username)).first()
        if user:
            session.expunge(user)
        return user


def sign_up(
    *,
    username: str,
    password: str,
    session_factory: SessionFactory,
    display_name: Optional[str] = None,
    default_currency: str = "USD",
) -> User:
    """Create a user and provision its profile in the same unit of work.

    The profile's display name falls back to the username.
    """

    username = _clean_username(username)
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters", field="password"
        )
    password_hash = _hasher.hash(password)
    with session_factory() as session:
        if _username_taken(session, username):
            raise ValidationError("Username already exists", field="username")
        user = User(username=username, password_hash=password_hash)
        session.add(user)
        try:
            session.flush()
        except IntegrityError as exc:
            # lost a race with a concurrent sign-up for the same name
            raise ValidationError("Username already exists", field="username") from exc
        profile = Profile(
            user_id=user.id,
            username=username,
            display_name=(display_name or "").strip() or username,
            default_currency=clean_currency(default_currency),
        )
        session.add(profile)
        session.commit()
        session.refresh(user)
        session.expunge(user)

    logger.info("User signed up", extra={"user_id": user.id})
    return user


def authenticate(
    *,
    username: str,
    password: str,
    session_factory: SessionFactory,
) -> User:
    """Validate credentials and return the user; raises ``AuthenticationError``."""

    username = (username or "").strip()
    if not username:
        raise AuthenticationError("Invalid username or password")
    with session_factory() as session:
        user = session.exec(select(User).where(User.username == username)).first()
        if user is None:
            logger.warning("Sign-in failed", extra={"reason": "unknown user"})
            raise AuthenticationError("Invalid username or password")
        try:
            _hasher.verify(user.password_hash, password)
        except (VerifyMismatchError, InvalidHash, VerificationError):
            logger.warning("Sign-in failed", extra={"user_id": user.id, "reason": "bad password"})
            raise AuthenticationError("Invalid username or password") from None

        if _hasher.check_needs_rehash(user.password_hash):
            user.password_hash = _hasher.hash(password)
        user.last_login = utcnow()
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)

    logger.info("User signed in", extra={"user_id": user.id})
    return user
