"""Authentication, user management and the signed-in session."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError
from sqlmodel import Session, select

from ..errors import AuthError, ValidationError
from ..infra.database import backend_errors
from ..logging_config import get_logger
from ..models.user import User

SessionFactory = Callable[[], Session]
IdentityListener = Callable[[Optional["Identity"]], None]

logger = get_logger(__name__)

_hasher = PasswordHasher()
MIN_PASSWORD_LENGTH = 6


@dataclass(frozen=True, slots=True)
class Identity:
    """Opaque reference to the signed-in user, used to scope owned rows."""

    user_id: int
    username: str
    display_name: str = ""

    @property
    def label(self) -> str:
        return self.display_name or self.username

    @classmethod
    def from_user(cls, user: User) -> "Identity":
        if user.id is None:
            raise AuthError("User has not been saved")
        return cls(user_id=user.id, username=user.username, display_name=user.display_name)


def get_user_by_username(username: str, session_factory: SessionFactory) -> Optional[User]:
    """Fetch a user by username."""
    username = username.strip()
    with backend_errors("Load user"), session_factory() as session:
        user = session.exec(select(User).where(User.username == username)).first()
        if user:
            session.expunge(user)
        return user


def any_users_exist(session_factory: SessionFactory) -> bool:
    """Determine if any users exist for first-run onboarding."""
    with backend_errors("Load users"), session_factory() as session:
        return session.exec(select(User.id)).first() is not None


def create_user(
    *,
    username: str,
    password: str,
    session_factory: SessionFactory,
    display_name: str = "",
) -> User:
    """Create a new user with hashed password."""

    username = username.strip()
    if not username:
        raise ValidationError("Username is required", field="username")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters", field="password"
        )
    password_hash = _hasher.hash(password)
    with backend_errors("Create user"), session_factory() as session:
        existing = session.exec(select(User).where(User.username == username)).first()
        if existing:
            raise ValidationError("Username already exists", field="username")
        user = User(
            username=username,
            password_hash=password_hash,
            # Default display name mirrors the profile bootstrap: the username itself
            display_name=display_name.strip() or username,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
    logger.info("User created", extra={"user_id": user.id})
    return user


def authenticate(
    *,
    username: str,
    password: str,
    session_factory: SessionFactory,
) -> Optional[User]:
    """Validate credentials and return the user when correct."""

    username = username.strip()
    if not username:
        return None
    with backend_errors("Sign in"), session_factory() as session:
        user = session.exec(select(User).where(User.username == username)).first()
        if user is None:
            return None
        try:
            _hasher.verify(user.password_hash, password)
        except (VerifyMismatchError, InvalidHash, VerificationError):
            return None

        user.last_login = datetime.now(timezone.utc)
        session.add(user)
        session.commit()
        session.refresh(user)
        session.expunge(user)
        return user


class AuthSession:
    """Holds the current identity and notifies listeners when it changes.

    One instance is created at startup and passed to every component that
    needs to know who is signed in.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self.session_factory = session_factory
        self._identity: Optional[Identity] = None
        self._listeners: list[IdentityListener] = []

    def current_identity(self) -> Optional[Identity]:
        return self._identity

    def require_identity(self) -> Identity:
        """Return the current identity or raise ``AuthError``."""
        if self._identity is None:
            raise AuthError("You must be signed in to do that")
        return self._identity

    def on_identity_change(self, callback: IdentityListener) -> Callable[[], None]:
        """Register ``callback`` and return a function that unregisters it."""
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _unsubscribe

    def sign_in(self, *, username: str, password: str) -> Identity:
        user = authenticate(
            username=username, password=password, session_factory=self.session_factory
        )
        if user is None:
            logger.warning("Sign-in rejected", extra={"username": username.strip()})
            raise AuthError("Invalid username or password")
        identity = Identity.from_user(user)
        logger.info("Signed in", extra={"user_id": identity.user_id})
        self._set_identity(identity)
        return identity

    def sign_up(self, *, username: str, password: str, display_name: str = "") -> Identity:
        """Create an account and sign straight into it."""
        user = create_user(
            username=username,
            password=password,
            display_name=display_name,
            session_factory=self.session_factory,
        )
        identity = Identity.from_user(user)
        self._set_identity(identity)
        return identity

    def sign_out(self) -> None:
        if self._identity is None:
            return
        logger.info("Signed out", extra={"user_id": self._identity.user_id})
        self._set_identity(None)

    def _set_identity(self, identity: Optional[Identity]) -> None:
        if identity == self._identity:
            return
        self._identity = identity
        for listener in list(self._listeners):
            listener(identity)
