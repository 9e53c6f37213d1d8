"""
Mock authentication backed by local storage.

There is a single demo account. Signing in writes the default user to
storage; signing out removes it. Profile edits are merged into the stored
user.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

from .config import config
from .constants import SESSION_STORAGE_KEY
from .exceptions import AuthenticationError, ProfileUpdateError
from .models.user_profile import UserProfile, default_user
from .utils.storage import LocalStorage, read_json_item
from .utils.validation import load_validator

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Credenciales incorrectas para el mock login."

_EDITABLE_FIELDS = {
    "name",
    "email",
    "avatar_url",
    "level",
    "xp",
    "words_learned",
    "consecutive_days",
    "current_vocabulary_level",
    "learning_goals",
    "topic",
    "daily_lesson_target",
    "daily_lesson_progress",
}


class AuthProvider(ABC):
    """Capability interface the pages depend on."""

    @abstractmethod
    def current_user(self) -> Optional[UserProfile]:
        pass

    @abstractmethod
    def sign_in(self, email: str, password: str) -> UserProfile:
        pass

    @abstractmethod
    def sign_up(self) -> UserProfile:
        pass

    @abstractmethod
    def sign_out(self):
        pass

    @abstractmethod
    def update_profile(self, **changes) -> UserProfile:
        pass

    @property
    def is_signed_in(self) -> bool:
        return self.current_user() is not None


class MockAuthProvider(AuthProvider):
    """
    Auth provider with one hard-coded account.

    Usage:
        auth = MockAuthProvider(MemoryStorage())
        auth.sign_in("mario@speakly.ai", "Password123")
        auth.update_profile(name="Mario R.")
    """

    def __init__(
        self,
        storage: LocalStorage,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ):
        self.storage = storage
        self.email = email or config.auth.mock_email
        self.password = password or config.auth.mock_password
        self.validator = load_validator("user_session")

    def current_user(self) -> Optional[UserProfile]:
        """Stored user merged over the defaults, or None when signed out."""
        data = read_json_item(self.storage, SESSION_STORAGE_KEY, self.validator)
        if data is None:
            return None
        merged = {**default_user().to_dict(), **data}
        merged["id"] = data.get("id") or default_user().user_id
        return UserProfile.from_dict(merged)

    def _write(self, user: UserProfile):
        self.storage.set_json(SESSION_STORAGE_KEY, user.to_dict())

    def sign_in(self, email: str, password: str) -> UserProfile:
        """
        Raises:
            AuthenticationError: If the credentials don't match the mock account
        """
        if (email or "").strip().lower() != self.email.lower() or password != self.password:
            logger.info(f"Rejected mock sign-in for '{email}'")
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
        return self._start_session()

    def sign_up(self) -> UserProfile:
        """Registration is simulated: the demo account is signed in."""
        return self._start_session()

    def _start_session(self) -> UserProfile:
        user = default_user()
        user.last_login = datetime.now(timezone.utc).isoformat()
        self._write(user)
        logger.info(f"User {user.user_id} signed in")
        return user

    def sign_out(self):
        self.storage.remove_item(SESSION_STORAGE_KEY)
        logger.info("User signed out")

    def update_profile(self, **changes) -> UserProfile:
        """
        Merge ``changes`` into the signed-in user and persist it.

        Raises:
            AuthenticationError: If nobody is signed in
            ProfileUpdateError: If a field is unknown or a value is invalid
        """
        user = self.current_user()
        if user is None:
            raise AuthenticationError("No hay una sesión activa.")

        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ProfileUpdateError(f"Campos no editables: {sorted(unknown)}")

        if "name" in changes:
            changes["name"] = (changes["name"] or "").strip()
            if not changes["name"]:
                raise ProfileUpdateError("El nombre no puede estar vacío.")
        if "email" in changes:
            changes["email"] = (changes["email"] or "").strip()
            if "@" not in changes["email"]:
                raise ProfileUpdateError("Ingresá un email válido.")

        for attr, value in changes.items():
            setattr(user, attr, value)

        checked = self.validator.validate(user.to_dict())
        if not checked:
            raise ProfileUpdateError("; ".join(checked.errors))

        self._write(user)
        return user
