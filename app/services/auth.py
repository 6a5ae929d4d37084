"""Authentication service."""

from dataclasses import dataclass

import bcrypt

from app.storage.base import ContentStore


@dataclass
class AuthResult:
    """Result of an authentication attempt."""

    success: bool
    error: str | None = None
    user_id: str | None = None
    username: str | None = None


class AuthService:
    """Handles user registration and authentication against the content store."""

    def __init__(self, store: ContentStore) -> None:
        self.store = store

    def register(self, username: str, password: str) -> AuthResult:
        """Register a new user. Returns AuthResult with success/error."""
        username = username.strip()
        if self.store.get_user_by_username(username):
            return AuthResult(success=False, error="Username already taken")

        password_hash = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
        user = self.store.create_user(username=username, password=password_hash)
        return AuthResult(success=True, user_id=user.id, username=user.username)

    def authenticate(self, username: str, password: str) -> AuthResult:
        """Authenticate a user by username and password."""
        user = self.store.get_user_by_username(username.strip())
        if not user:
            return AuthResult(success=False, error="Invalid username or password")

        if not bcrypt.checkpw(password.encode("utf-8"), user.password.encode("utf-8")):
            return AuthResult(success=False, error="Invalid username or password")

        return AuthResult(success=True, user_id=user.id, username=user.username)
