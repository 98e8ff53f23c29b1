from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from .model import User

# Demo credential table: username -> (password, role).
DEMO_CREDENTIALS: Mapping[str, tuple[str, Role]] = {
    "student1": ("password", Role.STUDENT),
    "hod1": ("password", Role.HOD),
    "faculty1": ("password", Role.FACULTY),
}


def build_user_table(credentials: Mapping[str, tuple[str, Role]] = DEMO_CREDENTIALS) -> dict[str, User]:
    return {
        username: User(username=username, password_hash=generate_password_hash(password), role=role)
        for username, (password, role) in credentials.items()
    }


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    username: str
    role: Role


class AuthService:
    """Use case: authenticate user (login) against the fixed credential table."""

    def __init__(self, users: Optional[Mapping[str, User]] = None):
        self._users = dict(users) if users is not None else build_user_table()

    def authenticate(self, username: str, password: str) -> SessionUser:
        if not isinstance(username, str) or not isinstance(password, str):
            raise AuthenticationError("Invalid username or password")
        user = self._users.get(username.strip())
        if not user or not check_password_hash(user.password_hash, password):
            raise AuthenticationError("Invalid username or password")
        return SessionUser(username=user.username, role=user.role)
