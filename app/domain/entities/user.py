"""Domain entities describing platform users and broadcast recipients."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .role import ADMIN_ROLE_ALIAS, Role

DEFAULT_AUTHOR_NAME = "Administrator"


class UserType(str, Enum):
    """Kind of member account; each type owns a different profile table."""

    VETERINARIAN = "VETERINARIAN"
    VETERINARY_STUDENT = "VETERINARY_STUDENT"
    HOSPITAL = "HOSPITAL"


@dataclass
class User:
    """Core attributes describing an application user."""

    id: int | None
    role: Role
    user_type: UserType
    name: str
    email: str
    password: str
    created_at: datetime | None
    updated_at: datetime | None
    is_active: bool
    deleted: bool
    deleted_at: datetime | None
    display_name: str | None = None

    def has_role(self, alias: str) -> bool:
        """Return ``True`` when the user's role alias matches ``alias``."""

        return self.role.alias.lower() == alias.lower()

    def is_admin(self) -> bool:
        """Return ``True`` when the user is an administrator."""

        return self.has_role(ADMIN_ROLE_ALIAS)


@dataclass(frozen=True)
class Recipient:
    """Snapshot entry produced by the recipient resolver.

    ``user_type`` is the raw stored value; it is only checked when the
    recipient's copy is written.
    """

    id: int
    user_type: str

    def resolve_user_type(self) -> UserType:
        """Return the parsed user type or raise ``ValueError``."""

        return UserType(self.user_type)


__all__ = ["DEFAULT_AUTHOR_NAME", "Recipient", "User", "UserType"]
