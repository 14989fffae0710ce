"""Domain entity representing a user role."""

from dataclasses import dataclass

ADMIN_ROLE_ALIAS = "admin"
MEMBER_ROLE_ALIAS = "member"


@dataclass
class Role:
    """Role assigned to an account; ``alias`` drives authorization checks."""

    id: int
    name: str
    alias: str


__all__ = ["ADMIN_ROLE_ALIAS", "MEMBER_ROLE_ALIAS", "Role"]
