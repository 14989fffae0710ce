"""Use case for creating users."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.domain.entities import (
    ADMIN_ROLE_ALIAS,
    MEMBER_ROLE_ALIAS,
    User,
    UserType,
)
from app.domain.exceptions import ValidationError
from app.infrastructure.database import transaction
from app.infrastructure.repositories import RoleRepository, UserRepository
from app.infrastructure.security import get_password_hash
from app.utils import now_in_app_naive_datetime

from .validators import normalize_email

logger = logging.getLogger(__name__)

_ROLE_NAMES = {
    ADMIN_ROLE_ALIAS: "Administrator",
    MEMBER_ROLE_ALIAS: "Member",
}


def create_user(
    session: Session,
    *,
    name: str,
    email: str,
    password: str,
    user_type: UserType = UserType.VETERINARIAN,
    role_alias: str = MEMBER_ROLE_ALIAS,
    real_name: str | None = None,
    is_active: bool = True,
) -> User:
    """Create a new user ensuring unique email addresses.

    ``real_name`` is stored on the profile that matches ``user_type`` and is
    what announcements show as their author.
    """

    repository = UserRepository(session)
    role_repository = RoleRepository(session)

    normalized_email = normalize_email(email)
    if not password:
        raise ValidationError("Password is required")
    if repository.get_by_email(normalized_email):
        raise ValidationError("Email is already registered")

    alias = role_alias.strip().lower()
    if alias not in _ROLE_NAMES:
        raise ValidationError("Role not allowed")

    with transaction(session, operation="create user"):
        role = role_repository.get_or_create(alias, name=_ROLE_NAMES[alias])
        user = repository.create(
            User(
                id=None,
                role=role,
                user_type=user_type,
                name=name.strip(),
                email=normalized_email,
                password=get_password_hash(password),
                created_at=now_in_app_naive_datetime(),
                updated_at=None,
                is_active=is_active,
                deleted=False,
                deleted_at=None,
            )
        )
        if real_name:
            repository.add_profile(user, real_name=real_name.strip())

    logger.info("User %s created with role %s", user.id, alias)
    return user


__all__ = ["create_user"]
