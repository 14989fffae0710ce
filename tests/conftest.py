"""Shared fixtures: a throwaway SQLite database configured before the app loads."""

from __future__ import annotations

import os
import tempfile
from functools import lru_cache
from pathlib import Path

import pytest

TEST_DB_PATH = Path(tempfile.mkdtemp(prefix="announcements-tests-")) / "test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "30"
os.environ["DISPATCH_MAX_WORKERS"] = "2"
os.environ["DISPATCH_WRITE_TIMEOUT_SECONDS"] = "30"

from app.config import get_settings  # noqa: E402

get_settings.cache_clear()

from app.domain.entities import (  # noqa: E402
    ADMIN_ROLE_ALIAS,
    MEMBER_ROLE_ALIAS,
    UserType,
)
from app.infrastructure.database import (  # noqa: E402
    Base,
    SessionLocal,
    engine,
    initialize_database,
)
from app.infrastructure.models import (  # noqa: E402
    HospitalProfileModel,
    RoleModel,
    UserModel,
    VeterinarianProfileModel,
)
from app.infrastructure.security import get_password_hash  # noqa: E402

DEFAULT_PASSWORD = "StrongPass123"


@lru_cache
def _hashed(password: str) -> str:
    return get_password_hash(password)


@pytest.fixture(autouse=True)
def reset_database():
    """Every test starts with empty tables."""

    initialize_database()
    yield
    with engine.begin() as connection:
        for table in reversed(Base.metadata.sorted_tables):
            connection.execute(table.delete())


@pytest.fixture()
def session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _get_role(db, alias: str) -> RoleModel:
    role = db.query(RoleModel).filter_by(alias=alias).first()
    if role is None:
        role = RoleModel(name=alias.title(), alias=alias)
        db.add(role)
        db.flush()
    return role


def add_user(
    *,
    email: str,
    role_alias: str = MEMBER_ROLE_ALIAS,
    user_type: UserType = UserType.VETERINARIAN,
    real_name: str | None = None,
    is_active: bool = True,
    deleted: bool = False,
    password: str = DEFAULT_PASSWORD,
) -> int:
    """Insert a committed user and return its id."""

    with SessionLocal() as db:
        role = _get_role(db, role_alias)
        user = UserModel(
            role_id=role.id,
            user_type=user_type.value,
            name=email.split("@")[0],
            email=email,
            password=_hashed(password),
            is_active=is_active,
            deleted=deleted,
        )
        db.add(user)
        db.flush()
        if real_name and user_type is UserType.HOSPITAL:
            db.add(HospitalProfileModel(user_id=user.id, representative_name=real_name))
        elif real_name:
            db.add(VeterinarianProfileModel(user_id=user.id, real_name=real_name))
        db.commit()
        return user.id


@pytest.fixture()
def admin_id() -> int:
    return add_user(
        email="admin@example.com",
        role_alias=ADMIN_ROLE_ALIAS,
        real_name="Kim Admin",
    )


@pytest.fixture()
def members(admin_id) -> list[int]:
    """Nine members, so ten users in total with the administrator."""

    user_types = list(UserType)
    return [
        add_user(
            email=f"member{index}@example.com",
            user_type=user_types[index % len(user_types)],
        )
        for index in range(9)
    ]


@pytest.fixture()
def user_factory():
    return add_user
