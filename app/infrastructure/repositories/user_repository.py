"""Persistence layer for user data."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session, joinedload

from app.domain.entities import DEFAULT_AUTHOR_NAME, Recipient, Role, User, UserType
from app.infrastructure.models import (
    HospitalProfileModel,
    UserModel,
    VeterinarianProfileModel,
    VeterinaryStudentProfileModel,
)


class UserRepository:
    """Provide user lookups, creation and the recipient snapshot query."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: int) -> User | None:
        model = self._get_model(id=user_id)
        return self._to_entity(model) if model else None

    def get_by_email(self, email: str) -> User | None:
        model = self._get_model(email=email)
        return self._to_entity(model) if model else None

    def create(self, user: User) -> User:
        model = UserModel()
        self._apply_entity_to_model(model, user)
        self.session.add(model)
        self.session.flush()
        self.session.refresh(model)
        return self._to_entity(model)

    def add_profile(
        self,
        user: User,
        *,
        real_name: str | None,
        nickname: str | None = None,
        hospital_name: str | None = None,
    ) -> None:
        """Attach the profile row matching ``user.user_type`` (flush only)."""

        if user.user_type is UserType.HOSPITAL:
            profile = HospitalProfileModel(
                user_id=user.id,
                hospital_name=hospital_name,
                representative_name=real_name,
            )
        elif user.user_type is UserType.VETERINARY_STUDENT:
            profile = VeterinaryStudentProfileModel(
                user_id=user.id, real_name=real_name, nickname=nickname
            )
        else:
            profile = VeterinarianProfileModel(
                user_id=user.id, real_name=real_name, nickname=nickname
            )
        self.session.add(profile)
        self.session.flush()

    def list_active_recipients(self, *, exclude_user_id: int | None) -> list[Recipient]:
        """Return every active, non-deleted user except ``exclude_user_id``.

        The list is ordered by id so two snapshots taken over the same table
        contents are identical.
        """

        query = (
            self.session.query(UserModel.id, UserModel.user_type)
            .filter(UserModel.deleted.is_(False))
            .filter(UserModel.is_active.is_(True))
        )
        if exclude_user_id is not None:
            query = query.filter(UserModel.id != exclude_user_id)
        query = query.order_by(UserModel.id.asc())
        return [
            Recipient(id=user_id, user_type=user_type)
            for user_id, user_type in query.all()
        ]

    def get_display_names(self, user_ids: Sequence[int]) -> dict[int, str]:
        """Resolve display names through the profile owned by each user type."""

        if not user_ids:
            return {}
        models = (
            self.session.query(UserModel)
            .filter(UserModel.id.in_({int(user_id) for user_id in user_ids}))
            .all()
        )
        return {model.id: self._display_name(model) for model in models}

    def get_nicknames(self, user_ids: Sequence[int]) -> dict[int, str]:
        """Return the veterinarian nickname of each user that has one."""

        if not user_ids:
            return {}
        profile = VeterinarianProfileModel
        rows = (
            self.session.query(profile.user_id, profile.nickname)
            .filter(profile.user_id.in_({int(user_id) for user_id in user_ids}))
            .all()
        )
        return {
            user_id: nickname.strip()
            for user_id, nickname in rows
            if nickname and nickname.strip()
        }

    @staticmethod
    def _display_name(model: UserModel) -> str:
        candidates = (
            getattr(model.veterinarian_profile, "real_name", None),
            getattr(model.veterinary_student_profile, "real_name", None),
            getattr(model.hospital_profile, "representative_name", None),
        )
        for candidate in candidates:
            if candidate and candidate.strip():
                return candidate.strip()
        return DEFAULT_AUTHOR_NAME

    def _get_model(self, include_deleted: bool = False, **filters) -> UserModel | None:
        query = self.session.query(UserModel).options(joinedload(UserModel.role))
        if not include_deleted:
            query = query.filter(UserModel.deleted.is_(False))
        return query.filter_by(**filters).first()

    @classmethod
    def _to_entity(cls, model: UserModel) -> User:
        if model.role is None:
            msg = "User role is not set"
            raise ValueError(msg)
        return User(
            id=model.id,
            role=Role(id=model.role.id, name=model.role.name, alias=model.role.alias),
            user_type=UserType(model.user_type),
            name=model.name,
            email=model.email,
            password=model.password,
            created_at=model.created_at,
            updated_at=model.updated_at,
            is_active=model.is_active,
            deleted=model.deleted,
            deleted_at=model.deleted_at,
            display_name=cls._display_name(model),
        )

    @staticmethod
    def _apply_entity_to_model(model: UserModel, user: User) -> None:
        model.role_id = user.role.id
        model.user_type = user.user_type.value
        model.name = user.name
        model.email = user.email
        model.password = user.password
        if user.created_at is not None:
            model.created_at = user.created_at
        model.is_active = user.is_active
        model.deleted = user.deleted
        model.deleted_at = user.deleted_at


__all__ = ["UserRepository"]
