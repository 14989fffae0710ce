"""Persistence layer for roles data."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.domain.entities import Role
from app.infrastructure.models import RoleModel


class RoleRepository:
    """Look up roles and create the built-in ones on demand."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_alias(self, alias: str) -> Role | None:
        model = self._get_model_by_alias(alias)
        return self._to_entity(model) if model else None

    def get_or_create(self, alias: str, *, name: str) -> Role:
        """Return the role for ``alias``, inserting it (flush only) when missing."""

        model = self._get_model_by_alias(alias)
        if model is None:
            model = RoleModel(name=name, alias=alias.lower())
            self.session.add(model)
            self.session.flush()
        return self._to_entity(model)

    def _get_model_by_alias(self, alias: str) -> RoleModel | None:
        return (
            self.session.query(RoleModel)
            .filter(func.lower(RoleModel.alias) == alias.lower())
            .first()
        )

    @staticmethod
    def _to_entity(model: RoleModel) -> Role:
        return Role(id=model.id, name=model.name, alias=model.alias)


__all__ = ["RoleRepository"]
