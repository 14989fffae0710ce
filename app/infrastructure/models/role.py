"""SQLAlchemy model for account roles."""

from sqlalchemy import Column, Integer, String

from app.infrastructure.database import Base


class RoleModel(Base):
    """Role table; ``alias`` is the stable key used by authorization checks."""

    __tablename__ = "role"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), nullable=False, unique=True)
    alias = Column(String(30), nullable=False, unique=True)


__all__ = ["RoleModel"]
