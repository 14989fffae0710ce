"""SQLAlchemy model for the user table."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.sql import expression
from sqlalchemy.orm import relationship

from app.infrastructure.database import Base


class UserModel(Base):
    """Database representation of a platform account."""

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    role_id = Column(Integer, ForeignKey("role.id"), nullable=False, index=True)
    user_type = Column(String(30), nullable=False, index=True)
    name = Column(String(50), nullable=False)
    email = Column(String(120), nullable=False, unique=True, index=True)
    password = Column(String(255), nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=True, onupdate=func.now())
    is_active = Column(Boolean, nullable=False, default=True)
    deleted = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=expression.false(),
    )
    deleted_at = Column(DateTime, nullable=True)

    role = relationship("RoleModel", lazy="joined")
    veterinarian_profile = relationship(
        "VeterinarianProfileModel", uselist=False, lazy="selectin"
    )
    veterinary_student_profile = relationship(
        "VeterinaryStudentProfileModel", uselist=False, lazy="selectin"
    )
    hospital_profile = relationship("HospitalProfileModel", uselist=False, lazy="selectin")


__all__ = ["UserModel"]
