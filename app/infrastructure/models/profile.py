"""Profile tables owned by each user type.

Only the fields needed to resolve a display name live here; the rest of each
profile belongs to other services.
"""

from sqlalchemy import Column, ForeignKey, Integer, String

from app.infrastructure.database import Base


class VeterinarianProfileModel(Base):
    __tablename__ = "veterinarian_profile"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    real_name = Column(String(50), nullable=True)
    nickname = Column(String(50), nullable=True)


class VeterinaryStudentProfileModel(Base):
    __tablename__ = "veterinary_student_profile"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    real_name = Column(String(50), nullable=True)
    nickname = Column(String(50), nullable=True)


class HospitalProfileModel(Base):
    __tablename__ = "hospital_profile"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    hospital_name = Column(String(120), nullable=True)
    representative_name = Column(String(50), nullable=True)


__all__ = [
    "HospitalProfileModel",
    "VeterinarianProfileModel",
    "VeterinaryStudentProfileModel",
]
