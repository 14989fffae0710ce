"""ORM models used by the application infrastructure."""

from .role import RoleModel
from .user import UserModel
from .profile import (
    HospitalProfileModel,
    VeterinarianProfileModel,
    VeterinaryStudentProfileModel,
)
from .notification import NotificationModel
from .announcement import (
    AnnouncementModel,
    NotificationBatchModel,
    NotificationDeliveryModel,
)

__all__ = [
    "AnnouncementModel",
    "HospitalProfileModel",
    "NotificationBatchModel",
    "NotificationDeliveryModel",
    "NotificationModel",
    "RoleModel",
    "UserModel",
    "VeterinarianProfileModel",
    "VeterinaryStudentProfileModel",
]
