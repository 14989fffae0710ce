"""Repository implementations for infrastructure layer."""

from .announcement_repository import AnnouncementRecord, AnnouncementRepository
from .notification_batch_repository import NotificationBatchRepository
from .notification_repository import NotificationRepository
from .role_repository import RoleRepository
from .user_repository import UserRepository

__all__ = [
    "AnnouncementRecord",
    "AnnouncementRepository",
    "NotificationBatchRepository",
    "NotificationRepository",
    "RoleRepository",
    "UserRepository",
]
