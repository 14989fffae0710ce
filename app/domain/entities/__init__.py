"""Domain entities exposed by the application."""

from .announcement import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_TARGET_USER_TYPES,
    Announcement,
    AnnouncementPriority,
    AnnouncementStatus,
    AnnouncementView,
    Notice,
)
from .content import (
    NotificationContent,
    PlainTextContent,
    RichTextContent,
    clean_image_urls,
    compose_content,
)
from .notification import Notification, NotificationType
from .notification_batch import (
    TERMINAL_BATCH_STATUSES,
    BatchStatus,
    DeliveryStatus,
    NotificationBatch,
    NotificationDelivery,
    RETRYABLE_DELIVERY_STATUSES,
    resolve_batch_status,
)
from .role import ADMIN_ROLE_ALIAS, MEMBER_ROLE_ALIAS, Role
from .user import DEFAULT_AUTHOR_NAME, Recipient, User, UserType

__all__ = [
    "ADMIN_ROLE_ALIAS",
    "Announcement",
    "AnnouncementPriority",
    "AnnouncementStatus",
    "AnnouncementView",
    "BatchStatus",
    "DEFAULT_AUTHOR_NAME",
    "DEFAULT_CONTENT_TYPE",
    "DEFAULT_TARGET_USER_TYPES",
    "DeliveryStatus",
    "MEMBER_ROLE_ALIAS",
    "Notice",
    "Notification",
    "NotificationBatch",
    "NotificationContent",
    "NotificationDelivery",
    "NotificationType",
    "PlainTextContent",
    "RETRYABLE_DELIVERY_STATUSES",
    "Recipient",
    "RichTextContent",
    "Role",
    "TERMINAL_BATCH_STATUSES",
    "User",
    "UserType",
    "clean_image_urls",
    "compose_content",
    "resolve_batch_status",
]
