from .announcement import (
    AnnouncementAction,
    AnnouncementActionRequest,
    AnnouncementCreate,
    AnnouncementRead,
    AnnouncementUpdate,
)
from .auth import Token
from .batch import BatchRead, DispatchRead
from .envelope import ApiModel, ApiResponse, ErrorResponse, MessageResponse
from .notice import NoticeRead
from .notification import NotificationRead

__all__ = [
    "AnnouncementAction",
    "AnnouncementActionRequest",
    "AnnouncementCreate",
    "AnnouncementRead",
    "AnnouncementUpdate",
    "ApiModel",
    "ApiResponse",
    "BatchRead",
    "DispatchRead",
    "ErrorResponse",
    "MessageResponse",
    "NoticeRead",
    "NotificationRead",
    "Token",
]
