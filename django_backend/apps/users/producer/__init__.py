from .events import (
    UserEventType,
    publish_user_event,
    publish_user_registered,
    publish_user_deleted,
    publish_user_restored,
    publish_user_purged,
    publish_user_login,
    publish_user_login_failed,
)

__all__ = [
    "UserEventType",
    "publish_user_event",
    "publish_user_registered",
    "publish_user_deleted",
    "publish_user_restored",
    "publish_user_purged",
    "publish_user_login",
    "publish_user_login_failed",
]
