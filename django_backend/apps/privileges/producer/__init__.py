from .events import (
    GroupEventType,
    publish_group_event,
    publish_group_created,
    publish_group_updated,
    publish_group_deleted,
    publish_group_members_added,
    publish_group_members_removed,
)

__all__ = [
    "GroupEventType",
    "publish_group_event",
    "publish_group_created",
    "publish_group_updated",
    "publish_group_deleted",
    "publish_group_members_added",
    "publish_group_members_removed",
]
