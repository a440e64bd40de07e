from .events import (
    TaskEventType,
    publish_task_event,
    publish_task_created,
    publish_task_deleted,
    publish_task_status_changed,
    publish_task_completed,
    publish_task_reopened,
    publish_dependency_added,
    publish_dependency_removed,
    publish_comment_added,
    publish_attachment_added,
    publish_attachment_removed,
)

__all__ = [
    "TaskEventType",
    "publish_task_event",
    "publish_task_created",
    "publish_task_deleted",
    "publish_task_status_changed",
    "publish_task_completed",
    "publish_task_reopened",
    "publish_dependency_added",
    "publish_dependency_removed",
    "publish_comment_added",
    "publish_attachment_added",
    "publish_attachment_removed",
]
