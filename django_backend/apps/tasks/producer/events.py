import logging
from enum import Enum
from typing import Dict, Any, Optional

from apps.common.events.base import publish_event
from apps.common.kafka.config import TASK_EVENTS_TOPIC

logger = logging.getLogger(__name__)


class TaskEventType(Enum):
    """Task event types"""
    # Task lifecycle
    TASK_CREATED = "task_created"
    TASK_DELETED = "task_deleted"
    TASK_COMPLETED = "task_completed"
    TASK_REOPENED = "task_reopened"

    # Task status changes
    TASK_STATUS_CHANGED = "task_status_changed"

    # Dependencies
    TASK_DEPENDENCY_ADDED = "task_dependency_added"
    TASK_DEPENDENCY_REMOVED = "task_dependency_removed"

    # Task comments
    TASK_COMMENT_ADDED = "task_comment_added"

    # Attachments
    TASK_ATTACHMENT_ADDED = "task_attachment_added"
    TASK_ATTACHMENT_REMOVED = "task_attachment_removed"


def publish_task_event(
    event_type: TaskEventType,
    user_id: Optional[int],
    data: Dict[str, Any],
    metadata: Optional[Dict[str, Any]] = None
) -> bool:
    """
    Publish task event

    Args:
        event_type: Type of task event
        user_id: ID of the user performing the action
        data: Event-specific data (should include task-related info)
        metadata: Additional metadata (optional)

    Returns:
        bool: True if event was published successfully
    """
    # task_id for partitioning if available, otherwise user_id
    message_key = str(data.get('task_id', user_id))
    return publish_event(
        topic=TASK_EVENTS_TOPIC,
        event_type=event_type.value,
        user_id=user_id,
        data=data,
        key=message_key,
        metadata=metadata,
    )

# Convenience functions for specific events

def publish_task_created(user_id: Optional[int], task_id: int, title: str, project_id: int = None,
                         status_id: int = None, assignee_id: int = None):
    """Publishes task creation event"""
    data = {
        'task_id': task_id,
        'title': title,
        'project_id': project_id,
        'status_id': status_id,
        'assignee_id': assignee_id,
        'action': 'create'
    }
    return publish_task_event(TaskEventType.TASK_CREATED, user_id, data)

def publish_task_deleted(user_id: Optional[int], task_id: int, title: str):
    """Publishes task soft deletion event"""
    data = {
        'task_id': task_id,
        'title': title,
        'action': 'delete'
    }
    return publish_task_event(TaskEventType.TASK_DELETED, user_id, data)

def publish_task_status_changed(user_id: Optional[int], task_id: int, title: str,
                                old_status_id: Optional[int], new_status_id: Optional[int]):
    """Publishes task status change event"""
    data = {
        'task_id': task_id,
        'title': title,
        'old_status_id': old_status_id,
        'new_status_id': new_status_id,
        'action': 'status_change'
    }
    return publish_task_event(TaskEventType.TASK_STATUS_CHANGED, user_id, data)

def publish_task_completed(user_id: Optional[int], task_id: int, title: str):
    """Publishes task completion event"""
    data = {
        'task_id': task_id,
        'title': title,
        'action': 'complete'
    }
    return publish_task_event(TaskEventType.TASK_COMPLETED, user_id, data)

def publish_task_reopened(user_id: Optional[int], task_id: int, title: str):
    """Publishes task reopen event"""
    data = {
        'task_id': task_id,
        'title': title,
        'action': 'reopen'
    }
    return publish_task_event(TaskEventType.TASK_REOPENED, user_id, data)

def publish_dependency_added(user_id: Optional[int], task_id: int, depends_on_task_id: int):
    """Publishes dependency edge creation event"""
    data = {
        'task_id': task_id,
        'depends_on_task_id': depends_on_task_id,
        'action': 'add_dependency'
    }
    return publish_task_event(TaskEventType.TASK_DEPENDENCY_ADDED, user_id, data)

def publish_dependency_removed(user_id: Optional[int], task_id: int, depends_on_task_id: int):
    """Publishes dependency edge removal event"""
    data = {
        'task_id': task_id,
        'depends_on_task_id': depends_on_task_id,
        'action': 'remove_dependency'
    }
    return publish_task_event(TaskEventType.TASK_DEPENDENCY_REMOVED, user_id, data)

def publish_comment_added(user_id: Optional[int], task_id: int, comment_id: int):
    """Publishes comment creation event"""
    data = {
        'task_id': task_id,
        'comment_id': comment_id,
        'action': 'comment'
    }
    return publish_task_event(TaskEventType.TASK_COMMENT_ADDED, user_id, data)


def publish_attachment_added(user_id: Optional[int], task_id: int, attachment_id: int, file_name: str):
    """Publishes attachment upload event"""
    data = {
        'task_id': task_id,
        'attachment_id': attachment_id,
        'file_name': file_name,
    }
    return publish_task_event(TaskEventType.TASK_ATTACHMENT_ADDED, user_id, data)


def publish_attachment_removed(user_id: Optional[int], task_id: int, attachment_id: int):
    data = {'task_id': task_id, 'attachment_id': attachment_id}
    return publish_task_event(TaskEventType.TASK_ATTACHMENT_REMOVED, user_id, data)
