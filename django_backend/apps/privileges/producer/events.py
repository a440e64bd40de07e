import logging
from enum import Enum
from typing import Dict, Any, List, Optional

from apps.common.events.base import publish_event
from apps.common.kafka.config import USER_ACTIVITIES_TOPIC

logger = logging.getLogger(__name__)


class GroupEventType(Enum):
    """Group and membership event types"""
    GROUP_CREATED = "group_created"
    GROUP_UPDATED = "group_updated"
    GROUP_DELETED = "group_deleted"
    GROUP_MEMBERS_ADDED = "group_members_added"
    GROUP_MEMBERS_REMOVED = "group_members_removed"


def publish_group_event(
    event_type: GroupEventType,
    user_id: Optional[int],
    data: Dict[str, Any],
    metadata: Optional[Dict[str, Any]] = None
) -> bool:
    """
    Publish group event; the group id is the partition key so one group's
    membership changes stay ordered.
    """
    return publish_event(
        topic=USER_ACTIVITIES_TOPIC,
        event_type=event_type.value,
        user_id=user_id,
        data=data,
        key=str(data.get('group_id', user_id)),
        metadata=metadata,
    )


def publish_group_created(user_id: Optional[int], group_id: int, group_name: str, role_id: int = None):
    """Publishes group creation event"""
    data = {
        'group_id': group_id,
        'group_name': group_name,
        'role_id': role_id,
        'action': 'create'
    }
    return publish_group_event(GroupEventType.GROUP_CREATED, user_id, data)


def publish_group_updated(user_id: Optional[int], group_id: int, group_name: str, changes: Dict[str, Any]):
    """Publishes group update event"""
    data = {
        'group_id': group_id,
        'group_name': group_name,
        'changes': changes,
        'action': 'update'
    }
    return publish_group_event(GroupEventType.GROUP_UPDATED, user_id, data)


def publish_group_deleted(user_id: Optional[int], group_id: int, group_name: str):
    """Publishes group soft deletion event"""
    data = {
        'group_id': group_id,
        'group_name': group_name,
        'action': 'delete'
    }
    return publish_group_event(GroupEventType.GROUP_DELETED, user_id, data)


def publish_group_members_added(user_id: Optional[int], group_id: int, group_name: str, member_ids: List[int]):
    """Publishes membership addition event"""
    data = {
        'group_id': group_id,
        'group_name': group_name,
        'member_ids': member_ids,
        'action': 'add_members'
    }
    return publish_group_event(GroupEventType.GROUP_MEMBERS_ADDED, user_id, data)


def publish_group_members_removed(user_id: Optional[int], group_id: int, group_name: str, member_ids: List[int]):
    """Publishes membership removal event"""
    data = {
        'group_id': group_id,
        'group_name': group_name,
        'member_ids': member_ids,
        'action': 'remove_members'
    }
    return publish_group_event(GroupEventType.GROUP_MEMBERS_REMOVED, user_id, data)
