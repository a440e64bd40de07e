import logging
from enum import Enum
from typing import Dict, Any, Optional

from apps.common.events.base import publish_event
from apps.common.kafka.config import USER_ACTIVITIES_TOPIC

logger = logging.getLogger(__name__)


class UserEventType(Enum):
    """User event types"""
    # Lifecycle
    USER_REGISTERED = "user_registered"
    USER_DELETED = "user_deleted"
    USER_RESTORED = "user_restored"
    USER_PURGED = "user_purged"

    # Authentication
    USER_LOGIN = "user_login"
    USER_LOGIN_FAILED = "user_login_failed"


def publish_user_event(
    event_type: UserEventType,
    user_id: Optional[int],
    data: Dict[str, Any],
    metadata: Optional[Dict[str, Any]] = None
) -> bool:
    """
    Publish user activity event

    Args:
        event_type: Type of user event
        user_id: ID of the user performing the action
        data: Event-specific data
        metadata: Additional metadata (optional)

    Returns:
        bool: True if event was published successfully
    """
    return publish_event(
        topic=USER_ACTIVITIES_TOPIC,
        event_type=event_type.value,
        user_id=user_id,
        data=data,
        key=str(data.get('user_id') or data.get('username')),
        metadata=metadata,
    )

# Convenience functions for specific events

def publish_user_registered(actor_id: Optional[int], user_id: int, username: str, email: str = None):
    """Publishes user registration event"""
    data = {
        'user_id': user_id,
        'username': username,
        'email': email,
        'action': 'register'
    }
    return publish_user_event(UserEventType.USER_REGISTERED, actor_id, data)

def publish_user_deleted(actor_id: Optional[int], user_id: int, username: str):
    """Publishes user soft deletion event"""
    data = {
        'user_id': user_id,
        'username': username,
        'action': 'delete'
    }
    return publish_user_event(UserEventType.USER_DELETED, actor_id, data)

def publish_user_restored(actor_id: Optional[int], user_id: int, username: str):
    """Publishes user restore event"""
    data = {
        'user_id': user_id,
        'username': username,
        'action': 'restore'
    }
    return publish_user_event(UserEventType.USER_RESTORED, actor_id, data)

def publish_user_purged(actor_id: Optional[int], user_id: int, username: str):
    """Publishes permanent user removal event"""
    data = {
        'user_id': user_id,
        'username': username,
        'action': 'purge'
    }
    return publish_user_event(UserEventType.USER_PURGED, actor_id, data)

def publish_user_login(user_id: int, username: str, ip_address: str = None, user_agent: str = None):
    """Publishes user login event"""
    data = {
        'user_id': user_id,
        'username': username,
        'ip_address': ip_address,
        'user_agent': user_agent,
        'action': 'login'
    }
    return publish_user_event(UserEventType.USER_LOGIN, user_id, data)

def publish_user_login_failed(username: str, ip_address: str = None, reason: str = None):
    """Publishes failed login attempt event"""
    data = {
        'username': username,
        'ip_address': ip_address,
        'reason': reason,
        'action': 'login_failed'
    }
    return publish_user_event(UserEventType.USER_LOGIN_FAILED, None, data)
