import logging
from enum import Enum
from typing import Dict, Any, Optional

from apps.common.events.base import publish_event
from apps.common.kafka.config import WORKFLOW_EVENTS_TOPIC

logger = logging.getLogger(__name__)


class WorkflowEventType(Enum):
    """Workflow event types"""
    WORKFLOW_CREATED = "workflow_created"
    WORKFLOW_UPDATED = "workflow_updated"
    WORKFLOW_DELETED = "workflow_deleted"

    # Steps
    WORKFLOW_STEP_ADDED = "workflow_step_added"
    WORKFLOW_STEP_REMOVED = "workflow_step_removed"
    WORKFLOW_STEPS_REPLACED = "workflow_steps_replaced"


def publish_workflow_event(
    event_type: WorkflowEventType,
    user_id: Optional[int],
    data: Dict[str, Any],
    metadata: Optional[Dict[str, Any]] = None
) -> bool:
    """
    Publish workflow event

    Args:
        event_type: Type of workflow event
        user_id: ID of the user performing the action
        data: Event-specific data, must carry ``workflow_id``
        metadata: Additional metadata (optional)

    Returns:
        bool: True if event was published successfully
    """
    return publish_event(
        topic=WORKFLOW_EVENTS_TOPIC,
        event_type=event_type.value,
        user_id=user_id,
        data=data,
        key=str(data['workflow_id']),
        metadata=metadata,
    )


def publish_workflow_created(user_id: Optional[int], workflow_id: int, name: str):
    """Publishes workflow creation event"""
    data = {
        'workflow_id': workflow_id,
        'name': name,
        'action': 'create'
    }
    return publish_workflow_event(WorkflowEventType.WORKFLOW_CREATED, user_id, data)


def publish_workflow_updated(user_id: Optional[int], workflow_id: int, changes: Dict[str, Any]):
    """Publishes workflow update event"""
    data = {
        'workflow_id': workflow_id,
        'changes': changes,
        'action': 'update'
    }
    return publish_workflow_event(WorkflowEventType.WORKFLOW_UPDATED, user_id, data)


def publish_workflow_deleted(user_id: Optional[int], workflow_id: int, name: str):
    """Publishes workflow soft deletion event"""
    data = {
        'workflow_id': workflow_id,
        'name': name,
        'action': 'delete'
    }
    return publish_workflow_event(WorkflowEventType.WORKFLOW_DELETED, user_id, data)


def publish_step_added(user_id: Optional[int], workflow_id: int, status_id: int, sequence_number: int):
    """Publishes step addition event"""
    data = {
        'workflow_id': workflow_id,
        'status_id': status_id,
        'sequence_number': sequence_number,
        'action': 'add_step'
    }
    return publish_workflow_event(WorkflowEventType.WORKFLOW_STEP_ADDED, user_id, data)


def publish_step_removed(user_id: Optional[int], workflow_id: int, status_id: int):
    """Publishes step removal event"""
    data = {
        'workflow_id': workflow_id,
        'status_id': status_id,
        'action': 'remove_step'
    }
    return publish_workflow_event(WorkflowEventType.WORKFLOW_STEP_REMOVED, user_id, data)


def publish_steps_replaced(user_id: Optional[int], workflow_id: int, steps):
    """Publishes full step list replacement event"""
    data = {
        'workflow_id': workflow_id,
        'steps': [{'status_id': s, 'sequence_number': n} for s, n in steps],
        'action': 'replace_steps'
    }
    return publish_workflow_event(WorkflowEventType.WORKFLOW_STEPS_REPLACED, user_id, data)
