from .events import (
    WorkflowEventType,
    publish_workflow_event,
    publish_workflow_created,
    publish_workflow_updated,
    publish_workflow_deleted,
    publish_step_added,
    publish_step_removed,
    publish_steps_replaced,
)

__all__ = [
    "WorkflowEventType",
    "publish_workflow_event",
    "publish_workflow_created",
    "publish_workflow_updated",
    "publish_workflow_deleted",
    "publish_step_added",
    "publish_step_removed",
    "publish_steps_replaced",
]
