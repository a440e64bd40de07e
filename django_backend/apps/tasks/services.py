"""
Task lifecycle: status, dependencies, completion, comments and attachments.

A task holds exactly one current status. Whether that status must belong to
the workflow governing the task (the workflow of its project/task type
binding) is decided by ``TASKS_ENFORCE_WORKFLOW_CONFORMANCE``; by default the
workflow order is declared only.
"""
import logging
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.common import soft_delete
from apps.common.associations import AssociationRegistry
from apps.common.exceptions import (
    DependencyCycleError,
    DuplicateDependency,
    NotFound,
    SelfDependencyError,
    WorkflowConformanceError,
    require_name,
)
from apps.projects.models import ProjectTaskType
from apps.users.models import User
from apps.workflows.models import Status
from apps.workflows.services import status_in_workflow

from .models import Task, TaskAttachment, TaskComment, TaskDependency
from .producer import events

logger = logging.getLogger(__name__)


def _actor_id(actor) -> Optional[int]:
    return getattr(actor, "pk", actor)


class TaskDependencyRegistry(AssociationRegistry):
    """Directed edges ``task -> depends_on_task``; an edge may not close a cycle."""

    def __init__(self):
        super().__init__(TaskDependency, "task", "depends_on_task")

    def duplicate_error(self, key, payload):
        return DuplicateDependency(*key)

    def validate_new(self, key, payload):
        if reaches(key.depends_on_task_id, key.task_id):
            raise DependencyCycleError(
                f"Task {key.task_id} depending on task {key.depends_on_task_id} would create a cycle"
            )


dependencies = TaskDependencyRegistry()


def reaches(start_id, target_id) -> bool:
    """True when ``target_id`` is reachable from ``start_id`` following depends-on edges."""
    seen = {start_id}
    frontier = [start_id]
    while frontier:
        next_ids = TaskDependency.objects.filter(task_id__in=frontier).values_list("depends_on_task_id", flat=True)
        frontier = []
        for task_id in next_ids:
            if task_id == target_id:
                return True
            if task_id not in seen:
                seen.add(task_id)
                frontier.append(task_id)
    return False


def get_task(task_id) -> Task:
    return soft_delete.get_alive(Task, task_id)


def create_task(task_title: str, actor=None, **fields) -> Task:
    task_title = require_name(task_title, "task_title")
    with transaction.atomic():
        task = Task.objects.create(task_title=task_title, **fields)
        logger.info(f"Task {task.pk} created by {_actor_id(actor)}")
        transaction.on_commit(
            lambda: events.publish_task_created(
                _actor_id(actor), task.pk, task.task_title, task.project_id, task.status_id, task.assignee_id
            )
        )
    return task


def delete_task(task_id, actor=None) -> Task:
    """Soft-delete; dependency edges and comments stay, and the row stays joinable."""
    with transaction.atomic():
        task = soft_delete.soft_delete(Task, task_id, actor=actor)
        transaction.on_commit(lambda: events.publish_task_deleted(_actor_id(actor), task.pk, task.task_title))
    return task


# Status

def governing_workflow(task: Task):
    """The workflow bound to the task's (project, task type), if any."""
    if task.project_id is None or task.task_type_id is None:
        return None
    binding = (
        ProjectTaskType.objects.select_related("workflow")
        .filter(pk=ProjectTaskType.Key(task.project_id, task.task_type_id))
        .first()
    )
    return binding.workflow if binding else None


def set_status(task_id, status_id, actor=None) -> Task:
    """
    Move a task to a status.

    With TASKS_ENFORCE_WORKFLOW_CONFORMANCE on, a status outside the
    governing workflow raises WorkflowConformanceError. Tasks without a
    governing workflow accept any status.
    """
    with transaction.atomic():
        task = get_task(task_id)
        try:
            status = Status.objects.get(pk=status_id)
        except Status.DoesNotExist:
            raise NotFound("Status", status_id)

        if getattr(settings, "TASKS_ENFORCE_WORKFLOW_CONFORMANCE", False):
            workflow = governing_workflow(task)
            if workflow is not None and not status_in_workflow(workflow.pk, status.pk):
                raise WorkflowConformanceError(
                    f"Status {status.status_name!r} is not a step of workflow {workflow.name!r}"
                )

        old_status_id = task.status_id
        task.status = status
        task.save(update_fields=["status", "updated_at"])
        logger.info(f"Task {task.pk} status {old_status_id} -> {status.pk}")
        transaction.on_commit(
            lambda: events.publish_task_status_changed(
                _actor_id(actor), task.pk, task.task_title, old_status_id, status.pk
            )
        )
    return task


def complete_task(task_id, actor=None) -> Task:
    with transaction.atomic():
        task = get_task(task_id)
        if task.completed_at is None:
            task.completed_at = timezone.now()
            task.save(update_fields=["completed_at", "updated_at"])
            transaction.on_commit(lambda: events.publish_task_completed(_actor_id(actor), task.pk, task.task_title))
    return task


def reopen_task(task_id, actor=None) -> Task:
    with transaction.atomic():
        task = get_task(task_id)
        if task.completed_at is not None:
            task.completed_at = None
            task.save(update_fields=["completed_at", "updated_at"])
            transaction.on_commit(lambda: events.publish_task_reopened(_actor_id(actor), task.pk, task.task_title))
    return task


# Dependencies

def add_dependency(task_id, depends_on_task_id, actor=None) -> TaskDependency:
    """
    Record that ``task_id`` depends on ``depends_on_task_id``.

    Raises:
        SelfDependencyError: both ids are the same task
        NotFound: either task is absent or soft-deleted
        DuplicateDependency: the edge already exists
        DependencyCycleError: the edge would close a cycle
    """
    if task_id == depends_on_task_id:
        raise SelfDependencyError(f"Task {task_id} cannot depend on itself")
    with transaction.atomic():
        edge = dependencies.create(task_id, depends_on_task_id)
        transaction.on_commit(
            lambda: events.publish_dependency_added(_actor_id(actor), task_id, depends_on_task_id)
        )
    return edge


def remove_dependency(task_id, depends_on_task_id, actor=None):
    with transaction.atomic():
        dependencies.delete(task_id, depends_on_task_id)
        transaction.on_commit(
            lambda: events.publish_dependency_removed(_actor_id(actor), task_id, depends_on_task_id)
        )


def direct_dependencies(task_id):
    """Live tasks ``task_id`` depends on, one hop."""
    soft_delete.get_including_deleted(Task, task_id)
    return dependencies.b_for_a(task_id)


def direct_dependents(task_id):
    """Live tasks depending on ``task_id``, one hop."""
    soft_delete.get_including_deleted(Task, task_id)
    return dependencies.a_for_b(task_id)


def count_dependencies(task_id) -> int:
    return direct_dependencies(task_id).count()


def count_dependents(task_id) -> int:
    return direct_dependents(task_id).count()


# Comments

def add_comment(task_id, user_id, comment: str, actor=None) -> TaskComment:
    comment = require_name(comment, "comment")
    with transaction.atomic():
        task = get_task(task_id)
        user = soft_delete.get_alive(User, user_id)
        obj = TaskComment.objects.create(task=task, user=user, comment=comment)
        transaction.on_commit(lambda: events.publish_comment_added(_actor_id(actor), task.pk, obj.pk))
    return obj


def comments_for_task(task_id, including_deleted: bool = False):
    manager = TaskComment.all_objects if including_deleted else TaskComment.objects
    return manager.filter(task_id=task_id).select_related("user")


# Attachments

def _attachment(attachment_id) -> TaskAttachment:
    try:
        return TaskAttachment.objects.get(pk=attachment_id)
    except TaskAttachment.DoesNotExist:
        raise NotFound("Task attachment", attachment_id)


def get_attachment(attachment_id) -> TaskAttachment:
    return _attachment(attachment_id)


def add_attachment(task_id, file_name: str, file_content: bytes = b"", file_type: str = "",
                   actor=None) -> TaskAttachment:
    file_name = require_name(file_name, "file_name")
    content = bytes(file_content or b"")
    with transaction.atomic():
        task = get_task(task_id)
        attachment = TaskAttachment.objects.create(
            task=task,
            file_name=file_name,
            file_type=file_type or "",
            file_size=len(content),
            file_content=content,
        )
        logger.info(f"Attachment {attachment.pk} ({attachment.file_size} bytes) added to task {task.pk}")
        transaction.on_commit(
            lambda: events.publish_attachment_added(_actor_id(actor), task.pk, attachment.pk, file_name)
        )
    return attachment


def update_attachment(attachment_id, file_name=None, file_type=None, file_content=None) -> TaskAttachment:
    """Replace the name, type and/or content; a new content recomputes the size."""
    attachment = _attachment(attachment_id)
    changed = []
    if file_name is not None:
        attachment.file_name = require_name(file_name, "file_name")
        changed.append("file_name")
    if file_type is not None:
        attachment.file_type = file_type
        changed.append("file_type")
    if file_content is not None:
        attachment.file_content = bytes(file_content)
        attachment.file_size = len(attachment.file_content)
        changed += ["file_content", "file_size"]
    if changed:
        attachment.save(update_fields=[*changed, "updated_at"])
    return attachment


def delete_attachment(attachment_id, actor=None):
    with transaction.atomic():
        attachment = _attachment(attachment_id)
        task_id = attachment.task_id
        attachment.delete()
        transaction.on_commit(lambda: events.publish_attachment_removed(_actor_id(actor), task_id, attachment_id))


def attachments_for_task(task_id):
    soft_delete.get_including_deleted(Task, task_id)
    return TaskAttachment.objects.filter(task_id=task_id).defer("file_content")


def find_attachments_by_file_name(file_name: str):
    return TaskAttachment.objects.filter(file_name__iexact=file_name).defer("file_content")


def find_attachments_by_file_type(file_type: str):
    return TaskAttachment.objects.filter(file_type__iexact=file_type).defer("file_content")
