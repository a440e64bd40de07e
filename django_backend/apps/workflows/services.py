"""
Workflows and statuses.

A workflow is a flat ordered list of statuses. Each step is identified by
(workflow, status) and holds a ``sequence_number`` unique within its
workflow. Nothing here moves tasks between statuses; the order is declared
for readers.
"""
import logging
from collections import namedtuple
from typing import Iterable, List, Optional, Tuple

from django.db import transaction

from apps.common import soft_delete
from apps.common.associations import AssociationRegistry
from apps.common.exceptions import (
    DuplicateSequenceNumber,
    NotFound,
    ValidationFailure,
)
from apps.common.services import create_named, update_named

from .models import Status, Workflow, WorkflowStep
from .producer import events

logger = logging.getLogger(__name__)

OrderedStep = namedtuple("OrderedStep", ["sequence_number", "status"])


def _actor_id(actor) -> Optional[int]:
    return getattr(actor, "pk", actor)


def _check_sequence_number(sequence_number) -> int:
    if isinstance(sequence_number, bool) or not isinstance(sequence_number, int) or sequence_number < 1:
        raise ValidationFailure(f"sequence_number must be a positive integer, got {sequence_number!r}")
    return sequence_number


class WorkflowStepRegistry(AssociationRegistry):
    """Steps keyed by (workflow, status), positions unique per workflow."""

    def __init__(self):
        super().__init__(WorkflowStep, "workflow", "status")

    def queryset(self):
        return super().queryset().order_by("workflow_id", "sequence_number")

    def position_taken(self, workflow_id, sequence_number) -> bool:
        return WorkflowStep.objects.filter(workflow_id=workflow_id, sequence_number=sequence_number).exists()

    def validate_new(self, key, payload):
        if self.position_taken(key.workflow_id, payload["sequence_number"]):
            raise DuplicateSequenceNumber(key.workflow_id, payload["sequence_number"])

    def translate_integrity_error(self, key, payload, error):
        if self.exists(*key):
            return self.duplicate_error(key, payload)
        if self.position_taken(key.workflow_id, payload["sequence_number"]):
            return DuplicateSequenceNumber(key.workflow_id, payload["sequence_number"])
        return error


steps = WorkflowStepRegistry()


# Statuses

def create_status(status_name: str, description: str = "") -> Status:
    return create_named(Status, "status_name", status_name, description=description)


def update_status(status_id, status_name=None, description=None) -> Status:
    try:
        status = Status.objects.get(pk=status_id)
    except Status.DoesNotExist:
        raise NotFound("Status", status_id)
    return update_named(status, "status_name", status_name, description=description)


def delete_status(status_id, actor=None):
    """Hard delete; refused while any step or task points at the status."""
    soft_delete.hard_delete(Status, status_id, actor=actor)


# Workflows

def create_workflow(name: str, description: str = "", actor=None) -> Workflow:
    with transaction.atomic():
        workflow = create_named(Workflow, "name", name, description=description)
        transaction.on_commit(
            lambda: events.publish_workflow_created(_actor_id(actor), workflow.pk, workflow.name)
        )
    return workflow


def update_workflow(workflow_id, name=None, description=None, actor=None) -> Workflow:
    with transaction.atomic():
        workflow = soft_delete.get_alive(Workflow, workflow_id)
        update_named(workflow, "name", name, description=description)
        changes = {k: v for k, v in (("name", name), ("description", description)) if v is not None}
        if changes:
            transaction.on_commit(
                lambda: events.publish_workflow_updated(_actor_id(actor), workflow.pk, changes)
            )
    return workflow


def delete_workflow(workflow_id, actor=None) -> Workflow:
    """Soft-delete the workflow. Its steps are left untouched."""
    with transaction.atomic():
        workflow = soft_delete.soft_delete(Workflow, workflow_id, actor=actor)
        transaction.on_commit(
            lambda: events.publish_workflow_deleted(_actor_id(actor), workflow.pk, workflow.name)
        )
    return workflow


def workflows_with_steps():
    return Workflow.objects.filter(steps__isnull=False).distinct()


# Steps

def add_step(workflow_id, status_id, sequence_number, actor=None) -> WorkflowStep:
    """
    Place a status at a position in a workflow.

    Raises:
        NotFound: the workflow (live) or the status does not exist
        ValidationFailure: sequence_number is not a positive integer
        DuplicateAssociation: the status is already a step of the workflow
        DuplicateSequenceNumber: the position is already used in the workflow
    """
    _check_sequence_number(sequence_number)
    with transaction.atomic():
        step = steps.create(workflow_id, status_id, sequence_number=sequence_number)
        transaction.on_commit(
            lambda: events.publish_step_added(_actor_id(actor), workflow_id, status_id, sequence_number)
        )
    return step


def replace_steps(workflow_id, new_steps: Iterable[Tuple[int, int]], actor=None) -> List[WorkflowStep]:
    """Swap the whole step list of a workflow for ``[(status_id, sequence_number), ...]``."""
    new_steps = [(status_id, _check_sequence_number(n)) for status_id, n in new_steps]
    status_ids = [s for s, _ in new_steps]
    positions = [n for _, n in new_steps]
    if len(set(status_ids)) != len(status_ids):
        raise ValidationFailure("A status may appear only once in a workflow")
    if len(set(positions)) != len(positions):
        raise ValidationFailure("Step sequence numbers must be unique within a workflow")

    with transaction.atomic():
        workflow = soft_delete.get_alive(Workflow, workflow_id)
        statuses = Status.objects.in_bulk(status_ids)
        missing = sorted(set(status_ids) - set(statuses))
        if missing:
            raise NotFound("Status", missing)
        removed = steps.delete_by_a(workflow.pk)
        created = WorkflowStep.objects.bulk_create(
            [WorkflowStep(workflow=workflow, status=statuses[s], sequence_number=n) for s, n in new_steps]
        )
        logger.info(f"Workflow {workflow.pk} steps replaced: {removed} removed, {len(created)} added")
        transaction.on_commit(
            lambda: events.publish_steps_replaced(_actor_id(actor), workflow.pk, new_steps)
        )
    return sorted(created, key=lambda step: step.sequence_number)


def remove_step(workflow_id, status_id, actor=None):
    """Remove a step by key. Tasks reference statuses, not steps, so this is never blocked."""
    with transaction.atomic():
        steps.delete(workflow_id, status_id)
        transaction.on_commit(
            lambda: events.publish_step_removed(_actor_id(actor), workflow_id, status_id)
        )


def steps_in_order(workflow_id) -> List[OrderedStep]:
    """
    The (sequence_number, status) pairs of a workflow, ascending.

    The workflow is looked up including soft-deleted rows: an existing task
    may still be governed by it. Only a workflow that never existed (or was
    hard-deleted) is NotFound.
    """
    workflow = soft_delete.get_including_deleted(Workflow, workflow_id)
    return [
        OrderedStep(step.sequence_number, step.status)
        for step in workflow.ordered_steps()
    ]


def has_at_least_one_step(workflow_id) -> bool:
    soft_delete.get_including_deleted(Workflow, workflow_id)
    return WorkflowStep.objects.filter(workflow_id=workflow_id).exists()


def status_in_workflow(workflow_id, status_id) -> bool:
    soft_delete.get_including_deleted(Workflow, workflow_id)
    return steps.exists(workflow_id, status_id)


def find_steps(workflow_id, status_name: str):
    return steps.find_by_a(workflow_id).filter(status__status_name=status_name)


def find_steps_by_names(workflow_name: str, status_name: str):
    return steps.queryset().filter(workflow__name=workflow_name, status__status_name=status_name)
