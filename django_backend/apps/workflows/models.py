from typing import NamedTuple

from django.db import models

from apps.common.models import SoftDeletableModel, TimeStampedModel


class Status(TimeStampedModel):
    """A task state. Shared: any number of workflows and tasks may point at it."""

    status_name = models.CharField(max_length=50, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["status_name"]
        verbose_name_plural = "statuses"

    def __str__(self) -> str:
        return self.status_name


class Workflow(SoftDeletableModel):
    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name

    def ordered_steps(self):
        return self.steps.select_related("status").order_by("sequence_number")


class WorkflowStep(TimeStampedModel):
    """
    Position of a Status inside a Workflow.

    Identified by (workflow, status): a status appears at most once per
    workflow. Positions are unique per workflow as well. Soft-deleting the
    workflow leaves its steps in place.
    """

    class Key(NamedTuple):
        workflow_id: int
        status_id: int

    pk = models.CompositePrimaryKey("workflow_id", "status_id")
    workflow = models.ForeignKey(Workflow, on_delete=models.PROTECT, related_name="steps")
    status = models.ForeignKey(Status, on_delete=models.PROTECT, related_name="workflow_steps")
    sequence_number = models.PositiveIntegerField()

    class Meta:
        ordering = ["workflow_id", "sequence_number"]
        constraints = [
            models.UniqueConstraint(fields=["workflow", "sequence_number"], name="uq_workflow_sequence")
        ]

    def __str__(self) -> str:
        return f"{self.workflow_id}#{self.sequence_number} -> {self.status_id}"

    @property
    def key(self) -> "WorkflowStep.Key":
        return self.Key(self.workflow_id, self.status_id)
