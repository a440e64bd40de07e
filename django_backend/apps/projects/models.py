from typing import NamedTuple

from django.conf import settings
from django.db import models

from apps.common.models import SoftDeletableModel, TimeStampedModel


class Project(SoftDeletableModel):
    project_name = models.CharField(max_length=255, unique=True)
    project_description = models.TextField(blank=True, default="")
    project_start_date = models.DateTimeField(null=True, blank=True)
    project_end_date = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["project_name"]

    def __str__(self) -> str:
        return self.project_name


class ProjectRole(TimeStampedModel):
    role_name = models.CharField(max_length=50, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")
    permissions = models.ManyToManyField("privileges.Permission", related_name="project_roles", blank=True)

    class Meta:
        ordering = ["role_name"]

    def __str__(self) -> str:
        return self.role_name


class ProjectUser(TimeStampedModel):
    class Key(NamedTuple):
        project_id: int
        user_id: int

    pk = models.CompositePrimaryKey("project_id", "user_id")
    project = models.ForeignKey(Project, on_delete=models.PROTECT, related_name="project_users")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="project_users")
    project_role = models.ForeignKey(
        ProjectRole,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="project_users",
    )

    class Meta:
        ordering = ["project_id", "user_id"]

    def __str__(self) -> str:
        return f"{self.user_id} in {self.project_id}"

    @property
    def key(self) -> "ProjectUser.Key":
        return self.Key(self.project_id, self.user_id)


class ProjectGroup(TimeStampedModel):
    class Key(NamedTuple):
        project_id: int
        group_id: int

    pk = models.CompositePrimaryKey("project_id", "group_id")
    project = models.ForeignKey(Project, on_delete=models.PROTECT, related_name="project_groups")
    group = models.ForeignKey("privileges.Group", on_delete=models.PROTECT, related_name="project_groups")
    project_role = models.ForeignKey(
        ProjectRole,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="project_groups",
    )

    class Meta:
        ordering = ["project_id", "group_id"]

    def __str__(self) -> str:
        return f"group {self.group_id} in {self.project_id}"

    @property
    def key(self) -> "ProjectGroup.Key":
        return self.Key(self.project_id, self.group_id)


class ProjectTaskType(TimeStampedModel):
    """Binds a task type to a project and names the workflow its tasks follow."""

    class Key(NamedTuple):
        project_id: int
        task_type_id: int

    pk = models.CompositePrimaryKey("project_id", "task_type_id")
    project = models.ForeignKey(Project, on_delete=models.PROTECT, related_name="project_task_types")
    task_type = models.ForeignKey("tasks.TaskType", on_delete=models.PROTECT, related_name="project_task_types")
    workflow = models.ForeignKey(
        "workflows.Workflow",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="project_task_types",
    )

    class Meta:
        ordering = ["project_id", "task_type_id"]

    def __str__(self) -> str:
        return f"type {self.task_type_id} in {self.project_id}"

    @property
    def key(self) -> "ProjectTaskType.Key":
        return self.Key(self.project_id, self.task_type_id)
