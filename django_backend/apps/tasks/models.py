from typing import NamedTuple

from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.common.models import SoftDeletableModel, SoftDeleteManager, SoftDeleteQuerySet, TimeStampedModel


class Category(TimeStampedModel):
    category_name = models.CharField(max_length=100, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["category_name"]
        verbose_name_plural = "categories"

    def __str__(self) -> str:
        return self.category_name


class TaskPriority(TimeStampedModel):
    priority_name = models.CharField(max_length=50, unique=True)

    class Meta:
        ordering = ["priority_name"]
        verbose_name_plural = "task priorities"

    def __str__(self) -> str:
        return self.priority_name


class TaskType(TimeStampedModel):
    task_type_name = models.CharField(max_length=255, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["task_type_name"]

    def __str__(self) -> str:
        return self.task_type_name


class TaskQuerySet(SoftDeleteQuerySet):
    def completed(self):
        return self.filter(completed_at__isnull=False)

    def incomplete(self):
        return self.filter(completed_at__isnull=True)

    def overdue(self, on_date=None):
        on_date = on_date or timezone.localdate()
        return self.incomplete().filter(task_due_date__lt=on_date)

    def due_between(self, start, end):
        return self.filter(task_due_date__range=(start, end))


class TaskManager(SoftDeleteManager.from_queryset(TaskQuerySet)):
    pass


class Task(SoftDeletableModel):
    task_title = models.CharField(max_length=255)
    task_description = models.TextField(blank=True, default="")
    task_due_date = models.DateField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    assignee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="assigned_tasks",
    )
    category = models.ForeignKey(Category, null=True, blank=True, on_delete=models.PROTECT, related_name="tasks")
    priority = models.ForeignKey(TaskPriority, null=True, blank=True, on_delete=models.PROTECT, related_name="tasks")
    project = models.ForeignKey(
        "projects.Project", null=True, blank=True, on_delete=models.PROTECT, related_name="tasks"
    )
    status = models.ForeignKey(
        "workflows.Status", null=True, blank=True, on_delete=models.PROTECT, related_name="tasks"
    )
    task_type = models.ForeignKey(TaskType, null=True, blank=True, on_delete=models.PROTECT, related_name="tasks")

    objects = TaskManager()
    all_objects = TaskQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["task_due_date"], name="task_due_date_idx"),
            models.Index(fields=["completed_at"], name="task_completed_at_idx"),
        ]

    def __str__(self) -> str:
        return self.task_title

    def depends_on(self):
        """Tasks this one waits for (one hop)."""
        return Task.objects.filter(dependent_edges__task=self)

    def blocks(self):
        """Tasks waiting for this one (one hop)."""
        return Task.objects.filter(dependency_edges__depends_on_task=self)


class TaskDependency(TimeStampedModel):
    """Directed edge: ``task`` depends on ``depends_on_task``."""

    class Key(NamedTuple):
        task_id: int
        depends_on_task_id: int

    pk = models.CompositePrimaryKey("task_id", "depends_on_task_id")
    task = models.ForeignKey(Task, on_delete=models.PROTECT, related_name="dependency_edges")
    depends_on_task = models.ForeignKey(Task, on_delete=models.PROTECT, related_name="dependent_edges")

    class Meta:
        ordering = ["task_id", "depends_on_task_id"]
        verbose_name_plural = "task dependencies"
        constraints = [
            models.CheckConstraint(
                condition=~models.Q(task=models.F("depends_on_task")),
                name="ck_task_dependency_no_self_loop",
            )
        ]

    def __str__(self) -> str:
        return f"{self.task_id} -> {self.depends_on_task_id}"

    @property
    def key(self) -> "TaskDependency.Key":
        return self.Key(self.task_id, self.depends_on_task_id)


class TaskComment(SoftDeletableModel):
    task = models.ForeignKey(Task, on_delete=models.PROTECT, related_name="comments")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="task_comments")
    comment = models.TextField()

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Comment #{self.pk} on {self.task_id}"


class TaskAttachment(TimeStampedModel):
    """A file stored alongside a task. ``file_size`` is derived from the content."""

    task = models.ForeignKey(Task, on_delete=models.PROTECT, related_name="attachments")
    file_name = models.CharField(max_length=255)
    file_type = models.CharField(max_length=100, blank=True, default="")
    file_size = models.PositiveBigIntegerField(default=0)
    file_content = models.BinaryField(default=bytes)

    class Meta:
        ordering = ["file_name", "id"]
        indexes = [models.Index(fields=["task"], name="task_attachment_task_idx")]

    def __str__(self) -> str:
        return f"{self.file_name} on {self.task_id}"
