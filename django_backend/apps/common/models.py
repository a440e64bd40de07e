from django.db import models
from django.utils import timezone


class TimeStampedModel(models.Model):
    """Abstract entity: integer identity plus creation/update timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class SoftDeleteQuerySet(models.QuerySet):
    def alive(self):
        return self.filter(deleted_at__isnull=True)

    def deleted(self):
        return self.filter(deleted_at__isnull=False)

    def soft_delete(self) -> int:
        now = timezone.now()
        return self.alive().update(deleted_at=now, updated_at=now)


class SoftDeleteManager(models.Manager.from_queryset(SoftDeleteQuerySet)):
    """Default manager of a deletable entity: hides logically deleted rows."""

    def get_queryset(self):
        return super().get_queryset().alive()


class SoftDeletableModel(TimeStampedModel):
    """
    Deletable capability.

    ``objects`` only ever returns rows whose ``deleted_at`` is null;
    ``all_objects`` is the explicit "including deleted" manager. Foreign key
    traversal goes through Django's plain base manager, so a soft-deleted row
    stays joinable from rows that reference it.
    """

    deleted_at = models.DateTimeField(null=True, blank=True, db_index=True)

    objects = SoftDeleteManager()
    all_objects = SoftDeleteQuerySet.as_manager()

    class Meta:
        abstract = True

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self):
        self.deleted_at = timezone.now()
        self.save(update_fields=["deleted_at", "updated_at"])

    def restore(self):
        self.deleted_at = None
        self.save(update_fields=["deleted_at", "updated_at"])

    def hard_delete(self):
        return models.Model.delete(self)
