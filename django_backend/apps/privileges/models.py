from django.db import models

from apps.common.models import SoftDeletableModel, TimeStampedModel


class Permission(TimeStampedModel):
    permission_name = models.CharField(max_length=100, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["permission_name"]

    def __str__(self) -> str:
        return self.permission_name


class Role(TimeStampedModel):
    role_name = models.CharField(max_length=100, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")
    permissions = models.ManyToManyField(Permission, related_name="roles", blank=True)

    class Meta:
        ordering = ["role_name"]

    def __str__(self) -> str:
        return self.role_name


class Group(SoftDeletableModel):
    """
    A named set of users carrying at most one Role.

    Membership is stored once, in the ``User.groups`` join table; ``members``
    is the reverse view of that same table.
    """

    group_name = models.CharField(max_length=100, unique=True)
    description = models.CharField(max_length=255, blank=True, default="")
    role = models.ForeignKey(
        Role,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="groups",
    )

    class Meta:
        ordering = ["group_name"]

    def __str__(self) -> str:
        return self.group_name

    def is_member(self, user) -> bool:
        return self.members.filter(pk=user.pk).exists()

    @property
    def member_count(self) -> int:
        return self.members.count()
