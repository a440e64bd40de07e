from django.contrib.auth.base_user import AbstractBaseUser, BaseUserManager
from django.db import models

from apps.common.models import SoftDeletableModel, SoftDeleteQuerySet


class UserManager(BaseUserManager.from_queryset(SoftDeleteQuerySet)):
    """Default user manager; soft-deleted users can neither be listed nor log in."""

    def get_queryset(self):
        return super().get_queryset().alive()

    def create_user(self, username, password=None, **extra_fields):
        if not username:
            raise ValueError("The username must be set")
        user = self.model(username=username, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, username, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        return self.create_user(username, password, **extra_fields)


class User(AbstractBaseUser, SoftDeletableModel):
    username = models.CharField(max_length=50, unique=True)
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)
    groups = models.ManyToManyField(
        "privileges.Group",
        related_name="members",
        blank=True,
    )

    objects = UserManager()

    USERNAME_FIELD = "username"
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return self.username


class UserAuth(SoftDeletableModel):
    user = models.OneToOneField(User, on_delete=models.PROTECT, related_name="user_auth")
    auth_token = models.CharField(max_length=255, blank=True, default="")
    last_login_at = models.DateTimeField(null=True, blank=True)
    failed_login_attempts = models.PositiveIntegerField(default=0)
    is_locked = models.BooleanField(default=False)

    def __str__(self):
        return f"Auth for {self.user_id}"


class UserDetails(SoftDeletableModel):
    user = models.OneToOneField(User, on_delete=models.PROTECT, related_name="user_details")
    email = models.EmailField(max_length=100, unique=True)
    first_name = models.CharField(max_length=50, blank=True, default="")
    last_name = models.CharField(max_length=50, blank=True, default="")
    phone_number = models.CharField(max_length=20, blank=True, default="")

    class Meta:
        verbose_name_plural = "user details"

    def __str__(self):
        return self.email


class DeletedUser(models.Model):
    """Archive row left behind when a user is purged; ``id`` is the purged user's id."""

    id = models.BigIntegerField(primary_key=True)
    username = models.CharField(max_length=50)
    deleted_at = models.DateTimeField()

    class Meta:
        ordering = ["-deleted_at"]

    def __str__(self):
        return f"{self.username} (purged)"
