"""User lifecycle: registration, soft deletion, restore and purge."""
import logging
from typing import Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.common import soft_delete
from apps.common.exceptions import DuplicateName, NotFound, require_name

from .models import DeletedUser, User, UserAuth, UserDetails
from .producer import events

logger = logging.getLogger(__name__)


def _actor_id(actor) -> Optional[int]:
    return getattr(actor, "pk", actor)


def create_user(username: str, password: str = None, email: str = None, actor=None,
                is_staff: bool = False, **details) -> User:
    """
    Create a user with its auth record and, when an email is given, its details.

    Usernames are compared case-insensitively, deleted users included.
    """
    username = require_name(username, "username")
    if User.all_objects.filter(username__iexact=username).exists():
        raise DuplicateName("User", username)
    if email and UserDetails.all_objects.filter(email__iexact=email).exists():
        raise DuplicateName("User details", email)
    try:
        with transaction.atomic():
            user = User.objects.create_user(username, password, is_staff=is_staff)
            UserAuth.objects.create(user=user)
            if email:
                UserDetails.objects.create(user=user, email=email, **details)
    except IntegrityError as e:
        logger.warning(f"User {username!r} rejected by unique constraint: {e}")
        raise DuplicateName("User", username) from e
    logger.info(f"User {user.pk} created: {username}")
    transaction.on_commit(lambda: events.publish_user_registered(_actor_id(actor), user.pk, user.username, email))
    return user


@transaction.atomic
def delete_user(user_id, actor=None) -> User:
    """Soft-delete a user together with its auth and details rows. Group memberships stay."""
    user = soft_delete.soft_delete(User, user_id, actor=actor)
    UserAuth.objects.filter(user=user).soft_delete()
    UserDetails.objects.filter(user=user).soft_delete()
    transaction.on_commit(lambda: events.publish_user_deleted(_actor_id(actor), user.pk, user.username))
    return user


@transaction.atomic
def restore_user(user_id, actor=None) -> User:
    user = soft_delete.restore(User, user_id, actor=actor)
    UserAuth.all_objects.filter(user=user).update(deleted_at=None)
    UserDetails.all_objects.filter(user=user).update(deleted_at=None)
    transaction.on_commit(lambda: events.publish_user_restored(_actor_id(actor), user.pk, user.username))
    return user


@transaction.atomic
def purge_user(user_id, actor=None):
    """
    Permanently remove a user, deleted or not.

    Details, auth record and group memberships go first; anything else still
    pointing at the user (tasks, comments, project memberships) makes the whole
    operation fail with ReferentialIntegrity and nothing is removed. A successful
    purge leaves a DeletedUser row with the old id and username.
    """
    try:
        user = User.all_objects.get(pk=user_id)
    except User.DoesNotExist:
        raise NotFound("User", user_id)
    pk, username = user.pk, user.username
    UserDetails.all_objects.filter(user=user).delete()
    UserAuth.all_objects.filter(user=user).delete()
    User.groups.through.objects.filter(user_id=user.pk).delete()
    soft_delete.hard_delete(User, user.pk, actor=actor)
    DeletedUser.objects.update_or_create(
        id=pk, defaults={"username": username, "deleted_at": timezone.now()}
    )
    transaction.on_commit(lambda: events.publish_user_purged(_actor_id(actor), pk, username))
