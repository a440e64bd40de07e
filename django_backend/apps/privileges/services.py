"""
Groups, roles and permissions.

Membership lives in a single join table (``User.groups``); ``Group.members``
is the reverse view of it, so adding or removing through either side is the
same write.
"""
import logging
from typing import Iterable, List, Optional

from django.db import transaction

from apps.common import soft_delete
from apps.common.exceptions import NotFound
from apps.common.services import create_named, update_named
from apps.users.models import User

from .models import Group, Permission, Role
from .producer import events

logger = logging.getLogger(__name__)

_UNSET = object()


def _actor_id(actor) -> Optional[int]:
    return getattr(actor, "pk", actor)


def get_group(group_id) -> Group:
    return soft_delete.get_alive(Group, group_id)


def _resolve_users(user_ids: Iterable[int]) -> List[User]:
    """All-or-nothing: every id must name a live user."""
    wanted = set(user_ids)
    users = list(User.objects.filter(pk__in=wanted))
    if len(users) != len(wanted):
        missing = sorted(wanted - {u.pk for u in users})
        raise NotFound("User", missing, f"One or more users not found: {missing}")
    return users


def resolve_permissions(permissions: Iterable) -> List[Permission]:
    """All-or-nothing: accepts permission ids or instances."""
    wanted = {getattr(p, "pk", p) for p in permissions}
    found = list(Permission.objects.filter(pk__in=wanted))
    if len(found) != len(wanted):
        raise NotFound("Permission", sorted(wanted - {p.pk for p in found}))
    return found


# Permissions and roles

def create_permission(permission_name: str, description: str = "") -> Permission:
    return create_named(Permission, "permission_name", permission_name, description=description)


def create_role(role_name: str, description: str = "", permission_ids: Iterable[int] = ()) -> Role:
    with transaction.atomic():
        role = create_named(Role, "role_name", role_name, description=description)
        permissions = resolve_permissions(permission_ids)
        if permissions:
            role.permissions.add(*permissions)
    return role


def update_permission(permission_id, permission_name=None, description=None) -> Permission:
    try:
        permission = Permission.objects.get(pk=permission_id)
    except Permission.DoesNotExist:
        raise NotFound("Permission", permission_id)
    return update_named(permission, "permission_name", permission_name, description=description)


def update_role(role_id, role_name=None, description=None, permission_ids=None) -> Role:
    try:
        role = Role.objects.get(pk=role_id)
    except Role.DoesNotExist:
        raise NotFound("Role", role_id)
    with transaction.atomic():
        update_named(role, "role_name", role_name, description=description)
        if permission_ids is not None:
            role.permissions.set(resolve_permissions(permission_ids))
    return role


def role_has_permission(role_id, permission_name: str) -> bool:
    return Role.objects.filter(pk=role_id, permissions__permission_name=permission_name).exists()


def unused_permissions():
    """Permissions granted by no role and no project role."""
    return Permission.objects.filter(roles__isnull=True, project_roles__isnull=True)


def unassigned_roles():
    """Roles no live group carries."""
    return Role.objects.exclude(pk__in=Group.objects.filter(role__isnull=False).values("role_id"))


# Groups

def create_group(group_name: str, description: str = "", role_id=None, actor=None) -> Group:
    role = None
    if role_id is not None:
        try:
            role = Role.objects.get(pk=role_id)
        except Role.DoesNotExist:
            raise NotFound("Role", role_id)
    with transaction.atomic():
        group = create_named(Group, "group_name", group_name, description=description, role=role)
        transaction.on_commit(
            lambda: events.publish_group_created(_actor_id(actor), group.pk, group.group_name, role_id)
        )
    return group


def update_group(group_id, group_name=None, description=None, role_id=_UNSET, actor=None) -> Group:
    with transaction.atomic():
        group = get_group(group_id)
        changes = {}
        extra = {}
        if description is not None:
            extra["description"] = description
            changes["description"] = description
        if role_id is not _UNSET:
            if role_id is None:
                group.role = None
            else:
                try:
                    group.role = Role.objects.get(pk=role_id)
                except Role.DoesNotExist:
                    raise NotFound("Role", role_id)
            group.save(update_fields=["role", "updated_at"])
            changes["role_id"] = role_id
        if group_name is not None:
            changes["group_name"] = group_name
        update_named(group, "group_name", group_name, **extra)
        transaction.on_commit(
            lambda: events.publish_group_updated(_actor_id(actor), group.pk, group.group_name, changes)
        )
    return group


def delete_group(group_id, actor=None) -> Group:
    """Soft-delete; memberships stay in place and reappear on restore."""
    with transaction.atomic():
        group = soft_delete.soft_delete(Group, group_id, actor=actor)
        transaction.on_commit(
            lambda: events.publish_group_deleted(_actor_id(actor), group.pk, group.group_name)
        )
    return group


def users_in_group_named(group_name: str):
    return User.objects.filter(groups__group_name=group_name, groups__deleted_at__isnull=True)


# Membership

@transaction.atomic
def add_members(group_id, user_ids: Iterable[int], actor=None) -> Group:
    """
    Add users to a group.

    Fails with NotFound, writing nothing, when the group or any of the users
    is absent. Users already in the group are left as they are.
    """
    group = get_group(group_id)
    users = _resolve_users(user_ids)
    group.members.add(*users)
    member_ids = sorted(u.pk for u in users)
    logger.info(f"Added users {member_ids} to group {group.pk}")
    transaction.on_commit(
        lambda: events.publish_group_members_added(_actor_id(actor), group.pk, group.group_name, member_ids)
    )
    return group


@transaction.atomic
def remove_members(group_id, user_ids: Iterable[int], actor=None) -> Group:
    """Remove users from a group; same preconditions as ``add_members``."""
    group = get_group(group_id)
    users = _resolve_users(user_ids)
    group.members.remove(*users)
    member_ids = sorted(u.pk for u in users)
    logger.info(f"Removed users {member_ids} from group {group.pk}")
    transaction.on_commit(
        lambda: events.publish_group_members_removed(_actor_id(actor), group.pk, group.group_name, member_ids)
    )
    return group


def members_of(group_id):
    return get_group(group_id).members.all()


def groups_of(user_id):
    return soft_delete.get_including_deleted(User, user_id).groups.all()
