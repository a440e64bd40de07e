"""
Projects and their composite-key associations.

Every "who/what belongs to this project" question is answered from the
current ProjectUser / ProjectGroup / ProjectTaskType rows; nothing is cached.
"""
import logging

from django.db import transaction

from apps.common import soft_delete
from apps.common.associations import AssociationRegistry
from apps.common.exceptions import NotFound
from apps.common.services import create_named, update_named
from apps.privileges.models import Group
from apps.privileges.services import resolve_permissions
from apps.users.models import User
from apps.workflows.models import Workflow

from .models import Project, ProjectGroup, ProjectRole, ProjectTaskType, ProjectUser

logger = logging.getLogger(__name__)

project_users = AssociationRegistry(ProjectUser, "project", "user")
project_groups = AssociationRegistry(ProjectGroup, "project", "group")
project_task_types = AssociationRegistry(ProjectTaskType, "project", "task_type")


def _project_role(project_role_id):
    if project_role_id is None:
        return None
    try:
        return ProjectRole.objects.get(pk=project_role_id)
    except ProjectRole.DoesNotExist:
        raise NotFound("Project role", project_role_id)


def _workflow(workflow_id):
    if workflow_id is None:
        return None
    return soft_delete.get_alive(Workflow, workflow_id)


# Projects

def create_project(project_name: str, **fields) -> Project:
    return create_named(Project, "project_name", project_name, **fields)


def update_project(project_id, project_name=None, **fields) -> Project:
    project = soft_delete.get_alive(Project, project_id)
    return update_named(project, "project_name", project_name, **fields)


def create_project_role(role_name: str, description: str = "", permissions=()) -> ProjectRole:
    with transaction.atomic():
        role = create_named(ProjectRole, "role_name", role_name, description=description)
        role.permissions.set(resolve_permissions(permissions))
    return role


def update_project_role(project_role_id, role_name=None, description=None, permissions=None) -> ProjectRole:
    role = _project_role(project_role_id)
    with transaction.atomic():
        update_named(role, "role_name", role_name, description=description)
        if permissions is not None:
            role.permissions.set(resolve_permissions(permissions))
    return role


@transaction.atomic
def decommission_project(project_id, actor=None) -> Project:
    """Drop every association of a project, then soft-delete it."""
    project = soft_delete.get_alive(Project, project_id)
    removed = (
        project_users.delete_by_a(project.pk)
        + project_groups.delete_by_a(project.pk)
        + project_task_types.delete_by_a(project.pk)
    )
    project = soft_delete.soft_delete(Project, project.pk, actor=actor)
    logger.info(f"Project {project.pk} decommissioned, {removed} associations removed")
    return project


# Association writes

def add_project_user(project_id, user_id, project_role_id=None) -> ProjectUser:
    return project_users.create(project_id, user_id, project_role=_project_role(project_role_id))


def set_project_user_role(project_id, user_id, project_role_id) -> ProjectUser:
    return project_users.update(project_id, user_id, project_role=_project_role(project_role_id))


def remove_project_user(project_id, user_id):
    project_users.delete(project_id, user_id)


def add_project_group(project_id, group_id, project_role_id=None) -> ProjectGroup:
    return project_groups.create(project_id, group_id, project_role=_project_role(project_role_id))


def set_project_group_role(project_id, group_id, project_role_id) -> ProjectGroup:
    return project_groups.update(project_id, group_id, project_role=_project_role(project_role_id))


def remove_project_group(project_id, group_id):
    project_groups.delete(project_id, group_id)


def add_project_task_type(project_id, task_type_id, workflow_id=None) -> ProjectTaskType:
    return project_task_types.create(project_id, task_type_id, workflow=_workflow(workflow_id))


def set_project_task_type_workflow(project_id, task_type_id, workflow_id) -> ProjectTaskType:
    return project_task_types.update(project_id, task_type_id, workflow=_workflow(workflow_id))


def remove_project_task_type(project_id, task_type_id):
    project_task_types.delete(project_id, task_type_id)


# Derived projections

def users_of_project(project_id):
    """Users attached directly through ProjectUser."""
    return project_users.b_for_a(project_id)


def users_of_project_via_groups(project_id):
    """Users reached through ProjectGroup -> Group -> members."""
    group_ids = Group.objects.filter(
        pk__in=ProjectGroup.objects.filter(project_id=project_id).values("group_id")
    )
    return User.objects.filter(groups__in=group_ids).distinct()


def projects_of_user(user_id):
    return project_users.a_for_b(user_id)


def projects_of_group(group_id):
    return project_groups.a_for_b(group_id)


def task_types_of_project(project_id):
    return project_task_types.b_for_a(project_id)


def projects_using_workflow(workflow_id):
    ids = ProjectTaskType.objects.filter(workflow_id=workflow_id).values("project_id")
    return Project.objects.filter(pk__in=ids)


def projects_using_workflow_named(workflow_name: str):
    ids = ProjectTaskType.objects.filter(workflow__name=workflow_name).values("project_id")
    return Project.objects.filter(pk__in=ids)


def project_users_with_role(role_name: str):
    return project_users.queryset().filter(project_role__role_name=role_name)


def project_groups_of_user(project_id, user_id):
    """The ProjectGroup rows of a project whose group has the user as a member."""
    return project_groups.find_by_a(project_id).filter(
        group__members__pk=user_id,
        group__deleted_at__isnull=True,
    )
