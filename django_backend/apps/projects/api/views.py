from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.response import Response

from apps.common.api.viewsets import SoftDeleteModelViewSet
from apps.projects import services
from apps.projects.models import Project, ProjectRole
from .serializers import (
    ProjectGroupInputSerializer,
    ProjectGroupSerializer,
    ProjectMemberSerializer,
    ProjectRoleChangeSerializer,
    ProjectRoleSerializer,
    ProjectSerializer,
    ProjectTaskTypeInputSerializer,
    ProjectTaskTypeSerializer,
    ProjectUserInputSerializer,
    ProjectUserSerializer,
    WorkflowChangeSerializer,
)


class ProjectRoleViewSet(viewsets.ModelViewSet):
    queryset = ProjectRole.objects.prefetch_related("permissions")
    serializer_class = ProjectRoleSerializer
    permission_classes = [permissions.IsAuthenticated]

    def perform_create(self, serializer):
        serializer.instance = services.create_project_role(**serializer.validated_data)

    def perform_update(self, serializer):
        serializer.instance = services.update_project_role(serializer.instance.pk, **serializer.validated_data)


class ProjectViewSet(SoftDeleteModelViewSet):
    queryset = Project.objects.all()
    serializer_class = ProjectSerializer
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ["project_name", "project_description"]
    ordering_fields = ["project_name", "project_start_date", "project_end_date", "created_at"]

    def perform_create(self, serializer):
        serializer.instance = services.create_project(**serializer.validated_data)

    def perform_update(self, serializer):
        serializer.instance = services.update_project(serializer.instance.pk, **serializer.validated_data)

    @action(
        detail=True,
        methods=["post"],
        permission_classes=[permissions.IsAuthenticated, permissions.IsAdminUser],
    )
    def decommission(self, request, pk=None):
        project = services.decommission_project(int(pk), actor=request.user)
        return Response(self.get_serializer(project).data)

    # Users

    @action(detail=True, methods=["get"])
    def users(self, request, pk=None):
        project = self.get_object()
        rows = services.project_users.find_by_a(project.pk)
        return Response(ProjectUserSerializer(rows, many=True).data)

    @users.mapping.post
    def add_user(self, request, pk=None):
        ser = ProjectUserInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        row = services.add_project_user(
            int(pk), ser.validated_data["user"], ser.validated_data.get("project_role")
        )
        return Response(ProjectUserSerializer(row).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["patch", "delete"], url_path=r"users/(?P<user_id>\d+)")
    def user(self, request, pk=None, user_id=None):
        if request.method == "DELETE":
            services.remove_project_user(int(pk), int(user_id))
            return Response(status=status.HTTP_204_NO_CONTENT)
        ser = ProjectRoleChangeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        row = services.set_project_user_role(int(pk), int(user_id), ser.validated_data["project_role"])
        return Response(ProjectUserSerializer(row).data)

    @action(detail=True, methods=["get"], url_path="group-users")
    def group_users(self, request, pk=None):
        project = self.get_object()
        users = services.users_of_project_via_groups(project.pk)
        return Response(ProjectMemberSerializer(users, many=True).data)

    # Groups

    @action(detail=True, methods=["get"])
    def groups(self, request, pk=None):
        project = self.get_object()
        rows = services.project_groups.find_by_a(project.pk)
        return Response(ProjectGroupSerializer(rows, many=True).data)

    @groups.mapping.post
    def add_group(self, request, pk=None):
        ser = ProjectGroupInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        row = services.add_project_group(
            int(pk), ser.validated_data["group"], ser.validated_data.get("project_role")
        )
        return Response(ProjectGroupSerializer(row).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["patch", "delete"], url_path=r"groups/(?P<group_id>\d+)")
    def group(self, request, pk=None, group_id=None):
        if request.method == "DELETE":
            services.remove_project_group(int(pk), int(group_id))
            return Response(status=status.HTTP_204_NO_CONTENT)
        ser = ProjectRoleChangeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        row = services.set_project_group_role(int(pk), int(group_id), ser.validated_data["project_role"])
        return Response(ProjectGroupSerializer(row).data)

    # Task types

    @action(detail=True, methods=["get"], url_path="task-types")
    def task_types(self, request, pk=None):
        project = self.get_object()
        rows = services.project_task_types.find_by_a(project.pk)
        return Response(ProjectTaskTypeSerializer(rows, many=True).data)

    @task_types.mapping.post
    def add_task_type(self, request, pk=None):
        ser = ProjectTaskTypeInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        row = services.add_project_task_type(
            int(pk), ser.validated_data["task_type"], ser.validated_data.get("workflow")
        )
        return Response(ProjectTaskTypeSerializer(row).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["patch", "delete"], url_path=r"task-types/(?P<task_type_id>\d+)")
    def task_type(self, request, pk=None, task_type_id=None):
        if request.method == "DELETE":
            services.remove_project_task_type(int(pk), int(task_type_id))
            return Response(status=status.HTTP_204_NO_CONTENT)
        ser = WorkflowChangeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        row = services.set_project_task_type_workflow(int(pk), int(task_type_id), ser.validated_data["workflow"])
        return Response(ProjectTaskTypeSerializer(row).data)

    @action(detail=False, methods=["get"], url_path=r"using-workflow/(?P<workflow_id>\d+)")
    def using_workflow(self, request, workflow_id=None):
        return self._list_response(services.projects_using_workflow(int(workflow_id)))

    @action(detail=False, methods=["get"], url_path=r"for-user/(?P<user_id>\d+)")
    def for_user(self, request, user_id=None):
        return self._list_response(services.projects_of_user(int(user_id)))
