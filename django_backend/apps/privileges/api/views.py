from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.response import Response

from apps.common.api.viewsets import SoftDeleteModelViewSet
from apps.privileges import services
from apps.privileges.models import Group, Permission, Role
from .serializers import (
    GroupMembersSerializer,
    GroupSerializer,
    MemberSerializer,
    PermissionSerializer,
    RoleSerializer,
)


class PermissionViewSet(viewsets.ModelViewSet):
    queryset = Permission.objects.all()
    serializer_class = PermissionSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ["permission_name", "description"]

    def perform_create(self, serializer):
        serializer.instance = services.create_permission(**serializer.validated_data)

    def perform_update(self, serializer):
        serializer.instance = services.update_permission(serializer.instance.pk, **serializer.validated_data)

    @action(detail=False, methods=["get"])
    def unused(self, request):
        return Response(self.get_serializer(services.unused_permissions(), many=True).data)


class RoleViewSet(viewsets.ModelViewSet):
    queryset = Role.objects.prefetch_related("permissions")
    serializer_class = RoleSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ["role_name", "description"]

    def perform_create(self, serializer):
        data = dict(serializer.validated_data)
        permission_ids = [p.pk for p in data.pop("permissions", [])]
        serializer.instance = services.create_role(permission_ids=permission_ids, **data)

    def perform_update(self, serializer):
        data = dict(serializer.validated_data)
        if "permissions" in data:
            data["permission_ids"] = [p.pk for p in data.pop("permissions")]
        serializer.instance = services.update_role(serializer.instance.pk, **data)

    @action(detail=False, methods=["get"])
    def unassigned(self, request):
        return Response(self.get_serializer(services.unassigned_roles(), many=True).data)


class GroupViewSet(SoftDeleteModelViewSet):
    serializer_class = GroupSerializer
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ["group_name", "description"]
    ordering_fields = ["group_name", "created_at"]

    def get_queryset(self):
        return Group.objects.select_related("role")

    def perform_create(self, serializer):
        data = dict(serializer.validated_data)
        role = data.pop("role", None)
        serializer.instance = services.create_group(
            role_id=role.pk if role else None, actor=self.request.user, **data
        )

    def perform_update(self, serializer):
        data = dict(serializer.validated_data)
        kwargs = {}
        if "role" in data:
            role = data.pop("role")
            kwargs["role_id"] = role.pk if role else None
        serializer.instance = services.update_group(
            serializer.instance.pk, actor=self.request.user, **data, **kwargs
        )

    def perform_destroy(self, instance):
        services.delete_group(instance.pk, actor=self.request.user)

    @action(detail=True, methods=["get"])
    def members(self, request, pk=None):
        group = self.get_object()
        return Response(MemberSerializer(group.members.all(), many=True).data)

    @action(detail=True, methods=["post"], url_path="members/add")
    def add_members(self, request, pk=None):
        ser = GroupMembersSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        group = services.add_members(int(pk), ser.validated_data["user_ids"], actor=request.user)
        return Response(self.get_serializer(group).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="members/remove")
    def remove_members(self, request, pk=None):
        ser = GroupMembersSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        group = services.remove_members(int(pk), ser.validated_data["user_ids"], actor=request.user)
        return Response(self.get_serializer(group).data, status=status.HTTP_200_OK)
