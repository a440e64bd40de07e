from django.http import HttpResponse
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.response import Response

from apps.common.api.viewsets import SoftDeleteModelViewSet
from apps.common.exceptions import NotFound
from apps.tasks import services
from apps.tasks.models import Category, Task, TaskAttachment, TaskPriority, TaskType
from .filters import TaskFilter
from .permissions import IsAssigneeOrAdmin
from .serializers import (
    AttachmentUploadSerializer,
    CategorySerializer,
    DependencyInputSerializer,
    StatusChangeSerializer,
    TaskAttachmentSerializer,
    TaskCommentSerializer,
    TaskDependencySerializer,
    TaskPrioritySerializer,
    TaskSerializer,
    TaskSummarySerializer,
    TaskTypeSerializer,
)


class CategoryViewSet(viewsets.ModelViewSet):
    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    permission_classes = [permissions.IsAuthenticated]


class TaskPriorityViewSet(viewsets.ModelViewSet):
    queryset = TaskPriority.objects.all()
    serializer_class = TaskPrioritySerializer
    permission_classes = [permissions.IsAuthenticated]


class TaskTypeViewSet(viewsets.ModelViewSet):
    queryset = TaskType.objects.all()
    serializer_class = TaskTypeSerializer
    permission_classes = [permissions.IsAuthenticated]


class TaskViewSet(SoftDeleteModelViewSet):
    serializer_class = TaskSerializer
    permission_classes = [permissions.IsAuthenticated, IsAssigneeOrAdmin]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_class = TaskFilter
    search_fields = ["task_title", "task_description"]
    ordering_fields = ["task_due_date", "created_at", "updated_at", "completed_at"]
    ordering = ["-created_at"]

    def get_queryset(self):
        return Task.objects.select_related("assignee", "status", "project", "priority", "category", "task_type")

    def perform_create(self, serializer):
        serializer.instance = services.create_task(actor=self.request.user, **serializer.validated_data)

    def perform_destroy(self, instance):
        services.delete_task(instance.pk, actor=self.request.user)

    @action(detail=True, methods=["post"], url_path="status")
    def change_status(self, request, pk=None):
        task = self.get_object()
        ser = StatusChangeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        task = services.set_status(task.pk, ser.validated_data["status"], actor=request.user)
        return Response(self.get_serializer(task).data)

    @action(detail=True, methods=["post"])
    def complete(self, request, pk=None):
        task = services.complete_task(self.get_object().pk, actor=request.user)
        return Response(self.get_serializer(task).data)

    @action(detail=True, methods=["post"])
    def reopen(self, request, pk=None):
        task = services.reopen_task(self.get_object().pk, actor=request.user)
        return Response(self.get_serializer(task).data)

    @action(detail=True, methods=["get"])
    def dependencies(self, request, pk=None):
        qs = services.direct_dependencies(int(pk))
        return Response(TaskSummarySerializer(qs, many=True).data)

    @dependencies.mapping.post
    def add_dependency(self, request, pk=None):
        task = self.get_object()
        ser = DependencyInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        edge = services.add_dependency(task.pk, ser.validated_data["depends_on_task"], actor=request.user)
        return Response(TaskDependencySerializer(edge).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["delete"], url_path=r"dependencies/(?P<depends_on_task_id>\d+)")
    def remove_dependency(self, request, pk=None, depends_on_task_id=None):
        task = self.get_object()
        services.remove_dependency(task.pk, int(depends_on_task_id), actor=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"])
    def dependents(self, request, pk=None):
        qs = services.direct_dependents(int(pk))
        return Response(TaskSummarySerializer(qs, many=True).data)

    @action(detail=True, methods=["get"])
    def comments(self, request, pk=None):
        task = self.get_object()
        qs = services.comments_for_task(task.pk)
        return Response(TaskCommentSerializer(qs, many=True).data)

    @comments.mapping.post
    def add_comment(self, request, pk=None):
        task = self.get_object()
        ser = TaskCommentSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        comment = services.add_comment(task.pk, request.user.pk, ser.validated_data["comment"], actor=request.user)
        return Response(TaskCommentSerializer(comment).data, status=status.HTTP_201_CREATED)

    def _task_attachment(self, task, attachment_id):
        attachment = services.get_attachment(int(attachment_id))
        if attachment.task_id != task.pk:
            raise NotFound("Task attachment", attachment_id)
        return attachment

    @action(detail=True, methods=["get"])
    def attachments(self, request, pk=None):
        task = self.get_object()
        qs = services.attachments_for_task(task.pk)
        return Response(TaskAttachmentSerializer(qs, many=True).data)

    @attachments.mapping.post
    def add_attachment(self, request, pk=None):
        task = self.get_object()
        ser = AttachmentUploadSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        attachment = services.add_attachment(task.pk, actor=request.user, **ser.validated_data)
        return Response(TaskAttachmentSerializer(attachment).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"], url_path=r"attachments/(?P<attachment_id>\d+)")
    def attachment(self, request, pk=None, attachment_id=None):
        attachment = self._task_attachment(self.get_object(), attachment_id)
        response = HttpResponse(
            bytes(attachment.file_content), content_type=attachment.file_type or "application/octet-stream"
        )
        response["Content-Disposition"] = f'attachment; filename="{attachment.file_name}"'
        return response

    @attachment.mapping.patch
    def update_attachment(self, request, pk=None, attachment_id=None):
        attachment = self._task_attachment(self.get_object(), attachment_id)
        ser = AttachmentUploadSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        attachment = services.update_attachment(attachment.pk, **ser.validated_data)
        return Response(TaskAttachmentSerializer(attachment).data)

    @attachment.mapping.delete
    def delete_attachment(self, request, pk=None, attachment_id=None):
        attachment = self._task_attachment(self.get_object(), attachment_id)
        services.delete_attachment(attachment.pk, actor=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"], url_path="attachments/search")
    def search_attachments(self, request):
        """``?file_name=`` or ``?file_type=``, both case-insensitive exact matches."""
        file_name = request.query_params.get("file_name")
        file_type = request.query_params.get("file_type")
        if file_name:
            qs = services.find_attachments_by_file_name(file_name)
        elif file_type:
            qs = services.find_attachments_by_file_type(file_type)
        else:
            qs = TaskAttachment.objects.none()
        return Response(TaskAttachmentSerializer(qs, many=True).data)
