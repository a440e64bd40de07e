from django.contrib.auth import get_user_model
from rest_framework import serializers

from apps.projects.models import Project
from apps.tasks.models import Category, Task, TaskAttachment, TaskComment, TaskPriority, TaskType
from apps.workflows.models import Status

User = get_user_model()


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "category_name", "description"]


class TaskPrioritySerializer(serializers.ModelSerializer):
    class Meta:
        model = TaskPriority
        fields = ["id", "priority_name"]


class TaskTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = TaskType
        fields = ["id", "task_type_name", "description"]


class TaskSerializer(serializers.ModelSerializer):
    assignee = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(), required=False, allow_null=True
    )
    project = serializers.PrimaryKeyRelatedField(
        queryset=Project.objects.all(), required=False, allow_null=True
    )
    # Initial status only; later moves go through the status action
    status = serializers.PrimaryKeyRelatedField(
        queryset=Status.objects.all(), required=False, allow_null=True
    )
    dependency_count = serializers.SerializerMethodField()

    class Meta:
        model = Task
        fields = [
            "id",
            "task_title",
            "task_description",
            "task_due_date",
            "completed_at",
            "assignee",
            "category",
            "priority",
            "project",
            "status",
            "task_type",
            "dependency_count",
            "created_at",
            "updated_at",
            "deleted_at",
        ]
        read_only_fields = [
            "id",
            "completed_at",
            "created_at",
            "updated_at",
            "deleted_at",
        ]

    def get_dependency_count(self, obj):
        return obj.depends_on().count()

    def validate_task_title(self, value):
        if not value.strip():
            raise serializers.ValidationError("Title must not be blank.")
        return value

    def update(self, instance, validated_data):
        if "status" in validated_data and validated_data["status"] != instance.status:
            raise serializers.ValidationError({"status": "Use the status action to change a task's status."})
        return super().update(instance, validated_data)


class StatusChangeSerializer(serializers.Serializer):
    status = serializers.IntegerField(min_value=1)


class DependencyInputSerializer(serializers.Serializer):
    depends_on_task = serializers.IntegerField(min_value=1)


class TaskDependencySerializer(serializers.Serializer):
    task = serializers.IntegerField(source="task_id", read_only=True)
    depends_on_task = serializers.IntegerField(source="depends_on_task_id", read_only=True)
    created_at = serializers.DateTimeField(read_only=True)


class TaskSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Task
        fields = ["id", "task_title", "status", "completed_at", "task_due_date"]


class TaskCommentSerializer(serializers.ModelSerializer):
    user = serializers.PrimaryKeyRelatedField(read_only=True)
    username = serializers.CharField(source="user.username", read_only=True)

    class Meta:
        model = TaskComment
        fields = ["id", "task", "user", "username", "comment", "created_at", "updated_at"]
        read_only_fields = ["id", "task", "user", "username", "created_at", "updated_at"]


class TaskAttachmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = TaskAttachment
        fields = ["id", "task", "file_name", "file_type", "file_size", "created_at", "updated_at"]
        read_only_fields = fields


class AttachmentUploadSerializer(serializers.Serializer):
    """Multipart upload; name and type default to the uploaded file's own."""

    file = serializers.FileField(required=False)
    file_name = serializers.CharField(max_length=255, required=False)
    file_type = serializers.CharField(max_length=100, required=False, allow_blank=True)

    def validate(self, attrs):
        upload = attrs.pop("file", None)
        if upload is not None:
            attrs["file_content"] = upload.read()
            attrs.setdefault("file_name", upload.name)
            attrs.setdefault("file_type", getattr(upload, "content_type", None) or "")
        elif not self.partial:
            raise serializers.ValidationError({"file": "No file was submitted."})
        return attrs
