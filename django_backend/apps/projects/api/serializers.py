from rest_framework import serializers

from apps.privileges.models import Permission
from apps.projects.models import Project, ProjectRole


class ProjectSerializer(serializers.ModelSerializer):
    class Meta:
        model = Project
        fields = [
            "id",
            "project_name",
            "project_description",
            "project_start_date",
            "project_end_date",
            "created_at",
            "updated_at",
            "deleted_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at", "deleted_at"]
        extra_kwargs = {"project_name": {"validators": []}}

    def validate(self, attrs):
        start = attrs.get("project_start_date", getattr(self.instance, "project_start_date", None))
        end = attrs.get("project_end_date", getattr(self.instance, "project_end_date", None))
        if start and end and end < start:
            raise serializers.ValidationError({"project_end_date": "End date must not precede start date."})
        return attrs


class ProjectRoleSerializer(serializers.ModelSerializer):
    permissions = serializers.PrimaryKeyRelatedField(
        many=True, queryset=Permission.objects.all(), required=False
    )

    class Meta:
        model = ProjectRole
        fields = ["id", "role_name", "description", "permissions", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]
        extra_kwargs = {"role_name": {"validators": []}}


class ProjectUserSerializer(serializers.Serializer):
    project = serializers.IntegerField(source="project_id", read_only=True)
    user = serializers.IntegerField(source="user_id", read_only=True)
    username = serializers.CharField(source="user.username", read_only=True)
    project_role = serializers.IntegerField(source="project_role_id", read_only=True, allow_null=True)
    created_at = serializers.DateTimeField(read_only=True)


class ProjectGroupSerializer(serializers.Serializer):
    project = serializers.IntegerField(source="project_id", read_only=True)
    group = serializers.IntegerField(source="group_id", read_only=True)
    group_name = serializers.CharField(source="group.group_name", read_only=True)
    project_role = serializers.IntegerField(source="project_role_id", read_only=True, allow_null=True)
    created_at = serializers.DateTimeField(read_only=True)


class ProjectTaskTypeSerializer(serializers.Serializer):
    project = serializers.IntegerField(source="project_id", read_only=True)
    task_type = serializers.IntegerField(source="task_type_id", read_only=True)
    task_type_name = serializers.CharField(source="task_type.task_type_name", read_only=True)
    workflow = serializers.IntegerField(source="workflow_id", read_only=True, allow_null=True)
    created_at = serializers.DateTimeField(read_only=True)


class ProjectUserInputSerializer(serializers.Serializer):
    user = serializers.IntegerField(min_value=1)
    project_role = serializers.IntegerField(min_value=1, required=False, allow_null=True)


class ProjectGroupInputSerializer(serializers.Serializer):
    group = serializers.IntegerField(min_value=1)
    project_role = serializers.IntegerField(min_value=1, required=False, allow_null=True)


class ProjectTaskTypeInputSerializer(serializers.Serializer):
    task_type = serializers.IntegerField(min_value=1)
    workflow = serializers.IntegerField(min_value=1, required=False, allow_null=True)


class ProjectRoleChangeSerializer(serializers.Serializer):
    project_role = serializers.IntegerField(min_value=1, allow_null=True)


class WorkflowChangeSerializer(serializers.Serializer):
    workflow = serializers.IntegerField(min_value=1, allow_null=True)


class ProjectMemberSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    username = serializers.CharField()
