from rest_framework import serializers

from apps.workflows.models import Status, Workflow


class StatusSerializer(serializers.ModelSerializer):
    class Meta:
        model = Status
        fields = ["id", "status_name", "description", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]
        extra_kwargs = {"status_name": {"validators": []}}


class WorkflowSerializer(serializers.ModelSerializer):
    step_count = serializers.SerializerMethodField()

    class Meta:
        model = Workflow
        fields = ["id", "name", "description", "step_count", "created_at", "updated_at", "deleted_at"]
        read_only_fields = ["id", "created_at", "updated_at", "deleted_at"]
        extra_kwargs = {"name": {"validators": []}}

    def get_step_count(self, obj):
        return obj.steps.count()


class WorkflowStepSerializer(serializers.Serializer):
    """Composite-key row: (workflow, status) plus its position."""

    workflow = serializers.IntegerField(source="workflow_id", read_only=True)
    status = serializers.IntegerField(source="status_id", read_only=True)
    status_name = serializers.CharField(source="status.status_name", read_only=True)
    sequence_number = serializers.IntegerField(read_only=True)


class OrderedStepSerializer(serializers.Serializer):
    sequence_number = serializers.IntegerField()
    status = StatusSerializer()


class StepInputSerializer(serializers.Serializer):
    status = serializers.IntegerField(min_value=1)
    # range checked by the service, to report the domain error
    sequence_number = serializers.IntegerField()


class ReplaceStepsSerializer(serializers.Serializer):
    steps = StepInputSerializer(many=True)
