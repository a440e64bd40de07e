from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.response import Response

from apps.common.api.viewsets import SoftDeleteModelViewSet
from apps.workflows import services
from apps.workflows.models import Status, Workflow
from .serializers import (
    OrderedStepSerializer,
    ReplaceStepsSerializer,
    StatusSerializer,
    StepInputSerializer,
    WorkflowSerializer,
    WorkflowStepSerializer,
)


class StatusViewSet(viewsets.ModelViewSet):
    queryset = Status.objects.all()
    serializer_class = StatusSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ["status_name", "description"]

    def perform_create(self, serializer):
        serializer.instance = services.create_status(**serializer.validated_data)

    def perform_update(self, serializer):
        serializer.instance = services.update_status(serializer.instance.pk, **serializer.validated_data)

    def perform_destroy(self, instance):
        services.delete_status(instance.pk, actor=self.request.user)


class WorkflowViewSet(SoftDeleteModelViewSet):
    queryset = Workflow.objects.all()
    serializer_class = WorkflowSerializer
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ["name", "description"]
    ordering_fields = ["name", "created_at"]

    def perform_create(self, serializer):
        serializer.instance = services.create_workflow(actor=self.request.user, **serializer.validated_data)

    def perform_update(self, serializer):
        serializer.instance = services.update_workflow(
            serializer.instance.pk, actor=self.request.user, **serializer.validated_data
        )

    def perform_destroy(self, instance):
        services.delete_workflow(instance.pk, actor=self.request.user)

    @action(detail=False, methods=["get"], url_path="with-steps")
    def with_steps(self, request):
        return self._list_response(services.workflows_with_steps())

    @action(detail=True, methods=["get"])
    def steps(self, request, pk=None):
        # Readable for soft-deleted workflows too
        ordered = services.steps_in_order(int(pk))
        return Response(OrderedStepSerializer(ordered, many=True).data)

    @steps.mapping.post
    def add_step(self, request, pk=None):
        ser = StepInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        step = services.add_step(
            int(pk),
            ser.validated_data["status"],
            ser.validated_data["sequence_number"],
            actor=request.user,
        )
        return Response(WorkflowStepSerializer(step).data, status=status.HTTP_201_CREATED)

    @steps.mapping.put
    def replace_steps(self, request, pk=None):
        ser = ReplaceStepsSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        created = services.replace_steps(
            int(pk),
            [(s["status"], s["sequence_number"]) for s in ser.validated_data["steps"]],
            actor=request.user,
        )
        return Response(WorkflowStepSerializer(created, many=True).data)

    @action(detail=True, methods=["delete"], url_path=r"steps/(?P<status_id>\d+)")
    def remove_step(self, request, pk=None, status_id=None):
        services.remove_step(int(pk), int(status_id), actor=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)
