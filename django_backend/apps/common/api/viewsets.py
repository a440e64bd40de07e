from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.common import soft_delete


class SoftDeleteModelViewSet(viewsets.ModelViewSet):
    """
    ModelViewSet for entities with the deletable capability.

    DELETE marks the row deleted instead of removing it. Deleted rows are only
    reachable through the explicit ``deleted`` / ``including-deleted`` list
    routes; ``hard`` and ``restore`` are reserved to staff.
    """

    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"

    def get_model(self):
        return self.get_serializer_class().Meta.model

    def get_queryset(self):
        return self.get_model().objects.all()

    def perform_destroy(self, instance):
        soft_delete.soft_delete(type(instance), instance.pk, actor=self.request.user)

    def perform_hard_delete(self, pk):
        soft_delete.hard_delete(self.get_model(), pk, actor=self.request.user)

    def perform_restore(self, pk):
        return soft_delete.restore(self.get_model(), pk, actor=self.request.user)

    def _list_response(self, queryset):
        queryset = self.filter_queryset(queryset)
        return Response(self.get_serializer(queryset, many=True).data)

    @action(detail=False, methods=["get"])
    def deleted(self, request):
        return self._list_response(soft_delete.find_deleted(self.get_model()))

    @action(detail=False, methods=["get"], url_path="including-deleted")
    def including_deleted(self, request):
        return self._list_response(soft_delete.find_including_deleted(self.get_model()))

    @action(
        detail=True,
        methods=["delete"],
        url_path="hard",
        permission_classes=[permissions.IsAuthenticated, permissions.IsAdminUser],
    )
    def hard_delete(self, request, pk=None):
        self.perform_hard_delete(int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(
        detail=True,
        methods=["post"],
        permission_classes=[permissions.IsAuthenticated, permissions.IsAdminUser],
    )
    def restore(self, request, pk=None):
        instance = self.perform_restore(int(pk))
        return Response(self.get_serializer(instance).data)
