from rest_framework.permissions import BasePermission, SAFE_METHODS


class IsAssigneeOrAdmin(BasePermission):
    """Anyone authenticated reads; unassigned tasks are open, assigned ones belong to their assignee."""

    def has_object_permission(self, request, view, obj):
        u = request.user
        if not u or not u.is_authenticated:
            return False
        if u.is_staff or request.method in SAFE_METHODS:
            return True
        return obj.assignee_id is None or obj.assignee_id == u.id
