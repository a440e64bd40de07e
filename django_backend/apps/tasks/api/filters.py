import django_filters

from apps.tasks.models import Task


class TaskFilter(django_filters.FilterSet):
    completed = django_filters.BooleanFilter(method="filter_completed")
    overdue = django_filters.BooleanFilter(method="filter_overdue")
    due_after = django_filters.DateFilter(field_name="task_due_date", lookup_expr="gte")
    due_before = django_filters.DateFilter(field_name="task_due_date", lookup_expr="lte")

    class Meta:
        model = Task
        fields = ["project", "status", "assignee", "priority", "category", "task_type"]

    def filter_completed(self, queryset, name, value):
        return queryset.completed() if value else queryset.incomplete()

    def filter_overdue(self, queryset, name, value):
        if value:
            return queryset.overdue()
        return queryset.exclude(pk__in=queryset.overdue().values("pk"))
