from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import CategoryViewSet, TaskPriorityViewSet, TaskTypeViewSet, TaskViewSet

router = DefaultRouter()
router.register(r"tasks", TaskViewSet, basename="tasks")
router.register(r"categories", CategoryViewSet, basename="categories")
router.register(r"task-priorities", TaskPriorityViewSet, basename="task-priorities")
router.register(r"task-types", TaskTypeViewSet, basename="task-types")

urlpatterns = [
    path("", include(router.urls)),
]
