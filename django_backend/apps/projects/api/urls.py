from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import ProjectRoleViewSet, ProjectViewSet

router = DefaultRouter()
router.register(r"projects", ProjectViewSet, basename="projects")
router.register(r"project-roles", ProjectRoleViewSet, basename="project-roles")

urlpatterns = [
    path("", include(router.urls)),
]
