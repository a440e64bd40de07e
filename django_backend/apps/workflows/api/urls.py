from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import StatusViewSet, WorkflowViewSet

router = DefaultRouter()
router.register(r"statuses", StatusViewSet, basename="statuses")
router.register(r"workflows", WorkflowViewSet, basename="workflows")

urlpatterns = [
    path("", include(router.urls)),
]
