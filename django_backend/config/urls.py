from django.http import HttpResponse
from django.urls import path, include


def healthz(_): return HttpResponse("ok", content_type="text/plain")


urlpatterns = [
    path("healthz/", healthz),
    path(
        "api/",
        include([
            path("", include("apps.users.api.urls")),
            path("", include("apps.privileges.api.urls")),
            path("", include("apps.workflows.api.urls")),
            path("", include("apps.projects.api.urls")),
            path("", include("apps.tasks.api.urls")),
        ])
    ),
]
