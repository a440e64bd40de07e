from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import F
from django.utils.decorators import method_decorator
from django.utils import timezone
from rest_framework import generics, permissions, status
from rest_framework.decorators import action
from rest_framework.exceptions import AuthenticationFailed, MethodNotAllowed
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import InvalidToken
from rest_framework_simplejwt.views import TokenObtainPairView

from apps.common.api.viewsets import SoftDeleteModelViewSet
from apps.users import services
from apps.users.models import DeletedUser, UserAuth
from .permissions import IsSelfOrAdmin
from .serializers import DeletedUserSerializer, RegisterSerializer, UserGroupSerializer, UserSerializer

from ..producer import publish_user_login, publish_user_login_failed

User = get_user_model()


def get_client_ip(request):
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0]
    return request.META.get('REMOTE_ADDR')


class RegisterAPIView(generics.CreateAPIView):
    permission_classes = [permissions.AllowAny]
    serializer_class = RegisterSerializer

    def create(self, request, *args, **kwargs):
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        user = services.create_user(data.pop("username"), data.pop("password"), email=data.pop("email", None), **data)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


@method_decorator(transaction.non_atomic_requests, name="dispatch")
class LoginView(TokenObtainPairView):
    """JWT login recording success and failure on the user's auth record."""

    def post(self, request, *args, **kwargs):
        username = request.data.get('username', 'unknown')
        ip_address = get_client_ip(request)
        try:
            response = super().post(request, *args, **kwargs)
        except (AuthenticationFailed, InvalidToken):
            UserAuth.objects.filter(user__username=username).update(
                failed_login_attempts=F('failed_login_attempts') + 1
            )
            publish_user_login_failed(username, ip_address, 'Invalid credentials')
            raise

        user = User.objects.get(username=username)
        UserAuth.objects.filter(user=user).update(last_login_at=timezone.now(), failed_login_attempts=0)
        publish_user_login(user.pk, user.username, ip_address, request.META.get('HTTP_USER_AGENT', ''))
        return response


class UserViewSet(SoftDeleteModelViewSet):
    queryset = User.objects.all()
    serializer_class = UserSerializer
    http_method_names = ["get", "post", "delete", "head", "options"]

    def get_queryset(self):
        return User.objects.select_related("user_details")

    def get_permissions(self):
        if self.action == "destroy":
            return [permissions.IsAuthenticated(), IsSelfOrAdmin()]
        return super().get_permissions()

    def create(self, request, *args, **kwargs):
        raise MethodNotAllowed("POST", "Use the register endpoint to create users.")

    def perform_destroy(self, instance):
        services.delete_user(instance.pk, actor=self.request.user)

    def perform_restore(self, pk):
        return services.restore_user(pk, actor=self.request.user)

    def perform_hard_delete(self, pk):
        services.purge_user(pk, actor=self.request.user)

    @action(detail=False, methods=["get"])
    def me(self, request):
        return Response(UserSerializer(request.user).data)

    @action(detail=True, methods=["get"])
    def groups(self, request, pk=None):
        user = self.get_object()
        return Response(UserGroupSerializer(user.groups.all(), many=True).data)

    @action(
        detail=False,
        methods=["get"],
        url_path="purged",
        permission_classes=[permissions.IsAuthenticated, permissions.IsAdminUser],
    )
    def purged(self, request):
        return Response(DeletedUserSerializer(DeletedUser.objects.all(), many=True).data)
