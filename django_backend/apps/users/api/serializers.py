from django.contrib.auth import get_user_model
from rest_framework import serializers

from apps.privileges.models import Group
from apps.users.models import DeletedUser

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    email = serializers.SerializerMethodField()
    first_name = serializers.SerializerMethodField()
    last_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "is_active",
            "is_staff",
            "created_at",
            "deleted_at",
        ]
        read_only_fields = fields

    def _details(self, obj):
        # The reverse one-to-one goes through the base manager: deleted details still show
        try:
            return obj.user_details
        except User.user_details.RelatedObjectDoesNotExist:
            return None

    def get_email(self, obj):
        details = self._details(obj)
        return details.email if details else None

    def get_first_name(self, obj):
        details = self._details(obj)
        return details.first_name if details else ""

    def get_last_name(self, obj):
        details = self._details(obj)
        return details.last_name if details else ""


class RegisterSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=50)
    password = serializers.CharField(write_only=True, min_length=6)
    email = serializers.EmailField(required=False)
    first_name = serializers.CharField(max_length=50, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=50, required=False, allow_blank=True)
    phone_number = serializers.CharField(max_length=20, required=False, allow_blank=True)


class UserGroupSerializer(serializers.ModelSerializer):
    class Meta:
        model = Group
        fields = ["id", "group_name", "role"]


class DeletedUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = DeletedUser
        fields = ["id", "username", "deleted_at"]
