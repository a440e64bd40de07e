from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from apps.privileges import services
from apps.privileges.models import Group
from apps.users.services import create_user


class GroupAPITest(APITestCase):
    """Test cases for Group API endpoints"""

    def setUp(self):
        self.client = APIClient()
        self.user = create_user("testuser", "testpass123")
        self.alice = create_user("alice", "testpass123")
        self.bob = create_user("bob", "testpass123")
        refresh = RefreshToken.for_user(self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")

    def test_create_group(self):
        """Test creating a group with a role"""
        role = services.create_role("Reader")

        response = self.client.post(reverse("groups-list"), {"group_name": "QA", "role": role.pk}, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["role"], role.pk)
        self.assertEqual(response.data["member_count"], 0)

    def test_create_duplicate_group(self):
        """Test duplicate group names answer with a conflict"""
        services.create_group("QA")

        response = self.client.post(reverse("groups-list"), {"group_name": "QA"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "duplicate_name")

    def test_members(self):
        """Test adding, listing and removing members"""
        group = services.create_group("QA")

        response = self.client.post(
            reverse("groups-add-members", args=[group.pk]), {"user_ids": [self.alice.pk, self.bob.pk]}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["member_count"], 2)

        self.client.post(reverse("groups-remove-members", args=[group.pk]), {"user_ids": [self.alice.pk]}, format="json")

        response = self.client.get(reverse("groups-members", args=[group.pk]))
        self.assertEqual([m["username"] for m in response.data], ["bob"])

    def test_add_unknown_member(self):
        """Test an unknown user fails the whole request"""
        group = services.create_group("QA")

        response = self.client.post(
            reverse("groups-add-members", args=[group.pk]), {"user_ids": [self.alice.pk, 999999]}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["entity"], "User")
        self.assertEqual(services.members_of(group.pk).count(), 0)

    def test_soft_delete_group(self):
        """Test deleted groups only show in the deleted list"""
        group = services.create_group("QA")

        response = self.client.delete(reverse("groups-detail", args=[group.pk]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

        self.assertEqual(self.client.get(reverse("groups-list")).data, [])
        response = self.client.get(reverse("groups-deleted"))
        self.assertEqual([g["group_name"] for g in response.data], ["QA"])
        self.assertTrue(Group.all_objects.filter(pk=group.pk).exists())

    def test_unused_permissions(self):
        """Test listing permissions no role grants"""
        read = services.create_permission("read")
        services.create_permission("write")
        services.create_role("Reader", permission_ids=[read.pk])

        response = self.client.get(reverse("permissions-unused"))

        self.assertEqual([p["permission_name"] for p in response.data], ["write"])

    def test_create_role_with_permissions(self):
        """Test creating a role with permissions"""
        read = services.create_permission("read")

        response = self.client.post(
            reverse("roles-list"), {"role_name": "Reader", "permissions": [read.pk]}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(services.role_has_permission(response.data["id"], "read"))
