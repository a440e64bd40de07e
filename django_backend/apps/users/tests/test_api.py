from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from apps.privileges import services as privileges
from apps.tasks import services as tasks
from apps.users import services
from apps.users.models import User, UserAuth


class UserAPITest(APITestCase):
    """Test cases for User API endpoints"""

    def setUp(self):
        self.client = APIClient()
        self.user = services.create_user("testuser", "testpass123", email="test@example.com")
        self.other = services.create_user("otheruser", "testpass123")
        self.admin = services.create_user("admin", "adminpass123", is_staff=True)
        self.authenticate()

    def authenticate(self, user=None):
        """Helper method to authenticate a user"""
        refresh = RefreshToken.for_user(user or self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")

    def test_register(self):
        """Test registering a new user"""
        self.client.credentials()
        data = {"username": "newuser", "password": "newpass123", "email": "new@example.com"}

        response = self.client.post(reverse("register"), data, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["email"], "new@example.com")
        self.assertTrue(User.objects.filter(username="newuser").exists())

    def test_register_duplicate_username(self):
        """Test registering a taken username"""
        self.client.credentials()
        data = {"username": "TestUser", "password": "newpass123"}

        response = self.client.post(reverse("register"), data, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "duplicate_name")

    def test_login(self):
        """Test obtaining a token pair"""
        self.client.credentials()
        data = {"username": "testuser", "password": "testpass123"}

        response = self.client.post(reverse("login"), data, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn("access", response.data)
        self.assertIsNotNone(UserAuth.objects.get(user=self.user).last_login_at)

    def test_login_failure_is_counted(self):
        """Test a wrong password increments the failed attempts"""
        self.client.credentials()
        data = {"username": "testuser", "password": "wrong"}

        response = self.client.post(reverse("login"), data, format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(UserAuth.objects.get(user=self.user).failed_login_attempts, 1)

    def test_deleted_user_cannot_login(self):
        """Test soft-deleted users are refused"""
        services.delete_user(self.other.pk)
        self.client.credentials()
        data = {"username": "otheruser", "password": "testpass123"}

        response = self.client.post(reverse("login"), data, format="json")

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me(self):
        """Test reading the current user"""
        response = self.client.get(reverse("users-me"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["username"], "testuser")

    def test_requires_authentication(self):
        """Test user list requires authentication"""
        self.client.credentials()
        response = self.client.get(reverse("users-list"))

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_through_viewset_not_allowed(self):
        """Test users are only created by registering"""
        response = self.client.post(reverse("users-list"), {"username": "x"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)

    def test_soft_delete_visibility(self):
        """Test deleted users leave the default list and show in the deleted list"""
        self.authenticate(self.admin)
        response = self.client.delete(reverse("users-detail", args=[self.other.pk]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

        listed = {u["username"] for u in self.client.get(reverse("users-list")).data}
        deleted = {u["username"] for u in self.client.get(reverse("users-deleted")).data}
        everyone = {u["username"] for u in self.client.get(reverse("users-including-deleted")).data}

        self.assertNotIn("otheruser", listed)
        self.assertEqual(deleted, {"otheruser"})
        self.assertIn("otheruser", everyone)

        response = self.client.post(reverse("users-restore", args=[self.other.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data["deleted_at"])

    def test_delete_other_user_forbidden(self):
        """Test non-staff users can only delete themselves"""
        response = self.client.delete(reverse("users-detail", args=[self.other.pk]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_hard_delete_requires_admin(self):
        """Test purging is reserved to staff"""
        response = self.client.delete(reverse("users-hard-delete", args=[self.other.pk]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_hard_delete_blocked_by_references(self):
        """Test purging a referenced user answers with a lock"""
        task = tasks.create_task("Write docs")
        tasks.add_comment(task.pk, self.other.pk, "Hello")
        self.authenticate(self.admin)

        response = self.client.delete(reverse("users-hard-delete", args=[self.other.pk]))

        self.assertEqual(response.status_code, status.HTTP_423_LOCKED)
        self.assertEqual(response.data["code"], "referential_integrity")
        self.assertTrue(User.objects.filter(pk=self.other.pk).exists())

    def test_hard_delete(self):
        """Test purging an unreferenced user"""
        self.authenticate(self.admin)

        response = self.client.delete(reverse("users-hard-delete", args=[self.other.pk]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.all_objects.filter(pk=self.other.pk).exists())

    def test_user_groups(self):
        """Test listing a user's groups"""
        group = privileges.create_group("QA")
        privileges.add_members(group.pk, [self.user.pk])

        response = self.client.get(reverse("users-groups", args=[self.user.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([g["group_name"] for g in response.data], ["QA"])

    def test_purged_users_archive(self):
        """Test purged users are listed to staff only"""
        self.authenticate(self.admin)
        self.client.delete(reverse("users-hard-delete", args=[self.other.pk]))

        response = self.client.get(reverse("users-purged"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([(u["id"], u["username"]) for u in response.data], [(self.other.pk, "otheruser")])

        self.authenticate()
        response = self.client.get(reverse("users-purged"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
