from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient, APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from apps.users.services import create_user
from apps.workflows import services


class WorkflowAPITest(APITestCase):
    """Test cases for Workflow API endpoints"""

    def setUp(self):
        self.client = APIClient()
        self.user = create_user("testuser", "testpass123")
        self.admin = create_user("admin", "adminpass123", is_staff=True)
        self.todo = services.create_status("To Do")
        self.in_progress = services.create_status("In Progress")
        self.done = services.create_status("Done")
        self.workflow = services.create_workflow("Dev Process")
        self.authenticate()

    def authenticate(self, user=None):
        """Helper method to authenticate a user"""
        refresh = RefreshToken.for_user(user or self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")

    def test_steps_in_order(self):
        """Test steps added out of order are listed by position"""
        url = reverse("workflows-steps", args=[self.workflow.pk])
        for status_obj, seq in ((self.done, 3), (self.todo, 1), (self.in_progress, 2)):
            response = self.client.post(url, {"status": status_obj.pk, "sequence_number": seq}, format="json")
            self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.get(url)

        self.assertEqual(
            [(s["sequence_number"], s["status"]["status_name"]) for s in response.data],
            [(1, "To Do"), (2, "In Progress"), (3, "Done")],
        )

    def test_duplicate_step(self):
        """Test a repeated step answers with a conflict"""
        url = reverse("workflows-steps", args=[self.workflow.pk])
        self.client.post(url, {"status": self.todo.pk, "sequence_number": 1}, format="json")

        response = self.client.post(url, {"status": self.todo.pk, "sequence_number": 1}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "duplicate_association")

        response = self.client.post(url, {"status": self.done.pk, "sequence_number": 1}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["code"], "duplicate_sequence_number")

    def test_invalid_sequence_number(self):
        """Test non-positive positions are rejected"""
        url = reverse("workflows-steps", args=[self.workflow.pk])

        response = self.client.post(url, {"status": self.todo.pk, "sequence_number": 0}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "validation_failure")

    def test_replace_and_remove_steps(self):
        """Test replacing the step list then removing one step"""
        url = reverse("workflows-steps", args=[self.workflow.pk])
        data = {"steps": [{"status": self.todo.pk, "sequence_number": 1}, {"status": self.done.pk, "sequence_number": 2}]}

        response = self.client.put(url, data, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s["status"] for s in response.data], [self.todo.pk, self.done.pk])

        response = self.client.delete(reverse("workflows-remove-step", args=[self.workflow.pk, self.todo.pk]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(len(self.client.get(url).data), 1)

    def test_deleted_workflow_steps_still_readable(self):
        """Test the steps of a soft-deleted workflow stay readable"""
        services.add_step(self.workflow.pk, self.todo.pk, 1)

        response = self.client.delete(reverse("workflows-detail", args=[self.workflow.pk]))
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)

        response = self.client.get(reverse("workflows-detail", args=[self.workflow.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.get(reverse("workflows-steps", args=[self.workflow.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_hard_delete_workflow_with_steps(self):
        """Test a workflow with steps cannot be purged"""
        services.add_step(self.workflow.pk, self.todo.pk, 1)
        self.authenticate(self.admin)

        response = self.client.delete(reverse("workflows-hard-delete", args=[self.workflow.pk]))

        self.assertEqual(response.status_code, status.HTTP_423_LOCKED)

    def test_delete_status_in_use(self):
        """Test deleting a status used by a workflow answers with a lock"""
        services.add_step(self.workflow.pk, self.todo.pk, 1)

        response = self.client.delete(reverse("statuses-detail", args=[self.todo.pk]))

        self.assertEqual(response.status_code, status.HTTP_423_LOCKED)

    def test_workflows_with_steps(self):
        """Test listing only workflows that have steps"""
        services.create_workflow("Empty")
        services.add_step(self.workflow.pk, self.todo.pk, 1)

        response = self.client.get(reverse("workflows-with-steps"))

        self.assertEqual([w["name"] for w in response.data], ["Dev Process"])
        self.assertEqual(response.data[0]["step_count"], 1)
