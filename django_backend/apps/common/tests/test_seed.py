from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from apps.projects import services as projects
from apps.projects.models import Project
from apps.tasks.models import Task
from apps.users.models import User
from apps.workflows import services as workflows
from apps.workflows.models import Workflow


class SeedCommandTest(TestCase):
    """Test cases for the seed management command"""

    def test_seed(self):
        """Test seeding creates a consistent sample dataset"""
        out = StringIO()
        call_command("seed", users=3, tasks=5, stdout=out)

        self.assertIn("Seed data created successfully", out.getvalue())
        self.assertEqual(User.objects.count(), 4)
        self.assertEqual(Task.objects.count(), 5)

        workflow = Workflow.objects.get(name="Default")
        self.assertEqual(
            [s.status.status_name for s in workflows.steps_in_order(workflow.pk)],
            ["To Do", "In Progress", "In Review", "Done"],
        )
        project = Project.objects.get(project_name="Sample Project")
        self.assertEqual(list(projects.projects_using_workflow(workflow.pk)), [project])

    def test_seed_twice(self):
        """Test running the command again reuses existing rows"""
        call_command("seed", users=2, tasks=0, stdout=StringIO())
        call_command("seed", users=2, tasks=0, stdout=StringIO())

        self.assertEqual(User.objects.count(), 3)
        self.assertEqual(Workflow.objects.count(), 1)
