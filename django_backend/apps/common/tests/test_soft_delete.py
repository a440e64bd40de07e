from django.test import TestCase

from apps.common import soft_delete
from apps.common.exceptions import NotFound, ReferentialIntegrity
from apps.projects.models import Project
from apps.tasks.models import Task
from apps.workflows.models import Status, Workflow, WorkflowStep


class SoftDeleteLedgerTest(TestCase):
    """Test cases for the generic soft-delete operations"""

    def setUp(self):
        self.project1 = Project.objects.create(project_name="Project 1")
        self.project2 = Project.objects.create(project_name="Project 2")

    def test_soft_delete_hides_row_from_default_reads(self):
        """Test that a soft-deleted row leaves the default queryset but stays stored"""
        soft_delete.soft_delete(Project, self.project1.pk)

        self.assertNotIn(self.project1, soft_delete.find_all(Project))
        self.assertIn(self.project2, soft_delete.find_all(Project))

        stored = soft_delete.find_including_deleted(Project, pk=self.project1.pk).get()
        self.assertIsNotNone(stored.deleted_at)
        self.assertTrue(stored.is_deleted)

    def test_scenario_soft_then_hard_delete(self):
        """Test soft delete followed by hard delete removes the row from every view"""
        soft_delete.soft_delete(Project, self.project1.pk)

        self.assertNotIn(self.project1, soft_delete.find_all(Project))
        self.assertIn(self.project1, soft_delete.find_deleted(Project))

        soft_delete.hard_delete(Project, self.project1.pk)

        self.assertNotIn(self.project1, soft_delete.find_all(Project))
        self.assertNotIn(self.project1, soft_delete.find_deleted(Project))
        self.assertFalse(Project.all_objects.filter(pk=self.project1.pk).exists())

    def test_soft_delete_twice_is_not_found(self):
        """Test that an already deleted row counts as absent"""
        soft_delete.soft_delete(Project, self.project1.pk)

        with self.assertRaises(NotFound) as ctx:
            soft_delete.soft_delete(Project, self.project1.pk)
        self.assertEqual(ctx.exception.entity, "Project")

    def test_get_alive_and_including_deleted(self):
        """Test the explicit escape hatch resolves deleted rows"""
        soft_delete.soft_delete(Project, self.project1.pk)

        with self.assertRaises(NotFound):
            soft_delete.get_alive(Project, self.project1.pk)
        self.assertEqual(soft_delete.get_including_deleted(Project, self.project1.pk), self.project1)

    def test_restore(self):
        """Test restoring a soft-deleted row"""
        soft_delete.soft_delete(Project, self.project1.pk)
        restored = soft_delete.restore(Project, self.project1.pk)

        self.assertIsNone(restored.deleted_at)
        self.assertIn(self.project1, soft_delete.find_all(Project))

    def test_restore_live_row_is_not_found(self):
        """Test restoring a row that is not deleted"""
        with self.assertRaises(NotFound):
            soft_delete.restore(Project, self.project1.pk)

    def test_hard_delete_referenced_row_is_refused(self):
        """Test hard delete of a row still referenced raises ReferentialIntegrity"""
        Task.objects.create(task_title="Referencing task", project=self.project1)

        with self.assertRaises(ReferentialIntegrity):
            soft_delete.hard_delete(Project, self.project1.pk)
        self.assertTrue(Project.objects.filter(pk=self.project1.pk).exists())

    def test_hard_delete_is_blocked_by_soft_deleted_references(self):
        """Test that references from soft-deleted rows still count"""
        task = Task.objects.create(task_title="Deleted task", project=self.project1)
        task.soft_delete()

        with self.assertRaises(ReferentialIntegrity):
            soft_delete.hard_delete(Project, self.project1.pk)

    def test_hard_delete_unknown_row(self):
        """Test hard delete of a missing id"""
        with self.assertRaises(NotFound):
            soft_delete.hard_delete(Project, 999999)

    def test_soft_deleted_row_stays_joinable(self):
        """Test foreign key traversal reaches soft-deleted rows"""
        task = Task.objects.create(task_title="Task", project=self.project1)
        soft_delete.soft_delete(Project, self.project1.pk)

        task = Task.objects.get(pk=task.pk)
        self.assertEqual(task.project.project_name, "Project 1")

    def test_non_deletable_model_rejected(self):
        """Test that plain entities do not offer soft deletion"""
        status = Status.objects.create(status_name="To Do")
        with self.assertRaises(TypeError):
            soft_delete.soft_delete(Status, status.pk)

    def test_hard_delete_plain_entity(self):
        """Test hard delete also serves entities without the deletable capability"""
        status = Status.objects.create(status_name="Unused")
        soft_delete.hard_delete(Status, status.pk)
        self.assertFalse(Status.objects.filter(pk=status.pk).exists())

    def test_soft_deleted_workflow_keeps_steps(self):
        """Test soft deleting a workflow leaves its steps in place"""
        workflow = Workflow.objects.create(name="Flow")
        status = Status.objects.create(status_name="To Do")
        WorkflowStep.objects.create(workflow=workflow, status=status, sequence_number=1)

        soft_delete.soft_delete(Workflow, workflow.pk)

        self.assertEqual(WorkflowStep.objects.filter(workflow_id=workflow.pk).count(), 1)

    def test_queryset_soft_delete(self):
        """Test bulk soft delete only touches live rows"""
        soft_delete.soft_delete(Project, self.project1.pk)
        updated = Project.all_objects.soft_delete()

        self.assertEqual(updated, 1)
        self.assertEqual(Project.objects.count(), 0)
        self.assertEqual(Project.all_objects.deleted().count(), 2)
