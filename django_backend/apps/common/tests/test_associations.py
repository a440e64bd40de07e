from unittest.mock import patch

from django.db import IntegrityError, transaction
from django.test import TestCase

from apps.common.associations import AssociationRegistry
from apps.common.exceptions import DuplicateAssociation, NotFound
from apps.projects.models import Project, ProjectRole, ProjectUser
from apps.users.models import User


class AssociationRegistryTest(TestCase):
    """Test cases for the composite-key association registry"""

    def setUp(self):
        self.registry = AssociationRegistry(ProjectUser, "project", "user")
        self.project = Project.objects.create(project_name="Apollo")
        self.other_project = Project.objects.create(project_name="Gemini")
        self.alice = User.objects.create_user(username="alice", password="testpass123")
        self.bob = User.objects.create_user(username="bob", password="testpass123")
        self.role = ProjectRole.objects.create(role_name="Owner")

    def test_create_and_find_exact(self):
        """Test creating an association and looking it up by key"""
        row = self.registry.create(self.project.pk, self.alice.pk, project_role=self.role)

        self.assertEqual(row.key, ProjectUser.Key(self.project.pk, self.alice.pk))
        found = self.registry.find_exact(self.project.pk, self.alice.pk)
        self.assertEqual(found.project_role, self.role)
        self.assertTrue(self.registry.exists(self.project.pk, self.alice.pk))

    def test_lookup_by_key_tuple(self):
        """Test the immutable key doubles as the primary key lookup"""
        self.registry.create(self.project.pk, self.alice.pk)
        key = ProjectUser.Key(self.project.pk, self.alice.pk)

        self.assertEqual(ProjectUser.objects.get(pk=key).user, self.alice)

    def test_duplicate_is_rejected(self):
        """Test a second association for the same pair fails and changes nothing"""
        self.registry.create(self.project.pk, self.alice.pk)

        with self.assertRaises(DuplicateAssociation):
            self.registry.create(self.project.pk, self.alice.pk, project_role=self.role)

        self.assertEqual(ProjectUser.objects.count(), 1)
        self.assertIsNone(self.registry.get(self.project.pk, self.alice.pk).project_role)

    def test_storage_key_is_the_backstop(self):
        """Test the composite primary key rejects duplicates without the service check"""
        ProjectUser.objects.create(project=self.project, user=self.alice)
        with self.assertRaises(IntegrityError), transaction.atomic():
            ProjectUser.objects.create(project=self.project, user=self.alice)

    def test_integrity_error_is_translated(self):
        """Test a constraint race surfaces as DuplicateAssociation"""
        self.registry.create(self.project.pk, self.alice.pk)

        # the explicit check misses the row, as it would for a concurrent creator
        with patch.object(self.registry, "exists", side_effect=[False, True]):
            with self.assertRaises(DuplicateAssociation):
                self.registry.create(self.project.pk, self.alice.pk)
        self.assertEqual(ProjectUser.objects.count(), 1)

    def test_missing_endpoint_is_not_found(self):
        """Test both endpoints must resolve"""
        with self.assertRaises(NotFound) as ctx:
            self.registry.create(self.project.pk, 999999)
        self.assertEqual(ctx.exception.entity, "User")

        with self.assertRaises(NotFound) as ctx:
            self.registry.create(999999, self.alice.pk)
        self.assertEqual(ctx.exception.entity, "Project")

    def test_soft_deleted_endpoint_is_not_found(self):
        """Test a soft-deleted endpoint cannot gain new associations"""
        self.project.soft_delete()
        with self.assertRaises(NotFound):
            self.registry.create(self.project.pk, self.alice.pk)

    def test_find_and_count_by_either_side(self):
        """Test side lookups and counts"""
        self.registry.create(self.project.pk, self.alice.pk)
        self.registry.create(self.project.pk, self.bob.pk)
        self.registry.create(self.other_project.pk, self.alice.pk)

        self.assertEqual(self.registry.count_by_a(self.project.pk), 2)
        self.assertEqual(self.registry.count_by_b(self.alice.pk), 2)
        self.assertEqual(
            {row.user_id for row in self.registry.find_by_a(self.project.pk)},
            {self.alice.pk, self.bob.pk},
        )
        self.assertEqual(
            set(self.registry.a_for_b(self.alice.pk)),
            {self.project, self.other_project},
        )
        self.assertEqual(set(self.registry.b_for_a(self.project.pk)), {self.alice, self.bob})

    def test_update_payload(self):
        """Test payload-only update"""
        self.registry.create(self.project.pk, self.alice.pk)
        row = self.registry.update(self.project.pk, self.alice.pk, project_role=self.role)

        self.assertEqual(row.project_role, self.role)
        self.assertEqual(self.registry.get(self.project.pk, self.alice.pk).project_role, self.role)

    def test_delete(self):
        """Test delete by key and the NotFound when absent"""
        self.registry.create(self.project.pk, self.alice.pk)
        self.registry.delete(self.project.pk, self.alice.pk)

        self.assertIsNone(self.registry.find_exact(self.project.pk, self.alice.pk))
        with self.assertRaises(NotFound):
            self.registry.delete(self.project.pk, self.alice.pk)

    def test_bulk_delete_by_side(self):
        """Test bulk removal returns the number of rows removed"""
        self.registry.create(self.project.pk, self.alice.pk)
        self.registry.create(self.project.pk, self.bob.pk)
        self.registry.create(self.other_project.pk, self.bob.pk)

        self.assertEqual(self.registry.delete_by_a(self.project.pk), 2)
        self.assertEqual(self.registry.delete_by_b(self.bob.pk), 1)
        self.assertEqual(ProjectUser.objects.count(), 0)
