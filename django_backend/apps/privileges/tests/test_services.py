from django.test import TestCase

from apps.common.events import EventPublisherFactory
from apps.common.exceptions import DuplicateName, NotFound, ValidationFailure
from apps.common.kafka.config import USER_ACTIVITIES_TOPIC
from apps.privileges import services
from apps.privileges.models import Group, Permission, Role
from apps.users.models import User


class GroupMembershipTest(TestCase):
    """Test cases for adding and removing group members"""

    def setUp(self):
        self.qa = services.create_group("QA")
        self.user1 = User.objects.create_user(username="user1", password="testpass123")
        self.user2 = User.objects.create_user(username="user2", password="testpass123")
        self.user3 = User.objects.create_user(username="user3", password="testpass123")

    def assertSymmetric(self, group, users):
        for user in users:
            self.assertEqual(
                group.members.filter(pk=user.pk).exists(),
                user.groups.filter(pk=group.pk).exists(),
            )

    def test_scenario_add_then_remove(self):
        """Test add two members, remove one: both views agree"""
        services.add_members(self.qa.pk, [self.user1.pk, self.user2.pk])
        services.remove_members(self.qa.pk, [self.user1.pk])

        self.assertEqual(set(self.qa.members.all()), {self.user2})
        self.assertNotIn(self.qa, self.user1.groups.all())
        self.assertIn(self.qa, self.user2.groups.all())
        self.assertSymmetric(self.qa, [self.user1, self.user2])

    def test_add_is_symmetric(self):
        """Test the group and user views agree after adding"""
        services.add_members(self.qa.pk, [self.user1.pk, self.user2.pk])

        self.assertEqual(set(self.qa.members.all()), {self.user1, self.user2})
        self.assertEqual(list(self.user1.groups.all()), [self.qa])
        self.assertSymmetric(self.qa, [self.user1, self.user2, self.user3])

    def test_add_is_all_or_nothing(self):
        """Test one unknown user aborts the whole addition"""
        with self.assertRaises(NotFound) as ctx:
            services.add_members(self.qa.pk, [self.user1.pk, 999999])

        self.assertEqual(ctx.exception.entity, "User")
        self.assertEqual(self.qa.members.count(), 0)

    def test_remove_is_all_or_nothing(self):
        """Test one unknown user aborts the whole removal"""
        services.add_members(self.qa.pk, [self.user1.pk, self.user2.pk])

        with self.assertRaises(NotFound):
            services.remove_members(self.qa.pk, [self.user1.pk, 999999])

        self.assertEqual(self.qa.members.count(), 2)

    def test_unknown_group(self):
        """Test the group must exist"""
        with self.assertRaises(NotFound) as ctx:
            services.add_members(999999, [self.user1.pk])
        self.assertEqual(ctx.exception.entity, "Group")

    def test_soft_deleted_group_is_not_found(self):
        """Test a soft-deleted group accepts no members"""
        services.delete_group(self.qa.pk)
        with self.assertRaises(NotFound):
            services.add_members(self.qa.pk, [self.user1.pk])

    def test_soft_deleted_user_is_not_found(self):
        """Test soft-deleted users cannot be added"""
        self.user1.soft_delete()
        with self.assertRaises(NotFound):
            services.add_members(self.qa.pk, [self.user1.pk])

    def test_add_is_idempotent_and_collapses_duplicates(self):
        """Test repeated ids and existing members are harmless"""
        services.add_members(self.qa.pk, [self.user1.pk])
        services.add_members(self.qa.pk, [self.user1.pk, self.user1.pk, self.user2.pk])

        self.assertEqual(self.qa.members.count(), 2)

    def test_removing_non_member_is_harmless(self):
        """Test removing an existing user that is not a member"""
        services.remove_members(self.qa.pk, [self.user3.pk])
        self.assertEqual(self.qa.members.count(), 0)

    def test_membership_events_published_on_commit(self):
        """Test membership changes publish events once committed"""
        EventPublisherFactory.reset_publisher()
        publisher = EventPublisherFactory.get_publisher()

        with self.captureOnCommitCallbacks(execute=True):
            services.add_members(self.qa.pk, [self.user2.pk, self.user1.pk])

        events = publisher.get_events(USER_ACTIVITIES_TOPIC)
        self.assertEqual(events[-1]["event_type"], "group_members_added")
        self.assertEqual(events[-1]["data"]["member_ids"], sorted([self.user1.pk, self.user2.pk]))
        self.assertEqual(events[-1]["key"], str(self.qa.pk))

    def test_failed_addition_publishes_nothing(self):
        """Test a rejected call leaves no event behind"""
        EventPublisherFactory.reset_publisher()
        publisher = EventPublisherFactory.get_publisher()

        with self.captureOnCommitCallbacks(execute=True):
            with self.assertRaises(NotFound):
                services.add_members(self.qa.pk, [999999])

        self.assertEqual(publisher.get_events(USER_ACTIVITIES_TOPIC), [])

    def test_users_in_group_named(self):
        """Test looking up members by group name"""
        services.add_members(self.qa.pk, [self.user1.pk])
        self.assertEqual(list(services.users_in_group_named("QA")), [self.user1])


class GroupLifecycleTest(TestCase):
    """Test cases for group, role and permission management"""

    def test_create_group_duplicate_name(self):
        """Test group names are unique"""
        services.create_group("QA")
        with self.assertRaises(DuplicateName):
            services.create_group("QA")

    def test_duplicate_name_includes_deleted_groups(self):
        """Test a soft-deleted group still holds its name"""
        group = services.create_group("QA")
        services.delete_group(group.pk)
        with self.assertRaises(DuplicateName):
            services.create_group("QA")

    def test_blank_group_name(self):
        """Test blank group names"""
        with self.assertRaises(ValidationFailure):
            services.create_group("  ")

    def test_create_group_with_unknown_role(self):
        """Test the role must exist"""
        with self.assertRaises(NotFound):
            services.create_group("QA", role_id=999999)

    def test_update_group(self):
        """Test renaming and changing the role"""
        role = services.create_role("Tester")
        group = services.create_group("QA")

        group = services.update_group(group.pk, group_name="Quality", role_id=role.pk)

        group.refresh_from_db()
        self.assertEqual(group.group_name, "Quality")
        self.assertEqual(group.role, role)

        services.update_group(group.pk, role_id=None)
        group.refresh_from_db()
        self.assertIsNone(group.role)

    def test_rename_to_taken_name(self):
        """Test renaming onto another group's name"""
        services.create_group("QA")
        other = services.create_group("Dev")
        with self.assertRaises(DuplicateName):
            services.update_group(other.pk, group_name="QA")

    def test_delete_group_keeps_memberships(self):
        """Test soft deletion leaves the membership table intact"""
        user = User.objects.create_user(username="user1", password="testpass123")
        group = services.create_group("QA")
        services.add_members(group.pk, [user.pk])

        services.delete_group(group.pk)

        self.assertNotIn(group, Group.objects.all())
        self.assertEqual(User.groups.through.objects.filter(group_id=group.pk).count(), 1)
        self.assertEqual(user.groups.count(), 0)

    def test_permissions_and_roles(self):
        """Test role permission checks and unused lookups"""
        read = services.create_permission("task.read")
        write = services.create_permission("task.write")
        role = services.create_role("Reader", permission_ids=[read.pk])
        spare = services.create_role("Spare")
        services.create_group("Readers", role_id=role.pk)

        self.assertTrue(services.role_has_permission(role.pk, "task.read"))
        self.assertFalse(services.role_has_permission(role.pk, "task.write"))
        self.assertEqual(list(services.unused_permissions()), [write])
        self.assertEqual(list(services.unassigned_roles()), [spare])

    def test_duplicate_permission_and_role(self):
        """Test unique names for permissions and roles"""
        services.create_permission("task.read")
        services.create_role("Reader")
        with self.assertRaises(DuplicateName):
            services.create_permission("task.read")
        with self.assertRaises(DuplicateName):
            services.create_role("Reader")

    def test_create_role_with_unknown_permission(self):
        """Test role creation rolls back on a missing permission"""
        with self.assertRaises(NotFound):
            services.create_role("Reader", permission_ids=[999999])
        self.assertFalse(Role.objects.filter(role_name="Reader").exists())

    def test_update_role_with_unknown_permission(self):
        """Test updating a role with a missing permission keeps its old set"""
        read = services.create_permission("task.read")
        role = services.create_role("Reader", permission_ids=[read.pk])

        with self.assertRaises(NotFound):
            services.update_role(role.pk, permission_ids=[read.pk, 999999])

        self.assertEqual(list(role.permissions.all()), [read])

    def test_update_permission(self):
        """Test updating a permission description"""
        permission = services.create_permission("task.read")
        services.update_permission(permission.pk, description="Read tasks")
        self.assertEqual(Permission.objects.get(pk=permission.pk).description, "Read tasks")


class UserGroupsTest(TestCase):
    """Test cases for listing the groups of a user"""

    def test_groups_of_deleted_user(self):
        """Test a soft-deleted user still lists its memberships"""
        user = User.objects.create_user(username="user1", password="testpass123")
        group = services.create_group("QA")
        services.add_members(group.pk, [user.pk])
        user.soft_delete()

        self.assertEqual(list(services.groups_of(user.pk)), [group])

    def test_groups_of_unknown_user(self):
        """Test a user that never existed"""
        with self.assertRaises(NotFound):
            services.groups_of(999999)
