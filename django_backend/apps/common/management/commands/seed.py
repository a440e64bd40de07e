import random
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from apps.privileges.models import Group, Permission, Role
from apps.privileges import services as privileges
from apps.projects.models import Project, ProjectRole
from apps.projects import services as projects
from apps.tasks.models import Category, TaskPriority, TaskType
from apps.tasks import services as tasks
from apps.users.models import User
from apps.users import services as users_service
from apps.workflows.models import Status, Workflow
from apps.workflows import services as workflows

STATUSES = ['To Do', 'In Progress', 'In Review', 'Blocked', 'Done']
PERMISSIONS = ['task.read', 'task.write', 'project.read', 'project.write', 'workflow.manage']
PRIORITIES = ['Low', 'Medium', 'High', 'Urgent']
CATEGORIES = ['Frontend', 'Backend', 'Database', 'Documentation', 'Testing']
TASK_TYPES = ['Bug', 'Feature', 'Chore']


class Command(BaseCommand):
    help = 'Seed the database with sample data'

    def add_arguments(self, parser):
        parser.add_argument(
            '--users',
            type=int,
            default=10,
            help='Number of users to create'
        )
        parser.add_argument(
            '--tasks',
            type=int,
            default=30,
            help='Number of tasks to create'
        )

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Starting database seeding...')

        statuses = self.create_statuses()
        workflow = self.create_workflow(statuses)
        roles = self.create_roles()
        users = self.create_users(options['users'])
        groups = self.create_groups(users, roles)
        project = self.create_project(users, groups, workflow)
        created = self.create_tasks(project, users, statuses, options['tasks'])

        self.stdout.write(
            self.style.SUCCESS(
                f'\nSeed data created successfully!\n'
                f'Statuses: {len(statuses)}\n'
                f'Users: {len(users)}\n'
                f'Groups: {len(groups)}\n'
                f'Tasks: {len(created)}\n\n'
                f'Admin user: admin / admin123\n'
                f'Regular users: [username] / password123'
            )
        )

    def create_statuses(self):
        self.stdout.write('Creating statuses...')
        statuses = []
        for name in STATUSES:
            status = Status.objects.filter(status_name=name).first()
            statuses.append(status or workflows.create_status(name))
        return statuses

    def create_workflow(self, statuses):
        self.stdout.write('Creating workflow...')
        workflow = Workflow.all_objects.filter(name='Default').first()
        if workflow is None:
            workflow = workflows.create_workflow('Default', 'Standard delivery flow')
            # Blocked is a side state, not a step
            ordered = [s for s in statuses if s.status_name != 'Blocked']
            workflows.replace_steps(workflow.pk, [(s.pk, n) for n, s in enumerate(ordered, start=1)])
        return workflow

    def create_roles(self):
        self.stdout.write('Creating roles and permissions...')
        permissions = [
            Permission.objects.filter(permission_name=name).first() or privileges.create_permission(name)
            for name in PERMISSIONS
        ]
        roles = {}
        for role_name, granted in (('Member', permissions[:3]), ('Maintainer', permissions)):
            role = Role.objects.filter(role_name=role_name).first()
            if role is None:
                role = privileges.create_role(role_name, permission_ids=[p.pk for p in granted])
            roles[role_name] = role
        for name in ('Owner', 'Contributor'):
            if not ProjectRole.objects.filter(role_name=name).exists():
                projects.create_project_role(name)
        return roles

    def create_users(self, num_users):
        self.stdout.write('Creating users...')

        FIRST_NAMES = [
            'Alice', 'Bob', 'Charlie', 'Diana', 'Eve', 'Frank', 'Grace', 'Henry',
            'Ivy', 'Jack', 'Kate', 'Liam', 'Mia', 'Noah', 'Olivia', 'Peter',
        ]

        users = []

        admin = User.objects.filter(username='admin').first()
        if admin is None:
            admin = users_service.create_user('admin', 'admin123', email='admin@example.com', is_staff=True)
            self.stdout.write(f'Created admin user: {admin.username}')
        users.append(admin)

        for i in range(num_users):
            first_name = FIRST_NAMES[i % len(FIRST_NAMES)]
            username = f"{first_name.lower()}{i}"
            user = User.objects.filter(username=username).first()
            if user is None:
                user = users_service.create_user(
                    username,
                    'password123',
                    email=f"{username}@example.com",
                    first_name=first_name,
                )
            users.append(user)

        return users

    def create_groups(self, users, roles):
        self.stdout.write('Creating groups...')
        groups = []
        for name, role in (('Developers', roles['Member']), ('Leads', roles['Maintainer'])):
            group = Group.objects.filter(group_name=name).first()
            if group is None:
                group = privileges.create_group(name, f'{name} of the sample project', role_id=role.pk)
                members = random.sample(users, min(len(users), 4))
                privileges.add_members(group.pk, [u.pk for u in members])
            groups.append(group)
        return groups

    def create_project(self, users, groups, workflow):
        self.stdout.write('Creating project...')
        project = Project.objects.filter(project_name='Sample Project').first()
        if project is not None:
            return project

        project = projects.create_project(
            'Sample Project',
            project_description='Seeded project',
            project_start_date=timezone.now(),
        )
        owner = ProjectRole.objects.get(role_name='Owner')
        projects.add_project_user(project.pk, users[0].pk, owner.pk)
        for group in groups:
            projects.add_project_group(project.pk, group.pk)
        for name in TASK_TYPES:
            task_type, _ = TaskType.objects.get_or_create(task_type_name=name)
            projects.add_project_task_type(project.pk, task_type.pk, workflow.pk)
        return project

    def create_tasks(self, project, users, statuses, num_tasks):
        self.stdout.write('Creating tasks...')

        priorities = [TaskPriority.objects.get_or_create(priority_name=name)[0] for name in PRIORITIES]
        categories = [Category.objects.get_or_create(category_name=name)[0] for name in CATEGORIES]
        task_types = list(TaskType.objects.filter(task_type_name__in=TASK_TYPES))

        created = []
        for i in range(num_tasks):
            task = tasks.create_task(
                f"Task {i + 1}: {random.choice(['Implement', 'Fix', 'Update', 'Create'])} "
                f"{random.choice(['feature', 'bug', 'component', 'endpoint'])}",
                task_description='Seeded task',
                task_due_date=(timezone.now() + timedelta(days=random.randint(-5, 30))).date(),
                assignee=random.choice(users),
                priority=random.choice(priorities),
                category=random.choice(categories),
                task_type=random.choice(task_types),
                project=project,
                status=statuses[0],
            )
            # edges only point to earlier tasks
            if created and random.random() > 0.6:
                tasks.add_dependency(task.pk, random.choice(created).pk)
            created.append(task)

        if created:
            tasks.add_comment(created[0].pk, users[0].pk, 'Kick-off task.')

        return created
