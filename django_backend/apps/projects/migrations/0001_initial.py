import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("privileges", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Project",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("deleted_at", models.DateTimeField(blank=True, db_index=True, null=True)),
                ("project_name", models.CharField(max_length=255, unique=True)),
                ("project_description", models.TextField(blank=True, default="")),
                ("project_start_date", models.DateTimeField(blank=True, null=True)),
                ("project_end_date", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "ordering": ["project_name"],
            },
        ),
        migrations.CreateModel(
            name="ProjectRole",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("role_name", models.CharField(max_length=50, unique=True)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                (
                    "permissions",
                    models.ManyToManyField(blank=True, related_name="project_roles", to="privileges.permission"),
                ),
            ],
            options={
                "ordering": ["role_name"],
            },
        ),
        migrations.CreateModel(
            name="ProjectUser",
            fields=[
                (
                    "pk",
                    models.CompositePrimaryKey(
                        "project_id", "user_id", blank=True, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "project",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="project_users",
                        to="projects.project",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="project_users",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "project_role",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="project_users",
                        to="projects.projectrole",
                    ),
                ),
            ],
            options={
                "ordering": ["project_id", "user_id"],
            },
        ),
        migrations.CreateModel(
            name="ProjectGroup",
            fields=[
                (
                    "pk",
                    models.CompositePrimaryKey(
                        "project_id", "group_id", blank=True, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "project",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="project_groups",
                        to="projects.project",
                    ),
                ),
                (
                    "group",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="project_groups",
                        to="privileges.group",
                    ),
                ),
                (
                    "project_role",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="project_groups",
                        to="projects.projectrole",
                    ),
                ),
            ],
            options={
                "ordering": ["project_id", "group_id"],
            },
        ),
    ]
