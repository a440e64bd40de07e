from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("users", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="DeletedUser",
            fields=[
                ("id", models.BigIntegerField(primary_key=True, serialize=False)),
                ("username", models.CharField(max_length=50)),
                ("deleted_at", models.DateTimeField()),
            ],
            options={
                "ordering": ["-deleted_at"],
            },
        ),
    ]
