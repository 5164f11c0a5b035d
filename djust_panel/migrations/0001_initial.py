import django.db.models.deletion
import djust_panel.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Permission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=50, unique=True)),
                ("slug", models.CharField(max_length=50, unique=True)),
                ("http_method", models.CharField(blank=True, default="", max_length=255)),
                ("http_path", models.TextField(blank=True, default="")),
                ("order", models.IntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="children",
                        to="djust_panel.permission",
                    ),
                ),
            ],
            options={
                "ordering": ["order", "id"],
            },
        ),
        migrations.CreateModel(
            name="Role",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=50, unique=True)),
                ("slug", models.CharField(max_length=50, unique=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "administrators",
                    models.ManyToManyField(blank=True, related_name="panel_roles", to=settings.AUTH_USER_MODEL),
                ),
                (
                    "permissions",
                    models.ManyToManyField(blank=True, related_name="roles", to="djust_panel.permission"),
                ),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="Menu",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order", models.IntegerField(default=0)),
                ("title", models.CharField(max_length=50)),
                ("icon", models.CharField(blank=True, default="", max_length=50)),
                ("uri", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="children",
                        to="djust_panel.menu",
                    ),
                ),
                (
                    "permissions",
                    models.ManyToManyField(blank=True, related_name="menus", to="djust_panel.permission"),
                ),
                ("roles", models.ManyToManyField(blank=True, related_name="menus", to="djust_panel.role")),
            ],
            options={
                "ordering": ["order", "id"],
            },
            bases=(djust_panel.models.MenuCache, models.Model),
        ),
    ]
