import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


STATUS_CHOICES = [
    ("Briefing", "Briefing"),
    ("Roteiro", "Roteiro"),
    ("Captação", "Captação"),
    ("Edição", "Edição"),
    ("Entrega", "Entrega"),
    ("Revisão", "Revisão"),
    ("Aguardando Aprovação", "Aguardando Aprovação"),
    ("Aprovado", "Aprovado"),
    ("Em Pausa", "Em Pausa"),
    ("Cancelado", "Cancelado"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Tag",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=50, unique=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="VideoType",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Project",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("client", models.CharField(blank=True, default="", max_length=255)),
                ("tags", models.JSONField(blank=True, default=list)),
                (
                    "priority",
                    models.CharField(
                        choices=[("Alta", "Alta"), ("Média", "Média"), ("Baixa", "Baixa")],
                        default="Média",
                        max_length=16,
                    ),
                ),
                ("status", models.CharField(choices=STATUS_CHOICES, default="Briefing", max_length=32)),
                ("expected_delivery_date", models.DateTimeField(blank=True, null=True)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("deliverable_link", models.URLField(blank=True, max_length=2048, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "responsible",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="responsible_projects",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "video_type",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="projects",
                        to="projects.videotype",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="project_status_created_idx"),
                    models.Index(fields=["responsible", "status"], name="project_resp_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="StatusLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("previous_status", models.CharField(choices=STATUS_CHOICES, max_length=32)),
                ("new_status", models.CharField(choices=STATUS_CHOICES, max_length=32)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "changed_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="status_changes",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "project",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="status_logs",
                        to="projects.project",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["project", "created_at"], name="statuslog_project_created_idx"),
                ],
            },
        ),
    ]
