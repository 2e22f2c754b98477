from django.db import models
from django.conf import settings


class VideoType(models.Model):
    """Lookup: kind of video (Institucional, Comercial, ...)."""
    name = models.CharField(max_length=100, unique=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Tag(models.Model):
    """Lookup: suggested tag names. Projects store tags as plain strings."""
    name = models.CharField(max_length=50, unique=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Project(models.Model):
    """
    A video production work item tracked through the pipeline.

    Status changes go through `projects.state_machine.transition`, which
    keeps `approved_at` in sync and appends a StatusLog entry.
    """
    STATUS_BRIEFING = "Briefing"
    STATUS_ROTEIRO = "Roteiro"
    STATUS_CAPTACAO = "Captação"
    STATUS_EDICAO = "Edição"
    STATUS_ENTREGA = "Entrega"
    STATUS_REVISAO = "Revisão"
    STATUS_AGUARDANDO_APROVACAO = "Aguardando Aprovação"
    STATUS_APROVADO = "Aprovado"
    STATUS_EM_PAUSA = "Em Pausa"
    STATUS_CANCELADO = "Cancelado"

    STATUS_CHOICES = [
        (STATUS_BRIEFING, "Briefing"),
        (STATUS_ROTEIRO, "Roteiro"),
        (STATUS_CAPTACAO, "Captação"),
        (STATUS_EDICAO, "Edição"),
        (STATUS_ENTREGA, "Entrega"),
        (STATUS_REVISAO, "Revisão"),
        (STATUS_AGUARDANDO_APROVACAO, "Aguardando Aprovação"),
        (STATUS_APROVADO, "Aprovado"),
        (STATUS_EM_PAUSA, "Em Pausa"),
        (STATUS_CANCELADO, "Cancelado"),
    ]

    # Statuses that no longer count as work in progress
    CLOSED_STATUSES = (STATUS_APROVADO, STATUS_CANCELADO)

    PRIORITY_ALTA = "Alta"
    PRIORITY_MEDIA = "Média"
    PRIORITY_BAIXA = "Baixa"

    PRIORITY_CHOICES = [
        (PRIORITY_ALTA, "Alta"),
        (PRIORITY_MEDIA, "Média"),
        (PRIORITY_BAIXA, "Baixa"),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    client = models.CharField(max_length=255, blank=True, default="")

    responsible = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="responsible_projects",
    )
    video_type = models.ForeignKey(
        VideoType,
        on_delete=models.SET_NULL,
        related_name="projects",
        null=True,
        blank=True,
    )
    tags = models.JSONField(default=list, blank=True)
    priority = models.CharField(
        max_length=16,
        choices=PRIORITY_CHOICES,
        default=PRIORITY_MEDIA,
    )

    status = models.CharField(
        max_length=32,
        choices=STATUS_CHOICES,
        default=STATUS_BRIEFING,
    )
    expected_delivery_date = models.DateTimeField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    deliverable_link = models.URLField(max_length=2048, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(
                fields=["status", "created_at"],
                name="project_status_created_idx",
            ),
            models.Index(
                fields=["responsible", "status"],
                name="project_resp_status_idx",
            ),
        ]

    @property
    def is_closed(self) -> bool:
        return self.status in self.CLOSED_STATUSES

    def __str__(self):
        return f"{self.title} ({self.status})"


class StatusLog(models.Model):
    """Append-only audit record of a project status change."""
    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name="status_logs",
    )
    previous_status = models.CharField(max_length=32, choices=Project.STATUS_CHOICES)
    new_status = models.CharField(max_length=32, choices=Project.STATUS_CHOICES)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="status_changes",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(
                fields=["project", "created_at"],
                name="statuslog_project_created_idx",
            ),
        ]

    def __str__(self):
        return f"{self.project_id}: {self.previous_status} -> {self.new_status}"
