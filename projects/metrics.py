# framety/projects/metrics.py
"""
Dashboard metrics.

One grouped query over the projects table, reduced in a single pass into
every counter the dashboard shows. Nothing is cached: each call reflects
the current state of the store.
"""
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from django.db.models import BooleanField, Case, Count, Q, Value, When
from django.utils import timezone

from .models import Project
from .state_machine import ALL_STATUSES

NO_RESPONSIBLE_LABEL = "Sem responsável"
NO_VIDEO_TYPE_LABEL = "Sem tipo"
NO_CLIENT_LABEL = "Sem cliente"


@dataclass
class MetricsSnapshot:
    # Projects not yet approved (the dashboard's "excluding approved" total)
    total_projects: int = 0
    all_projects: int = 0
    approved_projects: int = 0
    active_projects: int = 0
    overdue_projects: int = 0
    active_members: int = 0
    # Keys are Project.STATUS_* values only
    projects_by_status: Dict[str, int] = field(default_factory=dict)
    projects_by_responsible: Dict[str, int] = field(default_factory=dict)
    projects_by_video_type: Dict[str, int] = field(default_factory=dict)
    projects_by_client: Dict[str, int] = field(default_factory=dict)
    generated_at: Optional[datetime] = None

    def as_dict(self) -> dict:
        return {
            "total_projects": self.total_projects,
            "all_projects": self.all_projects,
            "approved_projects": self.approved_projects,
            "active_projects": self.active_projects,
            "overdue_projects": self.overdue_projects,
            "active_members": self.active_members,
            "completion_rate": completion_rate(self),
            "projects_by_status": self.projects_by_status,
            "projects_by_responsible": self.projects_by_responsible,
            "projects_by_video_type": self.projects_by_video_type,
            "projects_by_client": self.projects_by_client,
            "generated_at": self.generated_at,
        }


def completion_rate(snapshot: MetricsSnapshot) -> int:
    """approved / (total + approved) as a rounded percentage; 0 if empty."""
    denominator = snapshot.total_projects + snapshot.approved_projects
    if denominator == 0:
        return 0
    return round(snapshot.approved_projects / denominator * 100)


def is_overdue(project: Project, now: Optional[datetime] = None) -> bool:
    """Past its expected delivery and still open. No date is never overdue."""
    if project.expected_delivery_date is None or project.is_closed:
        return False
    return project.expected_delivery_date < (now or timezone.now())


def _responsible_label(name, first_name, last_name, username) -> str:
    """Mirror of User.display_name over raw columns; sentinel when no user."""
    full_name = f"{first_name or ''} {last_name or ''}".strip()
    return name or full_name or username or NO_RESPONSIBLE_LABEL


def _ranked(counter: Counter) -> Dict[str, int]:
    return dict(sorted(counter.items(), key=lambda item: (-item[1], item[0])))


def compute_metrics(now: Optional[datetime] = None) -> MetricsSnapshot:
    now = now or timezone.now()

    overdue = Case(
        When(
            Q(expected_delivery_date__lt=now) & ~Q(status__in=Project.CLOSED_STATUSES),
            then=Value(True),
        ),
        default=Value(False),
        output_field=BooleanField(),
    )

    rows = (
        Project.objects
        .annotate(is_overdue=overdue)
        .values_list(
            "status",
            "responsible_id",
            "responsible__name",
            "responsible__first_name",
            "responsible__last_name",
            "responsible__username",
            "video_type__name",
            "client",
            "is_overdue",
        )
        .annotate(count=Count("id"))
        .order_by()
    )

    by_status = Counter()
    by_responsible = Counter()
    by_video_type = Counter()
    by_client = Counter()
    responsibles = set()
    snapshot = MetricsSnapshot(generated_at=now)

    for (status, responsible_id, name, first_name, last_name, username,
         video_type_name, client, row_overdue, count) in rows:
        snapshot.all_projects += count
        by_status[status] += count
        by_responsible[_responsible_label(name, first_name, last_name, username)] += count
        by_video_type[video_type_name or NO_VIDEO_TYPE_LABEL] += count
        by_client[client or NO_CLIENT_LABEL] += count

        if responsible_id is not None:
            responsibles.add(responsible_id)

        if status == Project.STATUS_APROVADO:
            snapshot.approved_projects += count
        else:
            snapshot.total_projects += count

        if status not in Project.CLOSED_STATUSES:
            snapshot.active_projects += count

        if row_overdue:
            snapshot.overdue_projects += count

    # Pipeline order, absent statuses omitted
    snapshot.projects_by_status = {
        status: by_status[status] for status in ALL_STATUSES if by_status[status]
    }
    snapshot.projects_by_responsible = _ranked(by_responsible)
    snapshot.projects_by_video_type = _ranked(by_video_type)
    snapshot.projects_by_client = _ranked(by_client)
    snapshot.active_members = len(responsibles)

    return snapshot
