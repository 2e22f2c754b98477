from datetime import timedelta

from django.test import TestCase
from django.contrib.auth import get_user_model
from django.utils import timezone

from projects.models import Project, VideoType
from projects.metrics import (
    MetricsSnapshot,
    compute_metrics,
    completion_rate,
    is_overdue,
    NO_RESPONSIBLE_LABEL,
    NO_VIDEO_TYPE_LABEL,
    NO_CLIENT_LABEL,
)

User = get_user_model()


class MetricsTest(TestCase):
    def setUp(self):
        self.now = timezone.now()
        self.ana = User.objects.create_user(
            username="ana", email="ana@framety.com", password="pass12345", name="Ana",
        )
        self.bruno = User.objects.create_user(
            username="bruno", email="bruno@framety.com", password="pass12345", name="Bruno",
        )
        self.comercial = VideoType.objects.create(name="Comercial")

    def make(self, status, responsible=None, **extra):
        if status == Project.STATUS_APROVADO:
            extra.setdefault("approved_at", self.now)
        return Project.objects.create(
            title=f"{status} project",
            status=status,
            responsible=responsible or self.ana,
            **extra,
        )

    def test_empty_store(self):
        snapshot = compute_metrics(now=self.now)
        self.assertEqual(snapshot.all_projects, 0)
        self.assertEqual(snapshot.projects_by_status, {})
        self.assertEqual(completion_rate(snapshot), 0)

    def test_edicao_and_aprovado_scenario(self):
        for _ in range(3):
            self.make(Project.STATUS_EDICAO)
        for _ in range(2):
            self.make(Project.STATUS_APROVADO)

        snapshot = compute_metrics(now=self.now)

        self.assertEqual(
            snapshot.projects_by_status,
            {Project.STATUS_EDICAO: 3, Project.STATUS_APROVADO: 2},
        )
        self.assertEqual(snapshot.approved_projects, 2)
        self.assertEqual(snapshot.total_projects, 3)
        self.assertEqual(snapshot.all_projects, 5)
        self.assertEqual(completion_rate(snapshot), 40)
        self.assertEqual(snapshot.as_dict()["completion_rate"], 40)

    def test_overdue_counts_open_projects_only(self):
        yesterday = self.now - timedelta(days=1)
        late = self.make(Project.STATUS_EDICAO, expected_delivery_date=yesterday)
        approved = self.make(Project.STATUS_APROVADO, expected_delivery_date=yesterday)
        self.make(Project.STATUS_CANCELADO, expected_delivery_date=yesterday)
        self.make(Project.STATUS_EDICAO, expected_delivery_date=self.now + timedelta(days=1))
        self.make(Project.STATUS_EDICAO)  # no date is never overdue

        snapshot = compute_metrics(now=self.now)

        self.assertEqual(snapshot.overdue_projects, 1)
        self.assertTrue(is_overdue(late, now=self.now))
        self.assertFalse(is_overdue(approved, now=self.now))

    def test_active_excludes_approved_and_cancelled(self):
        self.make(Project.STATUS_BRIEFING)
        self.make(Project.STATUS_EM_PAUSA)
        self.make(Project.STATUS_APROVADO)
        self.make(Project.STATUS_CANCELADO)

        snapshot = compute_metrics(now=self.now)

        self.assertEqual(snapshot.active_projects, 2)
        self.assertEqual(snapshot.total_projects, 3)
        self.assertEqual(snapshot.approved_projects, 1)

    def test_grouping_by_responsible_type_and_client(self):
        nameless = User.objects.create_user(
            username="semnome", email="semnome@framety.com", password="pass12345",
        )
        self.make(Project.STATUS_EDICAO, responsible=self.ana, video_type=self.comercial, client="Acme")
        self.make(Project.STATUS_ROTEIRO, responsible=self.ana, client="Acme")
        self.make(Project.STATUS_ROTEIRO, responsible=self.bruno, video_type=self.comercial)
        self.make(Project.STATUS_ROTEIRO, responsible=nameless)

        snapshot = compute_metrics(now=self.now)

        self.assertEqual(
            snapshot.projects_by_responsible,
            {"Ana": 2, "Bruno": 1, "semnome": 1},
        )
        self.assertNotIn(NO_RESPONSIBLE_LABEL, snapshot.projects_by_responsible)
        self.assertEqual(snapshot.projects_by_video_type, {"Comercial": 2, NO_VIDEO_TYPE_LABEL: 2})
        self.assertEqual(snapshot.projects_by_client, {"Acme": 2, NO_CLIENT_LABEL: 2})
        self.assertEqual(snapshot.active_members, 3)

    def test_status_keys_follow_pipeline_order(self):
        self.make(Project.STATUS_REVISAO)
        self.make(Project.STATUS_BRIEFING)
        self.make(Project.STATUS_CAPTACAO)

        snapshot = compute_metrics(now=self.now)
        self.assertEqual(
            list(snapshot.projects_by_status),
            [Project.STATUS_BRIEFING, Project.STATUS_CAPTACAO, Project.STATUS_REVISAO],
        )

    def test_completion_rate_rounds(self):
        snapshot = MetricsSnapshot(total_projects=2, approved_projects=1)
        self.assertEqual(completion_rate(snapshot), 33)

    def test_responsible_label_matches_listing_name(self):
        full_name_only = User.objects.create_user(
            username="carla", email="carla@framety.com", password="pass12345",
            first_name="Carla", last_name="Dias",
        )
        username_only = User.objects.create_user(
            username="nn", email="nn@framety.com", password="pass12345",
        )
        self.make(Project.STATUS_EDICAO, responsible=full_name_only)
        self.make(Project.STATUS_EDICAO, responsible=username_only)

        snapshot = compute_metrics(now=self.now)

        self.assertEqual(
            snapshot.projects_by_responsible,
            {
                full_name_only.display_name: 1,
                username_only.display_name: 1,
            },
        )
        self.assertIn("Carla Dias", snapshot.projects_by_responsible)
        self.assertIn("nn", snapshot.projects_by_responsible)

    def test_sentinel_only_when_no_user_resolves(self):
        from projects.metrics import _responsible_label

        self.assertEqual(_responsible_label(None, None, None, None), NO_RESPONSIBLE_LABEL)
        self.assertEqual(_responsible_label("", "", "", "nn"), "nn")
