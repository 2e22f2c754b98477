from django.db import connection
from django.test import TestCase
from django.test.utils import CaptureQueriesContext
from django.urls import reverse
from rest_framework.test import APIClient
from rest_framework import status

from users.models import User
from projects.models import Project, StatusLog, VideoType, Tag


class ProjectApiTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.member = User.objects.create_user(
            username="membro", email="membro@framety.com", password="pass12345",
            name="Membro", role=User.ROLE_MEMBRO,
        )
        self.other = User.objects.create_user(
            username="outro", email="outro@framety.com", password="pass12345",
            name="Outro", role=User.ROLE_MEMBRO,
        )
        self.gestor = User.objects.create_user(
            username="gestor", email="gestor@framety.com", password="pass12345",
            name="Gestora", role=User.ROLE_GESTOR,
        )
        self.admin = User.objects.create_user(
            username="admin", email="admin@framety.com", password="pass12345",
            name="Admin", role=User.ROLE_ADMIN,
        )
        self.project = Project.objects.create(
            title="Spot A", client="Acme", responsible=self.member,
        )

    def auth(self, user):
        self.client.force_authenticate(user=user)

    def detail_url(self, project=None):
        return reverse("project-detail", args=[(project or self.project).id])

    def test_requires_authentication(self):
        resp = self.client.get(reverse("project-list-create"))
        self.assertIn(resp.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))
        self.assertFalse(resp.json()["success"])

    def test_create_project_defaults(self):
        self.auth(self.other)
        resp = self.client.post(
            reverse("project-list-create"),
            {"title": "Novo vídeo", "tags": ["Promo", "promo"], "status": Project.STATUS_EDICAO},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        data = resp.json()
        self.assertEqual(data["status"], Project.STATUS_BRIEFING)
        self.assertEqual(data["priority"], Project.PRIORITY_MEDIA)
        self.assertEqual(data["responsible"]["id"], self.other.id)
        self.assertEqual(data["tags"], ["Promo"])
        self.assertEqual(data["next_status"], Project.STATUS_ROTEIRO)
        self.assertIsNone(data["approved_at"])

    def test_create_without_title_is_rejected(self):
        self.auth(self.member)
        resp = self.client.post(reverse("project-list-create"), {"client": "Acme"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["errors"]["code"], "validation_error")

    def test_other_member_cannot_edit(self):
        self.auth(self.other)
        resp = self.client.patch(self.detail_url(), {"title": "Invadido"}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        body = resp.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["errors"]["code"], "unauthorized")

        self.project.refresh_from_db()
        self.assertEqual(self.project.title, "Spot A")

    def test_responsible_can_edit(self):
        self.auth(self.member)
        resp = self.client.patch(self.detail_url(), {"client": "Acme Ltda"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["client"], "Acme Ltda")

    def test_status_endpoint_moves_project_and_logs(self):
        self.auth(self.member)
        resp = self.client.post(
            reverse("project-status", args=[self.project.id]),
            {"status": Project.STATUS_ROTEIRO},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["status"], Project.STATUS_ROTEIRO)

        log = StatusLog.objects.get(project=self.project)
        self.assertEqual(log.previous_status, Project.STATUS_BRIEFING)
        self.assertEqual(log.new_status, Project.STATUS_ROTEIRO)
        self.assertEqual(log.changed_by, self.member)

    def test_status_change_through_patch_is_logged(self):
        self.auth(self.gestor)
        resp = self.client.patch(self.detail_url(), {"status": Project.STATUS_EDICAO}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(StatusLog.objects.filter(project=self.project).count(), 1)

    def test_invalid_status_is_rejected_without_side_effects(self):
        self.auth(self.member)
        resp = self.client.patch(
            self.detail_url(),
            {"title": "Alterado", "status": "Publicado"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["errors"]["code"], "invalid_transition")

        self.project.refresh_from_db()
        self.assertEqual(self.project.title, "Spot A")
        self.assertEqual(self.project.status, Project.STATUS_BRIEFING)
        self.assertFalse(StatusLog.objects.exists())

    def test_closed_project_cannot_move(self):
        self.auth(self.member)
        url = reverse("project-status", args=[self.project.id])
        self.client.post(url, {"status": Project.STATUS_CANCELADO}, format="json")

        resp = self.client.post(url, {"status": Project.STATUS_BRIEFING}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(StatusLog.objects.filter(project=self.project).count(), 1)

    def test_deliverable_link_with_approval(self):
        self.auth(self.member)
        link = "https://youtu.be/abc123"

        resp = self.client.patch(self.detail_url(), {"deliverable_link": link}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

        resp = self.client.post(
            reverse("project-status", args=[self.project.id]),
            {"status": Project.STATUS_APROVADO, "deliverable_link": link},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        data = resp.json()
        self.assertEqual(data["deliverable_link"], link)
        self.assertIsNotNone(data["approved_at"])
        self.assertEqual(data["allowed_transitions"], [])

    def test_delete_by_gestor_removes_logs(self):
        self.auth(self.member)
        self.client.post(
            reverse("project-status", args=[self.project.id]),
            {"status": Project.STATUS_ROTEIRO},
            format="json",
        )

        self.auth(self.gestor)
        resp = self.client.delete(self.detail_url())
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Project.objects.filter(pk=self.project.pk).exists())
        self.assertFalse(StatusLog.objects.exists())

    def test_other_member_cannot_delete(self):
        self.auth(self.other)
        resp = self.client.delete(self.detail_url())
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Project.objects.filter(pk=self.project.pk).exists())

    def test_missing_project_returns_404(self):
        self.auth(self.member)
        resp = self.client.get(reverse("project-detail", args=[9999]))
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.json()["errors"]["code"], "not_found")

    def test_list_filters_by_status(self):
        approved = Project.objects.create(
            title="Aprovado 1", responsible=self.member,
            status=Project.STATUS_APROVADO,
        )
        approved_later = Project.objects.create(
            title="Aprovado 2", responsible=self.other,
            status=Project.STATUS_APROVADO,
        )

        self.auth(self.other)
        resp = self.client.get(reverse("project-list-create"), {"status": Project.STATUS_APROVADO})
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        ids = [p["id"] for p in resp.json()]
        self.assertEqual(ids, [approved_later.id, approved.id])

        resp = self.client.get(
            reverse("project-list-create"),
            {"status": Project.STATUS_APROVADO, "responsible_id": self.member.id},
        )
        self.assertEqual([p["id"] for p in resp.json()], [approved.id])

    def test_list_search_is_case_insensitive(self):
        self.auth(self.other)
        resp = self.client.get(reverse("project-list-create"), {"search": "ACME"})
        self.assertEqual([p["id"] for p in resp.json()], [self.project.id])

    def test_list_rejects_unknown_status(self):
        self.auth(self.other)
        resp = self.client.get(reverse("project-list-create"), {"status": "Publicado"})
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_logs_newest_first(self):
        self.auth(self.member)
        url = reverse("project-status", args=[self.project.id])
        for target in (Project.STATUS_ROTEIRO, Project.STATUS_CAPTACAO):
            self.client.post(url, {"status": target}, format="json")

        resp = self.client.get(reverse("project-status-logs", args=[self.project.id]))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [entry["new_status"] for entry in resp.json()],
            [Project.STATUS_CAPTACAO, Project.STATUS_ROTEIRO],
        )

    def test_my_queue(self):
        Project.objects.create(title="De outro", responsible=self.other)
        Project.objects.create(
            title="Encerrado", responsible=self.member, status=Project.STATUS_CANCELADO,
        )

        self.auth(self.member)
        resp = self.client.get(reverse("project-my-queue"))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([p["id"] for p in resp.json()], [self.project.id])

    def test_metrics_endpoint(self):
        self.auth(self.other)
        resp = self.client.get(reverse("project-metrics"))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        data = resp.json()
        self.assertEqual(data["total_projects"], 1)
        self.assertEqual(data["completion_rate"], 0)
        self.assertEqual(data["projects_by_status"], {Project.STATUS_BRIEFING: 1})
        self.assertEqual(data["projects_by_client"], {"Acme": 1})


    def project_selects(self, queries):
        return [q["sql"] for q in queries if 'FROM "projects_project"' in q["sql"]]

    def test_create_response_does_not_reload_project(self):
        video_type = VideoType.objects.create(name="Comercial")
        self.auth(self.member)
        with CaptureQueriesContext(connection) as ctx:
            resp = self.client.post(
                reverse("project-list-create"),
                {"title": "Spot B", "video_type_id": video_type.id, "responsible_id": self.other.id},
                format="json",
            )

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.json()["video_type"]["name"], "Comercial")
        self.assertEqual(resp.json()["responsible"]["id"], self.other.id)
        self.assertEqual(self.project_selects(ctx.captured_queries), [])

    def test_patch_response_loads_project_once(self):
        self.auth(self.member)
        with CaptureQueriesContext(connection) as ctx:
            resp = self.client.patch(
                self.detail_url(), {"responsible_id": self.other.id}, format="json",
            )

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["responsible"]["id"], self.other.id)
        self.assertEqual(len(self.project_selects(ctx.captured_queries)), 1)

class LookupApiTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.member = User.objects.create_user(
            username="membro", email="membro@framety.com", password="pass12345", name="Membro",
        )
        self.admin = User.objects.create_user(
            username="admin", email="admin@framety.com", password="pass12345",
            name="Admin", role=User.ROLE_ADMIN,
        )
        VideoType.objects.create(name="Tutorial")
        Tag.objects.create(name="Promo")

    def test_any_user_can_read_lookups(self):
        self.client.force_authenticate(user=self.member)
        resp = self.client.get(reverse("video-type-list-create"))
        self.assertEqual([t["name"] for t in resp.json()], ["Tutorial"])
        resp = self.client.get(reverse("tag-list-create"))
        self.assertEqual([t["name"] for t in resp.json()], ["Promo"])

    def test_only_admin_creates_lookups(self):
        self.client.force_authenticate(user=self.member)
        resp = self.client.post(reverse("tag-list-create"), {"name": "Vendas"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin)
        resp = self.client.post(reverse("tag-list-create"), {"name": "Vendas"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Tag.objects.filter(name="Vendas").exists())

    def test_duplicate_lookup_is_rejected(self):
        self.client.force_authenticate(user=self.admin)
        resp = self.client.post(reverse("video-type-list-create"), {"name": "Tutorial"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(VideoType.objects.filter(name="Tutorial").count(), 1)
