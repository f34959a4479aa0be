from datetime import date, time

from django.contrib.auth import get_user_model
from django.test import TestCase

from core.models import AuditEvent, BibleReading, Hymn, Service, ServicePlanItem, ServiceType


class ServiceViewsTests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.editor = User.objects.create_user(email="editor@example.com", password="pass", role=User.ROLE_EDITOR)
        self.member = User.objects.create_user(email="member@example.com", password="pass")
        self.reader = User.objects.create_user(
            email="reader@example.com", password="pass", first_name="Ana", last_name="Ruiz", pulpit=True
        )
        self.service_type = ServiceType.objects.create(
            name="Culto general", requires_intro_reading=True, has_hymns_and_choruses=True
        )
        self.service = Service.objects.create(
            date=date(2025, 3, 2), start_time=time(19, 0), service_type=self.service_type
        )

    def test_dashboard_requires_login(self):
        response = self.client.get("/")

        self.assertEqual(response.status_code, 302)
        self.assertIn("/login/", response["Location"])

    def test_calendar_shows_completion(self):
        self.client.login(email="member@example.com", password="pass")

        response = self.client.get("/calendar/", {"year": 2025, "month": 3})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["services"][0].completion, "incomplete")
        self.assertContains(response, "Culto general")

    def test_service_detail_lists_missing_roles(self):
        self.client.login(email="member@example.com", password="pass")

        response = self.client.get(f"/services/{self.service.id}/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["missing_roles"], ["Introducción"])

    def test_member_cannot_assign(self):
        self.client.login(email="member@example.com", password="pass")

        response = self.client.post(
            f"/services/{self.service.id}/assign/", {"role": "intro", "user": self.reader.id}
        )

        self.assertEqual(response.status_code, 403)
        self.service.refresh_from_db()
        self.assertIsNone(self.service.intro_reader)

    def test_editor_assigns_reader(self):
        self.client.login(email="editor@example.com", password="pass")

        response = self.client.post(
            f"/services/{self.service.id}/assign/", {"role": "intro", "user": self.reader.id}
        )

        self.assertRedirects(response, f"/services/{self.service.id}/", fetch_redirect_response=False)
        self.service.refresh_from_db()
        self.assertEqual(self.service.intro_reader, self.reader)

    def test_htmx_assignment_returns_partial(self):
        self.client.login(email="editor@example.com", password="pass")

        response = self.client.post(
            f"/services/{self.service.id}/assign/",
            {"role": "intro", "user": self.reader.id},
            HTTP_HX_REQUEST="true",
        )

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "services/_assignments.html")
        self.assertTemplateNotUsed(response, "services/detail.html")
        self.assertEqual(response.context["completion"], "complete")

    def test_unavailable_reader_needs_confirmation(self):
        # 2025-03-02 is a Sunday.
        self.reader.availability = {"template": {"6": {"intro": False}}}
        self.reader.save()
        self.client.login(email="editor@example.com", password="pass")

        detail = self.client.get(f"/services/{self.service.id}/")
        self.assertContains(detail, "Ana Ruiz (no disponible)")

        response = self.client.post(
            f"/services/{self.service.id}/assign/", {"role": "intro", "user": self.reader.id}, follow=True
        )
        self.assertContains(response, "no está disponible")
        self.service.refresh_from_db()
        self.assertIsNone(self.service.intro_reader)

        self.client.post(
            f"/services/{self.service.id}/assign/",
            {"role": "intro", "user": self.reader.id, "confirm_unavailable": "1"},
        )
        self.service.refresh_from_db()
        self.assertEqual(self.service.intro_reader, self.reader)

    def test_repeated_reading_asks_for_confirmation(self):
        first = Service.objects.create(date=date(2025, 2, 23), start_time=time(19, 0), service_type=self.service_type)
        BibleReading.objects.create(
            service=first,
            reading_type="intro",
            book="Salmos",
            chapter_start=23,
            verse_start=1,
            chapter_end=23,
            verse_end=6,
        )
        self.client.login(email="editor@example.com", password="pass")
        payload = {
            "reading_type": "intro",
            "book": "Salmos",
            "chapter_start": 23,
            "verse_start": 1,
            "chapter_end": 23,
            "verse_end": 6,
            "reader": self.reader.id,
        }

        response = self.client.post(f"/services/{self.service.id}/readings/", payload)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["pending_reading"].service, first)
        self.assertEqual(BibleReading.objects.count(), 1)

        original = response.context["pending_reading"]
        response = self.client.post(
            f"/services/{self.service.id}/readings/confirm/", {**payload, "original_id": original.id}
        )

        self.assertEqual(response.status_code, 302)
        repeated = BibleReading.objects.get(service=self.service)
        self.assertTrue(repeated.is_repeated)
        self.assertEqual(repeated.original_reading, original)

    def test_invalid_reading_range_is_rejected(self):
        self.client.login(email="editor@example.com", password="pass")

        response = self.client.post(
            f"/services/{self.service.id}/readings/",
            {
                "reading_type": "intro",
                "book": "Juan",
                "chapter_start": 3,
                "verse_start": 16,
                "chapter_end": 2,
                "verse_end": 1,
                "reader": self.reader.id,
            },
        )

        self.assertEqual(response.status_code, 400)
        self.assertFalse(BibleReading.objects.exists())

    def test_plan_limit_is_reported(self):
        hymns = [Hymn.objects.create(number=n, title=f"Himno {n}") for n in range(1, 5)]
        self.client.login(email="editor@example.com", password="pass")
        for hymn in hymns:
            response = self.client.post(
                f"/services/{self.service.id}/plan/", {"kind": "hymn", "item_id": hymn.id}, follow=True
            )

        self.assertEqual(ServicePlanItem.objects.filter(service=self.service).count(), 3)
        self.assertContains(response, "Máximo 3 himnos permitidos")

    def test_plan_remove(self):
        hymn = Hymn.objects.create(number=1, title="Himno 1")
        item = ServicePlanItem.objects.create(service=self.service, kind="hymn", hymn=hymn, order=1)
        self.client.login(email="editor@example.com", password="pass")

        self.client.post(f"/services/{self.service.id}/plan/{item.id}/delete/")

        self.assertFalse(ServicePlanItem.objects.exists())

    def test_catalogue_search_partial(self):
        Hymn.objects.create(number=7, title="Grande es tu fidelidad")
        self.client.login(email="editor@example.com", password="pass")

        response = self.client.get(
            f"/services/{self.service.id}/catalogue/", {"kind": "hymn", "q": "fidelidad"}, HTTP_HX_REQUEST="true"
        )

        self.assertContains(response, "Grande es tu fidelidad")
        self.assertEqual(self.client.get(f"/services/{self.service.id}/catalogue/", {"kind": "x"}).status_code, 400)

    def test_status_update_is_audited(self):
        self.client.login(email="editor@example.com", password="pass")

        self.client.post(f"/services/{self.service.id}/status/", {"status": Service.STATUS_HELD})

        self.service.refresh_from_db()
        self.assertEqual(self.service.status, Service.STATUS_HELD)
        self.assertTrue(AuditEvent.objects.filter(action_type="status_change").exists())


class GenerateMonthViewTests(TestCase):
    def test_only_admin_can_generate(self):
        User = get_user_model()
        User.objects.create_user(email="editor@example.com", password="pass", role=User.ROLE_EDITOR)
        User.objects.create_user(email="admin@example.com", password="pass", role=User.ROLE_ADMIN)
        self.client.login(email="editor@example.com", password="pass")

        response = self.client.post("/services/generate/", {"year": 2025, "month": 3})
        self.assertEqual(response.status_code, 403)

        self.client.login(email="admin@example.com", password="pass")
        response = self.client.post("/services/generate/", {"year": 2025, "month": 3})
        self.assertEqual(response.status_code, 302)
        self.assertIn("year=2025&month=3", response["Location"])
