import json
from datetime import date, time

from django.contrib.auth import get_user_model
from django.test import TestCase

from core.models import AuditEvent, Service, ServiceType
from notifications.models import PushSubscription


class PageViewsTests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.admin = User.objects.create_user(
            email="admin@example.com", password="pass", role=User.ROLE_ADMIN, first_name="Marta", last_name="Gil"
        )
        self.member = User.objects.create_user(email="member@example.com", password="pass", first_name="Juan", last_name="Pérez")

    def test_dashboard_lists_my_services(self):
        service_type = ServiceType.objects.create(name="Culto general")
        Service.objects.create(date=date.today(), start_time=time(23, 0), service_type=service_type, teacher=self.member)
        self.client.login(email="member@example.com", password="pass")

        response = self.client.get("/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.context["my_services"]), 1)

    def test_members_directory_search(self):
        self.client.login(email="member@example.com", password="pass")

        response = self.client.get("/members/", {"q": "gil"})

        self.assertEqual(list(response.context["users"]), [self.admin])

    def test_profile_update(self):
        self.client.login(email="member@example.com", password="pass")

        response = self.client.post(
            "/profile/", {"first_name": "Juan", "last_name": "Pérez Gómez", "contact_email": "", "phone": "600000000"}
        )

        self.assertEqual(response.status_code, 302)
        self.member.refresh_from_db()
        self.assertEqual(self.member.last_name, "Pérez Gómez")
        self.assertTrue(AuditEvent.objects.filter(action_type="profile_update").exists())

    def test_profile_requires_names(self):
        self.client.login(email="member@example.com", password="pass")

        response = self.client.post("/profile/", {"first_name": " ", "last_name": "Pérez"})

        self.assertEqual(response.status_code, 200)
        self.assertIn("first_name", response.context["form"].errors)

    def test_profile_edits_availability(self):
        self.member.pulpit = True
        self.member.save()
        self.client.login(email="member@example.com", password="pass")

        self.client.post("/profile/", {"form_type": "weekly_availability", "day_6": ["intro", "teaching"]})
        self.client.post(
            "/profile/", {"form_type": "availability_exception", "date": "2025-03-02", "roles": ["closing"]}
        )

        self.member.refresh_from_db()
        self.assertEqual(self.member.availability["template"]["6"]["teaching"], True)
        self.assertEqual(self.member.availability["template"]["2"]["intro"], False)
        self.assertEqual(self.member.availability["exceptions"]["2025-03-02"]["closing"], True)
        response = self.client.get("/profile/")
        self.assertContains(response, "02/03/2025")

        self.client.post("/profile/", {"form_type": "delete_exception", "date": "2025-03-02"})

        self.member.refresh_from_db()
        self.assertEqual(self.member.availability["exceptions"], {})

    def test_stats_and_audit_are_admin_only(self):
        self.client.login(email="member@example.com", password="pass")
        self.assertEqual(self.client.get("/stats/").status_code, 403)
        self.assertEqual(self.client.get("/audit/").status_code, 403)

        self.client.login(email="admin@example.com", password="pass")
        self.assertEqual(self.client.get("/stats/", {"year": 2025}).status_code, 200)
        self.assertEqual(self.client.get("/audit/").status_code, 200)

    def test_readings_and_hymnal_pages(self):
        self.client.login(email="member@example.com", password="pass")

        self.assertEqual(self.client.get("/readings/", {"only_repeated": "on"}).status_code, 200)
        self.assertEqual(self.client.get("/hymnal/", {"kind": "chorus"}).status_code, 200)


class PwaViewsTests(TestCase):
    def test_manifest(self):
        response = self.client.get("/manifest.webmanifest")

        self.assertEqual(response["Content-Type"], "application/manifest+json")
        self.assertEqual(json.loads(response.content)["lang"], "es-ES")

    def test_push_subscribe_and_unsubscribe(self):
        user = get_user_model().objects.create_user(email="member@example.com", password="pass")
        self.client.login(email="member@example.com", password="pass")
        payload = {"endpoint": "https://push.example.com/abc", "keys": {"auth": "a", "p256dh": "p"}}

        response = self.client.post("/push/subscribe/", json.dumps(payload), content_type="application/json")
        self.assertEqual(response.json(), {"ok": True})
        self.assertTrue(PushSubscription.objects.filter(user=user, is_active=True).exists())
        self.assertEqual(self.client.get("/push/status/").json(), {"subscribed": True})

        response = self.client.post(
            "/push/unsubscribe/", json.dumps({"endpoint": payload["endpoint"]}), content_type="application/json"
        )
        self.assertEqual(response.json(), {"ok": True})
        self.assertFalse(PushSubscription.objects.get(user=user).is_active)
        self.assertEqual(self.client.get("/push/status/").json(), {"subscribed": False})

    def test_push_subscribe_requires_keys(self):
        get_user_model().objects.create_user(email="member@example.com", password="pass")
        self.client.login(email="member@example.com", password="pass")

        response = self.client.post(
            "/push/subscribe/", json.dumps({"endpoint": "https://push.example.com/abc"}), content_type="application/json"
        )

        self.assertEqual(response.status_code, 400)

    def test_service_worker_opens_service_from_push(self):
        response = self.client.get("/sw.js")

        self.assertEqual(response["Content-Type"], "application/javascript")
        self.assertEqual(response["Service-Worker-Allowed"], "/")
        self.assertContains(response, "/offline/")
        self.assertContains(response, '"/services/" + data.service_id')
        self.assertContains(self.client.get("/offline/"), "Sin conexión")
