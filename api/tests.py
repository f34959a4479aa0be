from datetime import date, time

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from core.models import Holiday, Hymn, Service, ServiceType


class ServiceApiTests(TestCase):
    client_class = APIClient

    def setUp(self):
        User = get_user_model()
        self.user = User.objects.create_user(email="member@example.com", password="pass")
        self.reader = User.objects.create_user(email="reader@example.com", password="pass", pulpit=True)
        self.service_type = ServiceType.objects.create(
            name="Culto de enseñanza",
            requires_intro_reading=True,
            requires_teaching=True,
        )

    def test_requires_authentication(self):
        response = self.client.get("/api/services/")
        self.assertIn(response.status_code, (401, 403))

    def test_lists_services_with_completion_status(self):
        complete = Service.objects.create(
            date=date(2025, 3, 2),
            start_time=time(19, 0),
            service_type=self.service_type,
            intro_reader=self.reader,
            teacher=self.reader,
        )
        incomplete = Service.objects.create(
            date=date(2025, 3, 5),
            start_time=time(19, 0),
            service_type=self.service_type,
            intro_reader=self.reader,
        )
        self.client.login(email="member@example.com", password="pass")

        response = self.client.get("/api/services/")

        self.assertEqual(response.status_code, 200)
        rows = {row["id"]: row for row in response.json()["results"]}
        self.assertEqual(rows[complete.id]["completion_status"], "complete")
        self.assertEqual(rows[incomplete.id]["completion_status"], "incomplete")
        self.assertEqual(rows[incomplete.id]["missing_roles"], ["teaching"])
        self.assertEqual(rows[complete.id]["service_type_name"], "Culto de enseñanza")

    def test_service_without_type_is_incomplete(self):
        Service.objects.create(date=date(2025, 3, 2), start_time=time(19, 0))
        self.client.login(email="member@example.com", password="pass")

        response = self.client.get("/api/services/")

        row = response.json()["results"][0]
        self.assertEqual(row["completion_status"], "incomplete")
        self.assertIsNone(row["service_type_name"])

    def test_filters_services_by_date_range(self):
        Service.objects.create(date=date(2025, 3, 2), start_time=time(19, 0), service_type=self.service_type)
        Service.objects.create(date=date(2025, 4, 6), start_time=time(19, 0), service_type=self.service_type)
        self.client.login(email="member@example.com", password="pass")

        response = self.client.get("/api/services/", {"from": "2025-04-01", "to": "2025-04-30"})

        results = response.json()["results"]
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0]["date"], "2025-04-06")


class CatalogueApiTests(TestCase):
    client_class = APIClient

    def setUp(self):
        get_user_model().objects.create_user(email="member@example.com", password="pass")
        self.client.login(email="member@example.com", password="pass")

    def test_holidays_filter_by_year(self):
        Holiday.objects.create(date=date(2025, 1, 6), category=Holiday.CATEGORY_NATIONAL, description="Reyes")
        Holiday.objects.create(date=date(2026, 1, 6), category=Holiday.CATEGORY_NATIONAL, description="Reyes")

        response = self.client.get("/api/holidays/", {"year": "2025"})

        results = response.json()["results"]
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0]["category"], "national")

    def test_hymns_ordered_by_number(self):
        Hymn.objects.create(number=12, title="Santo", duration_seconds=180)
        Hymn.objects.create(number=3, title="Gloria", duration_seconds=150)

        response = self.client.get("/api/hymns/")

        numbers = [row["number"] for row in response.json()["results"]]
        self.assertEqual(numbers, [3, 12])
