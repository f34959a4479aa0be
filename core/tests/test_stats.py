from datetime import date, time

from django.contrib.auth import get_user_model
from django.test import TestCase

from core.models import BibleReading, Service, ServiceType
from core.services.stats import bible_reading_stats, member_stats, participation_stats


class ParticipationStatsTests(TestCase):
    def test_counts_roles_per_pulpit_user(self):
        User = get_user_model()
        ana = User.objects.create_user(email="ana@example.com", password="pass", first_name="Ana", pulpit=True)
        luis = User.objects.create_user(email="luis@example.com", password="pass", first_name="Luis", pulpit=True)
        User.objects.create_user(email="member@example.com", password="pass")
        service_type = ServiceType.objects.create(name="Culto general")
        Service.objects.create(
            date=date(2025, 3, 2), start_time=time(19, 0), service_type=service_type, intro_reader=luis, teacher=luis
        )
        Service.objects.create(date=date(2025, 3, 9), start_time=time(19, 0), service_type=service_type, closing_reader=ana)
        Service.objects.create(date=date(2024, 3, 9), start_time=time(19, 0), service_type=service_type, teacher=ana)

        rows = participation_stats(2025)

        self.assertEqual([row["user"] for row in rows], [luis, ana])
        self.assertEqual(rows[0]["total"], 2)
        self.assertEqual(rows[0]["stats"], {"intro": 1, "closing": 0, "teaching": 1, "testimonies": 0})
        self.assertEqual(rows[1]["stats"]["teaching"], 0)


class ReadingStatsTests(TestCase):
    def test_top_readings_and_types(self):
        service = Service.objects.create(date=date(2025, 3, 2), start_time=time(19, 0))
        for _ in range(2):
            BibleReading.objects.create(
                service=service, reading_type="intro", book="Salmos", chapter_start=23, verse_start=1, chapter_end=23, verse_end=6
            )
        BibleReading.objects.create(
            service=service, reading_type="closing", book="Juan", chapter_start=3, verse_start=16, chapter_end=3, verse_end=16
        )

        stats = bible_reading_stats()

        self.assertEqual(stats["top_readings"][0], {"label": "Salmos 23:1-23:6", "count": 2})
        self.assertEqual(
            stats["readings_by_type"], [{"label": "Introducción", "count": 2}, {"label": "Finalización", "count": 1}]
        )

    def test_member_stats(self):
        User = get_user_model()
        User.objects.create_user(email="a@example.com", password="pass", pulpit=True)
        User.objects.create_user(email="b@example.com", password="pass")

        self.assertEqual(member_stats(), {"pulpit": 1, "total": 2})
