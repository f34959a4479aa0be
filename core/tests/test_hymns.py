from datetime import date, time

from django.contrib.auth import get_user_model
from django.test import TestCase

from core.exceptions import LimitExceededError, NotFoundError, ValidationError
from core.models import AuditEvent, Chorus, Hymn, Service, ServicePlanItem, ServiceType
from core.services.hymns import (
    add_plan_item,
    format_duration,
    parse_duration,
    plan_duration,
    plan_for_service,
    remove_plan_item,
    search_catalogue,
)


class PlanItemTests(TestCase):
    def setUp(self):
        service_type = ServiceType.objects.create(name="Culto de alabanza", has_hymns_and_choruses=True)
        self.service = Service.objects.create(date=date(2025, 3, 2), start_time=time(19, 0), service_type=service_type)
        self.hymns = [Hymn.objects.create(number=n, title=f"Himno {n}", duration_seconds=120) for n in range(1, 5)]
        self.chorus = Chorus.objects.create(number=1, title="Coro de gozo", duration_seconds=65)

    def test_adds_items_in_order(self):
        first = add_plan_item(self.service, "hymn", self.hymns[0].id)
        second = add_plan_item(self.service, "chorus", self.chorus.id)

        self.assertEqual((first.order, second.order), (1, 2))
        self.assertEqual(list(plan_for_service(self.service)), [first, second])
        self.assertEqual(AuditEvent.objects.filter(action_type="hymns_change").count(), 2)

    def test_hymn_limit_per_service(self):
        for hymn in self.hymns[:3]:
            add_plan_item(self.service, "hymn", hymn.id)

        with self.assertRaises(LimitExceededError) as ctx:
            add_plan_item(self.service, "hymn", self.hymns[3].id)

        self.assertEqual(str(ctx.exception), "Máximo 3 himnos permitidos")
        # choruses have their own limit
        add_plan_item(self.service, "chorus", self.chorus.id)

    def test_missing_item_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            add_plan_item(self.service, "hymn", 9999)

    def test_unknown_kind_is_rejected(self):
        with self.assertRaises(ValidationError):
            add_plan_item(self.service, "psalm", self.hymns[0].id)

    def test_remove_item(self):
        item = add_plan_item(self.service, "hymn", self.hymns[0].id)

        remove_plan_item(item)

        self.assertFalse(ServicePlanItem.objects.exists())
        self.assertEqual(AuditEvent.objects.filter(action_type="hymns_change").count(), 2)

    def test_plan_duration(self):
        add_plan_item(self.service, "hymn", self.hymns[0].id)
        add_plan_item(self.service, "chorus", self.chorus.id)

        self.assertEqual(plan_duration(plan_for_service(self.service)), 185)


class CatalogueTests(TestCase):
    def test_search_by_number_or_title(self):
        Hymn.objects.create(number=12, title="Santo, santo, santo")
        Hymn.objects.create(number=120, title="Cuán grande es Él")

        self.assertEqual([h.number for h in search_catalogue("hymn", "12")], [12])
        self.assertEqual([h.number for h in search_catalogue("hymn", "grande")], [120])
        self.assertEqual([h.number for h in search_catalogue("hymn", "")], [12, 120])

    def test_durations(self):
        self.assertEqual(format_duration(185), "3:05")
        self.assertEqual(format_duration(None), "0:00")
        self.assertEqual(parse_duration("3:05"), 185)
        with self.assertRaises(ValidationError):
            parse_duration("tres minutos")
        with self.assertRaises(ValidationError):
            parse_duration("3:75")


class CatalogueAdminTests(TestCase):
    def setUp(self):
        get_user_model().objects.create_superuser(email="admin@example.com", password="pass")
        self.client.login(email="admin@example.com", password="pass")

    def test_duration_is_entered_as_minutes_and_seconds(self):
        response = self.client.post("/admin/core/hymn/add/", {"number": 7, "title": "Santo, santo", "duration": "3:05"})

        self.assertEqual(response.status_code, 302)
        self.assertEqual(Hymn.objects.get(number=7).duration_seconds, 185)

    def test_invalid_duration_is_reported(self):
        response = self.client.post("/admin/core/chorus/add/", {"number": 3, "title": "Alabaré", "duration": "tres"})

        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Duración no válida")
        self.assertFalse(Chorus.objects.exists())

    def test_change_form_shows_current_duration(self):
        hymn = Hymn.objects.create(number=9, title="Cuán grande es Él", duration_seconds=245)

        response = self.client.get(f"/admin/core/hymn/{hymn.id}/change/")

        self.assertContains(response, 'value="4:05"')
