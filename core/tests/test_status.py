from datetime import date, time

from django.contrib.auth import get_user_model
from django.test import TestCase

from core.models import Service, ServiceType
from core.services.status import STATUS_COMPLETE, STATUS_INCOMPLETE, evaluate_completion, missing_roles


class CompletionStatusTests(TestCase):
    def setUp(self):
        self.reader = get_user_model().objects.create_user(email="reader@example.com", password="pass", pulpit=True)

    def _service(self, service_type=None, **assignees):
        return Service.objects.create(
            date=date(2025, 3, 2), start_time=time(19, 0), service_type=service_type, **assignees
        )

    def test_service_without_type_is_incomplete(self):
        service = self._service()

        self.assertEqual(evaluate_completion(service), STATUS_INCOMPLETE)
        self.assertEqual(missing_roles(service), ["intro", "closing", "teaching", "testimonies"])

    def test_type_without_requirements_is_complete(self):
        service_type = ServiceType.objects.create(name="Oración")
        service = self._service(service_type)

        self.assertEqual(evaluate_completion(service), STATUS_COMPLETE)
        self.assertEqual(missing_roles(service), [])

    def test_each_missing_required_role_makes_it_incomplete(self):
        service_type = ServiceType.objects.create(
            name="Culto general",
            requires_intro_reading=True,
            requires_closing_reading=True,
            requires_teaching=True,
            requires_testimonies=True,
        )
        full = {
            "intro_reader": self.reader,
            "closing_reader": self.reader,
            "teacher": self.reader,
            "testimonies_leader": self.reader,
        }
        self.assertEqual(evaluate_completion(self._service(service_type, **full)), STATUS_COMPLETE)

        for field_name in full:
            partial = {key: value for key, value in full.items() if key != field_name}
            service = self._service(service_type, **partial)
            self.assertEqual(evaluate_completion(service), STATUS_INCOMPLETE, field_name)
            self.assertEqual(len(missing_roles(service)), 1)

    def test_unrequired_roles_are_ignored(self):
        service_type = ServiceType.objects.create(name="Enseñanza", requires_teaching=True)
        service = self._service(service_type, teacher=self.reader)

        self.assertEqual(evaluate_completion(service), STATUS_COMPLETE)

    def test_explicit_type_overrides_service_type(self):
        lenient = ServiceType.objects.create(name="Oración")
        strict = ServiceType.objects.create(name="Testimonios", requires_testimonies=True)
        service = self._service(lenient)

        self.assertEqual(evaluate_completion(service), STATUS_COMPLETE)
        self.assertEqual(evaluate_completion(service, service_type=strict), STATUS_INCOMPLETE)
        self.assertEqual(missing_roles(service, service_type=strict), ["testimonies"])

    def test_evaluation_has_no_side_effects(self):
        service_type = ServiceType.objects.create(name="Enseñanza", requires_teaching=True)
        service = self._service(service_type)
        updated_at = service.updated_at

        evaluate_completion(service)
        service.refresh_from_db()

        self.assertEqual(service.updated_at, updated_at)
