from datetime import date

from django.contrib.auth import get_user_model
from django.test import TestCase

from core.exceptions import NotFoundError, ValidationError
from core.models import AuditEvent
from core.services.availability import (
    availability_exceptions,
    is_available,
    remove_availability_exception,
    set_availability_exception,
    set_weekly_availability,
    weekly_roles,
)

SUNDAY = date(2025, 3, 2)
WEDNESDAY = date(2025, 3, 5)


class AvailabilityTests(TestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(email="reader@example.com", password="pass", pulpit=True)

    def test_user_without_availability_is_available(self):
        self.assertTrue(is_available(self.user, SUNDAY, "teaching"))
        self.assertEqual(weekly_roles(self.user)[6], ["intro", "closing", "teaching", "testimonies"])

    def test_weekly_template_limits_days_and_roles(self):
        set_weekly_availability(self.user, {6: ["intro", "closing"]})

        self.user.refresh_from_db()
        self.assertTrue(is_available(self.user, SUNDAY, "intro"))
        self.assertFalse(is_available(self.user, SUNDAY, "teaching"))
        self.assertFalse(is_available(self.user, WEDNESDAY, "intro"))
        self.assertEqual(weekly_roles(self.user)[6], ["intro", "closing"])
        self.assertEqual(weekly_roles(self.user)[2], [])
        self.assertTrue(AuditEvent.objects.filter(action_type="availability_update", entity_id=str(self.user.id)).exists())

    def test_exception_overrides_template_for_that_date(self):
        set_weekly_availability(self.user, {6: ["intro"]})
        set_availability_exception(self.user, SUNDAY, [])
        set_availability_exception(self.user, WEDNESDAY, ["teaching"])

        self.assertFalse(is_available(self.user, SUNDAY, "intro"))
        self.assertTrue(is_available(self.user, date(2025, 3, 9), "intro"))
        self.assertTrue(is_available(self.user, WEDNESDAY, "teaching"))
        self.assertEqual([day for day, _roles in availability_exceptions(self.user)], ["2025-03-02", "2025-03-05"])

    def test_removing_exception_restores_template(self):
        set_weekly_availability(self.user, {6: ["intro"]})
        set_availability_exception(self.user, SUNDAY, [])

        remove_availability_exception(self.user, SUNDAY)

        self.assertTrue(is_available(self.user, SUNDAY, "intro"))
        with self.assertRaises(NotFoundError):
            remove_availability_exception(self.user, SUNDAY)

    def test_unknown_roles_and_days_are_rejected(self):
        with self.assertRaises(ValidationError):
            set_weekly_availability(self.user, {6: ["preaching"]})
        with self.assertRaises(ValidationError):
            set_weekly_availability(self.user, {9: ["intro"]})
        with self.assertRaises(ValidationError):
            set_availability_exception(self.user, SUNDAY, ["preaching"])
        self.user.refresh_from_db()
        self.assertEqual(self.user.availability, {})
