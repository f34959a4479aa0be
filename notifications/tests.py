from datetime import date, time, timedelta
from io import StringIO

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone

from core.models import Service, ServiceType
from notifications.models import Notification, NotificationPreference, PushSubscription
from notifications.services import (
    NotificationService,
    enqueue_notification,
    has_active_push,
    subscribe_push,
    unsubscribe_push,
)


class NotificationEnqueueTests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.user = User.objects.create_user(email="user@example.com", first_name="Ana", password="pass", pulpit=True)
        service_type = ServiceType.objects.create(name="Enseñanza", requires_teaching=True)
        self.service = Service.objects.create(date=date(2025, 12, 25), start_time=time(19, 0), service_type=service_type)

    def test_idempotency_key_deduplicates(self):
        enqueue_notification(self.user, "ASSIGNMENT_CHANGED", {"service_id": self.service.id, "role": "teaching"}, "k:1")
        enqueue_notification(self.user, "ASSIGNMENT_CHANGED", {"service_id": self.service.id, "role": "teaching"}, "k:1")
        self.assertEqual(Notification.objects.count(), 1)

    @override_settings(APP_BASE_URL="https://example.com")
    def test_assignment_payload_uses_absolute_url(self):
        notification = enqueue_notification(
            self.user, "ASSIGNMENT_CHANGED", {"service_id": self.service.id, "role": "teaching"}, "k:2"
        )
        self.assertIn("https://example.com", notification.payload["body"])
        self.assertIn("25/12/2025", notification.payload["body"])
        self.assertEqual(notification.status, "pending")

    def test_disabled_email_is_skipped(self):
        NotificationPreference.objects.create(user=self.user, email_enabled=False)
        notification = enqueue_notification(self.user, "ASSIGNMENT_CHANGED", {"service_id": self.service.id}, "k:3")
        self.assertEqual(notification.status, "skipped")
        self.assertEqual(notification.error_message, "email_disabled")

    def test_inactive_user_is_skipped(self):
        self.user.is_active = False
        self.user.save()
        notification = enqueue_notification(self.user, "ASSIGNMENT_CHANGED", {"service_id": self.service.id}, "k:4")
        self.assertEqual(notification.error_message, "user_inactive")


class NotificationProcessingTests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.user = User.objects.create_user(email="user@example.com", password="pass")

    def _notification(self, key, **extra):
        return Notification.objects.create(
            user=self.user,
            channel="email",
            template_code="ASSIGNMENT_CHANGED",
            payload={"subject": "Prueba", "body": "Prueba"},
            idempotency_key=key,
            **extra,
        )

    def test_claim_pending_is_exclusive(self):
        self._notification("claim:1")
        self._notification("claim:2")
        service = NotificationService()
        first = set(service.claim_pending_ids(limit=1))
        second = set(service.claim_pending_ids(limit=1))
        self.assertEqual(len(first), 1)
        self.assertEqual(len(second), 1)
        self.assertTrue(first.isdisjoint(second))

    def test_send_pending_delivers_email(self):
        notification = self._notification("send:1")
        sent = NotificationService().send_pending()
        self.assertEqual(sent, 1)
        self.assertEqual(len(mail.outbox), 1)
        notification.refresh_from_db()
        self.assertEqual(notification.status, "sent")
        self.assertIsNotNone(notification.sent_at)

    def test_failed_delivery_does_not_set_sent_at(self):
        class FailingService(NotificationService):
            def deliver(self, notification):
                raise RuntimeError("fail")

        notification = self._notification("fail:1")
        with self.assertLogs("notifications.services", level="WARNING"):
            FailingService().send_pending()
        notification.refresh_from_db()
        self.assertEqual(notification.status, "failed")
        self.assertIsNone(notification.sent_at)
        self.assertTrue(notification.error_message)

    def test_send_notifications_command_respects_limit(self):
        self._notification("cmd:1")
        self._notification("cmd:2")
        out = StringIO()
        call_command("send_notifications", "--limit", "1", stdout=out)
        self.assertIn("Notifications processed: 1 sent", out.getvalue())
        self.assertEqual(Notification.objects.filter(status="pending").count(), 1)

    def test_reclaim_stuck_processing(self):
        now = timezone.now()
        stuck = self._notification("stuck:1", status="processing", last_attempt_at=now - timedelta(minutes=20))
        claimed = NotificationService().claim_pending_ids(limit=10, now=now)
        self.assertIn(stuck.id, claimed)
        stuck.refresh_from_db()
        self.assertEqual(stuck.last_attempt_at, now)


class PushSubscriptionTests(TestCase):
    def setUp(self):
        User = get_user_model()
        self.user = User.objects.create_user(email="user@example.com", password="pass")

    def test_subscribe_upserts_by_endpoint(self):
        subscribe_push(self.user, "https://push.example.com/1", "p256", "auth")
        subscribe_push(self.user, "https://push.example.com/1", "p256-new", "auth-new")
        self.assertEqual(PushSubscription.objects.count(), 1)
        self.assertEqual(PushSubscription.objects.get().p256dh_key, "p256-new")

    def test_unsubscribe_deactivates_only_that_endpoint(self):
        subscribe_push(self.user, "https://push.example.com/1", "p256", "auth")
        subscribe_push(self.user, "https://push.example.com/2", "p256", "auth")
        self.assertEqual(unsubscribe_push(self.user, "https://push.example.com/1"), 1)
        self.assertEqual(
            list(PushSubscription.objects.filter(is_active=True).values_list("endpoint", flat=True)),
            ["https://push.example.com/2"],
        )
        self.assertTrue(has_active_push(self.user))

    def test_resubscribing_reactivates_endpoint(self):
        subscribe_push(self.user, "https://push.example.com/1", "p256", "auth")
        unsubscribe_push(self.user, "https://push.example.com/1")
        self.assertFalse(has_active_push(self.user))
        self.assertEqual(unsubscribe_push(self.user, "https://push.example.com/1"), 0)

        subscribe_push(self.user, "https://push.example.com/1", "p256", "auth")

        self.assertTrue(has_active_push(self.user))
        self.assertEqual(PushSubscription.objects.count(), 1)
