import logging
from datetime import timedelta

from django.conf import settings
from django.core.mail import send_mail
from django.db.models import Q
from django.urls import reverse
from django.utils import timezone

from core.models import Service
from notifications.models import Notification, NotificationPreference, PushSubscription

logger = logging.getLogger(__name__)

STUCK_PROCESSING_AFTER = timedelta(minutes=15)


class NotificationService:
    def deliver(self, notification):
        if notification.channel == "email":
            subject = notification.payload.get("subject", settings.CHURCH_NAME)
            body = notification.payload.get("body", "")
            send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [notification.user.email])
            return True
        return False

    def claim_pending_ids(self, limit=50, now=None):
        now = now or timezone.now()
        stuck_before = now - STUCK_PROCESSING_AFTER
        candidates = list(
            Notification.objects.filter(
                Q(status="pending") | Q(status="processing", last_attempt_at__lt=stuck_before)
            )
            .order_by("created_at", "id")
            .values_list("id", flat=True)[:limit]
        )
        claimed = []
        for notification_id in candidates:
            updated = Notification.objects.filter(
                Q(status="pending") | Q(status="processing", last_attempt_at__lt=stuck_before),
                id=notification_id,
            ).update(status="processing", last_attempt_at=now)
            if updated:
                claimed.append(notification_id)
        return claimed

    def send_pending(self, limit=50):
        sent = 0
        claimed = self.claim_pending_ids(limit=limit)
        for notification in Notification.objects.filter(id__in=claimed).select_related("user"):
            try:
                delivered = self.deliver(notification)
            except Exception as exc:
                logger.warning("Notification %s failed: %s", notification.id, exc)
                notification.status = "failed"
                notification.error_message = str(exc)
            else:
                notification.status = "sent" if delivered else "failed"
                if delivered:
                    notification.sent_at = timezone.now()
                    sent += 1
            notification.save(update_fields=["status", "sent_at", "error_message"])
        return sent


def _absolute_url(path):
    base = getattr(settings, "APP_BASE_URL", "")
    if base:
        return f"{base}{path}"
    return path


def _render_payload(template_code, payload):
    if payload.get("subject") and payload.get("body"):
        return payload

    service = payload.get("service")
    if not service and payload.get("service_id"):
        service = Service.objects.select_related("service_type").filter(id=payload["service_id"]).first()

    if service and template_code == "ASSIGNMENT_CHANGED":
        role = payload.get("role")
        role_label = Service.ROLE_LABELS.get(role, "una participación")
        url = _absolute_url(reverse("service_detail", args=[service.id]))
        return {
            "subject": "Nueva asignación",
            "body": (
                f"Se te ha asignado {role_label.lower()} en el culto del "
                f"{service.date:%d/%m/%Y} a las {service.start_time:%H:%M}. Ver detalles: {url}"
            ),
            "url": url,
        }

    return {"subject": settings.CHURCH_NAME, "body": "Tienes una nueva actualización en el sistema."}


def _skipped_reason(user):
    if not user.is_active:
        return "user_inactive"
    if not user.email:
        return "missing_email"
    pref = NotificationPreference.objects.filter(user=user).first()
    if pref and not pref.email_enabled:
        return "email_disabled"
    return ""


def enqueue_notification(user, template_code, payload, idempotency_key, channel="email"):
    payload = _render_payload(template_code, payload)
    reason = _skipped_reason(user)
    defaults = {
        "user": user,
        "template_code": template_code,
        "payload": payload,
        "status": "skipped" if reason else "pending",
        "error_message": reason,
    }
    notification, _ = Notification.objects.get_or_create(
        channel=channel,
        idempotency_key=idempotency_key,
        defaults=defaults,
    )
    return notification


def subscribe_push(user, endpoint, p256dh_key, auth_key, user_agent=""):
    subscription, _ = PushSubscription.objects.update_or_create(
        user=user,
        endpoint=endpoint,
        defaults={
            "p256dh_key": p256dh_key,
            "auth_key": auth_key,
            "user_agent": user_agent[:255],
            "is_active": True,
        },
    )
    return subscription


def unsubscribe_push(user, endpoint):
    return PushSubscription.objects.filter(user=user, endpoint=endpoint, is_active=True).update(is_active=False)


def has_active_push(user):
    return PushSubscription.objects.filter(user=user, is_active=True).exists()
