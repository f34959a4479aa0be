from django.contrib.auth import get_user_model
from django.db.models import Q

from core.exceptions import ValidationError
from core.models import Service
from core.services.audit import log_audit
from core.services.availability import is_available
from notifications.services import enqueue_notification

ASSIGNMENT_CHANGED = "ASSIGNMENT_CHANGED"


def search_pulpit_users(query="", limit=20, day=None, role=None):
    """Active pulpit users matching ``query`` by first or last name.

    With a ``day`` and ``role`` every user is flagged with ``available`` and
    the available ones come first.
    """
    User = get_user_model()
    qs = User.objects.filter(pulpit=True, is_active=True).order_by("first_name", "last_name")
    query = (query or "").strip()
    if query:
        qs = qs.filter(Q(first_name__icontains=query) | Q(last_name__icontains=query))
    qs = qs[:limit]
    if day is None or role is None:
        return qs
    users = list(qs)
    for user in users:
        user.available = is_available(user, day, role)
    return sorted(users, key=lambda user: not user.available)


def update_assignment(service, role, user, actor=None, confirmed=False):
    if role not in Service.ROLES:
        raise ValidationError("Tipo de asignación no válido.", field="role")
    if user is not None and not user.pulpit:
        raise ValidationError("El hermano no está habilitado para el púlpito.", field="user")
    field_name = Service.ROLES[role][1]
    previous_id = service.assignee_id_for(role)
    new_id = user.id if user else None
    if previous_id == new_id:
        return service
    if user is not None and not confirmed and not is_available(user, service.date, role):
        raise ValidationError("El hermano no está disponible para esta participación.", field="availability")
    setattr(service, field_name, user)
    service.save(update_fields=[field_name, "updated_at"])
    event = log_audit(
        actor,
        "Service",
        service.id,
        "assignment_change",
        {"role": role, "from": previous_id, "to": new_id},
        description=f"Cambio de {Service.ROLE_LABELS[role].lower()} en culto",
        service=service,
    )
    if user is not None:
        enqueue_notification(
            user,
            ASSIGNMENT_CHANGED,
            {"service_id": service.id, "role": role},
            idempotency_key=f"assign:{service.id}:{role}:{user.id}:{event.id}",
        )
    return service
