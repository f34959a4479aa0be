from django.db.models import Max

from core.exceptions import LimitExceededError, NotFoundError, ValidationError
from core.models import Chorus, Hymn, ServicePlanItem
from core.services.audit import log_audit

MAX_HYMNS_PER_SERVICE = 3
MAX_CHORUSES_PER_SERVICE = 3
SEARCH_LIMIT = 20

CATALOGUES = {
    ServicePlanItem.KIND_HYMN: Hymn,
    ServicePlanItem.KIND_CHORUS: Chorus,
}
LIMITS = {
    ServicePlanItem.KIND_HYMN: MAX_HYMNS_PER_SERVICE,
    ServicePlanItem.KIND_CHORUS: MAX_CHORUSES_PER_SERVICE,
}


def _catalogue(kind):
    try:
        return CATALOGUES[kind]
    except KeyError:
        raise ValidationError("Tipo no válido: debe ser himno o coro.", field="kind") from None


def search_catalogue(kind, query="", limit=SEARCH_LIMIT):
    model = _catalogue(kind)
    qs = model.objects.order_by("number")
    query = (query or "").strip()
    if query.isdigit():
        qs = qs.filter(number=int(query))
    elif query:
        qs = qs.filter(title__icontains=query)
    return qs[:limit]


def catalogue_counts():
    return {"hymns": Hymn.objects.count(), "choruses": Chorus.objects.count()}


def plan_for_service(service):
    return ServicePlanItem.objects.filter(service=service).select_related("hymn", "chorus").order_by("order", "id")


def add_plan_item(service, kind, item_id, order=None, actor=None):
    model = _catalogue(kind)
    item = model.objects.filter(id=item_id).first()
    if item is None:
        raise NotFoundError("Himno" if kind == ServicePlanItem.KIND_HYMN else "Coro")
    current = ServicePlanItem.objects.filter(service=service, kind=kind).count()
    if current >= LIMITS[kind]:
        label = "himnos" if kind == ServicePlanItem.KIND_HYMN else "coros"
        raise LimitExceededError(f"Máximo {LIMITS[kind]} {label} permitidos")
    if order is None:
        order = (ServicePlanItem.objects.filter(service=service).aggregate(top=Max("order"))["top"] or 0) + 1
    plan_item = ServicePlanItem.objects.create(
        service=service,
        kind=kind,
        hymn=item if kind == ServicePlanItem.KIND_HYMN else None,
        chorus=item if kind == ServicePlanItem.KIND_CHORUS else None,
        order=order,
    )
    log_audit(
        actor,
        "ServicePlanItem",
        plan_item.id,
        "hymns_change",
        {"kind": kind, "item_id": item.id, "order": order},
        description=f"Añadido {plan_item.get_kind_display().lower()} al culto",
        service=service,
    )
    return plan_item


def remove_plan_item(plan_item, actor=None):
    service = plan_item.service
    payload = {"kind": plan_item.kind, "item_id": plan_item.hymn_id or plan_item.chorus_id}
    plan_item_id = plan_item.id
    plan_item.delete()
    log_audit(
        actor,
        "ServicePlanItem",
        plan_item_id,
        "hymns_change",
        payload,
        description="Eliminado himno/coro del culto",
        service=service,
    )


def plan_duration(items):
    total = 0
    for plan_item in items:
        item = plan_item.item
        total += (item.duration_seconds or 0) if item else 0
    return total


def format_duration(seconds):
    seconds = int(seconds or 0)
    return f"{seconds // 60}:{seconds % 60:02d}"


def parse_duration(value):
    try:
        minutes, seconds = (int(part) for part in str(value).split(":"))
    except ValueError:
        raise ValidationError("Duración no válida (formato MM:SS).", field="duration") from None
    if minutes < 0 or not 0 <= seconds < 60:
        raise ValidationError("Duración no válida (formato MM:SS).", field="duration")
    return minutes * 60 + seconds
