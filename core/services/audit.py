from core.models import AuditEvent


def log_audit(actor, entity_type, entity_id, action_type, diff=None, description="", service=None):
    if actor is not None and not getattr(actor, "is_authenticated", False):
        actor = None
    return AuditEvent.objects.create(
        actor_user=actor,
        service=service,
        entity_type=entity_type,
        entity_id=str(entity_id),
        action_type=action_type,
        description=description[:255],
        diff_json=diff or {},
    )


def audit_action_types():
    return list(
        AuditEvent.objects.order_by("action_type").values_list("action_type", flat=True).distinct()
    )
