"""Completion status of a service: are all required roles assigned?"""

from core.models import Service

STATUS_COMPLETE = "complete"
STATUS_INCOMPLETE = "incomplete"


def _resolve_type(service, service_type):
    if service_type is not None:
        return service_type
    if not service.service_type_id:
        return None
    return service.service_type


def missing_roles(service, service_type=None):
    service_type = _resolve_type(service, service_type)
    if service_type is None:
        return list(Service.ROLES)
    missing = []
    for role, (flag, _field) in Service.ROLES.items():
        if getattr(service_type, flag, False) and service.assignee_id_for(role) is None:
            missing.append(role)
    return missing


def evaluate_completion(service, service_type=None):
    service_type = _resolve_type(service, service_type)
    # An unconfigured type is never complete.
    if service_type is None:
        return STATUS_INCOMPLETE
    for role, (flag, _field) in Service.ROLES.items():
        if getattr(service_type, flag, False) and service.assignee_id_for(role) is None:
            return STATUS_INCOMPLETE
    return STATUS_COMPLETE
