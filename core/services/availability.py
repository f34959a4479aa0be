"""Member availability for pulpit roles.

``User.availability`` holds a weekly template keyed by weekday (``"0"`` is
Monday) and per-date exceptions keyed by ISO date. Each entry maps a role
code to whether the member can take it::

    {"template": {"6": {"intro": true, "teaching": false}},
     "exceptions": {"2025-03-02": {"intro": false}}}

A member who never set availability is available for everything. Once a
template exists, days and roles missing from it count as unavailable. An
exception for a date replaces the template for that date.
"""

from core.exceptions import NotFoundError, ValidationError
from core.models import Service
from core.services.audit import log_audit

WEEKDAYS = [
    (0, "Lunes"),
    (1, "Martes"),
    (2, "Miércoles"),
    (3, "Jueves"),
    (4, "Viernes"),
    (5, "Sábado"),
    (6, "Domingo"),
]


def _roles_entry(roles):
    roles = set(roles or [])
    unknown = roles - set(Service.ROLES)
    if unknown:
        raise ValidationError("Tipo de asignación no válido.", field="roles")
    return {role: role in roles for role in Service.ROLES}


def is_available(user, day, role):
    data = user.availability or {}
    exception = (data.get("exceptions") or {}).get(day.isoformat())
    if exception is not None:
        return exception.get(role) is True
    template = data.get("template")
    if template is None:
        return True
    return (template.get(str(day.weekday())) or {}).get(role) is True


def weekly_roles(user):
    """Role codes available per weekday, for prefilling forms."""
    template = (user.availability or {}).get("template")
    if template is None:
        return {day: list(Service.ROLES) for day, _label in WEEKDAYS}
    return {
        day: [role for role in Service.ROLES if (template.get(str(day)) or {}).get(role) is True]
        for day, _label in WEEKDAYS
    }


def availability_exceptions(user):
    exceptions = (user.availability or {}).get("exceptions") or {}
    return sorted(exceptions.items())


def _save(user, availability, action, diff, actor):
    user.availability = availability
    user.save(update_fields=["availability"])
    log_audit(actor or user, "User", user.id, action, diff, description="Disponibilidad actualizada")
    return user


def set_weekly_availability(user, roles_by_day, actor=None):
    """Replace the weekly template with ``{weekday: [role, ...]}``."""
    template = {}
    for day, roles in roles_by_day.items():
        if int(day) not in dict(WEEKDAYS):
            raise ValidationError("Día de la semana no válido.", field="weekday")
        template[str(int(day))] = _roles_entry(roles)
    availability = dict(user.availability or {})
    availability["template"] = template
    return _save(user, availability, "availability_update", {"template": template}, actor)


def set_availability_exception(user, day, roles, actor=None):
    entry = _roles_entry(roles)
    availability = dict(user.availability or {})
    exceptions = dict(availability.get("exceptions") or {})
    exceptions[day.isoformat()] = entry
    availability["exceptions"] = exceptions
    return _save(user, availability, "availability_exception", {"date": day.isoformat(), "roles": entry}, actor)


def remove_availability_exception(user, day, actor=None):
    availability = dict(user.availability or {})
    exceptions = dict(availability.get("exceptions") or {})
    if exceptions.pop(day.isoformat(), None) is None:
        raise NotFoundError("Excepción", message="No hay una excepción para esa fecha")
    availability["exceptions"] = exceptions
    return _save(user, availability, "availability_exception_delete", {"date": day.isoformat()}, actor)
