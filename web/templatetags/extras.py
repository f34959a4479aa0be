from django import template

from core.services.hymns import format_duration
from core.services.readings import format_citation
from core.services.status import STATUS_COMPLETE

register = template.Library()


@register.filter
def get_item(mapping, key):
    if not mapping:
        return None
    return mapping.get(key)


@register.filter
def get_list_item(mapping, key):
    if not mapping:
        return []
    return mapping.get(key, [])


@register.filter
def weekday_label(value):
    labels = {
        0: "Lun",
        1: "Mar",
        2: "Mié",
        3: "Jue",
        4: "Vie",
        5: "Sáb",
        6: "Dom",
    }
    if value is None or value == "":
        return "Cualquier día"
    return labels.get(value, str(value))


@register.filter
def completion_label(value):
    return "Completo" if value == STATUS_COMPLETE else "Incompleto"


@register.filter
def duration(seconds):
    return format_duration(seconds)


@register.filter
def citation(reading):
    if reading is None:
        return ""
    return format_citation(reading)
