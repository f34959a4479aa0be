from collections import Counter

from django.contrib.auth import get_user_model

from core.models import BibleReading, Service
from core.services.readings import format_citation

TOP_READINGS = 5


def participation_stats(year):
    User = get_user_model()
    users = User.objects.filter(pulpit=True).order_by("first_name", "last_name")
    rows = {
        user.id: {"user": user, "total": 0, "stats": {role: 0 for role in Service.ROLES}}
        for user in users
    }
    fields = [f"{field_name}_id" for _flag, field_name in Service.ROLES.values()]
    services = Service.objects.filter(date__year=year).values_list(*fields)
    for assignee_ids in services:
        for role, user_id in zip(Service.ROLES, assignee_ids):
            row = rows.get(user_id)
            if row is None:
                continue
            row["stats"][role] += 1
            row["total"] += 1
    return sorted(rows.values(), key=lambda row: row["total"], reverse=True)


def bible_reading_stats():
    readings = BibleReading.objects.all()
    citations = Counter(format_citation(reading) for reading in readings)
    top_readings = [{"label": label, "count": count} for label, count in citations.most_common(TOP_READINGS)]
    by_type = Counter(readings.values_list("reading_type", flat=True))
    readings_by_type = [
        {"label": label, "count": by_type.get(code, 0)} for code, label in BibleReading.TYPE_CHOICES
    ]
    return {"top_readings": top_readings, "readings_by_type": readings_by_type}


def member_stats():
    User = get_user_model()
    return {
        "pulpit": User.objects.filter(pulpit=True).count(),
        "total": User.objects.count(),
    }
