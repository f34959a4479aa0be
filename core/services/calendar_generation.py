from datetime import date, datetime

from dateutil import rrule
from dateutil.relativedelta import relativedelta

from core.exceptions import ValidationError
from core.models import Service, ServiceSchedule
from core.services.audit import log_audit
from core.services.holidays import HOLIDAY_SHIFT_MINUTES, holidays_by_date, shift_time


def month_bounds(year, month):
    try:
        start = date(int(year), int(month), 1)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Mes no válido.") from exc
    end = start + relativedelta(months=1, days=-1)
    return start, end


def schedule_dates(schedule, start_date, end_date):
    rule = rrule.rrule(
        rrule.WEEKLY,
        byweekday=schedule.weekday,
        dtstart=datetime.combine(start_date, schedule.default_time),
        until=datetime.combine(end_date, schedule.default_time),
    )
    return [occ.date() for occ in rule]


def generate_services_for_month(year, month, actor=None):
    start_date, end_date = month_bounds(year, month)
    holidays = holidays_by_date(start_date, end_date)
    schedules = ServiceSchedule.objects.filter(active=True).select_related("service_type")
    created = []
    for schedule in schedules:
        for day in schedule_dates(schedule, start_date, end_date):
            if Service.objects.filter(date=day, service_type=schedule.service_type).exists():
                continue
            is_holiday = bool(holidays.get(day))
            adjusted = is_holiday and schedule.affected_by_holiday
            start_time = schedule.default_time
            if adjusted:
                start_time = shift_time(start_time, -HOLIDAY_SHIFT_MINUTES)
            service = Service.objects.create(
                date=day,
                start_time=start_time,
                service_type=schedule.service_type,
                status=Service.STATUS_PLANNED,
                is_holiday=is_holiday,
                is_holiday_adjusted=adjusted,
            )
            created.append(service)
    if created:
        log_audit(
            actor,
            "Service",
            f"{start_date:%Y-%m}",
            "generate",
            {"count": len(created)},
            description=f"Generados {len(created)} cultos para {start_date:%m/%Y}",
        )
    return created


def create_service(day, start_time, service_type, actor=None):
    # Explicit times are kept as entered, even on a holiday.
    is_holiday = bool(holidays_by_date(day, day).get(day))
    service = Service.objects.create(
        date=day,
        start_time=start_time,
        service_type=service_type,
        status=Service.STATUS_PLANNED,
        is_holiday=is_holiday,
    )
    log_audit(actor, "Service", service.id, "create", {"date": day.isoformat()}, service=service)
    return service


def services_for_month(year, month):
    start_date, end_date = month_bounds(year, month)
    return (
        Service.objects.filter(date__gte=start_date, date__lte=end_date)
        .select_related("service_type", "intro_reader", "closing_reader", "teacher", "testimonies_leader")
        .order_by("date", "start_time")
    )
