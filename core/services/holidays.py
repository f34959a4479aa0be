"""Holiday calendar and the start-time shift it imposes on services.

A service on a holiday date starts one hour earlier. Adding the first
holiday for a date moves every not-yet-adjusted service back an hour;
removing the last holiday for a date moves every adjusted service forward
again. Both operations lock the date's services before touching holidays so
concurrent admin actions on the same date run one after the other, and each
shift is a conditional update on ``is_holiday_adjusted`` so a service is
never shifted twice for the same transition.

The holiday write itself is all-or-nothing. Individual service shifts are
best effort: a failing row is logged, reported in the result and skipped.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date

from django.db import DatabaseError, connection, transaction
from django.utils import timezone

from core.exceptions import NotFoundError, PersistenceError, ValidationError
from core.models import Holiday, Service
from core.services.audit import log_audit

logger = logging.getLogger(__name__)

HOLIDAY_SHIFT_MINUTES = 60
MINUTES_PER_DAY = 24 * 60
VALID_CATEGORIES = {code for code, _label in Holiday.CATEGORY_CHOICES}


@dataclass
class HolidaySyncResult:
    date: date
    holiday: Holiday = None
    shifted: list = field(default_factory=list)
    skipped: list = field(default_factory=list)
    failed: list = field(default_factory=list)
    reverted: bool = False

    @property
    def ok(self):
        return not self.failed


def shift_time(value, minutes):
    """Move a time of day by ``minutes``, wrapping around midnight."""
    total = (value.hour * 60 + value.minute + minutes) % MINUTES_PER_DAY
    return value.replace(hour=total // 60, minute=total % 60)


def _coerce_date(value):
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise ValidationError("La fecha no es válida.", field="date") from exc


def _lock_services_for_date(day):
    qs = Service.objects.filter(date=day).order_by("id")
    if connection.features.has_select_for_update:
        qs = qs.select_for_update()
    return list(qs.values_list("id", flat=True))


def _find_services_for_date(day, holiday_adjusted):
    return list(
        Service.objects.filter(date=day, is_holiday_adjusted=holiday_adjusted).order_by("start_time", "id")
    )


def _apply_shift(service, minutes, holiday_adjusted):
    new_start = shift_time(service.start_time, minutes)
    updated = Service.objects.filter(id=service.id, is_holiday_adjusted=not holiday_adjusted).update(
        start_time=new_start,
        is_holiday_adjusted=holiday_adjusted,
        updated_at=timezone.now(),
    )
    if updated:
        service.start_time = new_start
        service.is_holiday_adjusted = holiday_adjusted
    return bool(updated)


def _shift_services(services, minutes, holiday_adjusted, result):
    for service in services:
        try:
            with transaction.atomic():
                applied = _apply_shift(service, minutes, holiday_adjusted)
        except DatabaseError:
            logger.exception("Could not shift service %s on %s", service.id, result.date)
            result.failed.append(service.id)
            continue
        if applied:
            result.shifted.append(service.id)
        else:
            logger.warning("Service %s on %s was already shifted, skipping", service.id, result.date)
            result.skipped.append(service.id)


def add_holiday(day, category, description="", actor=None):
    day = _coerce_date(day)
    if category not in VALID_CATEGORIES:
        raise ValidationError("Tipo de festivo no válido.", field="category")
    result = HolidaySyncResult(date=day)
    with transaction.atomic():
        try:
            _lock_services_for_date(day)
            first_for_date = not Holiday.objects.filter(date=day).exists()
            with transaction.atomic():
                holiday = Holiday.objects.create(date=day, category=category, description=description or "")
                Service.objects.filter(date=day, is_holiday=False).update(
                    is_holiday=True, updated_at=timezone.now()
                )
        except DatabaseError as exc:
            raise PersistenceError("No se pudo guardar el festivo.") from exc
        result.holiday = holiday
        # Only the first holiday of a date moves start times.
        if first_for_date:
            services = _find_services_for_date(day, holiday_adjusted=False)
            _shift_services(services, -HOLIDAY_SHIFT_MINUTES, True, result)
        log_audit(
            actor,
            "Holiday",
            holiday.id,
            "holiday_create",
            {"date": day.isoformat(), "category": category, "shifted": result.shifted, "failed": result.failed},
            description=f"Festivo añadido el {day:%d/%m/%Y}",
        )
    logger.info(
        "Holiday %s added for %s: %s shifted, %s skipped, %s failed",
        holiday.id,
        day,
        len(result.shifted),
        len(result.skipped),
        len(result.failed),
    )
    return result


def remove_holiday(holiday_id, actor=None):
    with transaction.atomic():
        try:
            holiday = Holiday.objects.filter(id=holiday_id).first()
        except DatabaseError as exc:
            raise PersistenceError("No se pudo leer el festivo.") from exc
        if holiday is None:
            raise NotFoundError("Festivo")
        day = holiday.date
        result = HolidaySyncResult(date=day, holiday=holiday)
        try:
            _lock_services_for_date(day)
            with transaction.atomic():
                holiday.delete()
                remaining = Holiday.objects.filter(date=day).count()
                if remaining == 0:
                    Service.objects.filter(date=day, is_holiday=True).update(
                        is_holiday=False, updated_at=timezone.now()
                    )
        except DatabaseError as exc:
            raise PersistenceError("No se pudo eliminar el festivo.") from exc
        # Another holiday on the same date keeps the earlier start times.
        if remaining == 0:
            result.reverted = True
            services = _find_services_for_date(day, holiday_adjusted=True)
            _shift_services(services, HOLIDAY_SHIFT_MINUTES, False, result)
        log_audit(
            actor,
            "Holiday",
            holiday_id,
            "holiday_delete",
            {"date": day.isoformat(), "remaining": remaining, "shifted": result.shifted, "failed": result.failed},
            description=f"Festivo eliminado el {day:%d/%m/%Y}",
        )
    logger.info(
        "Holiday %s removed for %s: %s remaining, %s shifted, %s failed",
        holiday_id,
        day,
        remaining,
        len(result.shifted),
        len(result.failed),
    )
    return result


def holidays_for_year(year=None):
    qs = Holiday.objects.all().order_by("date", "id")
    if year:
        qs = qs.filter(date__year=year)
    return qs


def holidays_by_date(start_date, end_date):
    grouped = defaultdict(list)
    for holiday in Holiday.objects.filter(date__gte=start_date, date__lte=end_date).order_by("date", "id"):
        grouped[holiday.date].append(holiday)
    return grouped


def toggle_service_holiday(service_id, actor=None):
    """Switch one service between its normal and holiday start time."""
    with transaction.atomic():
        qs = Service.objects.filter(id=service_id)
        if connection.features.has_select_for_update:
            qs = qs.select_for_update()
        service = qs.first()
        if service is None:
            raise NotFoundError("Culto")
        to_holiday = not service.is_holiday_adjusted
        minutes = -HOLIDAY_SHIFT_MINUTES if to_holiday else HOLIDAY_SHIFT_MINUTES
        previous = service.start_time
        try:
            applied = _apply_shift(service, minutes, to_holiday)
        except DatabaseError as exc:
            raise PersistenceError("No se pudo cambiar el horario del culto.") from exc
        if not applied:
            logger.warning("Service %s changed while toggling its holiday schedule", service.id)
            raise PersistenceError("El culto fue modificado por otra persona. Vuelve a intentarlo.")
        log_audit(
            actor,
            "Service",
            service.id,
            "holiday_toggle",
            {"from": previous.isoformat(), "to": service.start_time.isoformat(), "holiday": to_holiday},
            description="Horario festivo aplicado" if to_holiday else "Horario normal restaurado",
            service=service,
        )
    logger.info("Service %s holiday schedule %s", service.id, "applied" if to_holiday else "removed")
    return service
