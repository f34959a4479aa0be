import calendar as cal
import logging
from datetime import date, timedelta

from django.contrib import messages
from django.contrib.auth import get_user_model
from django.contrib.auth.decorators import login_required
from django.core.paginator import Paginator
from django.db.models import Q
from django.http import HttpResponseBadRequest
from django.shortcuts import get_object_or_404, redirect, render
from django.urls import reverse
from django.views.decorators.http import require_POST

from core.exceptions import PulpitoError
from core.models import AuditEvent, BibleReading, Service, ServicePlanItem, ServiceType
from core.services.assignments import search_pulpit_users, update_assignment
from core.services.audit import audit_action_types, log_audit
from core.services.availability import (
    availability_exceptions,
    remove_availability_exception,
    set_availability_exception,
    set_weekly_availability,
)
from core.services.calendar_generation import create_service, generate_services_for_month, services_for_month
from core.services.holidays import (
    add_holiday,
    holidays_by_date,
    holidays_for_year,
    remove_holiday,
    toggle_service_holiday,
)
from core.services.hymns import (
    add_plan_item,
    catalogue_counts,
    format_duration,
    plan_duration,
    plan_for_service,
    remove_plan_item,
    search_catalogue,
)
from core.services.permissions import ADMIN_ROLES, EDITOR_ROLES, require_roles, user_has_role
from core.services.readings import (
    bible_books,
    confirm_repeated_reading,
    filter_readings,
    readings_for_service,
    save_reading,
)
from core.services.stats import bible_reading_stats, member_stats, participation_stats
from core.services.status import STATUS_COMPLETE, evaluate_completion, missing_roles
from web.forms import (
    AssignmentForm,
    AvailabilityExceptionForm,
    GenerateMonthForm,
    HolidayForm,
    PlanItemForm,
    ProfileForm,
    ReadingFilterForm,
    ReadingForm,
    ServiceCreateForm,
    ServiceStatusForm,
    WeeklyAvailabilityForm,
)

logger = logging.getLogger(__name__)

UPCOMING_LIMIT = 5
PAGE_SIZE = 25


def _month_from_request(request):
    today = date.today()
    try:
        year = int(request.GET.get("year", today.year))
        month = int(request.GET.get("month", today.month))
        date(year, month, 1)
    except ValueError:
        return today.year, today.month
    return year, month


def _form_error_message(form):
    for errors in form.errors.values():
        if errors:
            return errors[0]
    return "Datos no válidos."


@login_required
def dashboard(request):
    today = date.today()
    upcoming = list(
        Service.objects.filter(date__gte=today)
        .exclude(status=Service.STATUS_CANCELLED)
        .select_related("service_type", "intro_reader", "closing_reader", "teacher", "testimonies_leader")
        .order_by("date", "start_time")[:UPCOMING_LIMIT]
    )
    for service in upcoming:
        service.completion = evaluate_completion(service)
    user = request.user
    my_services = (
        Service.objects.filter(date__gte=today)
        .filter(
            Q(intro_reader=user) | Q(closing_reader=user) | Q(teacher=user) | Q(testimonies_leader=user)
        )
        .select_related("service_type")
        .order_by("date", "start_time")[:UPCOMING_LIMIT]
    )
    incomplete = sum(1 for service in upcoming if service.completion != STATUS_COMPLETE)
    return render(
        request,
        "dashboard.html",
        {
            "upcoming": upcoming,
            "my_services": my_services,
            "incomplete": incomplete,
            "members": member_stats(),
        },
    )


@login_required
def calendar_month(request):
    year, month = _month_from_request(request)
    services = list(services_for_month(year, month))
    services_by_day = {}
    for service in services:
        service.completion = evaluate_completion(service)
        services_by_day.setdefault(service.date, []).append(service)

    month_start = date(year, month, 1)
    month_end = date(year, month, cal.monthrange(year, month)[1])
    prev_month = month_start - timedelta(days=1)
    next_month = month_end + timedelta(days=1)

    return render(
        request,
        "calendar/month.html",
        {
            "today": date.today(),
            "year": year,
            "month": month,
            "month_grid": cal.Calendar(firstweekday=0).monthdatescalendar(year, month),
            "services_by_day": services_by_day,
            "holidays_by_day": holidays_by_date(month_start, month_end),
            "services": services,
            "create_form": ServiceCreateForm(initial={"date": month_start}),
            "generate_form": GenerateMonthForm(initial={"year": year, "month": month}),
            "prev_month": {"year": prev_month.year, "month": prev_month.month},
            "next_month": {"year": next_month.year, "month": next_month.month},
        },
    )


@login_required
@require_roles(ADMIN_ROLES)
@require_POST
def generate_month(request):
    form = GenerateMonthForm(request.POST)
    if not form.is_valid():
        messages.error(request, _form_error_message(form))
        return redirect("calendar")
    year, month = form.cleaned_data["year"], form.cleaned_data["month"]
    created = generate_services_for_month(year, month, actor=request.user)
    if created:
        messages.success(request, f"Se generaron {len(created)} cultos.")
    else:
        messages.info(request, "No había cultos nuevos por generar.")
    logger.info("Generated %s services for %s/%s", len(created), month, year)
    return redirect(f"{reverse('calendar')}?year={year}&month={month}")


@login_required
@require_roles(ADMIN_ROLES)
@require_POST
def service_create(request):
    form = ServiceCreateForm(request.POST)
    if not form.is_valid():
        messages.error(request, _form_error_message(form))
        return redirect("calendar")
    service = create_service(
        form.cleaned_data["date"],
        form.cleaned_data["start_time"],
        form.cleaned_data["service_type"],
        actor=request.user,
    )
    messages.success(request, "Culto creado.")
    return redirect("service_detail", service_id=service.id)


def _service_detail_context(request, service, reading_form=None, pending_reading=None):
    plan_items = list(plan_for_service(service))
    return {
        "service": service,
        "completion": evaluate_completion(service),
        "missing_roles": [Service.ROLE_LABELS[role] for role in missing_roles(service)],
        "roles": [
            {
                "code": role,
                "label": Service.ROLE_LABELS[role],
                "required": bool(service.service_type and getattr(service.service_type, flag)),
                "assignee": service.assignee_for(role),
                "candidates": search_pulpit_users(limit=None, day=service.date, role=role),
            }
            for role, (flag, _field) in Service.ROLES.items()
        ],
        "readings": readings_for_service(service),
        "reading_form": reading_form or ReadingForm(),
        "pending_reading": pending_reading,
        "plan_items": plan_items,
        "plan_duration": format_duration(plan_duration(plan_items)),
        "plan_form": PlanItemForm(),
        "status_form": ServiceStatusForm(initial={"status": service.status}),
        "books": bible_books(),
        "can_edit": user_has_role(request.user, EDITOR_ROLES),
    }


def _get_service(service_id):
    return get_object_or_404(
        Service.objects.select_related(
            "service_type", "intro_reader", "closing_reader", "teacher", "testimonies_leader"
        ),
        id=service_id,
    )


@login_required
def service_detail(request, service_id):
    service = _get_service(service_id)
    return render(request, "services/detail.html", _service_detail_context(request, service))


@login_required
@require_roles(EDITOR_ROLES)
@require_POST
def service_assign(request, service_id):
    service = _get_service(service_id)
    form = AssignmentForm(request.POST)
    if not form.is_valid():
        messages.error(request, _form_error_message(form))
    else:
        try:
            update_assignment(
                service,
                form.cleaned_data["role"],
                form.cleaned_data["user"],
                actor=request.user,
                confirmed=form.cleaned_data["confirm_unavailable"],
            )
        except PulpitoError as exc:
            messages.error(request, exc.message)
        else:
            messages.success(request, "Asignación actualizada.")
    if request.htmx:
        service = _get_service(service_id)
        return render(request, "services/_assignments.html", _service_detail_context(request, service))
    return redirect("service_detail", service_id=service.id)


@login_required
@require_roles(EDITOR_ROLES)
@require_POST
def service_status_update(request, service_id):
    service = _get_service(service_id)
    form = ServiceStatusForm(request.POST)
    if not form.is_valid():
        messages.error(request, _form_error_message(form))
        return redirect("service_detail", service_id=service.id)
    previous = service.status
    service.status = form.cleaned_data["status"]
    service.save(update_fields=["status", "updated_at"])
    log_audit(
        request.user,
        "Service",
        service.id,
        "status_change",
        {"from": previous, "to": service.status},
        description=f"Estado cambiado a {service.get_status_display().lower()}",
        service=service,
    )
    messages.success(request, "Estado actualizado.")
    return redirect("service_detail", service_id=service.id)


@login_required
@require_roles(EDITOR_ROLES)
@require_POST
def service_holiday_toggle(request, service_id):
    try:
        service = toggle_service_holiday(service_id, actor=request.user)
    except PulpitoError as exc:
        messages.error(request, exc.message)
        return redirect("service_detail", service_id=service_id)
    if service.is_holiday_adjusted:
        messages.success(request, "Horario festivo aplicado (-1h).")
    else:
        messages.success(request, "Horario normal restaurado.")
    return redirect("service_detail", service_id=service.id)


@login_required
@require_roles(EDITOR_ROLES)
@require_POST
def reading_save(request, service_id):
    service = _get_service(service_id)
    form = ReadingForm(request.POST)
    if not form.is_valid():
        messages.error(request, _form_error_message(form))
        context = _service_detail_context(request, service, reading_form=form)
        return render(request, "services/detail.html", context, status=400)
    data = form.cleaned_data
    try:
        outcome = save_reading(
            service,
            data["reading_type"],
            data["book"],
            data["chapter_start"],
            data["verse_start"],
            data["chapter_end"],
            data["verse_end"],
            data["reader"],
            actor=request.user,
        )
    except PulpitoError as exc:
        messages.error(request, exc.message)
        return redirect("service_detail", service_id=service.id)
    if outcome.requires_confirmation:
        messages.warning(request, "Esta lectura ya fue realizada anteriormente. Confirma para registrarla de nuevo.")
        context = _service_detail_context(
            request,
            service,
            reading_form=ReadingForm(initial={**data, "reader": data["reader"].id, "original_id": outcome.existing.id}),
            pending_reading=outcome.existing,
        )
        return render(request, "services/detail.html", context)
    messages.success(request, "Lectura registrada.")
    return redirect("service_detail", service_id=service.id)


@login_required
@require_roles(EDITOR_ROLES)
@require_POST
def reading_confirm(request, service_id):
    service = _get_service(service_id)
    form = ReadingForm(request.POST)
    if not form.is_valid():
        messages.error(request, _form_error_message(form))
        return redirect("service_detail", service_id=service.id)
    data = form.cleaned_data
    original = get_object_or_404(BibleReading, id=data["original_id"]) if data.get("original_id") else None
    try:
        confirm_repeated_reading(
            service,
            data["reading_type"],
            data["book"],
            data["chapter_start"],
            data["verse_start"],
            data["chapter_end"],
            data["verse_end"],
            data["reader"],
            original,
            actor=request.user,
        )
    except PulpitoError as exc:
        messages.error(request, exc.message)
    else:
        messages.success(request, "Lectura repetida registrada.")
    return redirect("service_detail", service_id=service.id)


@login_required
def catalogue_search(request, service_id):
    service = _get_service(service_id)
    kind = request.GET.get("kind", ServicePlanItem.KIND_HYMN)
    try:
        results = search_catalogue(kind, request.GET.get("q", ""))
    except PulpitoError:
        return HttpResponseBadRequest("Tipo no válido")
    return render(request, "services/_catalogue_results.html", {"service": service, "kind": kind, "results": results})


@login_required
@require_roles(EDITOR_ROLES)
@require_POST
def plan_add(request, service_id):
    service = _get_service(service_id)
    form = PlanItemForm(request.POST)
    if not form.is_valid():
        messages.error(request, _form_error_message(form))
        return redirect("service_detail", service_id=service.id)
    try:
        add_plan_item(
            service,
            form.cleaned_data["kind"],
            form.cleaned_data["item_id"],
            order=form.cleaned_data.get("order"),
            actor=request.user,
        )
    except PulpitoError as exc:
        messages.error(request, exc.message)
    else:
        messages.success(request, "Plan del culto actualizado.")
    return redirect("service_detail", service_id=service.id)


@login_required
@require_roles(EDITOR_ROLES)
@require_POST
def plan_remove(request, service_id, item_id):
    plan_item = get_object_or_404(ServicePlanItem, id=item_id, service_id=service_id)
    remove_plan_item(plan_item, actor=request.user)
    messages.success(request, "Elemento eliminado del plan.")
    return redirect("service_detail", service_id=service_id)


@login_required
def holiday_list(request):
    try:
        year = int(request.GET.get("year", date.today().year))
    except ValueError:
        year = date.today().year
    form = HolidayForm()
    if request.method == "POST":
        if not user_has_role(request.user, ADMIN_ROLES):
            messages.error(request, "No autorizado")
            return redirect("holidays")
        form = HolidayForm(request.POST)
        if form.is_valid():
            try:
                result = add_holiday(
                    form.cleaned_data["date"],
                    form.cleaned_data["category"],
                    form.cleaned_data["description"],
                    actor=request.user,
                )
            except PulpitoError as exc:
                messages.error(request, exc.message)
            else:
                _report_sync(request, result, "Festivo añadido.")
                return redirect(f"{reverse('holidays')}?year={result.date.year}")
    return render(
        request,
        "holidays/list.html",
        {"holidays": holidays_for_year(year), "year": year, "form": form},
    )


@login_required
@require_roles(ADMIN_ROLES)
@require_POST
def holiday_delete(request, holiday_id):
    try:
        result = remove_holiday(holiday_id, actor=request.user)
    except PulpitoError as exc:
        messages.error(request, exc.message)
        return redirect("holidays")
    _report_sync(request, result, "Festivo eliminado.")
    return redirect(f"{reverse('holidays')}?year={result.date.year}")


def _report_sync(request, result, success_message):
    if result.failed:
        messages.warning(
            request,
            f"{success_message} No se pudo ajustar el horario de {len(result.failed)} culto(s); revisa el registro.",
        )
        return
    if result.shifted:
        messages.success(request, f"{success_message} Se ajustó el horario de {len(result.shifted)} culto(s).")
        return
    messages.success(request, success_message)


@login_required
def readings_list(request):
    form = ReadingFilterForm(request.GET or None)
    filters = form.cleaned_data if form.is_valid() else {}
    service_type = filters.get("service_type")
    readings = filter_readings(
        start_date=filters.get("start_date"),
        end_date=filters.get("end_date"),
        service_type_id=service_type.id if service_type else None,
        reading_type=filters.get("reading_type") or None,
        only_repeated=filters.get("only_repeated", False),
    )
    page = Paginator(readings, PAGE_SIZE).get_page(request.GET.get("page"))
    return render(request, "readings/list.html", {"form": form, "page": page})


@login_required
def hymnal(request):
    kind = request.GET.get("kind", ServicePlanItem.KIND_HYMN)
    try:
        results = search_catalogue(kind, request.GET.get("q", ""))
    except PulpitoError as exc:
        messages.error(request, exc.message)
        results = []
    template = "services/_catalogue_results.html" if request.htmx else "hymnal.html"
    return render(
        request,
        template,
        {"kind": kind, "query": request.GET.get("q", ""), "results": results, "counts": catalogue_counts()},
    )


@login_required
def members(request):
    User = get_user_model()
    query = (request.GET.get("q") or "").strip()
    role = request.GET.get("role") or ""
    users = User.objects.filter(is_active=True).order_by("first_name", "last_name")
    if query:
        users = users.filter(
            Q(first_name__icontains=query) | Q(last_name__icontains=query) | Q(email__icontains=query)
        )
    if role:
        users = users.filter(role=role)
    if request.GET.get("pulpit"):
        users = users.filter(pulpit=True)
    return render(
        request,
        "members.html",
        {"users": users, "query": query, "role": role, "roles": User.ROLE_CHOICES, "stats": member_stats()},
    )


@login_required
def profile(request):
    user = request.user
    form = ProfileForm(instance=user)
    weekly_form = WeeklyAvailabilityForm(user=user)
    exception_form = AvailabilityExceptionForm()
    if request.method == "POST":
        form_type = request.POST.get("form_type", "profile")
        if form_type == "profile":
            form = ProfileForm(request.POST, instance=user)
            if form.is_valid():
                form.save()
                log_audit(user, "User", user.id, "profile_update", {"fields": form.changed_data})
                messages.success(request, "Perfil actualizado.")
                return redirect("profile")
        elif form_type == "weekly_availability":
            weekly_form = WeeklyAvailabilityForm(request.POST, user=user)
            if weekly_form.is_valid():
                set_weekly_availability(user, weekly_form.roles_by_day())
                messages.success(request, "Disponibilidad semanal guardada.")
                return redirect("profile")
            messages.error(request, "Revisa la disponibilidad semanal.")
        elif form_type == "availability_exception":
            exception_form = AvailabilityExceptionForm(request.POST)
            if exception_form.is_valid():
                set_availability_exception(
                    user, exception_form.cleaned_data["date"], exception_form.cleaned_data["roles"]
                )
                messages.success(request, "Excepción guardada.")
                return redirect("profile")
            messages.error(request, "Revisa la excepción.")
        elif form_type == "delete_exception":
            try:
                remove_availability_exception(user, date.fromisoformat(request.POST.get("date", "")))
            except ValueError:
                messages.error(request, "La fecha no es válida.")
            except PulpitoError as exc:
                messages.error(request, exc.message)
            else:
                messages.success(request, "Excepción eliminada.")
            return redirect("profile")
    return render(
        request,
        "profile.html",
        {
            "form": form,
            "weekly_form": weekly_form,
            "exception_form": exception_form,
            "exceptions": [
                (date.fromisoformat(day), [Service.ROLE_LABELS[role] for role, enabled in roles.items() if enabled])
                for day, roles in availability_exceptions(user)
            ],
        },
    )


@login_required
@require_roles(ADMIN_ROLES)
def stats(request):
    try:
        year = int(request.GET.get("year", date.today().year))
    except ValueError:
        year = date.today().year
    return render(
        request,
        "stats.html",
        {
            "year": year,
            "participation": participation_stats(year),
            "role_labels": Service.ROLE_LABELS,
            "readings": bible_reading_stats(),
            "members": member_stats(),
            "service_types": ServiceType.objects.order_by("order", "name"),
        },
    )


@login_required
@require_roles(ADMIN_ROLES)
def audit_log(request):
    events = AuditEvent.objects.select_related("actor_user", "service").order_by("-timestamp", "-id")
    action_type = request.GET.get("action") or ""
    if action_type:
        events = events.filter(action_type=action_type)
    page = Paginator(events, PAGE_SIZE).get_page(request.GET.get("page"))
    return render(
        request,
        "audit.html",
        {"page": page, "action_type": action_type, "action_types": audit_action_types()},
    )
