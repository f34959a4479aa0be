from django import forms
from django.contrib import admin

from core.exceptions import ValidationError
from core.models import (
    AuditEvent,
    BibleChapter,
    BibleReading,
    Chorus,
    Holiday,
    Hymn,
    Service,
    ServicePlanItem,
    ServiceSchedule,
    ServiceType,
)
from core.services.hymns import format_duration, parse_duration


@admin.register(ServiceType)
class ServiceTypeAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "order",
        "requires_intro_reading",
        "requires_closing_reading",
        "requires_teaching",
        "requires_testimonies",
        "has_hymns_and_choruses",
    )


@admin.register(ServiceSchedule)
class ServiceScheduleAdmin(admin.ModelAdmin):
    list_display = ("weekday", "default_time", "service_type", "affected_by_holiday", "active")
    list_filter = ("active", "affected_by_holiday")


class ServicePlanItemInline(admin.TabularInline):
    model = ServicePlanItem
    extra = 0


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ("date", "start_time", "service_type", "status", "is_holiday", "is_holiday_adjusted")
    list_filter = ("status", "service_type", "is_holiday_adjusted")
    date_hierarchy = "date"
    inlines = [ServicePlanItemInline]
    raw_id_fields = ("intro_reader", "closing_reader", "teacher", "testimonies_leader")


@admin.register(Holiday)
class HolidayAdmin(admin.ModelAdmin):
    list_display = ("date", "category", "description")
    list_filter = ("category",)
    # Adding or deleting here skips the start-time shift; use the holidays page.
    readonly_fields = ("created_at",)


@admin.register(BibleChapter)
class BibleChapterAdmin(admin.ModelAdmin):
    list_display = ("book", "chapter", "verse_count", "testament")
    search_fields = ("book", "abbreviation")


@admin.register(BibleReading)
class BibleReadingAdmin(admin.ModelAdmin):
    list_display = ("service", "reading_type", "book", "chapter_start", "verse_start", "reader", "is_repeated")
    list_filter = ("reading_type", "is_repeated")


class CatalogueItemForm(forms.ModelForm):
    duration = forms.CharField(label="Duración (MM:SS)", required=False)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.instance.pk:
            self.fields["duration"].initial = format_duration(self.instance.duration_seconds)

    def clean_duration(self):
        value = self.cleaned_data["duration"].strip()
        if not value:
            return 0
        try:
            return parse_duration(value)
        except ValidationError as exc:
            raise forms.ValidationError(exc.message) from exc

    def save(self, commit=True):
        self.instance.duration_seconds = self.cleaned_data["duration"]
        return super().save(commit=commit)


@admin.register(Hymn, Chorus)
class CatalogueAdmin(admin.ModelAdmin):
    form = CatalogueItemForm
    exclude = ("duration_seconds",)
    list_display = ("number", "title", "duration_label")
    search_fields = ("title",)

    @admin.display(description="Duración", ordering="duration_seconds")
    def duration_label(self, obj):
        return format_duration(obj.duration_seconds)


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ("timestamp", "actor_user", "action_type", "entity_type", "entity_id")
    list_filter = ("action_type",)
    readonly_fields = [field.name for field in AuditEvent._meta.fields]
