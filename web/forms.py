from django import forms
from django.contrib.auth import get_user_model

from core.models import BibleReading, Holiday, Service, ServicePlanItem, ServiceType
from core.services.availability import WEEKDAYS, weekly_roles
from core.services.readings import validate_reading_range

DATE_WIDGET = forms.DateInput(attrs={"type": "date"}, format="%Y-%m-%d")
TIME_WIDGET = forms.TimeInput(attrs={"type": "time"}, format="%H:%M")
ROLE_CHOICES = list(Service.ROLE_LABELS.items())


def pulpit_users():
    return get_user_model().objects.filter(pulpit=True, is_active=True).order_by("first_name", "last_name")


class HolidayForm(forms.Form):
    date = forms.DateField(widget=DATE_WIDGET, input_formats=["%Y-%m-%d"])
    category = forms.ChoiceField(choices=Holiday.CATEGORY_CHOICES)
    description = forms.CharField(max_length=200, required=False)


class ServiceCreateForm(forms.ModelForm):
    class Meta:
        model = Service
        fields = ["date", "start_time", "service_type"]
        widgets = {"date": DATE_WIDGET, "start_time": TIME_WIDGET}

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["service_type"].required = True
        self.fields["service_type"].queryset = ServiceType.objects.order_by("order", "name")


class GenerateMonthForm(forms.Form):
    year = forms.IntegerField(min_value=2000, max_value=2100)
    month = forms.IntegerField(min_value=1, max_value=12)


class ServiceStatusForm(forms.Form):
    status = forms.ChoiceField(choices=Service.STATUS_CHOICES)


class AssignmentForm(forms.Form):
    role = forms.ChoiceField(choices=ROLE_CHOICES)
    user = forms.ModelChoiceField(queryset=None, required=False, empty_label="Sin asignar")
    confirm_unavailable = forms.BooleanField(required=False)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["user"].queryset = pulpit_users()


class ReadingForm(forms.Form):
    reading_type = forms.ChoiceField(choices=BibleReading.TYPE_CHOICES)
    book = forms.CharField(max_length=60, widget=forms.TextInput(attrs={"list": "books"}))
    chapter_start = forms.IntegerField(min_value=1)
    verse_start = forms.IntegerField(min_value=1)
    chapter_end = forms.IntegerField(min_value=1, required=False)
    verse_end = forms.IntegerField(min_value=1, required=False)
    reader = forms.ModelChoiceField(queryset=None)
    original_id = forms.IntegerField(required=False, widget=forms.HiddenInput)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["reader"].queryset = pulpit_users()

    def clean(self):
        cleaned = super().clean()
        errors = validate_reading_range(
            cleaned.get("book"),
            cleaned.get("chapter_start"),
            cleaned.get("verse_start"),
            cleaned.get("chapter_end"),
            cleaned.get("verse_end"),
        )
        for field_name, message in errors.items():
            if field_name not in self.errors:
                self.add_error(field_name, message)
        return cleaned


class PlanItemForm(forms.Form):
    kind = forms.ChoiceField(choices=ServicePlanItem.KIND_CHOICES)
    item_id = forms.IntegerField(min_value=1)
    order = forms.IntegerField(min_value=0, required=False)


class ReadingFilterForm(forms.Form):
    start_date = forms.DateField(widget=DATE_WIDGET, required=False)
    end_date = forms.DateField(widget=DATE_WIDGET, required=False)
    service_type = forms.ModelChoiceField(queryset=ServiceType.objects.all(), required=False)
    reading_type = forms.ChoiceField(choices=[("", "Todas")] + BibleReading.TYPE_CHOICES, required=False)
    only_repeated = forms.BooleanField(required=False)


class ProfileForm(forms.ModelForm):
    class Meta:
        model = get_user_model()
        fields = ["first_name", "last_name", "contact_email", "phone"]

    def clean_first_name(self):
        value = self.cleaned_data["first_name"].strip()
        if not value:
            raise forms.ValidationError("El nombre es requerido")
        return value

    def clean_last_name(self):
        value = self.cleaned_data["last_name"].strip()
        if not value:
            raise forms.ValidationError("Los apellidos son requeridos")
        return value


class WeeklyAvailabilityForm(forms.Form):
    def __init__(self, *args, user=None, **kwargs):
        super().__init__(*args, **kwargs)
        current = weekly_roles(user) if user is not None else {}
        for day, label in WEEKDAYS:
            self.fields[f"day_{day}"] = forms.MultipleChoiceField(
                label=label,
                choices=ROLE_CHOICES,
                required=False,
                initial=current.get(day, []),
                widget=forms.CheckboxSelectMultiple,
            )

    def roles_by_day(self):
        return {day: self.cleaned_data.get(f"day_{day}", []) for day, _label in WEEKDAYS}


class AvailabilityExceptionForm(forms.Form):
    date = forms.DateField(widget=DATE_WIDGET, input_formats=["%Y-%m-%d"])
    roles = forms.MultipleChoiceField(
        label="Disponible para",
        choices=ROLE_CHOICES,
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )
