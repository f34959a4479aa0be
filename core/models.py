from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class ServiceType(TimeStampedModel):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    color = models.CharField(max_length=20, default="#6d28d9")
    order = models.PositiveSmallIntegerField(default=0)
    requires_intro_reading = models.BooleanField(default=False)
    requires_closing_reading = models.BooleanField(default=False)
    requires_teaching = models.BooleanField(default=False)
    requires_testimonies = models.BooleanField(default=False)
    has_hymns_and_choruses = models.BooleanField(default=False)

    class Meta:
        ordering = ["order", "name"]

    def __str__(self):
        return self.name


class ServiceSchedule(TimeStampedModel):
    WEEKDAY_CHOICES = [
        (0, "Lunes"),
        (1, "Martes"),
        (2, "Miércoles"),
        (3, "Jueves"),
        (4, "Viernes"),
        (5, "Sábado"),
        (6, "Domingo"),
    ]
    weekday = models.PositiveSmallIntegerField(choices=WEEKDAY_CHOICES, unique=True)
    default_time = models.TimeField()
    service_type = models.ForeignKey(ServiceType, on_delete=models.CASCADE, related_name="schedules")
    affected_by_holiday = models.BooleanField(default=False)
    active = models.BooleanField(default=True)

    class Meta:
        ordering = ["weekday"]

    def __str__(self):
        return f"{self.get_weekday_display()} {self.default_time:%H:%M}"


class Service(TimeStampedModel):
    STATUS_PLANNED = "planned"
    STATUS_HELD = "held"
    STATUS_CANCELLED = "cancelled"
    STATUS_CHOICES = [
        (STATUS_PLANNED, "Planeado"),
        (STATUS_HELD, "Realizado"),
        (STATUS_CANCELLED, "Cancelado"),
    ]

    # role code -> (requirement flag on ServiceType, assignee field on Service)
    ROLES = {
        "intro": ("requires_intro_reading", "intro_reader"),
        "closing": ("requires_closing_reading", "closing_reader"),
        "teaching": ("requires_teaching", "teacher"),
        "testimonies": ("requires_testimonies", "testimonies_leader"),
    }
    ROLE_LABELS = {
        "intro": "Introducción",
        "closing": "Finalización",
        "teaching": "Enseñanza",
        "testimonies": "Testimonios",
    }

    date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField(null=True, blank=True)
    service_type = models.ForeignKey(ServiceType, on_delete=models.PROTECT, null=True, blank=True, related_name="services")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PLANNED)
    is_holiday = models.BooleanField(default=False)
    is_holiday_adjusted = models.BooleanField(default=False)
    intro_reader = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="intro_services"
    )
    closing_reader = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="closing_services"
    )
    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="teaching_services"
    )
    testimonies_leader = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="testimonies_services"
    )

    class Meta:
        ordering = ["date", "start_time"]
        indexes = [
            models.Index(fields=["date", "is_holiday_adjusted"], name="service_date_adjusted_idx"),
        ]

    def __str__(self):
        label = self.service_type.name if self.service_type_id else "Culto"
        return f"{label} {self.date:%d/%m/%Y} {self.start_time:%H:%M}"

    def assignee_for(self, role):
        return getattr(self, self.ROLES[role][1])

    def assignee_id_for(self, role):
        return getattr(self, f"{self.ROLES[role][1]}_id")


class Holiday(models.Model):
    CATEGORY_NATIONAL = "national"
    CATEGORY_REGIONAL = "regional"
    CATEGORY_LOCAL = "local"
    CATEGORY_ADJUSTED_WORKDAY = "adjusted_workday"
    CATEGORY_CHOICES = [
        (CATEGORY_NATIONAL, "Nacional"),
        (CATEGORY_REGIONAL, "Autonómico"),
        (CATEGORY_LOCAL, "Local"),
        (CATEGORY_ADJUSTED_WORKDAY, "Laborable festivo"),
    ]

    date = models.DateField(db_index=True)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    description = models.CharField(max_length=200, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["date", "id"]

    def __str__(self):
        return f"{self.date:%d/%m/%Y} - {self.description or self.get_category_display()}"


class BibleChapter(models.Model):
    TESTAMENT_CHOICES = [
        ("AT", "Antiguo Testamento"),
        ("NT", "Nuevo Testamento"),
    ]
    book = models.CharField(max_length=60)
    testament = models.CharField(max_length=2, choices=TESTAMENT_CHOICES)
    abbreviation = models.CharField(max_length=10)
    book_order = models.PositiveSmallIntegerField()
    chapter = models.PositiveSmallIntegerField()
    verse_count = models.PositiveSmallIntegerField()

    class Meta:
        ordering = ["book_order", "chapter"]
        unique_together = ("book", "chapter")


class BibleReading(models.Model):
    TYPE_INTRO = "intro"
    TYPE_CLOSING = "closing"
    TYPE_CHOICES = [
        (TYPE_INTRO, "Introducción"),
        (TYPE_CLOSING, "Finalización"),
    ]
    service = models.ForeignKey(Service, on_delete=models.CASCADE, related_name="readings")
    reading_type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    book = models.CharField(max_length=60)
    chapter_start = models.PositiveSmallIntegerField()
    verse_start = models.PositiveSmallIntegerField()
    chapter_end = models.PositiveSmallIntegerField()
    verse_end = models.PositiveSmallIntegerField()
    reader = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    is_repeated = models.BooleanField(default=False)
    original_reading = models.ForeignKey(
        "self", on_delete=models.SET_NULL, null=True, blank=True, related_name="repetitions"
    )
    registered_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-registered_at"]
        indexes = [
            models.Index(fields=["book", "chapter_start", "verse_start"], name="reading_citation_idx"),
        ]


class Hymn(models.Model):
    number = models.PositiveIntegerField(unique=True)
    title = models.CharField(max_length=200)
    duration_seconds = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["number"]

    def __str__(self):
        return f"{self.number}. {self.title}"


class Chorus(models.Model):
    number = models.PositiveIntegerField(unique=True)
    title = models.CharField(max_length=200)
    duration_seconds = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["number"]
        verbose_name_plural = "choruses"

    def __str__(self):
        return f"{self.number}. {self.title}"


class ServicePlanItem(models.Model):
    KIND_HYMN = "hymn"
    KIND_CHORUS = "chorus"
    KIND_CHOICES = [
        (KIND_HYMN, "Himno"),
        (KIND_CHORUS, "Coro"),
    ]
    service = models.ForeignKey(Service, on_delete=models.CASCADE, related_name="plan_items")
    kind = models.CharField(max_length=10, choices=KIND_CHOICES)
    hymn = models.ForeignKey(Hymn, on_delete=models.CASCADE, null=True, blank=True)
    chorus = models.ForeignKey(Chorus, on_delete=models.CASCADE, null=True, blank=True)
    order = models.PositiveSmallIntegerField(default=0)

    class Meta:
        ordering = ["order", "id"]

    @property
    def item(self):
        return self.hymn if self.kind == self.KIND_HYMN else self.chorus


class AuditEvent(models.Model):
    actor_user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    service = models.ForeignKey(Service, on_delete=models.SET_NULL, null=True, blank=True)
    entity_type = models.CharField(max_length=100)
    entity_id = models.CharField(max_length=100)
    action_type = models.CharField(max_length=50)
    description = models.CharField(max_length=255, blank=True)
    diff_json = models.JSONField(default=dict, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-timestamp", "-id"]
        indexes = [
            models.Index(fields=["entity_type", "entity_id"], name="audit_entity_idx"),
            models.Index(fields=["action_type", "timestamp"], name="audit_action_ts_idx"),
        ]
