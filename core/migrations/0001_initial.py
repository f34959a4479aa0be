# Generated manually for the initial scheduling schema.

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ServiceType",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=100, unique=True)),
                ("description", models.TextField(blank=True)),
                ("color", models.CharField(default="#6d28d9", max_length=20)),
                ("order", models.PositiveSmallIntegerField(default=0)),
                ("requires_intro_reading", models.BooleanField(default=False)),
                ("requires_closing_reading", models.BooleanField(default=False)),
                ("requires_teaching", models.BooleanField(default=False)),
                ("requires_testimonies", models.BooleanField(default=False)),
                ("has_hymns_and_choruses", models.BooleanField(default=False)),
            ],
            options={
                "ordering": ["order", "name"],
            },
        ),
        migrations.CreateModel(
            name="ServiceSchedule",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "weekday",
                    models.PositiveSmallIntegerField(
                        choices=[
                            (0, "Lunes"),
                            (1, "Martes"),
                            (2, "Miércoles"),
                            (3, "Jueves"),
                            (4, "Viernes"),
                            (5, "Sábado"),
                            (6, "Domingo"),
                        ],
                        unique=True,
                    ),
                ),
                ("default_time", models.TimeField()),
                ("affected_by_holiday", models.BooleanField(default=False)),
                ("active", models.BooleanField(default=True)),
                (
                    "service_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="schedules", to="core.servicetype"
                    ),
                ),
            ],
            options={
                "ordering": ["weekday"],
            },
        ),
        migrations.CreateModel(
            name="Service",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("date", models.DateField()),
                ("start_time", models.TimeField()),
                ("end_time", models.TimeField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[("planned", "Planeado"), ("held", "Realizado"), ("cancelled", "Cancelado")],
                        default="planned",
                        max_length=20,
                    ),
                ),
                ("is_holiday", models.BooleanField(default=False)),
                ("is_holiday_adjusted", models.BooleanField(default=False)),
                (
                    "service_type",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="services",
                        to="core.servicetype",
                    ),
                ),
                (
                    "intro_reader",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="intro_services",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "closing_reader",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="closing_services",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "teacher",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="teaching_services",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "testimonies_leader",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="testimonies_services",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["date", "start_time"],
                "indexes": [
                    models.Index(fields=["date", "is_holiday_adjusted"], name="service_date_adjusted_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Holiday",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("date", models.DateField(db_index=True)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("national", "Nacional"),
                            ("regional", "Autonómico"),
                            ("local", "Local"),
                            ("adjusted_workday", "Laborable festivo"),
                        ],
                        max_length=20,
                    ),
                ),
                ("description", models.CharField(blank=True, max_length=200)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["date", "id"],
            },
        ),
        migrations.CreateModel(
            name="BibleChapter",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("book", models.CharField(max_length=60)),
                (
                    "testament",
                    models.CharField(
                        choices=[("AT", "Antiguo Testamento"), ("NT", "Nuevo Testamento")], max_length=2
                    ),
                ),
                ("abbreviation", models.CharField(max_length=10)),
                ("book_order", models.PositiveSmallIntegerField()),
                ("chapter", models.PositiveSmallIntegerField()),
                ("verse_count", models.PositiveSmallIntegerField()),
            ],
            options={
                "ordering": ["book_order", "chapter"],
                "unique_together": {("book", "chapter")},
            },
        ),
        migrations.CreateModel(
            name="BibleReading",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "reading_type",
                    models.CharField(
                        choices=[("intro", "Introducción"), ("closing", "Finalización")], max_length=10
                    ),
                ),
                ("book", models.CharField(max_length=60)),
                ("chapter_start", models.PositiveSmallIntegerField()),
                ("verse_start", models.PositiveSmallIntegerField()),
                ("chapter_end", models.PositiveSmallIntegerField()),
                ("verse_end", models.PositiveSmallIntegerField()),
                ("is_repeated", models.BooleanField(default=False)),
                ("registered_at", models.DateTimeField(auto_now_add=True)),
                (
                    "service",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="readings", to="core.service"
                    ),
                ),
                (
                    "reader",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "original_reading",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="repetitions",
                        to="core.biblereading",
                    ),
                ),
            ],
            options={
                "ordering": ["-registered_at"],
                "indexes": [
                    models.Index(fields=["book", "chapter_start", "verse_start"], name="reading_citation_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Hymn",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("number", models.PositiveIntegerField(unique=True)),
                ("title", models.CharField(max_length=200)),
                ("duration_seconds", models.PositiveIntegerField(default=0)),
            ],
            options={
                "ordering": ["number"],
            },
        ),
        migrations.CreateModel(
            name="Chorus",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("number", models.PositiveIntegerField(unique=True)),
                ("title", models.CharField(max_length=200)),
                ("duration_seconds", models.PositiveIntegerField(default=0)),
            ],
            options={
                "ordering": ["number"],
                "verbose_name_plural": "choruses",
            },
        ),
        migrations.CreateModel(
            name="ServicePlanItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("kind", models.CharField(choices=[("hymn", "Himno"), ("chorus", "Coro")], max_length=10)),
                ("order", models.PositiveSmallIntegerField(default=0)),
                (
                    "service",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="plan_items", to="core.service"
                    ),
                ),
                (
                    "hymn",
                    models.ForeignKey(
                        blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, to="core.hymn"
                    ),
                ),
                (
                    "chorus",
                    models.ForeignKey(
                        blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, to="core.chorus"
                    ),
                ),
            ],
            options={
                "ordering": ["order", "id"],
            },
        ),
        migrations.CreateModel(
            name="AuditEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("entity_type", models.CharField(max_length=100)),
                ("entity_id", models.CharField(max_length=100)),
                ("action_type", models.CharField(max_length=50)),
                ("description", models.CharField(blank=True, max_length=255)),
                ("diff_json", models.JSONField(blank=True, default=dict)),
                ("timestamp", models.DateTimeField(auto_now_add=True)),
                (
                    "actor_user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "service",
                    models.ForeignKey(
                        blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to="core.service"
                    ),
                ),
            ],
            options={
                "ordering": ["-timestamp", "-id"],
                "indexes": [
                    models.Index(fields=["entity_type", "entity_id"], name="audit_entity_idx"),
                    models.Index(fields=["action_type", "timestamp"], name="audit_action_ts_idx"),
                ],
            },
        ),
    ]
