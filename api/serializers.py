from rest_framework import serializers

from core.models import Chorus, Holiday, Hymn, Service
from core.services.status import evaluate_completion, missing_roles


class ServiceSerializer(serializers.ModelSerializer):
    service_type_name = serializers.CharField(source="service_type.name", default=None, read_only=True)
    completion_status = serializers.SerializerMethodField()
    missing_roles = serializers.SerializerMethodField()

    class Meta:
        model = Service
        fields = [
            "id",
            "date",
            "start_time",
            "end_time",
            "service_type",
            "service_type_name",
            "status",
            "is_holiday",
            "is_holiday_adjusted",
            "intro_reader",
            "closing_reader",
            "teacher",
            "testimonies_leader",
            "completion_status",
            "missing_roles",
        ]

    def get_completion_status(self, obj):
        return evaluate_completion(obj)

    def get_missing_roles(self, obj):
        return missing_roles(obj)


class HolidaySerializer(serializers.ModelSerializer):
    class Meta:
        model = Holiday
        fields = ["id", "date", "category", "description"]


class HymnSerializer(serializers.ModelSerializer):
    class Meta:
        model = Hymn
        fields = ["id", "number", "title", "duration_seconds"]


class ChorusSerializer(serializers.ModelSerializer):
    class Meta:
        model = Chorus
        fields = ["id", "number", "title", "duration_seconds"]
