from rest_framework import permissions, viewsets

from api.serializers import ChorusSerializer, HolidaySerializer, HymnSerializer, ServiceSerializer
from core.models import Chorus, Holiday, Hymn, Service


class ServiceViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Service.objects.select_related("service_type").order_by("date", "start_time")
    serializer_class = ServiceSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        qs = super().get_queryset()
        start = self.request.query_params.get("from")
        end = self.request.query_params.get("to")
        if start:
            qs = qs.filter(date__gte=start)
        if end:
            qs = qs.filter(date__lte=end)
        return qs


class HolidayViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Holiday.objects.order_by("date", "id")
    serializer_class = HolidaySerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        qs = super().get_queryset()
        year = self.request.query_params.get("year")
        if year and year.isdigit():
            qs = qs.filter(date__year=int(year))
        return qs


class HymnViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Hymn.objects.order_by("number")
    serializer_class = HymnSerializer
    permission_classes = [permissions.IsAuthenticated]


class ChorusViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Chorus.objects.order_by("number")
    serializer_class = ChorusSerializer
    permission_classes = [permissions.IsAuthenticated]
