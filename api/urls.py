from django.urls import include, path
from rest_framework.routers import DefaultRouter

from api.views import ChorusViewSet, HolidayViewSet, HymnViewSet, ServiceViewSet

router = DefaultRouter()
router.register("services", ServiceViewSet)
router.register("holidays", HolidayViewSet)
router.register("hymns", HymnViewSet)
router.register("choruses", ChorusViewSet)

urlpatterns = [
    path("", include(router.urls)),
]
