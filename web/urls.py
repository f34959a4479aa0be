from django.urls import path

from web import pwa, views

urlpatterns = [
    path("", views.dashboard, name="dashboard"),
    path("manifest.webmanifest", pwa.manifest, name="pwa_manifest"),
    path("sw.js", pwa.service_worker, name="pwa_service_worker"),
    path("offline/", pwa.offline, name="pwa_offline"),
    path("push/status/", pwa.push_status, name="push_status"),
    path("push/subscribe/", pwa.push_subscribe, name="push_subscribe"),
    path("push/unsubscribe/", pwa.push_unsubscribe, name="push_unsubscribe"),
    path("calendar/", views.calendar_month, name="calendar"),
    path("services/generate/", views.generate_month, name="generate_month"),
    path("services/new/", views.service_create, name="service_create"),
    path("services/<int:service_id>/", views.service_detail, name="service_detail"),
    path("services/<int:service_id>/assign/", views.service_assign, name="service_assign"),
    path("services/<int:service_id>/status/", views.service_status_update, name="service_status_update"),
    path("services/<int:service_id>/holiday/", views.service_holiday_toggle, name="service_holiday_toggle"),
    path("services/<int:service_id>/readings/", views.reading_save, name="reading_save"),
    path("services/<int:service_id>/readings/confirm/", views.reading_confirm, name="reading_confirm"),
    path("services/<int:service_id>/catalogue/", views.catalogue_search, name="catalogue_search"),
    path("services/<int:service_id>/plan/", views.plan_add, name="plan_add"),
    path("services/<int:service_id>/plan/<int:item_id>/delete/", views.plan_remove, name="plan_remove"),
    path("holidays/", views.holiday_list, name="holidays"),
    path("holidays/<int:holiday_id>/delete/", views.holiday_delete, name="holiday_delete"),
    path("readings/", views.readings_list, name="readings"),
    path("hymnal/", views.hymnal, name="hymnal"),
    path("members/", views.members, name="members"),
    path("profile/", views.profile, name="profile"),
    path("stats/", views.stats, name="stats"),
    path("audit/", views.audit_log, name="audit"),
]
