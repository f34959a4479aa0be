"""Installable app endpoints: manifest, service worker and push subscriptions."""

import json

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import render
from django.templatetags.static import static
from django.urls import reverse
from django.views.decorators.http import require_GET, require_POST

from notifications.services import has_active_push, subscribe_push, unsubscribe_push

APP_NAME = "Púlpito IDMJI"
THEME_COLOR = "#4c1d95"
BACKGROUND_COLOR = "#f5f3ff"
SW_VERSION = "v4"

SHORTCUTS = [
    ("Calendario de cultos", "Cultos", "calendar"),
    ("Lecturas bíblicas", "Lecturas", "readings"),
    ("Himnario", "Himnario", "hymnal"),
]


def _no_store(response):
    response["Cache-Control"] = "no-store"
    return response


def manifest(request):
    icon = {"src": static("pwa/icon.svg"), "sizes": "any", "type": "image/svg+xml"}
    data = {
        "name": APP_NAME,
        "short_name": "Púlpito",
        "description": "Programación de cultos, lecturas y participaciones.",
        "lang": "es-ES",
        "start_url": reverse("dashboard"),
        "scope": "/",
        "display": "standalone",
        "theme_color": THEME_COLOR,
        "background_color": BACKGROUND_COLOR,
        "icons": [icon, {**icon, "purpose": "maskable"}],
        "shortcuts": [
            {"name": name, "short_name": short_name, "url": reverse(url_name)}
            for name, short_name, url_name in SHORTCUTS
        ],
    }
    response = JsonResponse(data, json_dumps_params={"ensure_ascii": False})
    response["Content-Type"] = "application/manifest+json"
    return _no_store(response)


def offline(request):
    return render(request, "pwa/offline.html")


def service_worker(request):
    context = {
        "version": SW_VERSION,
        "offline_url": reverse("pwa_offline"),
        "css_url": static("css/app.css"),
        "icon_url": static("pwa/icon.svg"),
    }
    response = render(request, "pwa/sw.js", context, content_type="application/javascript")
    response["Service-Worker-Allowed"] = "/"
    return _no_store(response)


def _subscription_payload(request):
    try:
        return json.loads(request.body.decode("utf-8") or "{}")
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None


@login_required
@require_GET
def push_status(request):
    return JsonResponse({"subscribed": has_active_push(request.user)})


@login_required
@require_POST
def push_subscribe(request):
    payload = _subscription_payload(request)
    if payload is None:
        return JsonResponse({"ok": False, "error": "invalid_json"}, status=400)
    keys = payload.get("keys") or {}
    if not payload.get("endpoint") or not keys.get("auth") or not keys.get("p256dh"):
        return JsonResponse({"ok": False, "error": "missing_fields"}, status=400)
    subscribe_push(
        request.user,
        payload["endpoint"],
        p256dh_key=keys["p256dh"],
        auth_key=keys["auth"],
        user_agent=request.headers.get("User-Agent") or "",
    )
    return JsonResponse({"ok": True})


@login_required
@require_POST
def push_unsubscribe(request):
    payload = _subscription_payload(request)
    if payload is None:
        return JsonResponse({"ok": False, "error": "invalid_json"}, status=400)
    if not payload.get("endpoint"):
        return JsonResponse({"ok": False, "error": "missing_endpoint"}, status=400)
    return JsonResponse({"ok": bool(unsubscribe_push(request.user, payload["endpoint"]))})
