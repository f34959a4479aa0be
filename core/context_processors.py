from django.conf import settings

from core.services.permissions import ADMIN_ROLES, EDITOR_ROLES, user_has_role


def navigation(request):
    user = request.user
    return {
        "church_name": settings.CHURCH_NAME,
        "can_manage": user.is_authenticated and user_has_role(user, ADMIN_ROLES),
        "can_edit": user.is_authenticated and user_has_role(user, EDITOR_ROLES),
    }
