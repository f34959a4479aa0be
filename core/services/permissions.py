from functools import wraps

from django.http import HttpResponseForbidden

ADMIN_ROLES = ["ADMIN"]
EDITOR_ROLES = ["ADMIN", "EDITOR"]


def user_has_role(user, role_codes):
    if not user.is_authenticated or not user.is_active:
        return False
    if user.is_superuser:
        return True
    return user.role in role_codes


def require_roles(role_codes):
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            if user_has_role(request.user, role_codes):
                return view_func(request, *args, **kwargs)
            return HttpResponseForbidden("No autorizado")

        return _wrapped

    return decorator
