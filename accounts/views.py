from django.contrib.auth.views import LoginView, LogoutView
from django.views.generic import TemplateView

from .forms import LoginForm


class UserLoginView(LoginView):
    template_name = "login.html"
    authentication_form = LoginForm
    redirect_authenticated_user = True


class UserLogoutView(LogoutView):
    template_name = "logout.html"


class LogoutConfirmView(TemplateView):
    """Pantalla de confirmación antes de cerrar sesión (GET)."""

    template_name = "logout_confirm.html"
