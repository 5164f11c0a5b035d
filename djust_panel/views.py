"""
LiveView pages of the panel: dashboard, login and logout.

Resource screens are served by the controllers; these views provide the
panel chrome around them (navigation, dashboard widgets).
"""

from functools import wraps

from django.contrib.auth import authenticate, logout
from django.http import HttpResponseRedirect
from django.urls import reverse
from djust import LiveView
from djust.decorators import event_handler, state

from . import auth

# Global registry for view configurations.
# Keeps non-serializable objects (the site) off the LiveView instances.
_VIEW_REGISTRY = {}

DEFAULT_SITE_NAME = "djust_panel"


def register_admin_view(view_id, admin_site, **extra):
    _VIEW_REGISTRY[view_id] = {"admin_site": admin_site, **extra}


def get_admin_config(view_id):
    return _VIEW_REGISTRY.get(view_id, {})


def admin_login_required(view_func, site_name=None):
    """
    Send users without panel access (staff, administrators, role holders)
    to the panel login page.
    """

    @wraps(view_func)
    def wrapped_view(request, *args, **kwargs):
        if not auth.has_panel_access(request.user):
            login_url = reverse(f"{site_name or DEFAULT_SITE_NAME}:login")
            return HttpResponseRedirect(f"{login_url}?next={request.path}")
        return view_func(request, *args, **kwargs)

    return wrapped_view


class AdminBaseMixin:
    """Base mixin for panel LiveViews. Provides the chrome context."""

    # Prefixed with underscore so LiveView's get_context_data() skips it
    _view_registry_id = None

    @classmethod
    def as_view(cls, **initkwargs):
        view = super().as_view(**initkwargs)
        site = get_admin_config(initkwargs.get("_view_registry_id")).get("admin_site")
        return admin_login_required(view, site.name if site is not None else None)

    @property
    def _admin_site(self):
        return get_admin_config(self._view_registry_id).get("admin_site")

    def get_admin_context(self):
        """Common chrome context. Everything is forced to plain (JSON serializable) values."""
        site = self._admin_site
        user = self.request.user
        return {
            "site_header": str(site.site_header),
            "admin_site_name": str(site.name),
            "nav": site.get_nav(self.request),
            "resources": site.get_resource_list(self.request),
            "username": user.get_username() if user.is_authenticated else None,
            "is_authenticated": user.is_authenticated,
            "is_administrator": auth.is_administrator(user),
        }


class AdminIndexView(AdminBaseMixin, LiveView):
    """Dashboard: plugin widgets and the registered resources."""

    template_name = "djust_panel/index.html"

    def mount(self, request, **kwargs):
        self.request = request

    def get_context_data(self, **kwargs):
        widgets = self._admin_site.get_widgets(self.request)

        return {
            **self.get_admin_context(),
            "title": str(self._admin_site.index_title),
            "widgets": widgets,
            "has_widgets": len(widgets) > 0,
        }


class LoginView(LiveView):
    """Panel login."""

    template_name = "djust_panel/login.html"

    _view_registry_id = None

    username = state(default="")
    password = state(default="")
    error = state(default="")

    def mount(self, request, **kwargs):
        self.request = request
        self.next_url = request.GET.get("next", "")

    @property
    def _admin_site(self):
        return get_admin_config(self._view_registry_id).get("admin_site")

    def _site_name(self):
        return self._admin_site.name if self._admin_site else DEFAULT_SITE_NAME

    def get_context_data(self, **kwargs):
        return {
            "site_header": str(self._admin_site.site_header) if self._admin_site else "djust panel",
            "username": self.username,
            "error": self.error,
        }

    @event_handler
    def update_username(self, value: str, field: str = None):
        self.username = value
        self.error = ""

    @event_handler
    def update_password(self, value: str, field: str = None):
        self.password = value
        self.error = ""

    @event_handler
    def do_login(self, **kwargs):
        from django.contrib.auth import BACKEND_SESSION_KEY, HASH_SESSION_KEY, SESSION_KEY

        if not self.username or not self.password:
            self.error = "Please enter both username and password."
            return

        user = authenticate(self.request, username=self.username, password=self.password)

        if user is None:
            self.error = "Invalid username or password."
        elif not user.is_active or not auth.has_panel_access(user):
            self.error = "Your account is not authorized to access the panel."
        else:
            # Manual session login for WebSocket context
            session = self.request.session
            session[SESSION_KEY] = str(user.pk)
            session[BACKEND_SESSION_KEY] = user.backend
            session[HASH_SESSION_KEY] = user.get_session_auth_hash()
            session.save()

            redirect_url = self.next_url or reverse(f"{self._site_name()}:index")
            self.push_event("redirect", {"url": redirect_url})

        self.password = ""


class LogoutView(LiveView):
    """Panel logout."""

    template_name = "djust_panel/logout.html"

    _view_registry_id = None

    def mount(self, request, **kwargs):
        self.request = request
        logout(request)

    @property
    def _admin_site(self):
        return get_admin_config(self._view_registry_id).get("admin_site")

    def get_context_data(self, **kwargs):
        site_name = self._admin_site.name if self._admin_site else DEFAULT_SITE_NAME
        return {
            "site_header": str(self._admin_site.site_header) if self._admin_site else "djust panel",
            "login_url": reverse(f"{site_name}:login"),
        }
