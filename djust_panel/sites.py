"""
PanelSite - the registry behind the panel urls.

Manages resource registrations (CRUD controllers) and plugin registrations
(dashboard extensions).
"""

import logging
import re

from django.core.exceptions import PermissionDenied
from django.urls import NoReverseMatch, path, re_path, reverse
from django.utils.module_loading import import_string

from .conf import admin_url, panel_settings

logger = logging.getLogger(__name__)


class PanelSite:
    """
    Usage:
        from djust_panel import site
        from djust_panel.controllers import ResourceController

        @site.register("articles")
        class ArticleController(ResourceController):
            model = Article

        # urls.py
        path("admin/", site.urls)
    """

    def __init__(self, name="djust_panel"):
        self.name = name
        self._registry = {}  # prefix -> controller class (or its dotted path)
        self._plugins = {}  # name -> PanelPlugin instance

    @property
    def site_header(self):
        return panel_settings.get("title")

    @property
    def index_title(self):
        return panel_settings.get("index_title")

    # ---- Resource registration ----

    def register(self, prefix, controller_class=None):
        """
        Register a resource controller under a url prefix.

        Can be used as a decorator:
            @site.register("articles")
            class ArticleController(ResourceController):
                model = Article

        Or called directly, with a class or its dotted path:
            site.register("auth/roles", "djust_panel.controllers.roles.RoleController")
        """
        prefix = str(prefix).strip("/")
        if not prefix:
            raise ValueError("A resource needs a non-empty url prefix")

        def _controller_wrapper(controller):
            if prefix in self._registry:
                raise ValueError(f"Resource '{prefix}' is already registered")
            self._registry[prefix] = controller
            return controller

        if controller_class is not None:
            return _controller_wrapper(controller_class)

        return _controller_wrapper

    def unregister(self, prefix):
        prefix = str(prefix).strip("/")
        if prefix not in self._registry:
            raise ValueError(f"Resource '{prefix}' is not registered")
        del self._registry[prefix]

    def is_registered(self, prefix):
        return str(prefix).strip("/") in self._registry

    def get_controller(self, prefix):
        controller = self._registry[str(prefix).strip("/")]
        if isinstance(controller, str):
            controller = import_string(controller)
        return controller

    @staticmethod
    def url_name(prefix):
        return prefix.replace("/", "_").replace("-", "_")

    # ---- Plugin registration ----

    def register_plugin(self, plugin_class_or_instance):
        """
        Register a plugin. Accepts a class (instantiated automatically) or an instance.

            site.register_plugin(StatsPlugin)
        """
        if isinstance(plugin_class_or_instance, type):
            plugin = plugin_class_or_instance()
        else:
            plugin = plugin_class_or_instance

        if not plugin.name:
            raise ValueError(f"Plugin {plugin.__class__.__name__} must have a 'name' attribute")

        if plugin.name in self._plugins:
            raise ValueError(f"Plugin '{plugin.name}' is already registered")

        self._plugins[plugin.name] = plugin
        plugin.ready()

    def unregister_plugin(self, name):
        if name not in self._plugins:
            raise ValueError(f"Plugin '{name}' is not registered")
        del self._plugins[name]

    def get_plugin(self, name):
        return self._plugins.get(name)

    # ---- URL generation ----

    def get_resource_urls(self, prefix, controller):
        name = self.url_name(prefix)
        pattern = "^" + re.escape(prefix)

        def view(route):
            from .views import admin_login_required

            return admin_login_required(controller.as_view(route=route), self.name)

        return [
            re_path(rf"{pattern}/?$", view("collection"), name=f"{name}_index"),
            re_path(rf"{pattern}/create/?$", view("create"), name=f"{name}_create"),
            re_path(rf"{pattern}/(?P<pk>[^/]+)/edit/?$", view("edit"), name=f"{name}_edit"),
            re_path(rf"{pattern}/(?P<pk>[^/]+)/?$", view("member"), name=f"{name}_show"),
        ]

    def get_setting_view(self):
        """The signed in user's settings page."""
        from .controllers.settings import UserSettingController
        from .views import admin_login_required

        return admin_login_required(UserSettingController.as_view(), self.name)

    def get_urls(self):
        """Url patterns of the panel: login, logout, dashboard, resources and plugin pages."""
        from .views import AdminIndexView, LoginView, LogoutView, register_admin_view

        login_id = f"{self.name}_login"
        logout_id = f"{self.name}_logout"
        index_id = f"{self.name}_index"
        register_admin_view(login_id, admin_site=self)
        register_admin_view(logout_id, admin_site=self)
        register_admin_view(index_id, admin_site=self)

        urlpatterns = [
            path("login/", LoginView.as_view(_view_registry_id=login_id), name="login"),
            path("logout/", LogoutView.as_view(_view_registry_id=logout_id), name="logout"),
            path("", AdminIndexView.as_view(_view_registry_id=index_id), name="index"),
        ]
        urlpatterns.append(re_path(r"^auth/setting/?$", self.get_setting_view(), name="auth_setting"))

        for prefix in self._registry:
            urlpatterns += self.get_resource_urls(prefix, self.get_controller(prefix))

        for plugin in self._plugins.values():
            for page in plugin.get_pages():
                page_view_id = f"{self.name}_plugin_{page.url_name}"
                register_admin_view(page_view_id, admin_site=self)
                urlpatterns.append(
                    path(
                        f"{page.url_path}/",
                        page.view_class.as_view(_view_registry_id=page_view_id),
                        name=page.url_name,
                    )
                )

        return urlpatterns

    @property
    def urls(self):
        """Return (urlpatterns, app_name, namespace) tuple."""
        return self.get_urls(), "djust_panel", self.name

    def reverse(self, url_name, *args, **kwargs):
        return reverse(f"{self.name}:{url_name}", args=args or None, kwargs=kwargs or None, current_app=self.name)

    # ---- Navigation data ----

    def get_resource_list(self, request):
        """Registered resources the user may open, sorted by title."""
        from . import auth

        user = getattr(request, "user", None)
        resources = []
        for prefix in self._registry:
            controller = self.get_controller(prefix)
            if controller.permission and not _passes(auth, user, controller.permission):
                continue
            title = controller.title
            if not title and controller.model is not None:
                title = controller.model._meta.verbose_name_plural
            resources.append(
                {
                    "prefix": prefix,
                    "title": str(title or prefix),
                    "url": self.reverse(f"{self.url_name(prefix)}_index"),
                }
            )
        resources.sort(key=lambda x: x["title"])
        return resources

    def get_menu(self, request):
        """The ``Menu`` tree, without the entries the user may not see."""
        from . import auth
        from .models import Menu

        user = getattr(request, "user", None)
        administrator = auth.is_administrator(user)
        roles = set(auth.get_roles(user).values_list("slug", flat=True))

        def visible(node):
            if administrator:
                return True
            if node["roles"] and not roles.intersection(node["roles"]):
                return False
            permissions = node.get("permissions") or []
            if permissions and not any(auth.can(user, slug) for slug in permissions):
                return False
            return True

        def walk(nodes):
            items = []
            for node in nodes:
                if not visible(node):
                    continue
                items.append(
                    {
                        **node,
                        "url": admin_url(node["uri"]) if node["uri"] else "#",
                        "children": walk(node["children"]),
                    }
                )
            return items

        return walk(Menu.tree())

    def get_plugin_nav(self, request):
        """
        Plugin nav items grouped by section:

        [{"section": "Reports", "items": [{"label": ..., "url": ...}, ...]}, ...]
        """
        sections = {}

        for plugin in self._plugins.values():
            for nav_item in plugin.get_nav_items():
                if not nav_item.has_permission(request):
                    continue

                section_name = str(nav_item.section or plugin.verbose_name or plugin.name)
                url = nav_item.url
                if url is None:
                    try:
                        url = self.reverse(nav_item.url_name)
                    except NoReverseMatch:
                        logger.warning("Nav item %r points at an unknown url", nav_item)
                        url = "#"

                sections.setdefault(section_name, []).append(
                    {
                        "label": str(nav_item.label),
                        "url": str(url),
                        "icon": str(nav_item.icon or ""),
                        "order": nav_item.order,
                    }
                )

        result = []
        for section_name in sorted(sections.keys()):
            items = sorted(sections[section_name], key=lambda x: x["order"])
            result.append({"section": section_name, "items": items})

        return result

    def get_nav(self, request):
        return {"menu": self.get_menu(request), "plugins": self.get_plugin_nav(request)}

    def get_widgets(self, request):
        """
        Render the widgets of all plugins the user may see.

        [{"widget_id": ..., "label": ..., "html": ..., "size": ..., "order": ...}, ...]
        """
        widgets = []

        for plugin in self._plugins.values():
            for widget in plugin.get_widgets():
                if not widget.has_permission(request):
                    continue

                widgets.append(
                    {
                        "widget_id": widget.widget_id,
                        "label": str(widget.label),
                        "html": str(widget.render(request)),
                        "size": widget.size,
                        "order": widget.order,
                    }
                )

        widgets.sort(key=lambda w: w["order"])
        return widgets


def _passes(auth, user, permission):
    try:
        return auth.check(user, permission)
    except PermissionDenied:
        return False
