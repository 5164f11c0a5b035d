"""
Dashboard plugins for djust-panel.

Packages hook into the panel with:
- PanelPlugin: groups pages, widgets and nav items for a package
- PanelPage: custom LiveView page inside the panel chrome
- NavItem: sidebar navigation entry

Example usage (in your_package/djust_panel.py):

    from djust_panel import site
    from djust_panel.dashboard import PanelPlugin
    from djust_panel.widgets import DashboardWidget

    class StatsWidget(DashboardWidget):
        widget_id = "stats"
        label = "Stats"
        template_name = "my_package/panel/stats.html"

        def get_context(self, request):
            return {"count": 42}

    class MyPlugin(PanelPlugin):
        name = "my_package"
        verbose_name = "My Package"

        def get_widgets(self):
            return [StatsWidget()]

    site.register_plugin(MyPlugin)

Permissions are panel permission slugs, checked with ``auth.can``.
"""


def _can(request, permission):
    if permission is None:
        return True
    from . import auth

    return auth.can(getattr(request, "user", None), permission)


class NavItem:
    """Sidebar navigation entry, pointing at a url name of the site or at a plain url."""

    def __init__(
        self,
        label,
        url_name=None,
        icon=None,
        order=0,
        section=None,
        permission=None,
        url=None,
    ):
        self.label = label
        self.url_name = url_name
        self.icon = icon
        self.order = order
        self.section = section
        self.permission = permission
        self.url = url

    def has_permission(self, request):
        return _can(request, self.permission)

    def __repr__(self):
        return f"NavItem(label={self.label!r}, url_name={self.url_name!r})"


class PanelPage:
    """
    Custom LiveView page within the panel chrome.

    Auto-generates a NavItem unless show_in_nav=False.
    """

    def __init__(
        self,
        url_path,
        url_name,
        view_class,
        label=None,
        icon=None,
        nav_section=None,
        nav_order=0,
        permission=None,
        show_in_nav=True,
    ):
        self.url_path = url_path.strip("/")
        self.url_name = url_name
        self.view_class = view_class
        self.label = label or url_name.replace("_", " ").title()
        self.icon = icon
        self.nav_section = nav_section
        self.nav_order = nav_order
        self.permission = permission
        self.show_in_nav = show_in_nav

    def get_nav_item(self):
        if not self.show_in_nav:
            return None
        return NavItem(
            label=self.label,
            url_name=self.url_name,
            icon=self.icon,
            order=self.nav_order,
            section=self.nav_section,
            permission=self.permission,
        )

    def __repr__(self):
        return f"PanelPage(url_path={self.url_path!r}, url_name={self.url_name!r})"


class PanelPlugin:
    """
    Base class for panel extensions. One per package.

    Register via site.register_plugin(MyPlugin).
    """

    name = None  # unique identifier (required)
    verbose_name = None

    def get_pages(self):
        return []

    def get_widgets(self):
        return []

    def get_nav_items(self):
        """Nav items of the pages that have show_in_nav=True. Override for custom items."""
        items = []
        for page in self.get_pages():
            nav_item = page.get_nav_item()
            if nav_item is not None:
                items.append(nav_item)
        return items

    def ready(self):
        """Called when the plugin is registered."""
        pass

    def __repr__(self):
        return f"PanelPlugin(name={self.name!r})"
