"""
djust-panel: declarative admin screens for Django, powered by djust.

Grids, forms, detail views, dashboards and widgets are described with
builder objects in resource controllers; the panel renders them, wires the
AJAX endpoints and applies role based permissions.
"""

__version__ = "0.1.0"

# Import adapters module to register the panel_tailwind adapter
from . import adapters  # noqa: F401
from .dashboard import NavItem, PanelPage, PanelPlugin
from .decorators import displayer, form_field, register
from .sites import PanelSite

# Default panel site instance
site = PanelSite()
site.register("auth/roles", "djust_panel.controllers.roles.RoleController")
site.register("helpers/scaffold", "djust_panel.controllers.scaffold.ScaffoldController")


def autodiscover():
    """
    Auto-discover djust_panel.py modules in all installed apps.

    Apps register their resource controllers and plugins there.
    """
    from django.utils.module_loading import autodiscover_modules

    autodiscover_modules("djust_panel", register_to=site)


__all__ = [
    "PanelSite",
    "PanelPlugin",
    "PanelPage",
    "NavItem",
    "register",
    "displayer",
    "form_field",
    "site",
    "autodiscover",
]
