"""
Settings for djust-panel.

Project settings live in a single ``DJUST_PANEL`` dict in Django settings and
are deep-merged over the defaults below. Keys are looked up with dotted paths:

    from djust_panel.conf import panel_settings

    panel_settings.get("menu.cache.enable")
"""

import copy

from django.conf import settings

DEFAULTS = {
    "title": "djust panel",
    "index_title": "Dashboard",
    "route": {
        "prefix": "admin",
    },
    "grid": {
        "per_page": 20,
        "per_pages": [10, 20, 30, 50, 100],
        "export_limit": 50000,
    },
    "menu": {
        "cache": {
            "enable": False,
            "store": "default",
        },
        "bind_permission": True,
    },
    "upload": {
        "storage": None,
        "directory": {
            "file": "files",
            "image": "images",
        },
    },
    "scaffold": {
        "enable": None,
        "output_dir": None,
    },
    "layout": [],
}

_MISSING = object()


def _merge(base, override):
    result = copy.deepcopy(base)
    for key, value in override.items():
        if "." in key:
            # Flat dotted keys are allowed: {"menu.cache.enable": True}
            head, _, rest = key.partition(".")
            value = _merge(result.get(head, {}) or {}, {rest: value})
            key = head
        elif isinstance(value, dict) and isinstance(result.get(key), dict):
            value = _merge(result[key], value)
        result[key] = value
    return result


class PanelSettings:
    """Lazy view over ``settings.DJUST_PANEL`` merged with defaults.

    Settings are re-read on every access so ``override_settings`` works.
    """

    def as_dict(self):
        return _merge(DEFAULTS, getattr(settings, "DJUST_PANEL", {}) or {})

    def get(self, key, default=None):
        value = self.as_dict()
        for segment in key.split("."):
            if not isinstance(value, dict):
                return default
            value = value.get(segment, _MISSING)
            if value is _MISSING:
                return default
        return value

    def __getitem__(self, key):
        value = self.get(key, _MISSING)
        if value is _MISSING:
            raise KeyError(key)
        return value

    def scaffold_enabled(self):
        enabled = self.get("scaffold.enable")
        if enabled is None:
            return bool(settings.DEBUG)
        return bool(enabled)


panel_settings = PanelSettings()


def admin_url(path=""):
    """Return an absolute url inside the panel route prefix."""
    prefix = "/" + str(panel_settings.get("route.prefix", "admin")).strip("/")
    path = str(path or "")
    if path.startswith(("http://", "https://", "//")):
        return path
    if path.startswith(prefix + "/") or path == prefix:
        return path
    path = path.strip("/")
    return f"{prefix}/{path}" if path else prefix
