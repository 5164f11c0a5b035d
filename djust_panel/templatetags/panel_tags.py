"""Template tags and filters for djust-panel."""

from django import template
from django.urls import reverse

from .. import assets

register = template.Library()


@register.filter
def get_item(dictionary, key):
    """Get an item from a dictionary by key."""
    if dictionary is None:
        return None
    return dictionary.get(key)


@register.simple_tag
def panel_url(site_name, view_name, *args, **kwargs):
    """Reverse a url of a panel site."""
    return reverse(f"{site_name}:{view_name}", args=args or None, kwargs=kwargs or None)


@register.simple_tag(takes_context=True)
def panel_nav(context):
    """Navigation of the panel site for the current request."""
    from .. import site as default_site

    request = context.get("request")
    if request is None or not getattr(request, "user", None) or not request.user.is_authenticated:
        return {"menu": [], "plugins": []}
    return default_site.get_nav(request)


@register.simple_tag
def panel_assets():
    """Drain the scripts and styles registered while rendering."""
    return assets.render()


@register.inclusion_tag("djust_panel/partials/menu.html")
def panel_menu(items):
    return {"items": items}
