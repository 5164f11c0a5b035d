from django.template.loader import render_to_string
from django.utils.safestring import mark_safe

from ..helpers import render
from .base import Widget


class DashboardWidget(Widget):
    """
    A card on the dashboard.

    Either set ``template_name`` and override ``get_context()``, or pass the
    card body (a string, builder or callable) as ``content``.
    """

    widget_id = None
    label = ""
    order = 0
    size = "md"  # "sm", "md", or "lg"
    permission = None

    def __init__(self, content=None, widget_id=None, label=None, order=None, size=None, permission=None):
        super().__init__(content)
        if widget_id is not None:
            self.widget_id = widget_id
        if label is not None:
            self.label = label
        if order is not None:
            self.order = order
        if size is not None:
            self.size = size
        if permission is not None:
            self.permission = permission

    def get_context(self, request):
        return {}

    def has_permission(self, request):
        """A widget without ``permission`` is visible to everyone in the panel."""
        if self.permission is None:
            return True
        from .. import auth

        return auth.can(getattr(request, "user", None), self.permission)

    def render(self, request=None):
        if self.template_name:
            context = {**self._variables, **self.get_context(request), "widget": self}
            return mark_safe(render_to_string(self.template_name, context, request=request))
        return mark_safe(render(self.content, request))

    def __repr__(self):
        return f"DashboardWidget(widget_id={self.widget_id!r}, label={self.label!r})"
