from django.utils.html import format_html
from django.utils.safestring import mark_safe

from .. import assets
from ..helpers import render


class Tools:
    """List / view / delete buttons in the form header, plus custom tools."""

    tools = ("delete", "view", "list")

    def __init__(self, builder):
        self.form = builder
        self.appends = []
        self.prepends = []
        self.show_list = True
        self.show_delete = True
        self.show_view = True

    def append(self, tool):
        self.appends.append(tool)
        return self

    def prepend(self, tool):
        self.prepends.append(tool)
        return self

    def disable_list(self, disable=True):
        self.show_list = not disable
        return self

    def disable_delete(self, disable=True):
        self.show_delete = not disable
        return self

    def disable_view(self, disable=True):
        self.show_view = not disable
        return self

    def get_list_path(self):
        return self.form.get_resource()

    def get_view_path(self):
        key = self.form.get_resource_id()
        if key:
            return f"{self.get_list_path()}/{key}"
        return self.get_list_path()

    def get_delete_path(self):
        return self.get_view_path()

    def render_list(self):
        if not self.show_list:
            return ""
        return format_html(
            '<a href="{}" class="btn btn-sm btn-default">List</a>', self.get_list_path()
        )

    def render_view(self):
        if not self.show_view:
            return ""
        return format_html(
            '<a href="{}" class="btn btn-sm btn-primary">View</a>', self.get_view_path()
        )

    def render_delete(self):
        if not self.show_delete:
            return ""
        assets.script("DjustPanel.bindDelete('.form-tool-delete');")
        return format_html(
            '<a href="#" class="btn btn-sm btn-danger form-tool-delete" data-url="{}" data-redirect="{}">Delete</a>',
            self.get_delete_path(),
            self.get_list_path(),
        )

    def render_custom_tools(self, tools):
        if self.form.is_creating():
            self.disable_view()
            self.disable_delete()
        return " ".join(render(tool) for tool in tools)

    def render(self):
        output = self.render_custom_tools(self.prepends)
        for tool in self.tools:
            output += str(getattr(self, f"render_{tool}")())
        return mark_safe(output + self.render_custom_tools(self.appends))
