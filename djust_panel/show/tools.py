from django.utils.html import format_html
from django.utils.safestring import mark_safe

from .. import assets
from ..helpers import random_id, render


class Tools:
    """List / edit / delete buttons of a detail panel, plus custom tools."""

    tools = ("delete", "edit", "list")

    def __init__(self, panel):
        self.panel = panel
        self.resource = None
        self.appends = []
        self.prepends = []
        self.show_list = True
        self.show_delete = True
        self.show_edit = True
        self.show_quick_edit_button = False
        self.dialog_form_dimensions = ["700px", "670px"]

    def append(self, tool):
        self.appends.append(tool)
        return self

    def prepend(self, tool):
        self.prepends.append(tool)
        return self

    def get_resource(self):
        if self.resource is None:
            self.resource = self.panel.parent.get_resource()
        return self.resource

    def disable_list(self, disable=True):
        self.show_list = not disable
        return self

    def disable_delete(self, disable=True):
        self.show_delete = not disable
        return self

    def disable_edit(self, disable=True):
        self.show_edit = not disable
        return self

    def disable_quick_edit(self, disable=True):
        self.show_quick_edit_button = not disable
        return self

    def show_quick_edit(self, width=None, height=None):
        self.show_quick_edit_button = True
        if width:
            self.dialog_form_dimensions[0] = width
        if height:
            self.dialog_form_dimensions[1] = height
        return self

    def get_list_path(self):
        url = self.get_resource()
        if url.startswith(("http://", "https://")):
            return url
        return "/" + url.strip("/")

    def get_edit_path(self):
        return f"{self.get_list_path()}/{self.panel.parent.get_id()}/edit"

    def get_delete_path(self):
        return f"{self.get_list_path()}/{self.panel.parent.get_id()}"

    def render_list(self):
        if not self.show_list:
            return ""
        return format_html(
            '<a href="{}" class="btn btn-sm btn-default">List</a>', self.get_list_path()
        )

    def render_edit(self):
        if not self.show_quick_edit_button and not self.show_edit:
            return ""
        url = self.get_edit_path()
        button = quick_button = ""
        if self.show_edit:
            button = format_html('<a href="{}" class="btn btn-sm btn-primary">Edit</a>', url)
        if self.show_quick_edit_button:
            from ..widgets.modal_form import ModalForm

            element_id = random_id("show-edit-")
            width, height = self.dialog_form_dimensions
            ModalForm("Edit").click(f".{element_id}").dimensions(width, height).success(
                "DjustPanel.reload()"
            ).render()
            text = "" if self.show_edit else "Edit"
            quick_button = format_html(
                '<a href="#" data-url="{}" class="btn btn-sm btn-primary {}">&#x2750; {}</a>',
                url,
                element_id,
                text,
            )
        return format_html('<div class="btn-group">{}{}</div>', button, quick_button)

    def render_delete(self):
        if not self.show_delete:
            return ""
        assets.script("DjustPanel.bindDelete('.show-tool-delete');")
        return format_html(
            '<a href="#" class="btn btn-sm btn-danger show-tool-delete" data-url="{}" data-redirect="{}">Delete</a>',
            self.get_delete_path(),
            self.get_list_path(),
        )

    def render_custom_tools(self, tools):
        return " ".join(render(tool) for tool in tools)

    def render(self):
        output = self.render_custom_tools(self.prepends)
        for tool in self.tools:
            output += str(getattr(self, f"render_{tool}")())
        return mark_safe(output + self.render_custom_tools(self.appends))
