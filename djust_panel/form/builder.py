"""
Form builder: mode, action url, field list and the html around them.
"""

from django.template.loader import render_to_string
from django.utils.html import format_html
from django.utils.safestring import mark_safe

from .. import assets
from ..helpers import html_attributes, random_id
from .fields import Display, Hidden
from .files import UploadField
from .footer import Footer
from .tools import Tools


class Builder:
    PREVIOUS_URL_KEY = "_previous_"

    MODE_EDIT = "edit"
    MODE_CREATE = "create"
    MODE_DELETE = "delete"

    template_name = "djust_panel/form.html"

    def __init__(self, form):
        self.form = form
        self.id = None
        self.action = None
        self.mode = self.MODE_CREATE
        self._fields = []
        self._hidden_fields = []
        self._options = {}
        self.width = {"label": 2, "field": 8}
        self.template_name = type(self).template_name
        self.title_text = None
        self.form_id = None
        self.wrapper = None
        self.show_header = True
        self.show_footer = True
        self.tools = Tools(self)
        self.footer = Footer(self)

    # ---- Mode ----

    def set_mode(self, mode=MODE_CREATE):
        self.mode = mode
        return self

    def get_mode(self):
        return self.mode

    def is_mode(self, mode):
        return self.mode == mode

    def is_creating(self):
        return self.is_mode(self.MODE_CREATE)

    def is_editing(self):
        return self.is_mode(self.MODE_EDIT)

    def is_deleting(self):
        return self.is_mode(self.MODE_DELETE)

    def set_resource_id(self, pk):
        self.id = pk
        return self

    def get_resource_id(self):
        return self.id

    def get_resource(self, slice=None):
        if self.is_creating():
            return self.form.get_resource(-1)
        if slice is not None:
            return self.form.get_resource(slice)
        return self.form.get_resource()

    # ---- Layout ----

    def wrap(self, callback):
        self.wrapper = callback
        return self

    def has_wrapper(self):
        return self.wrapper is not None

    def get_tools(self):
        return self.tools

    def get_footer(self):
        return self.footer

    def set_width(self, field=8, label=2):
        self.width = {"label": label, "field": field}
        return self

    def get_width(self):
        return self.width

    def set_action(self, action):
        self.action = action
        return self

    def get_action(self):
        if self.action:
            return self.action
        if self.is_editing():
            return f"{self.form.get_resource()}/{self.id}"
        if self.is_creating():
            return self.form.get_resource(-1)
        return ""

    def set_view(self, template_name):
        self.template_name = template_name
        return self

    def set_title(self, title):
        self.title_text = title
        return self

    def title(self):
        if self.title_text:
            return self.title_text
        if self.is_creating():
            return "Create"
        if self.is_editing():
            return "Edit"
        return ""

    # ---- Fields ----

    def push_field(self, field):
        self._fields.append(field)
        return self

    def fields(self):
        return list(self._fields)

    def field(self, name):
        for field in self._fields:
            if field.column == name:
                return field
        return None

    def remove_field(self, column):
        self._fields = [field for field in self._fields if field.column != column]
        return self

    def get_hidden_fields(self):
        return list(self._hidden_fields)

    def add_hidden_field(self, field):
        self._hidden_fields.append(field)
        return self

    def options(self, options=None):
        if not options:
            return self._options
        self._options.update(options)
        return self

    def option(self, option, *value):
        if not value:
            return self._options.get(option)
        self._options[option] = value[0]
        return self

    def disable_header(self, disable=True):
        self.show_header = not disable
        return self

    def disable_footer(self, disable=True):
        self.show_footer = not disable
        return self

    def set_form_id(self, form_id):
        self.form_id = form_id
        return self

    def get_form_id(self):
        if not self.form_id:
            self.form_id = random_id("form-")
        return self.form_id

    def has_file(self):
        return any(isinstance(field, UploadField) for field in self._fields)

    # ---- Rendering ----

    def add_redirect_url_field(self):
        request = self.form.request
        if request is None:
            return
        previous = request.META.get("HTTP_REFERER")
        current = request.build_absolute_uri()
        if not previous or previous == current:
            return
        if request.build_absolute_uri(self.get_resource()) in previous:
            self.add_hidden_field(Hidden(self.PREVIOUS_URL_KEY).value(previous))

    def open(self, options=None):
        options = options or {}
        if self.is_editing():
            self.add_hidden_field(Hidden("_method").value("PUT"))
        self.add_redirect_url_field()
        attributes = {
            "id": self.get_form_id(),
            "action": self.get_action(),
            "method": options.get("method", "post"),
            "accept-charset": "UTF-8",
            "class": options.get("class"),
        }
        if self.has_file():
            attributes["enctype"] = "multipart/form-data"
        return format_html("<form {}>", html_attributes(attributes))

    def close(self):
        return mark_safe("</form>")

    def remove_reserved_fields(self):
        if not self.is_creating():
            return
        repository = self.form.repository
        reserved = [self.form.get_key_name()]
        if repository is not None:
            reserved += [repository.get_created_at_column(), repository.get_updated_at_column()]
        self._fields = [
            field
            for field in self._fields
            if not (field.column in reserved and isinstance(field, Display))
        ]

    def render_tools(self):
        return self.tools.render()

    def render_footer(self):
        if not self.show_footer:
            return ""
        return self.footer.render()

    def setup_submit_script(self):
        assets.script(f"DjustPanel.ajaxForm('#{self.get_form_id()}');")

    def render(self):
        self.remove_reserved_fields()
        if self.form.allow_ajax_submit():
            self.setup_submit_script()
        opening = self.open({"class": "form-horizontal"})
        context = {
            "form": self,
            "title": self.title(),
            "width": self.width,
            "form_id": self.get_form_id(),
            "show_header": self.show_header,
            "tools": self.render_tools() if self.show_header else "",
            "fields": [field.render() for field in self._fields],
            "hidden_fields": [field.render() for field in self._hidden_fields],
            "footer": self.render_footer(),
        }
        html = render_to_string(self.template_name, context, request=self.form.request)
        if self.wrapper is not None:
            html = self.wrapper(mark_safe(html))
        else:
            html = format_html('<div class="card">{}</div>', mark_safe(html))
        return mark_safe(f"{opening}{html}{self.close()}")
