"""
Show: the detail screen of one record.

    def detail(self, pk):
        show = Show(pk, ModelRepository(Article, ["category", "tags"]), request=self.request)
        show.field("id")
        show.field("title")
        show.divider()
        show.field("category.name", "Category")
        show.field("tags.name", "Tags").label()
        return show
"""

import logging

from django.template.loader import render_to_string
from django.utils.safestring import mark_safe

from ..conf import admin_url
from ..events import HasBuilderEvents
from ..repository import ModelRepository
from .field import Divider, Html, ShowField
from .tools import Tools

logger = logging.getLogger(__name__)

__all__ = ["Show", "Panel", "ShowField"]


class Panel:
    template_name = "djust_panel/show.html"

    def __init__(self, parent):
        self.parent = parent
        self.tools = Tools(self)
        self.title = "Detail"
        self.style = "default"
        self.wrapper = None
        self.template_name = type(self).template_name

    def set_title(self, title):
        self.title = title
        return self

    def set_style(self, style):
        self.style = style
        return self

    def set_view(self, template_name):
        self.template_name = template_name
        return self

    def wrap(self, callback):
        self.wrapper = callback
        return self

    def render(self):
        context = {
            "title": self.title,
            "style": self.style,
            "tools": self.tools.render(),
            "fields": [item.render() for item in self.parent.get_fields()],
        }
        html = render_to_string(self.template_name, context, request=self.parent.request)
        if self.wrapper is not None:
            html = self.wrapper(mark_safe(html))
        return mark_safe(html)


class Show(HasBuilderEvents):
    def __init__(self, pk, repository, builder=None, request=None):
        if not isinstance(repository, ModelRepository):
            repository = ModelRepository(repository)
        self.id = pk
        self.repository = repository
        self.builder = builder
        self.request = request
        self.record = None
        self._fields = []
        self._resource = None
        self._panel = Panel(self)
        self._built = False
        self.call_resolving()

    @classmethod
    def make(cls, *args, **kwargs):
        return cls(*args, **kwargs)

    def get_id(self):
        return self.id

    def get_key_name(self):
        return self.repository.get_key_name()

    # ---- Fields ----

    def field(self, name, label=None):
        if label is None:
            label = self.repository.get_field_label(name)
        field = ShowField(name, label)
        self._fields.append(field)
        return field

    def fields(self, *names):
        """``fields("id", "title")`` or ``fields({"id": "ID", "title": "Title"})``."""
        if len(names) == 1 and isinstance(names[0], dict):
            for name, label in names[0].items():
                self.field(name, label)
        else:
            for name in names:
                self.field(name)
        return self

    def divider(self):
        self._fields.append(Divider())
        return self

    def html(self, content):
        self._fields.append(Html(content))
        return self

    def get_fields(self):
        return list(self._fields)

    # ---- Resource ----

    def resource(self, path):
        if path:
            self._resource = admin_url(path)
        return self

    def get_resource(self):
        """List url: the current path without its trailing ``/<pk>``."""
        if self._resource is None:
            path = self.request.path.rstrip("/") if self.request is not None else ""
            suffix = f"/{self.id}"
            self._resource = path[: -len(suffix)] if path.endswith(suffix) else path
        return self._resource

    # ---- Panel ----

    def panel(self, callback=None):
        if callback is None:
            return self._panel
        callback(self._panel)
        return self

    def tools(self, callback):
        callback(self._panel.tools)
        return self

    def disable_list_button(self, disable=True):
        self._panel.tools.disable_list(disable)
        return self

    def disable_edit_button(self, disable=True):
        self._panel.tools.disable_edit(disable)
        return self

    def disable_delete_button(self, disable=True):
        self._panel.tools.disable_delete(disable)
        return self

    def show_quick_edit(self, width=None, height=None):
        self._panel.tools.show_quick_edit(width, height)
        return self

    def disable_quick_edit(self, disable=True):
        self._panel.tools.disable_quick_edit(disable)
        return self

    def set_title(self, title):
        self._panel.set_title(title)
        return self

    # ---- Rendering ----

    def build(self):
        if self._built:
            return
        self._built = True
        if self.builder is not None:
            self.builder(self)
        if not self._fields:
            for field in self.repository.editable_fields():
                self.field(field.name)
        self.record = self.repository.find(self.id)
        for item in self._fields:
            item.fill(self.record)

    def render(self):
        self.build()
        self.call_composing()
        return self._panel.render()

    def __html__(self):
        return str(self.render())
