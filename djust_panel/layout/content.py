"""
Page content: header, breadcrumb, flash messages and rows of builders.

    return (
        Content(request=request)
        .header("Articles")
        .description("List")
        .breadcrumb({"text": "Articles", "url": "/admin/articles"})
        .body(grid)
        .response()
    )
"""

import logging

from django.contrib import messages
from django.http import HttpResponse
from django.template.loader import render_to_string
from django.utils.safestring import mark_safe

from .. import assets
from ..conf import panel_settings
from ..events import HasBuilderEvents
from ..exceptions import BreadcrumbFormatError
from .row import Row

logger = logging.getLogger(__name__)


class Content(HasBuilderEvents):
    template_name = "djust_panel/content.html"
    simple_template_name = "djust_panel/simple.html"

    def __init__(self, callback=None, request=None):
        self.request = request
        self.template_name = type(self).template_name
        self._header = ""
        self._description = ""
        self._breadcrumb = []
        self._rows = []
        self._variables = {}
        self._alerts = []
        self.call_resolving()
        if callback is not None:
            callback(self)

    @classmethod
    def make(cls, *args, **kwargs):
        return cls(*args, **kwargs)

    def header(self, header=""):
        self._header = header
        return self

    def description(self, description=""):
        self._description = description
        return self

    def simple(self):
        self.template_name = self.simple_template_name
        return self

    def is_simple(self):
        return self.template_name == self.simple_template_name

    def set_view(self, template_name):
        self.template_name = template_name
        return self

    def with_(self, variables):
        self._variables.update(variables)
        return self

    # ---- Breadcrumb ----

    def breadcrumb(self, *items):
        """
        ``breadcrumb("Articles", "/admin/articles", "icon")`` adds one item;
        ``breadcrumb({"text": ...}, {"text": ..., "url": ...})`` adds several.
        """
        self._breadcrumb.extend(self.format_breadcrumb(list(items)))
        return self

    def format_breadcrumb(self, items):
        if not items:
            raise BreadcrumbFormatError("Breadcrumb format error!")
        not_dict = False
        for item in items:
            if isinstance(item, dict):
                if "text" not in item:
                    raise BreadcrumbFormatError("Breadcrumb format error!")
            elif item:
                not_dict = True
        if not_dict:
            padded = items + [None, None, None]
            return [{"text": padded[0], "url": padded[1], "icon": padded[2]}]
        return [dict(item) for item in items if isinstance(item, dict)]

    def get_breadcrumb(self):
        return list(self._breadcrumb)

    # ---- Rows ----

    def _make_row(self, content):
        if callable(content) and not hasattr(content, "render"):
            row = Row()
            content(row)
            return row
        return Row(content)

    def row(self, content):
        self._rows.append(self._make_row(content))
        return self

    body = row

    def prepend(self, content):
        self._rows.insert(0, self._make_row(content))
        return self

    def build(self):
        return mark_safe("".join(str(row.render()) for row in self._rows))

    # ---- Flash messages ----

    def _flash(self, level, title, message):
        text = f"{title}: {message}" if title and message else (title or message)
        if self.request is not None and hasattr(self.request, "_messages"):
            messages.add_message(self.request, level, text)
        else:
            self._alerts.append({"level": messages.DEFAULT_TAGS[level], "text": text})
        return self

    def with_success(self, title="", message=""):
        return self._flash(messages.SUCCESS, title, message)

    def with_error(self, title="", message=""):
        return self._flash(messages.ERROR, title, message)

    def with_warning(self, title="", message=""):
        return self._flash(messages.WARNING, title, message)

    def with_info(self, title="", message=""):
        return self._flash(messages.INFO, title, message)

    # ---- Rendering ----

    def extra_styles(self):
        if not self.is_simple() and "fixed" in (panel_settings.get("layout") or []):
            return "#nprogress .spinner{position:fixed!important;top:65px;}#nprogress .bar{top:50px;}"
        return ""

    def render(self):
        self.call_composing()
        content = self.build()
        context = {
            **self._variables,
            "header": self._header,
            "description": self._description,
            "breadcrumb": self._breadcrumb,
            "content": content,
            "alerts": self._alerts,
            "extra_styles": self.extra_styles(),
            "assets": assets.render(),
            "panel_title": panel_settings.get("title"),
        }
        return render_to_string(self.template_name, context, request=self.request)

    def response(self, status=200):
        return HttpResponse(self.render(), status=status)

    def __html__(self):
        return self.render()
