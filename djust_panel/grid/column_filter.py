"""
Filters attached to a single grid column header.

    grid.column("status").filter(In({"draft": "Draft", "published": "Published"}))
    grid.column("created_at").filter(Between(datetime=True))
"""

from django.db.models import Q
from django.utils.html import format_html, format_html_join

from ..helpers import url_with_query, url_without_query


class ColumnFilter:
    """Base class. Subclasses implement ``add_binding`` and ``render``."""

    def __init__(self):
        self.parent = None

    @classmethod
    def make(cls, *args, **kwargs):
        return cls(*args, **kwargs)

    def set_parent(self, column):
        self.parent = column

    @property
    def grid(self):
        return self.parent.grid

    def get_column_name(self):
        return self.parent.get_name()

    def get_lookup(self, suffix=None):
        field = self.get_column_name().replace(".", "__")
        return f"{field}__{suffix}" if suffix else field

    def get_form_name(self):
        return f"{self.grid.get_name()}_filter_{self.get_column_name()}"

    def get_filter_value(self, default=""):
        request = self.grid.request
        if request is None:
            return default
        return request.GET.get(self.get_form_name(), default)

    def get_form_action(self):
        """Current url without this filter, the page number and ``_pjax``."""
        return url_without_query(
            self.grid.current_url(),
            [self.get_form_name(), self.grid.model().get_page_name(), "_pjax"],
        )

    def url_without_filter(self):
        return url_with_query(self.grid.current_url(), {self.get_form_name(): None})

    def is_active(self):
        value = self.get_filter_value()
        if isinstance(value, dict):
            return any(value.values())
        return value not in ("", None, [])

    def add_binding(self, value, model):
        """Constrain ``model`` (a ``GridModel``) with the submitted value."""

    def render(self):
        return ""

    def render_form(self, inputs):
        active = " text-indigo-600" if self.is_active() else ""
        return format_html(
            '<span class="grid-column-filter dropdown">'
            '<a href="#" class="dropdown-toggle{}" data-toggle="dropdown">&#x25BE;</a>'
            '<form action="{}" method="get" class="dropdown-menu">{}'
            '<div class="grid-column-filter-buttons">'
            '<button type="submit" class="btn btn-sm btn-primary">Submit</button>'
            '<a href="{}" class="btn btn-sm btn-default">Reset</a></div></form></span>',
            active,
            self.get_form_action(),
            inputs,
            self.url_without_filter(),
        )


class Equal(ColumnFilter):
    def add_binding(self, value, model):
        if value in ("", None):
            return
        model.filter(Q(**{self.get_lookup(): value}))

    def render(self):
        return self.render_form(
            format_html(
                '<input type="text" name="{}" value="{}" class="form-control input-sm">',
                self.get_form_name(),
                self.get_filter_value(),
            )
        )


class Like(Equal):
    def add_binding(self, value, model):
        if value in ("", None):
            return
        model.filter(Q(**{self.get_lookup("icontains"): value}))


class In(ColumnFilter):
    """Checkbox list; matches any of the ticked options."""

    def __init__(self, options):
        super().__init__()
        self.options = dict(options)

    def get_filter_value(self, default=None):
        request = self.grid.request
        if request is None:
            return default or []
        return request.GET.getlist(self.get_form_name()) or (default or [])

    def add_binding(self, value, model):
        if not value:
            return
        model.filter(Q(**{self.get_lookup("in"): list(value)}))

    def render(self):
        checked = [str(value) for value in self.get_filter_value()]
        inputs = format_html_join(
            "",
            '<label class="block"><input type="checkbox" name="{}" value="{}"{}> {}</label>',
            (
                (self.get_form_name(), key, " checked" if str(key) in checked else "", label)
                for key, label in self.options.items()
            ),
        )
        return self.render_form(inputs)


class Between(ColumnFilter):
    """Start/end inputs bound to ``__gte`` / ``__lte``."""

    def __init__(self, datetime=False):
        super().__init__()
        self.datetime = datetime

    def get_filter_value(self, default=None):
        request = self.grid.request
        name = self.get_form_name()
        if request is None:
            return default or {"start": "", "end": ""}
        return {
            "start": request.GET.get(f"{name}[start]", ""),
            "end": request.GET.get(f"{name}[end]", ""),
        }

    def url_without_filter(self):
        name = self.get_form_name()
        return url_without_query(self.grid.current_url(), [f"{name}[start]", f"{name}[end]"])

    def get_form_action(self):
        name = self.get_form_name()
        return url_without_query(
            self.grid.current_url(),
            [f"{name}[start]", f"{name}[end]", self.grid.model().get_page_name(), "_pjax"],
        )

    def add_binding(self, value, model):
        value = value or {}
        if value.get("start"):
            model.filter(Q(**{self.get_lookup("gte"): value["start"]}))
        if value.get("end"):
            model.filter(Q(**{self.get_lookup("lte"): value["end"]}))

    def render(self):
        name = self.get_form_name()
        value = self.get_filter_value()
        input_type = "datetime-local" if self.datetime else "text"
        inputs = format_html(
            '<div class="input-group input-group-sm">'
            '<input type="{}" name="{}[start]" value="{}" class="form-control">'
            '<span class="input-group-addon">To</span>'
            '<input type="{}" name="{}[end]" value="{}" class="form-control"></div>',
            input_type,
            name,
            value["start"],
            input_type,
            name,
            value["end"],
        )
        return self.render_form(inputs)
