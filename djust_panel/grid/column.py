"""
Grid columns.

A column knows how to pull its value out of a record (dotted names follow
relations) and how to turn it into cell HTML through a chain of display
callbacks. Callbacks receive ``(value, record)`` and return the new value.

    grid.column("title").bold()
    grid.column("status").using({"draft": "Draft"}).label("warning")
    grid.column("category.name", "Category").sortable()
    grid.column("is_featured").switch("green")
"""

from django.utils.html import conditional_escape, format_html
from django.utils.safestring import SafeData, mark_safe

from ..helpers import data_get, html_attributes, humanize, url_with_query


class Column:
    SELECT_COLUMN_NAME = "__row_selector__"
    ACTION_COLUMN_NAME = "__actions__"
    NUMBER_COLUMN_NAME = "#"

    # name -> displayer class, see Column.extend()
    _extensions = {}

    def __init__(self, name, label=None):
        self.name = name
        self._label = label or humanize(name)
        self.grid = None
        self._display_callbacks = []
        self._sortable = False
        self._width = None
        self._style = None
        self._help = None
        self._priority = None
        self._filter = None
        self._header_html = []
        self._header_attributes = {}

    # ---- Identity ----

    def set_grid(self, grid):
        self.grid = grid
        return self

    def get_name(self):
        return self.name

    def get_label(self):
        return self._label

    def set_label(self, label):
        self._label = label
        return self

    def is_special(self):
        return self.name in (
            self.SELECT_COLUMN_NAME,
            self.ACTION_COLUMN_NAME,
            self.NUMBER_COLUMN_NAME,
        )

    # ---- Display chain ----

    def display(self, callback):
        self._display_callbacks.append(callback)
        return self

    def has_display_callbacks(self):
        return bool(self._display_callbacks)

    def using(self, values, default=None):
        """Map raw values to display values."""

        def _using(value, record):
            if isinstance(value, list):
                return [values.get(item, default if default is not None else item) for item in value]
            if value in values:
                return values[value]
            return default if default is not None else value

        return self.display(_using)

    def bold(self):
        return self.display(lambda value, record: format_html("<b>{}</b>", _text(value)))

    def label(self, style="primary"):
        def _label(value, record):
            items = value if isinstance(value, list) else [value]
            return mark_safe(
                "&nbsp;".join(
                    format_html('<span class="label bg-{}">{}</span>', style, _text(item))
                    for item in items
                    if item not in (None, "")
                )
            )

        return self.display(_label)

    def badge(self, style="primary"):
        def _badge(value, record):
            items = value if isinstance(value, list) else [value]
            return mark_safe(
                "&nbsp;".join(
                    format_html('<span class="badge bg-{}">{}</span>', style, _text(item))
                    for item in items
                    if item not in (None, "")
                )
            )

        return self.display(_badge)

    def image(self, width=200, height=200, server=""):
        def _image(value, record):
            items = value if isinstance(value, list) else [value]
            return mark_safe(
                "&nbsp;".join(
                    format_html(
                        '<img src="{}{}" style="max-width:{}px;max-height:{}px" class="img img-thumbnail">',
                        server,
                        item,
                        width,
                        height,
                    )
                    for item in items
                    if item
                )
            )

        return self.display(_image)

    def link(self, href=None, target="_blank"):
        def _link(value, record):
            url = href(value, record) if callable(href) else (href or value)
            return format_html('<a href="{}" target="{}">{}</a>', url, target, _text(value))

        return self.display(_link)

    def display_using(self, displayer_class, *args, **kwargs):
        """Render cells through a displayer (see ``grid.displayers``)."""

        def _displayer(value, record):
            displayer = displayer_class(value, self.grid, self, record)
            return displayer.display(*args, **kwargs)

        return self.display(_displayer)

    def switch(self, color=""):
        from .displayers import SwitchDisplay

        return self.display_using(SwitchDisplay, color)

    def radio(self, options):
        from .displayers import Radio

        return self.display_using(Radio, options)

    def checkbox(self, options):
        from .displayers import Checkbox

        return self.display_using(Checkbox, options)

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls._extensions = {}

    @classmethod
    def extend(cls, name, displayer_class):
        """Register ``displayer_class`` as ``column.<name>(*args)``."""
        cls._extensions[name] = displayer_class

    @classmethod
    def get_extension(cls, name):
        for klass in cls.__mro__:
            displayer_class = vars(klass).get("_extensions", {}).get(name)
            if displayer_class is not None:
                return displayer_class
        return None

    def __getattr__(self, name):
        displayer_class = type(self).get_extension(name)
        if displayer_class is not None:
            return lambda *args, **kwargs: self.display_using(displayer_class, *args, **kwargs)
        raise AttributeError(f"{type(self).__name__!s} has no attribute {name!r}")

    # ---- Header ----

    def sortable(self, value=True):
        self._sortable = value
        return self

    def is_sortable(self):
        return self._sortable and not self.is_special()

    def width(self, width):
        self._width = width
        return self

    def style(self, style):
        self._style = style
        return self

    def help(self, text):
        self._help = text
        return self

    def responsive(self, priority=1):
        self._priority = priority
        if self.grid is not None:
            self.grid.responsive()
        return self

    def get_data_priority(self):
        return self._priority

    def filter(self, column_filter):
        column_filter.set_parent(self)
        self._filter = column_filter
        return self

    def get_filter(self):
        return self._filter

    def set_header_attributes(self, attributes):
        self._header_attributes.update(attributes)
        return self

    def get_header_attributes(self):
        attributes = dict(self._header_attributes)
        style = ";".join(s for s in [f"width:{self._width}" if self._width else "", self._style or ""] if s)
        if style:
            attributes["style"] = style
        if self._priority is not None:
            attributes["data-priority"] = self._priority
        return attributes

    def add_header(self, html):
        self._header_html.append(html)
        return self

    def render_sorter(self):
        if not self.is_sortable() or self.grid is None:
            return ""
        sort_name = self.grid.model().get_sort_name()
        current = self.grid.model().get_sort()
        if current == self.name:
            target, icon = f"-{self.name}", "&#x25B2;"
        elif current == f"-{self.name}":
            target, icon = None, "&#x25BC;"
        else:
            target, icon = self.name, "&#x21C5;"
        url = url_with_query(self.grid.current_url(), {sort_name: target})
        return format_html('<a class="grid-column-sorter" href="{}">{}</a>', url, mark_safe(icon))

    def render_header(self):
        """Extra header html: sorter, help, column filter and appended html."""
        parts = [self.render_sorter()]
        if self._help:
            parts.append(
                format_html('<i class="grid-column-help" title="{}">?</i>', self._help)
            )
        if self._filter is not None:
            parts.append(self._filter.render())
        parts.extend(self._header_html)
        return mark_safe("".join(str(part) for part in parts if part))

    def render_th(self, **extra):
        attributes = {**self.get_header_attributes(), **extra}
        return format_html(
            "<th {}>{} {}</th>", html_attributes(attributes), self._label, self.render_header()
        )

    # ---- Cells ----

    def original_value(self, row):
        if self.name == self.NUMBER_COLUMN_NAME:
            return row.number
        return data_get(row.record, self.name)

    def fill(self, rows):
        for row in rows:
            value = self.original_value(row)
            for callback in self._display_callbacks:
                value = callback(value, row.record)
            row.set_cell(self.name, _text(value))

    def __repr__(self):
        return f"Column(name={self.name!r}, label={self._label!r})"


def _text(value):
    """Escaped cell text. Lists join with commas, ``None`` renders empty."""
    if value is None:
        return ""
    if isinstance(value, SafeData):
        return value
    if isinstance(value, (list, tuple)):
        return mark_safe(", ".join(str(_text(item)) for item in value))
    if isinstance(value, bool):
        return mark_safe("&#x2713;" if value else "&#x2717;")
    return conditional_escape(value)
