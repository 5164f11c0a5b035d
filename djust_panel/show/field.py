from django.utils.html import conditional_escape, format_html
from django.utils.safestring import SafeData, mark_safe

from ..helpers import data_get, humanize, render


class ShowField:
    """
    One ``label: value`` line of a detail view.

    Modifiers stack like grid column displays; callbacks receive
    ``(value, record)``.
    """

    def __init__(self, name, label=None):
        self.name = name
        self.label_text = label if label is not None else humanize(name)
        self.callbacks = []
        self.escape = True
        self._width = {"label": 2, "field": 8}
        self.value = None

    def as_(self, callback):
        self.callbacks.append(callback)
        return self

    def using(self, values, default=None):
        def _using(value, record):
            if isinstance(value, list):
                return [values.get(item, default if default is not None else item) for item in value]
            return values.get(value, default if default is not None else value)

        return self.as_(_using)

    def _wrap_items(self, template, *args):
        def _wrap(value, record):
            items = value if isinstance(value, list) else [value]
            return mark_safe(
                "&nbsp;".join(
                    format_html(template, *args, item) for item in items if item not in (None, "")
                )
            )

        return self.as_(_wrap)

    def label(self, style="primary"):
        return self._wrap_items('<span class="label bg-{}">{}</span>', style)

    def badge(self, style="primary"):
        return self._wrap_items('<span class="badge bg-{}">{}</span>', style)

    def image(self, width=200, height=200, server=""):
        def _image(value, record):
            items = value if isinstance(value, list) else [value]
            return mark_safe(
                "&nbsp;".join(
                    format_html(
                        '<img src="{}{}" style="max-width:{}px;max-height:{}px" class="img">',
                        server,
                        item,
                        width,
                        height,
                    )
                    for item in items
                    if item
                )
            )

        return self.as_(_image)

    def link(self, href=None, target="_blank"):
        def _link(value, record):
            url = href(value, record) if callable(href) else (href or value)
            return format_html('<a href="{}" target="{}">{}</a>', url, target, value)

        return self.as_(_link)

    def unescape(self):
        self.escape = False
        return self

    def width(self, field=8, label=2):
        self._width = {"label": label, "field": field}
        return self

    def fill(self, record):
        value = data_get(record, self.name)
        for callback in self.callbacks:
            value = callback(value, record)
        self.value = value
        return self

    def render_value(self):
        value = self.value
        if isinstance(value, (list, tuple)):
            value = ", ".join(str(item) for item in value)
        if value is None or value == "":
            return mark_safe("&nbsp;")
        if not self.escape or isinstance(value, SafeData):
            return mark_safe(value)
        return conditional_escape(value)

    def render(self):
        return format_html(
            '<div class="show-field grid grid-cols-12 gap-4 mb-2">'
            '<div class="col-span-{} text-right font-medium">{}</div>'
            '<div class="col-span-{}"><div class="show-value">{}</div></div></div>',
            self._width["label"],
            self.label_text,
            self._width["field"],
            self.render_value(),
        )


class Divider:
    def fill(self, record):
        return self

    def render(self):
        return mark_safe('<hr class="show-divider">')


class Html:
    def __init__(self, content):
        self.content = content

    def fill(self, record):
        return self

    def render(self):
        return mark_safe(render(self.content))
