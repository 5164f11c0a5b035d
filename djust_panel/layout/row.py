"""Bootstrap-style rows and columns used by ``Content``."""

from django.utils.html import format_html
from django.utils.safestring import mark_safe

from ..helpers import render


class Column:
    def __init__(self, content, width=12):
        self.width = width
        self.contents = []
        self.append(content)

    def append(self, content):
        if content is not None:
            self.contents.append(content)
        return self

    def row(self, content):
        """Nest a row inside this column."""
        nested = Row()
        if callable(content) and not hasattr(content, "render"):
            content(nested)
        else:
            nested.column(12, content)
        return self.append(nested)

    def render(self):
        html = mark_safe("".join(render(content) for content in self.contents))
        return format_html('<div class="col-md-{}">{}</div>', self.width, html)


class Row:
    def __init__(self, content=None):
        self.columns = []
        if content is not None:
            self.column(12, content)

    def column(self, width, content):
        """``content`` may be html, a renderable, or ``callback(column)``."""
        if callable(content) and not hasattr(content, "render"):
            column = Column(None, width)
            content(column)
        else:
            column = Column(content, width)
        self.columns.append(column)
        return self

    def render(self):
        html = mark_safe("".join(str(column.render()) for column in self.columns))
        return format_html('<div class="row">{}</div>', html)

    build = render
