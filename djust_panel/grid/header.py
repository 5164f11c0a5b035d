"""
Multiple table headers.

``combine`` groups adjacent columns under a shared header cell:

    grid.combine("Publishing", ["publish_date", "publish_time"])

After the grid builds, ``sort_headers`` moves the combined columns next to
each other. Ungrouped columns that came before the first grouped column stay
in front; every other ungrouped column goes after the groups.
"""

from django.utils.html import format_html
from django.utils.safestring import mark_safe

from ..helpers import html_attributes


class Header:
    def __init__(self, grid, label, column_names):
        self.grid = grid
        self.label = label
        self.column_names = list(column_names)
        self.attributes = {}
        self._html = []

    def get_column_names(self):
        return self.column_names

    def is_single(self):
        return len(self.column_names) == 1

    def responsive(self, priority=1):
        self.attributes["data-priority"] = priority
        return self

    def set_attributes(self, attributes):
        self.attributes.update(attributes)
        return self

    def append(self, html):
        self._html.append(html)
        return self

    def render(self):
        attributes = dict(self.attributes)
        if self.is_single():
            attributes["rowspan"] = 2
        else:
            attributes["colspan"] = len(self.column_names)
            attributes.setdefault("style", "text-align:center")
        extra = mark_safe("".join(str(html) for html in self._html))
        return format_html("<th {}>{} {}</th>", html_attributes(attributes), self.label, extra)

    def __repr__(self):
        return f"Header(label={self.label!r}, columns={self.column_names!r})"


class MultipleHeaderMixin:
    """Grid mixin. Expects ``self._columns`` (ordered dict) and ``self.column_names``."""

    def combine(self, label, column_names):
        column_names = list(column_names)
        if len(column_names) < 2:
            raise ValueError("combine() needs at least 2 column names")
        self.with_border()
        header = Header(self, label, column_names)
        self._headers[label] = header
        return header

    def get_multiple_headers(self):
        return list(self._headers.values())

    def has_multiple_headers(self):
        return bool(self._headers)

    def sort_headers(self):
        if not self._headers:
            return

        original_headers = list(self._headers.values())
        original_columns = self._columns

        grouped = {}
        for header in original_headers:
            for name in header.get_column_names():
                column = original_columns.get(name)
                if column is not None:
                    grouped[name] = column

        before, after = {}, {}
        is_before = True
        for name, column in original_columns.items():
            if is_before and name not in grouped:
                before[name] = column
                continue
            is_before = False
            if name not in grouped:
                after[name] = column

        self._columns = {**before, **grouped, **after}
        self.column_names = list(self._columns)
        self._sorted_headers = (
            self._headers_for_columns(before)
            + original_headers
            + self._headers_for_columns(after)
        )

    def _headers_for_columns(self, columns):
        headers = []
        for name, column in columns.items():
            header = Header(self, column.get_label(), [name])
            priority = column.get_data_priority()
            if isinstance(priority, int):
                header.responsive(priority)
            html = column.render_header()
            if html:
                header.append(html)
            headers.append(header)
        return headers

    def get_sorted_headers(self):
        return self._sorted_headers or self.get_multiple_headers()
