from django.utils.html import format_html, format_html_join

from ..helpers import html_attributes


class Row:
    """One rendered table row: the record, its cells and its ``<tr>`` attributes."""

    def __init__(self, grid, record, number):
        self.grid = grid
        self.record = record
        self.number = number
        self.cells = {}
        self.attributes = {}

    def get_key(self):
        return getattr(self.record, self.grid.get_key_name(), None)

    def set_cell(self, name, html):
        self.cells[name] = html

    def column(self, name, value=None):
        """Read a rendered cell, or overwrite it when ``value`` is given."""
        if value is None:
            return self.cells.get(name, "")
        self.cells[name] = value
        return self

    def set_attributes(self, attributes):
        self.attributes.update(attributes)
        return self

    def style(self, style):
        if isinstance(style, dict):
            style = ";".join(f"{key}:{value}" for key, value in style.items())
        return self.set_attributes({"style": style})

    def render(self, column_names):
        attributes = {"data-key": self.get_key(), **self.attributes}
        cells = format_html_join(
            "", '<td data-column="{}">{}</td>', ((name, self.cells.get(name, "")) for name in column_names)
        )
        return format_html("<tr {}>{}</tr>", html_attributes(attributes), cells)

    def __repr__(self):
        return f"Row(key={self.get_key()!r}, number={self.number})"
