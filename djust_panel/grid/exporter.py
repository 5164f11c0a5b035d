"""
CSV export of grid data.

The export button links to ``?_export_=<scope>`` where scope is ``all``,
``page:<n>`` or ``selected:<id,id>``.
"""

import csv
import logging

from django.http import HttpResponse
from django.utils.html import format_html, strip_tags
from django.utils.safestring import mark_safe
from django.utils.text import slugify

from ..helpers import data_get, url_with_query

logger = logging.getLogger(__name__)

SCOPE_ALL = "all"
SCOPE_CURRENT_PAGE = "page"
SCOPE_SELECTED_ROWS = "selected"


class CsvExporter:
    QUERY_NAME = "_export_"

    def __init__(self, grid, filename=None):
        self.grid = grid
        self.filename = filename

    def get_query_name(self):
        name = self.grid.get_name()
        return f"{name}{self.QUERY_NAME}" if name else self.QUERY_NAME

    def requested_scope(self):
        request = self.grid.request
        if request is None:
            return None
        return request.GET.get(self.get_query_name())

    def get_filename(self):
        if self.filename:
            return self.filename
        model = self.grid.repository.model
        return f"{slugify(model._meta.verbose_name_plural)}.csv"

    def export_columns(self):
        return [
            column
            for column in self.grid.get_columns()
            if not column.is_special()
        ]

    def records(self, scope):
        model = self.grid.model()
        limit = self.grid.option("export_limit")
        kind, _, argument = scope.partition(":")
        if kind == SCOPE_SELECTED_ROWS:
            keys = [key for key in argument.split(",") if key]
            return model.find_by_keys(keys)[:limit]
        if kind == SCOPE_CURRENT_PAGE:
            return model.build_data()
        return list(model.queryset()[:limit])

    def response(self, scope):
        response = HttpResponse(content_type="text/csv")
        response["Content-Disposition"] = f'attachment; filename="{self.get_filename()}"'
        writer = csv.writer(response)
        columns = self.export_columns()
        writer.writerow([str(column.get_label()) for column in columns])
        count = 0
        for record in self.records(scope):
            writer.writerow([_cell(data_get(record, column.get_name())) for column in columns])
            count += 1
        logger.info("Exported %d row(s) from grid %s (%s)", count, self.grid.get_table_id(), scope)
        return response

    def url(self, scope):
        return url_with_query(self.grid.current_url(), {self.get_query_name(): scope})

    def render(self):
        page = self.grid.model().paginator()
        items = []
        if self.grid.option("show_export_all"):
            items.append(("All", self.url(SCOPE_ALL)))
        if self.grid.option("show_export_current_page") and page is not None:
            items.append(("Current page", self.url(f"{SCOPE_CURRENT_PAGE}:{page.number}")))
        links = "".join(
            str(format_html('<li><a href="{}" target="_blank">{}</a></li>', url, label))
            for label, url in items
        )
        selected = ""
        if self.grid.option("show_export_selected_rows"):
            selected = format_html(
                '<li><a href="#" class="grid-export-selected" data-url="{}">Selected rows</a></li>',
                self.url(f"{SCOPE_SELECTED_ROWS}:"),
            )
        return format_html(
            '<div class="btn-group grid-exporter dropdown">'
            '<button type="button" class="btn btn-sm btn-default dropdown-toggle" '
            'data-toggle="dropdown">Export</button><ul class="dropdown-menu">{}{}</ul></div>',
            mark_safe(links),
            selected,
        )


def _cell(value):
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(_cell(item) for item in value)
    return strip_tags(str(value))
