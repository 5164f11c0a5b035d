"""
Grid: the list screen of a resource.

    def grid(self):
        grid = Grid(ModelRepository(Article, ["category"]), request=self.request)
        grid.column("id").bold().sortable()
        grid.column("title")
        grid.column("category.name", "Category")
        grid.quick_search(["title", "content"])
        grid.filter().equal("status")
        return grid

``render()`` builds the grid on first use: builder callback, quick search,
column filters, filter panel, ordering, pagination, then columns fill their
cells and rows are assembled.
"""

import logging

from django.template.loader import render_to_string
from django.utils.html import format_html
from django.utils.safestring import mark_safe

from ..conf import admin_url, panel_settings
from ..events import HasBuilderEvents
from ..helpers import render, random_id, url_with_query
from ..repository import ModelRepository
from .column import Column
from .displayers import Actions, RowSelector
from .exporter import CsvExporter
from .filter import Filter
from .header import MultipleHeaderMixin
from .model import GridModel
from .quick_search import QuickSearch, build_q, parse_query, search_columns_q
from .row import Row
from .tools import CreateButton, Tools

logger = logging.getLogger(__name__)

__all__ = ["Grid", "Column"]


class Grid(MultipleHeaderMixin, HasBuilderEvents):
    template_name = "djust_panel/grid/table.html"

    default_options = {
        "show_pagination": True,
        "show_filter": True,
        "show_actions": True,
        "show_quick_edit_button": False,
        "show_edit_button": True,
        "show_view_button": True,
        "show_delete_button": True,
        "show_row_selector": True,
        "show_create_btn": True,
        "show_quick_create_btn": False,
        "show_bordered": False,
        "show_toolbar": True,
        "row_selector_style": "primary",
        "row_selector_circle": True,
        "row_selector_clicktr": False,
        "row_selector_label_key": None,
        "row_selector_bg": "var(--20)",
        "show_exporter": False,
        "show_export_all": True,
        "show_export_current_page": True,
        "show_export_selected_rows": True,
        "export_limit": 50000,
        "dialog_form_area": ["700px", "670px"],
        "table_header_style": "table-header-gray",
    }

    def __init__(self, repository=None, builder=None, request=None):
        if repository is not None and not isinstance(repository, ModelRepository):
            repository = ModelRepository(repository)
        self.repository = repository
        self.request = request
        self.builder = builder
        self.options = dict(self.default_options)
        self.options["export_limit"] = panel_settings.get("grid.export_limit", 50000)
        self.key_name = repository.get_key_name() if repository is not None else "id"
        self.table_id = random_id("grid-")
        self.name = ""
        self._columns = {}
        self.column_names = []
        self._rows = []
        self._rows_callbacks = []
        self._action_callbacks = []
        self._actions_class = Actions
        self._headers = {}
        self._sorted_headers = []
        self._built = False
        self._header = None
        self._footer = None
        self._wrapper = None
        self._responsive = False
        self._variables = {}
        self._resource = None
        self._title = None
        self._description = None
        self._quick_search = None
        self._search = None
        self._exporter = None
        self._resolved = set()
        self._error = None

        self._model = GridModel(repository, request).set_grid(self)
        self.tools = Tools(self)
        self._filter = Filter(self)
        self.call_resolving()

    @classmethod
    def make(cls, *args, **kwargs):
        return cls(*args, **kwargs)

    def __repr__(self):
        return f"Grid(table_id={self.table_id!r})"

    # ---- Identity ----

    def get_table_id(self):
        return self.table_id

    def get_key_name(self):
        return self.key_name or "id"

    def set_key_name(self, name):
        self.key_name = name
        return self

    def get_name(self):
        return self.name

    def set_name(self, name):
        """Prefix query params so several grids can share a page."""
        self.name = name
        self.table_id = f"{name}-{self.table_id}" if name else self.table_id
        self._model.set_grid(self)
        return self

    def model(self):
        return self._model

    def resolved(self, key):
        """True if ``key`` was already resolved for this grid; marks it otherwise."""
        if key in self._resolved:
            return True
        self._resolved.add(key)
        return False

    # ---- Columns ----

    def column(self, name, label=None):
        if label is None and self.repository is not None:
            label = self.repository.get_field_label(name)
        return self._add_column(name, label)

    def number(self, label=None):
        return self._add_column(Column.NUMBER_COLUMN_NAME, label or "#").bold()

    def columns(self, *columns):
        """``columns("id", "title")`` or ``columns({"id": "ID", "title": "Title"})``."""
        if len(columns) == 1 and isinstance(columns[0], dict):
            for name, label in columns[0].items():
                self.column(name, label)
        else:
            for name in columns:
                self.column(name)
        return self

    def _add_column(self, name, label=None):
        column = Column(name, label).set_grid(self)
        self._columns[name] = column
        return column

    def get_columns(self):
        return list(self._columns.values())

    def get_column(self, name):
        return self._columns.get(name)

    def get_column_names(self):
        return self.column_names

    def is_sortable(self, name):
        column = self._columns.get(name)
        return column is not None and column.is_sortable()

    def column_map(self):
        """Label -> name and name -> name, used by the quick search language."""
        mapping = {}
        for column in self.get_columns():
            if column.is_special():
                continue
            mapping[str(column.get_label())] = column.get_name()
            mapping[column.get_name()] = column.get_name()
        return mapping

    # ---- Options ----

    def option(self, key, *value):
        if not value:
            return self.options.get(key)
        self.options[key] = value[0]
        return self

    def set_row_selector_options(self, style=None, circle=None, clicktr=None, label=None, bg=None):
        for key, val in (
            ("row_selector_style", style),
            ("row_selector_circle", circle),
            ("row_selector_clicktr", clicktr),
            ("row_selector_label_key", label),
            ("row_selector_bg", bg),
        ):
            if val is not None:
                self.options[key] = val
        return self

    def get_row_selector_options(self):
        return {
            "style": self.options["row_selector_style"],
            "circle": self.options["row_selector_circle"],
            "clicktr": self.options["row_selector_clicktr"],
            "label_key": self.options["row_selector_label_key"],
            "bg": self.options["row_selector_bg"],
        }

    def disable_row_selector(self, disable=True):
        self.tools.disable_batch_actions(disable)
        return self.option("show_row_selector", not disable)

    def show_row_selector(self, show=True):
        return self.disable_row_selector(not show)

    def disable_create_button(self, disable=True):
        return self.option("show_create_btn", not disable)

    def show_create_button(self, show=True):
        return self.disable_create_button(not show)

    def disable_quick_create_button(self, disable=True):
        return self.option("show_quick_create_btn", not disable)

    def show_quick_create_button(self, show=True):
        return self.disable_quick_create_button(not show)

    def disable_actions(self, disable=True):
        return self.option("show_actions", not disable)

    def disable_edit_button(self, disable=True):
        return self.option("show_edit_button", not disable)

    def disable_view_button(self, disable=True):
        return self.option("show_view_button", not disable)

    def disable_delete_button(self, disable=True):
        return self.option("show_delete_button", not disable)

    def show_quick_edit_button(self, show=True):
        return self.option("show_quick_edit_button", show)

    def disable_pagination(self, disable=True):
        if disable:
            self._model.disable_pagination()
        return self.option("show_pagination", not disable)

    def paginate(self, per_page=20):
        self._model.set_per_page(per_page)
        return self

    def disable_batch_actions(self, disable=True):
        self.tools.disable_batch_actions(disable)
        return self

    def disable_batch_delete(self, disable=True):
        self.tools.disable_batch_delete(disable)
        return self

    def disable_toolbar(self, disable=True):
        return self.option("show_toolbar", not disable)

    def disable_filter(self, disable=True):
        return self.option("show_filter", not disable)

    def show_filter(self, show=True):
        return self.disable_filter(not show)

    def disable_filter_button(self, disable=True):
        self.tools.disable_filter_button(disable)
        return self

    def show_filter_button(self, show=True):
        return self.disable_filter_button(not show)

    def disable_refresh_button(self, disable=True):
        self.tools.disable_refresh_button(disable)
        return self

    def expand_filter(self):
        self._filter.expand()
        return self

    def with_border(self):
        return self.option("show_bordered", True)

    def set_modal_form_dimensions(self, width, height):
        return self.option("dialog_form_area", [width, height])

    def responsive(self):
        self._responsive = True
        return self

    def allow_responsive(self):
        return self._responsive

    # ---- Exporter ----

    def export(self, filename=None):
        self.option("show_exporter", True)
        self._exporter = CsvExporter(self, filename)
        return self._exporter

    def disable_exporter(self, disable=True):
        return self.option("show_exporter", not disable)

    def show_exporter(self, show=True):
        if show and self._exporter is None:
            self._exporter = CsvExporter(self)
        return self.disable_exporter(not show)

    def handle_export_request(self):
        """Return a CSV response when an export was requested, else ``None``."""
        if not self.option("show_exporter") or self._exporter is None:
            return None
        scope = self._exporter.requested_scope()
        if not scope:
            return None
        self.call_builder()
        self.apply_quick_search()
        self.apply_column_filter()
        self._apply_filter_conditions()
        return self._exporter.response(scope)

    # ---- Filters & search ----

    def filter(self, callback=None):
        """Return the filter panel, or configure it with ``callback(filter)``."""
        if callback is not None:
            callback(self._filter)
            return self
        return self._filter

    def get_filter(self):
        return self._filter

    def quick_search(self, search=None):
        """
        Enable the search box. ``search`` is a callable ``(queryset, query)``,
        a column name or list of names, or ``None`` for the query language.
        """
        self._search = search
        self._quick_search = QuickSearch(self)
        return self._quick_search

    def get_quick_search(self):
        return self._quick_search

    def apply_quick_search(self):
        if self._quick_search is None:
            return
        query = self._quick_search.value()
        if not query:
            return
        search = self._search
        if callable(search):
            self._model.apply(lambda qs: search(qs, query))
        elif search:
            columns = [search] if isinstance(search, str) else list(search)
            self._model.filter(search_columns_q(columns, query))
        else:
            model = self.repository.model if self.repository is not None else None
            q = build_q(parse_query(query, self.column_map()), model)
            if q is None:
                self._model.match_nothing()
            else:
                self._model.filter(q)

    def apply_column_filter(self):
        for column in self.get_columns():
            column_filter = column.get_filter()
            if column_filter is not None:
                column_filter.add_binding(column_filter.get_filter_value(), self._model)

    def _apply_filter_conditions(self):
        q = self._filter.conditions_q()
        if q:
            self._model.filter(q)
        scope = self._filter.current_scope()
        if scope is not None:
            self._model.apply(scope.callback)

    # ---- Rows & actions ----

    def rows(self, callback=None):
        """Register ``callback(row)``; without argument return the built rows."""
        if callback is None:
            return self._rows
        self._rows_callbacks.append(callback)
        return self

    def actions(self, callback):
        """``callback(actions, record)`` customises the row actions."""
        self._action_callbacks.append(callback)
        return self

    def set_actions_class(self, actions_class):
        self._actions_class = actions_class
        return self

    # ---- Resource ----

    def resource(self, path):
        if path:
            self._resource = admin_url(path)
        return self

    def get_resource(self):
        if self._resource is None:
            self._resource = self.request.path.rstrip("/") if self.request is not None else ""
        return self._resource

    def current_url(self):
        if self.request is None:
            return self.get_resource()
        return self.request.get_full_path()

    def get_create_url(self):
        url = f"{self.get_resource()}/create"
        constraints = self._model.get_constraints()
        return url_with_query(url, constraints) if constraints else url

    # ---- Header / footer ----

    def header(self, content=None):
        if content is None:
            return self._header
        self._header = content
        return self

    def footer(self, content=None):
        if content is None:
            return self._footer
        self._footer = content
        return self

    def _render_box(self, content, css_class):
        if not content:
            return ""
        html = render(content, self._model.build_data())
        if not html:
            return ""
        return format_html('<div class="{}">{}</div>', css_class, mark_safe(html))

    def render_header(self):
        return self._render_box(self._header, "box-header clearfix")

    def render_footer(self):
        return self._render_box(self._footer, "box-footer clearfix")

    # ---- Build ----

    def call_builder(self):
        if self.builder is not None and not self.resolved("builder"):
            self.builder(self)

    def prepend_row_selector_column(self):
        if not self.options["show_row_selector"]:
            return
        label = format_html(
            '<input type="checkbox" class="grid-select-all {}" data-grid="#{}">',
            "circle" if self.options["row_selector_circle"] else "",
            self.table_id,
        )
        column = Column(Column.SELECT_COLUMN_NAME, label).set_grid(self)
        column.display_using(RowSelector)
        self._columns = {Column.SELECT_COLUMN_NAME: column, **self._columns}

    def append_actions_column(self):
        if not self.options["show_actions"]:
            return
        column = Column(Column.ACTION_COLUMN_NAME, "Action").set_grid(self)
        column.display_using(self._actions_class, self._action_callbacks)
        self._columns[Column.ACTION_COLUMN_NAME] = column

    def build(self):
        if self._built:
            return
        self._built = True
        self.call_builder()
        self.apply_quick_search()
        self.apply_column_filter()
        records = self._filter.execute()
        offset = self._model.offset()

        self.prepend_row_selector_column()
        self.append_actions_column()

        self._rows = [Row(self, record, offset + index + 1) for index, record in enumerate(records)]
        for column in self.get_columns():
            column.fill(self._rows)
        self.column_names = list(self._columns)
        for callback in self._rows_callbacks:
            for row in self._rows:
                callback(row)
        self.sort_headers()

    # ---- Rendering ----

    def wrap(self, callback):
        self._wrapper = callback
        return self

    def has_wrapper(self):
        return self._wrapper is not None

    def with_(self, variables):
        self._variables = dict(variables)
        return self

    def set_view(self, template_name, variables=None):
        self.template_name = template_name
        if variables:
            self._variables.update(variables)
        return self

    def set_title(self, title):
        self._title = title
        return self

    def set_description(self, description):
        self._description = description
        return self

    def render_tools(self):
        parts = []
        if self._quick_search is not None:
            parts.append(self._quick_search.render())
        parts.append(self.tools.render())
        return mark_safe("&nbsp;".join(str(part) for part in parts if part))

    def render_exporter(self):
        if not self.option("show_exporter") or self._exporter is None:
            return ""
        return self._exporter.render()

    def render_create_button(self):
        if not self.options["show_create_btn"] and not self.options["show_quick_create_btn"]:
            return ""
        return CreateButton(self).render()

    def render_filter(self):
        if not self.options["show_filter"]:
            return ""
        return self._filter.render()

    def render_pagination(self):
        page = self._model.paginator()
        if not self.options["show_pagination"] or page is None:
            return ""
        page_name = self._model.get_page_name()
        links = []
        for number in page.paginator.page_range:
            url = url_with_query(self.current_url(), {page_name: number})
            css = "active" if number == page.number else ""
            links.append(format_html('<li class="{}"><a href="{}">{}</a></li>', css, url, number))
        return format_html(
            '<div class="grid-pagination"><span>{} - {} of {}</span><ul class="pagination">{}</ul></div>',
            page.start_index(),
            page.end_index(),
            page.paginator.count,
            mark_safe("".join(str(link) for link in links)),
        )

    def render_thead(self):
        if not self.has_multiple_headers():
            return mark_safe(
                "<tr>" + "".join(str(column.render_th()) for column in self.get_columns()) + "</tr>"
            )
        top, bottom = [], []
        for header in self.get_sorted_headers():
            top.append(str(header.render()))
            if not header.is_single():
                for name in header.get_column_names():
                    column = self._columns.get(name)
                    if column is not None:
                        bottom.append(str(column.render_th()))
        return mark_safe("<tr>" + "".join(top) + "</tr><tr>" + "".join(bottom) + "</tr>")

    def variables(self):
        return {
            **self._variables,
            "grid": self,
            "table_id": self.table_id,
            "title": self._title,
            "description": self._description,
            "bordered": self.options["show_bordered"],
            "show_toolbar": self.options["show_toolbar"],
            "header_style": self.options["table_header_style"],
            "clicktr": self.options["row_selector_clicktr"],
            "thead": self.render_thead(),
            "rows": [row.render(self.column_names) for row in self._rows],
            "column_count": len(self.column_names),
            "tools": self.render_tools(),
            "create_button": self.render_create_button(),
            "exporter": self.render_exporter(),
            "filter": self.render_filter(),
            "header": self.render_header(),
            "footer": self.render_footer(),
            "pagination": self.render_pagination(),
            "responsive": self._responsive,
        }

    def render(self):
        try:
            self.build()
            self.call_composing()
            html = render_to_string(self.template_name, self.variables(), request=self.request)
        except Exception as exc:
            logger.exception("Failed to render grid %s", self.table_id)
            return render_to_string(
                "djust_panel/partials/error.html",
                {"title": type(exc).__name__, "message": str(exc)},
            )
        if self._wrapper is not None:
            html = self._wrapper(mark_safe(html))
        return mark_safe(html)

    def __html__(self):
        return str(self.render())
