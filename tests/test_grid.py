"""Tests for grids: columns, filters, sorting, pagination, headers and export."""

import pytest
from django.db.models import Q
from django.test import RequestFactory, TestCase
from django.utils.safestring import mark_safe

from djust_panel import assets
from djust_panel.grid import Column, Grid
from djust_panel.grid import column_filter
from djust_panel.grid.displayers import AbstractDisplayer, DropdownActions
from djust_panel.grid.mini import MiniGrid
from djust_panel.layout import Content
from djust_panel.repository import ModelRepository
from tests.models import Article, Category, Tag


class GridTestCase(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.tech = Category.objects.create(name="Technology")
        cls.python = Tag.objects.create(name="Python")
        cls.django = Tag.objects.create(name="Django")
        cls.first = Article.objects.create(
            title="First", status="draft", views=10, category=cls.tech
        )
        cls.first.tags.set([cls.python, cls.django])
        cls.second = Article.objects.create(title="Second", status="published", views=30)
        cls.third = Article.objects.create(
            title="Third", status="published", views=20, is_featured=True
        )

    def setUp(self):
        self.factory = RequestFactory()
        assets.collect()

    def make_grid(self, params=None, repository=None):
        request = self.factory.get("/admin/articles", params or {})
        grid = Grid(repository or ModelRepository(Article, ["category", "tags"]), request=request)
        grid.model().order_by("id")
        return grid

    def titles(self, grid):
        return [row.record.title for row in grid.rows()]


class TestColumns(GridTestCase):
    """Column values and display chains."""

    def test_label_defaults_to_verbose_name(self):
        grid = self.make_grid()
        assert grid.column("publish_date").get_label() == "Publish date"
        assert grid.column("category.name").get_label() == "Name"
        assert grid.column("category.name", "Category").get_label() == "Category"

    def test_relation_and_many_values(self):
        grid = self.make_grid({"_sort": "id"})
        grid.column("id").sortable()
        grid.column("category.name", "Category")
        grid.column("tags.name", "Tags").label("info")
        grid.build()
        row = grid.rows()[0]
        assert row.record == self.first
        assert row.column("category.name") == "Technology"
        assert 'class="label bg-info">Python</span>' in str(row.column("tags.name"))
        assert 'class="label bg-info">Django</span>' in str(row.column("tags.name"))

    def test_display_chain(self):
        grid = self.make_grid({"_sort": "id"})
        grid.column("status").using(dict(Article.STATUS_CHOICES)).bold()
        grid.column("title").display(lambda value, record: f"{value} ({record.views})")
        grid.build()
        row = grid.rows()[0]
        assert str(row.column("status")) == "<b>Draft</b>"
        assert row.column("title") == "First (10)"

    def test_values_are_escaped(self):
        Article.objects.create(title="<script>x</script>")
        grid = self.make_grid()
        grid.column("title")
        html = str(grid.render())
        assert "<script>x</script>" not in html
        assert "&lt;script&gt;x&lt;/script&gt;" in html

    def test_number_column(self):
        grid = self.make_grid()
        grid.number()
        grid.build()
        assert [row.column("#") for row in grid.rows()] == ["<b>1</b>", "<b>2</b>", "<b>3</b>"]

    def test_unknown_extension_raises(self):
        column = Column("title")
        with pytest.raises(AttributeError, match="no attribute 'sparkle'"):
            column.sparkle()

    def test_registered_extension(self):
        class Stars(AbstractDisplayer):
            def display(self, symbol="*"):
                return symbol * (self.value // 10)

        Column.extend("stars", Stars)
        try:
            grid = self.make_grid({"_sort": "views"})
            grid.column("views").stars("+")
            grid.build()
            assert [row.column("views") for row in grid.rows()] == ["+", "++", "+++"]
        finally:
            Column._extensions.pop("stars")

    def test_row_callbacks(self):
        grid = self.make_grid()
        grid.column("title")
        grid.rows(lambda row: row.style({"color": "red"}) if row.record.is_featured else None)
        html = str(grid.render())
        assert 'style="color:red"' in html


class TestDisplayers(GridTestCase):
    """Inline editors and row actions."""

    def test_switch(self):
        grid = self.make_grid({"_sort": "id"})
        grid.column("is_featured").switch("green")
        grid.build()
        cells = [str(row.column("is_featured")) for row in grid.rows()]
        assert "checked" not in cells[0]
        assert "checked" in cells[2]
        assert 'data-color="var(--success)"' in cells[2]
        scripts = assets.collect()["script"]
        assert any("DjustPanel.gridSwitch" in script and "/admin/articles" in script for script in scripts)

    def test_checkbox_marks_related_keys(self):
        grid = self.make_grid({"_sort": "id"})
        grid.column("tags").checkbox({self.python.pk: "Python", self.django.pk: "Django"})
        grid.build()
        cell = str(grid.rows()[0].column("tags"))
        assert cell.count(" checked") == 2
        assert f'data-key="{self.first.pk}"' in cell

    def test_radio(self):
        grid = self.make_grid({"_sort": "id"})
        grid.column("status").radio(dict(Article.STATUS_CHOICES))
        grid.build()
        cell = str(grid.rows()[1].column("status"))
        assert 'value="published" checked' in cell

    def test_default_actions(self):
        grid = self.make_grid()
        grid.column("title")
        grid.build()
        row = grid.rows()[0]
        cell = str(row.column(Column.ACTION_COLUMN_NAME))
        assert f'href="/admin/articles/{row.record.pk}/edit"' in cell
        assert f'href="/admin/articles/{row.record.pk}"' in cell
        assert f'data-url="/admin/articles/{row.record.pk}"' in cell

    def test_actions_callback_disables_per_record(self):
        grid = self.make_grid({"_sort": "id"})
        grid.column("title")
        grid.actions(lambda actions, record: actions.disable_delete(record.is_featured))
        grid.build()
        cells = [str(row.column(Column.ACTION_COLUMN_NAME)) for row in grid.rows()]
        assert "Delete" in cells[0]
        assert "Delete" not in cells[2]

    def test_disabled_buttons(self):
        grid = self.make_grid()
        grid.column("title")
        grid.disable_edit_button()
        grid.disable_view_button()
        grid.build()
        cell = str(grid.rows()[0].column(Column.ACTION_COLUMN_NAME))
        assert "Edit" not in cell
        assert "View" not in cell
        assert "Delete" in cell

    def test_dropdown_actions(self):
        grid = self.make_grid()
        grid.column("title")
        grid.set_actions_class(DropdownActions)
        grid.actions(lambda actions, record: actions.append(mark_safe("<a href='/x'>Custom</a>")))
        grid.build()
        cell = str(grid.rows()[0].column(Column.ACTION_COLUMN_NAME))
        assert "grid-dropdown-actions" in cell
        assert "Custom" in cell

    def test_row_selector(self):
        grid = self.make_grid()
        grid.column("title")
        grid.build()
        assert grid.get_column_names()[0] == Column.SELECT_COLUMN_NAME
        assert "grid-row-checkbox" in str(grid.rows()[0].column(Column.SELECT_COLUMN_NAME))

        grid = self.make_grid()
        grid.column("title")
        grid.disable_row_selector()
        grid.disable_actions()
        grid.build()
        assert grid.get_column_names() == ["title"]


class TestSortingAndPagination(GridTestCase):
    def test_sort_by_sortable_column(self):
        grid = self.make_grid({"_sort": "-views"})
        grid.column("views").sortable()
        grid.build()
        assert self.titles(grid) == ["Second", "Third", "First"]

    def test_non_sortable_column_is_ignored(self):
        grid = self.make_grid({"_sort": "views"})
        grid.column("views")
        grid.build()
        assert grid.model().get_sort() is None

    def test_doubled_minus_sort_is_ignored(self):
        grid = self.make_grid({"_sort": "--title"})
        grid.column("title").sortable()
        html = str(grid.render())
        assert grid.model().get_sort() is None
        assert "FieldError" not in html
        assert self.titles(grid) == ["First", "Second", "Third"]

    def test_bare_minus_sort_is_ignored(self):
        grid = self.make_grid({"_sort": "-"})
        grid.column("title").sortable()
        grid.build()
        assert grid.model().get_sort() is None

    def test_sorter_link(self):
        grid = self.make_grid({"_sort": "views"})
        grid.column("views").sortable()
        html = str(grid.render())
        assert "_sort=-views" in html

    def test_pagination(self):
        grid = self.make_grid({"per_page": "10", "_sort": "views", "page": "1"})
        grid.column("views").sortable()
        grid.paginate(2)
        grid.build()
        assert grid.model().get_per_page() == 10
        assert len(grid.rows()) == 3

        grid = self.make_grid({"_sort": "views", "page": "2"})
        grid.column("views").sortable()
        grid.paginate(2)
        grid.build()
        assert self.titles(grid) == ["Second"]
        assert grid.rows()[0].number == 3
        assert "3 - 3 of 3" in str(grid.render_pagination())

    def test_named_grid_prefixes_query_params(self):
        grid = self.make_grid({"posts_sort": "-views", "_sort": "views"})
        grid.set_name("posts")
        grid.column("views").sortable()
        grid.build()
        assert self.titles(grid) == ["Second", "Third", "First"]
        assert grid.model().get_page_name() == "posts_page"

    def test_disable_pagination(self):
        grid = self.make_grid()
        grid.column("title")
        grid.disable_pagination()
        grid.build()
        assert grid.model().paginator() is None
        assert grid.render_pagination() == ""


class TestFilterPanel(GridTestCase):
    def make_filtered(self, params):
        grid = self.make_grid(params)
        grid.column("title")
        panel = grid.filter()
        panel.equal("status")
        panel.like("title")
        panel.between("views")
        panel.in_("category", options={self.tech.pk: "Technology"})
        panel.where("Popular", lambda value: Q(views__gte=20) if value == "1" else None)
        panel.scope("featured", "Featured", lambda qs: qs.filter(is_featured=True))
        grid.build()
        return grid

    def test_equal(self):
        assert sorted(self.titles(self.make_filtered({"status": "published"}))) == ["Second", "Third"]

    def test_like(self):
        assert self.titles(self.make_filtered({"title": "ir"})) == ["First", "Third"]

    def test_between(self):
        grid = self.make_filtered({"views[start]": "15", "views[end]": "25"})
        assert self.titles(grid) == ["Third"]

    def test_in(self):
        assert self.titles(self.make_filtered({"category": [str(self.tech.pk)]})) == ["First"]

    def test_scope(self):
        grid = self.make_filtered({"_scope_": "featured"})
        assert self.titles(grid) == ["Third"]
        assert grid.get_filter().is_active()

    def test_where_input_is_named_after_label(self):
        grid = self.make_filtered({"popular": "1"})
        assert self.titles(grid) == ["Second", "Third"]
        assert 'name="popular"' in str(grid.get_filter().render())

    def test_named_grid_prefixes_scope_param(self):
        grid = self.make_grid({"_scope_": "featured"})
        grid.set_name("posts")
        grid.column("title")
        grid.filter().scope("featured", "Featured", lambda qs: qs.filter(is_featured=True))
        grid.build()
        assert grid.get_filter().get_scope_name() == "posts_scope_"
        assert self.titles(grid) == ["First", "Second", "Third"]

        grid = self.make_grid({"posts_scope_": "featured"})
        grid.set_name("posts")
        grid.column("title")
        grid.filter().scope("featured", "Featured", lambda qs: qs.filter(is_featured=True))
        grid.build()
        assert self.titles(grid) == ["Third"]
        assert "posts_scope_=featured" in str(grid.get_filter().render_button())

    def test_rendered_panel_is_collapsed_until_active(self):
        grid = self.make_filtered({})
        assert "grid-filter hidden" in str(grid.get_filter().render())
        grid = self.make_filtered({"status": "draft"})
        assert "grid-filter hidden" not in str(grid.get_filter().render())


class TestColumnFilters(GridTestCase):
    def test_in_filter(self):
        grid = self.make_grid({"_filter_status": ["draft", "archived"]})
        grid.column("status").filter(column_filter.In(dict(Article.STATUS_CHOICES)))
        grid.build()
        assert self.titles(grid) == ["First"]

    def test_like_filter(self):
        grid = self.make_grid({"_filter_title": "SEC"})
        grid.column("title").filter(column_filter.Like())
        grid.build()
        assert self.titles(grid) == ["Second"]

    def test_between_filter(self):
        grid = self.make_grid({"_filter_views[start]": "20"})
        grid.column("views").filter(column_filter.Between())
        grid.build()
        assert sorted(self.titles(grid)) == ["Second", "Third"]

    def test_filter_renders_in_header(self):
        grid = self.make_grid({"_filter_title": "x"})
        grid.column("title").filter(column_filter.Equal())
        html = str(grid.render())
        assert "grid-column-filter" in html
        assert 'name="_filter_title" value="x"' in html


class TestMultipleHeaders(GridTestCase):
    def test_combine_needs_two_columns(self):
        grid = self.make_grid()
        with pytest.raises(ValueError, match="at least 2"):
            grid.combine("Alone", ["title"])

    def test_sort_headers_groups_columns(self):
        grid = self.make_grid()
        grid.disable_row_selector()
        grid.disable_actions()
        grid.column("id")
        grid.column("publish_date")
        grid.column("title")
        grid.column("publish_time")
        grid.column("views")
        grid.combine("Publishing", ["publish_date", "publish_time"])
        grid.build()
        assert grid.get_column_names() == ["id", "publish_date", "publish_time", "title", "views"]
        labels = [header.label for header in grid.get_sorted_headers()]
        assert labels == ["ID", "Publishing", "Title", "Views"]
        thead = str(grid.render_thead())
        assert 'colspan="2"' in thead
        assert 'rowspan="2"' in thead
        assert grid.option("show_bordered") is True

    def test_sort_headers_wraps_single_columns(self):
        grid = self.make_grid()
        grid.disable_row_selector()
        grid.disable_actions()
        grid.column("id").responsive(2)
        grid.column("publish_date")
        grid.column("views").add_header('<span class="views-hint">hits</span>')
        grid.column("publish_time")
        grid.column("title").help("Shown in lists")
        grid.combine("Publishing", ["publish_date", "publish_time"])
        grid.build()

        headers = grid.get_sorted_headers()
        assert [header.label for header in headers] == ["ID", "Publishing", "Views", "Title"]
        before, group, views, title = headers
        assert before.is_single() and before.get_column_names() == ["id"]
        assert before.attributes["data-priority"] == 2
        assert group.get_column_names() == ["publish_date", "publish_time"]
        assert "data-priority" not in views.attributes
        assert grid.get_column_names() == ["id", "publish_date", "publish_time", "views", "title"]

        assert 'data-priority="2"' in str(before.render())
        assert 'rowspan="2"' in str(before.render())
        assert "views-hint" in str(views.render())
        assert 'title="Shown in lists"' in str(title.render())

        thead = str(grid.render_thead())
        top, bottom = thead.split("</tr><tr>")
        assert "views-hint" in top
        assert "views-hint" not in bottom
        assert bottom.count("<th") == 2


class TestExporter(GridTestCase):
    def test_export_all(self):
        grid = self.make_grid({"_export_": "all"})
        grid.column("title")
        grid.column("category.name", "Category")
        grid.show_exporter()
        response = grid.handle_export_request()
        assert response["Content-Type"] == "text/csv"
        assert 'filename="articles.csv"' in response["Content-Disposition"]
        lines = response.content.decode().splitlines()
        assert lines[0] == "Title,Category"
        assert "First,Technology" in lines
        assert len(lines) == 4

    def test_export_selected_rows(self):
        grid = self.make_grid({"_export_": f"selected:{self.second.pk},{self.third.pk}"})
        grid.column("title")
        grid.export("picked.csv")
        response = grid.handle_export_request()
        assert 'filename="picked.csv"' in response["Content-Disposition"]
        assert sorted(response.content.decode().splitlines()[1:]) == ["Second", "Third"]

    def test_export_respects_filters(self):
        grid = self.make_grid({"_export_": "all", "status": "published"})
        grid.column("title")
        grid.filter().equal("status")
        grid.show_exporter()
        response = grid.handle_export_request()
        assert sorted(response.content.decode().splitlines()[1:]) == ["Second", "Third"]

    def test_export_stops_at_export_limit(self):
        grid = self.make_grid({"_export_": "all"})
        grid.column("title")
        grid.show_exporter()
        grid.option("export_limit", 2)
        lines = grid.handle_export_request().content.decode().splitlines()
        assert lines == ["Title", "First", "Second"]

    def test_export_limit_applies_to_selected_rows(self):
        keys = ",".join(str(article.pk) for article in (self.first, self.second, self.third))
        grid = self.make_grid({"_export_": f"selected:{keys}"})
        grid.column("title")
        grid.show_exporter()
        grid.option("export_limit", 1)
        lines = grid.handle_export_request().content.decode().splitlines()
        assert len(lines) == 2

    def test_export_selected_skips_malformed_keys(self):
        grid = self.make_grid({"_export_": f"selected:abc,{self.second.pk}"})
        grid.column("title")
        grid.show_exporter()
        response = grid.handle_export_request()
        assert response.content.decode().splitlines() == ["Title", "Second"]

    def test_export_selected_with_only_malformed_keys(self):
        grid = self.make_grid({"_export_": "selected:abc"})
        grid.column("title")
        grid.show_exporter()
        response = grid.handle_export_request()
        assert response.status_code == 200
        assert response.content.decode().splitlines() == ["Title"]

    def test_no_export_without_exporter(self):
        grid = self.make_grid({"_export_": "all"})
        grid.column("title")
        assert grid.handle_export_request() is None


class TestRendering(GridTestCase):
    def test_render(self):
        grid = self.make_grid()
        grid.column("title")
        grid.quick_search(["title"])
        grid.show_exporter()
        grid.set_title("Articles")
        html = str(grid.render())
        assert grid.get_table_id() in html
        assert "First" in html
        assert 'href="/admin/articles/create"' in html
        assert "grid-exporter" in html
        assert "grid-quick-search" in html

    def test_create_url_keeps_constraints(self):
        grid = self.make_grid()
        grid.model().where(category_id=self.tech.pk)
        assert grid.get_create_url() == f"/admin/articles/create?category_id={self.tech.pk}"
        grid.column("title")
        grid.build()
        assert self.titles(grid) == ["First"]

    def test_builder_callback(self):
        request = self.factory.get("/admin/articles")
        grid = Grid(Article, lambda grid: grid.column("title"), request=request)
        html = str(grid.render())
        assert "Second" in html

    def test_render_errors_show_error_box(self):
        grid = self.make_grid({"_sort": "nope"})
        grid.column("nope").sortable()
        html = str(grid.render())
        assert "FieldError" in html

    def test_empty_grid(self):
        grid = self.make_grid({"status": "archived"})
        grid.column("title")
        grid.filter().equal("status")
        assert "No data." in str(grid.render())


class TestMiniGrid(GridTestCase):
    def tearDown(self):
        Content.clear_builder_events()

    def test_mini_grid_options(self):
        request = self.factory.get("/admin/auth/roles", {"_mini": "1"})
        grid = MiniGrid(Category, request=request)
        assert grid.get_name() == "mini"
        assert grid.option("show_create_btn") is False
        assert grid.option("show_actions") is False
        assert grid.option("row_selector_clicktr") is True
        grid.column("name")
        grid.build()
        assert Column.ACTION_COLUMN_NAME not in grid.get_column_names()
