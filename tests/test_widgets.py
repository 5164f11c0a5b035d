"""Tests for charts, modal forms and dashboard widgets."""

import json

from django.contrib.auth import get_user_model
from django.test import RequestFactory, TestCase

from djust_panel import assets
from djust_panel.form import Form
from djust_panel.layout import Content
from djust_panel.models import Permission, Role
from djust_panel.widgets import Bar, Chart, DashboardWidget, Doughnut, Line, ModalForm, Pie, Widget
from djust_panel.widgets.chart import CHART_JS, PALETTES
from tests.models import Article

User = get_user_model()


class TestWidget(TestCase):
    def test_attributes(self):
        widget = Widget("body").class_("box").class_("wide", append=True).style("color:red")
        html = str(widget.render())
        assert 'class="box wide"' in html
        assert 'style="color:red"' in html
        assert ">body</div>" in html

    def test_content_is_escaped(self):
        assert "&lt;script&gt;" in str(Widget("<script>").render())


class TestChart(TestCase):
    def setUp(self):
        assets.collect()

    def test_title_and_labels(self):
        chart = Bar("Sales", ["Jan", "Feb"])
        assert chart.get_options()["title"] == {"text": "Sales", "display": True, "fontSize": "14"}
        assert chart.get_data()["labels"] == ["Jan", "Feb"]

    def test_single_argument_forms(self):
        assert Line("Only title").get_options()["title"]["text"] == "Only title"
        assert Line(["a", "b"]).get_data()["labels"] == ["a", "b"]

    def test_add_datasets(self):
        chart = Bar().add("2023", [1, 2]).add([("2024", [3, 4]), ("2025", [5, 6], "#000")])
        datasets = chart.get_datasets()
        assert [item["label"] for item in datasets] == ["2023", "2024", "2025"]
        assert datasets[0]["backgroundColor"] == PALETTES["blue"][0]
        assert datasets[1]["backgroundColor"] == PALETTES["blue"][1]
        assert datasets[2]["backgroundColor"] == "#000"
        assert all(item["type"] == "bar" for item in datasets)

    def test_dataset_options(self):
        chart = Line().add("Visits", [1], {"borderColor": "#111", "fill": False})
        item = chart.get_data()["datasets"][0]
        assert item["borderColor"] == "#111"
        assert item["fill"] is False

    def test_palette(self):
        chart = Bar().palette("green").add("a", [1])
        assert chart.get_datasets()[0]["backgroundColor"] == PALETTES["green"][0]

    def test_pie_colours_each_slice(self):
        chart = Pie("Share", ["a", "b", "c"]).add("Share", [1, 2, 3])
        assert chart.get_datasets()[0]["backgroundColor"] == PALETTES["blue"][:3]
        assert Doughnut().type == "doughnut"

    def test_options(self):
        chart = Chart().disable_legend().legend_position("bottom").padding(10).responsive(False)
        options = chart.get_options()
        assert options["legend"] == {"display": False, "position": "bottom"}
        assert options["layout"] == {"padding": 10}
        assert options["responsive"] is False

    def test_composite(self):
        line = Line().add("Trend", [1, 2])
        chart = Bar().add("Count", [3, 4]).composite(line)
        types = [item["type"] for item in chart.get_datasets()]
        assert types == ["bar", "line"]

    def test_render_registers_assets(self):
        html = str(Bar("Sales", ["Jan"]).add("2024", [1]).height("300px").render())
        assert "<canvas" in html
        assert "height:300px" in html
        bucket = assets.collect()
        assert CHART_JS in bucket["js"]
        assert any(script.startswith("DjustPanel.chart(") for script in bucket["script"])

    def test_request_url(self):
        chart = Bar().request("/admin/stats", {"range": "week"})
        chart.render()
        script = [item for item in assets.collect()["script"] if item.startswith("DjustPanel.chart(")][0]
        assert '"/admin/stats?range=week"' in script

    def test_json_response(self):
        response = Bar().add("a", [1]).title("T").to_json_response(data={"extra": True})
        payload = json.loads(response.content)
        assert payload["status"] == 1
        assert payload["datasets"][0]["data"] == [1]
        assert payload["options"]["title"]["text"] == "T"
        assert payload["extra"] is True


class TestModalForm(TestCase):
    def setUp(self):
        assets.collect()
        self.factory = RequestFactory()

    def tearDown(self):
        Content.clear_builder_events()

    def test_script(self):
        ModalForm("New tag", "tags/create").click(".new-tag").success("DjustPanel.reload()").render()
        script = assets.collect()["script"][0]
        assert "DjustPanel.modalForm(opts);" in script
        assert '"defaultUrl": "/admin/tags/create?_form_win_=1"' in script
        assert '"buttonSelector": ".new-tag"' in script
        assert "opts.success = function (success, response) { DjustPanel.reload() };" in script

    def test_dimensions(self):
        modal = ModalForm().dimensions("500px", "400px").width("600px")
        assert modal.options["area"] == ["600px", "400px"]

    def test_is_modal(self):
        assert ModalForm.is_modal(self.factory.get("/admin/tags/create", {"_form_win_": "1"}))
        assert not ModalForm.is_modal(self.factory.get("/admin/tags/create"))
        assert not ModalForm.is_modal(None)

    def test_prepare_strips_chrome(self):
        request = self.factory.get("/admin/articles/create", {"_form_win_": "1"})
        form = Form(Article, request=request)
        form.text("title")
        assert ModalForm.prepare(form)
        html = str(form.render())
        assert "card-header" not in html
        assert "card-footer" not in html
        assert 'name="csrfmiddlewaretoken"' in html

    def test_prepare_ignores_regular_requests(self):
        form = Form(Article, request=self.factory.get("/admin/articles/create"))
        assert not ModalForm.prepare(form)


class TestDashboardWidget(TestCase):
    def setUp(self):
        self.request = RequestFactory().get("/admin/")

    def test_string_content(self):
        assert DashboardWidget("<b>hi</b>").render(self.request) == "&lt;b&gt;hi&lt;/b&gt;"

    def test_callable_content_receives_request(self):
        widget = DashboardWidget(lambda request: request.path, widget_id="path")
        assert widget.render(self.request) == "/admin/"

    def test_defaults(self):
        widget = DashboardWidget("x", widget_id="w", label="W", order=3, size="lg")
        assert (widget.widget_id, widget.label, widget.order, widget.size) == ("w", "W", 3, "lg")
        assert repr(widget) == "DashboardWidget(widget_id='w', label='W')"

    def test_permission(self):
        widget = DashboardWidget("secret", permission="reports.revenue")
        self.request.user = User.objects.create_user("viewer", password="x")
        assert not widget.has_permission(self.request)

        role = Role.objects.create(name="Finance", slug="finance")
        role.permissions.add(Permission.objects.create(name="Revenue", slug="reports.revenue"))
        role.administrators.add(self.request.user)
        assert widget.has_permission(self.request)

    def test_without_permission_everyone_sees_it(self):
        assert DashboardWidget("open").has_permission(self.request)
