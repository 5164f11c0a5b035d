"""
Chart.js charts.

    Bar("Monthly sales", ["Jan", "Feb", "Mar"]).add("2024", [10, 20, 30]).palette("green")

A chart renders a ``<canvas>`` and registers the script drawing it. With
``request(url)`` the chart fetches its datasets from ``url`` instead; the
view behind it answers with ``chart.to_json_response()``.
"""

import json

from django.http import JsonResponse
from django.utils.html import format_html

from .. import assets
from ..helpers import random_id, url_with_query
from .base import Widget

CHART_JS = "https://cdn.jsdelivr.net/npm/chart.js@2.9.4/dist/Chart.min.js"

PALETTES = {
    "blue": ["#5b8def", "#3d6fd6", "#9bb9f6", "#2a4f9e", "#c4d6fa", "#7ea4f2"],
    "green": ["#21b978", "#4ecb91", "#8fdeb8", "#17865a", "#c2eedb", "#2f9e6c"],
    "orange": ["#ff8c2e", "#ffa95c", "#ffc899", "#d46a12", "#ffe2c7", "#e67e22"],
    "purple": ["#7c5bd6", "#9b80e3", "#c0afee", "#5a3cab", "#ddd3f6", "#8e6fe0"],
    "red": ["#ea5455", "#f08182", "#f5aeaf", "#c23536", "#fad5d5", "#d94748"],
    "gray": ["#6c757d", "#8f979e", "#b5bbc0", "#495057", "#dee2e6", "#adb5bd"],
}


class Chart(Widget):
    global_settings = {
        "defaultFontColor": "#555",
        "defaultFontFamily": "Nunito,system-ui,sans-serif",
    }

    type = "line"

    def __init__(self, *params):
        super().__init__()
        self.id = ""
        self.colors = list(PALETTES["blue"])
        self.data = {"labels": [], "datasets": []}
        self.options = {}
        self.container_style = ""
        self.url = None
        if len(params) == 2:
            title, labels = params
            if title:
                self.title(title)
            if labels:
                self.labels(labels)
        elif params and params[0]:
            if isinstance(params[0], str):
                self.title(params[0])
            elif isinstance(params[0], (list, tuple)):
                self.labels(params[0])

    def palette(self, name):
        self.colors = list(PALETTES[name])
        return self

    def composite(self, chart):
        self.data["datasets"].extend(chart.get_datasets())
        return self

    def labels(self, labels):
        self.data["labels"] = list(labels)
        return self

    def add(self, label, data=None, fill_color=None):
        """
        Add a dataset, or several: ``add([("A", [1, 2]), ("B", [3, 4], "#f00")])``.

        ``fill_color`` is a background colour or a dict of dataset options.
        """
        if isinstance(label, (list, tuple)):
            for item in label:
                self.add(*item)
            return self
        item = {"label": label, "data": list(data or []), "backgroundColor": None}
        if isinstance(fill_color, str):
            item["backgroundColor"] = fill_color
        elif isinstance(fill_color, dict):
            item = {"backgroundColor": None, **fill_color, "label": label, "data": list(data or [])}
        self.data["datasets"].append(item)
        return self

    def get_data(self):
        return self.data

    def get_options(self):
        return self.options

    def set_options(self, options):
        self.options.update(options)
        return self

    def _merge_option(self, key, options):
        self.options.setdefault(key, {}).update(options)
        return self

    def responsive(self, value=True):
        return self.set_options({"responsive": value})

    def legend(self, options):
        return self._merge_option("legend", options)

    def disable_legend(self):
        return self.legend({"display": False})

    def legend_position(self, position):
        return self.legend({"position": position})

    def tooltips(self, options):
        return self._merge_option("tooltips", options)

    def disable_tooltip(self):
        return self.tooltips({"enabled": False})

    def title(self, options):
        if isinstance(options, dict):
            self.options["title"] = options
        else:
            self.options["title"] = {"text": options, "display": True, "fontSize": "14"}
        return self

    def elements(self, options):
        return self._merge_option("elements", options)

    def layout(self, options):
        return self._merge_option("layout", options)

    def padding(self, padding):
        return self.layout({"padding": padding})

    def animation(self, options):
        return self._merge_option("animation", options)

    def width(self, width):
        return self.set_container_style(f"width:{width}")

    def height(self, height):
        return self.set_container_style(f"height:{height}")

    def set_container_style(self, style, append=True):
        if append:
            self.container_style += f";{style}"
        else:
            self.container_style = style
        return self

    def request(self, url, query=None):
        """Load the datasets from ``url`` when the chart is drawn."""
        self.url = url_with_query(url, query) if query else url
        return self

    def fill_color(self, colors=None):
        colors = list(colors or self.colors)
        for item in self.data["datasets"]:
            if not item.get("backgroundColor") and colors:
                item["backgroundColor"] = colors.pop(0)

    def make_id(self):
        if not self.id:
            self.id = random_id(f"chart_{self.type}")

    def get_id(self):
        self.make_id()
        return self.id

    def get_datasets(self):
        self.fill_color()
        return [{**item, "type": item.get("type", self.type)} for item in self.data["datasets"]]

    def config(self):
        return {"type": self.type, "data": self.data, "options": self.options}

    def script(self):
        return f"DjustPanel.chart({json.dumps(self.id)}, {json.dumps(self.config())}, {json.dumps(self.url)});"

    def render(self):
        self.make_id()
        self.fill_color()
        assets.js(CHART_JS)
        for key, value in self.global_settings.items():
            assets.script(f"Chart.defaults.global.{key}={json.dumps(value)};")
        assets.script(self.script())
        self.set_html_attribute("id", self.id)
        return format_html(
            '<div class="chart" style="{}"><canvas {}>Your browser does not support the canvas element.</canvas></div>',
            self.container_style,
            self.format_html_attributes(),
        )

    def to_json_response(self, return_options=True, data=None):
        payload = {
            "status": 1,
            "datasets": self.get_datasets(),
            "options": self.get_options() if return_options else {},
        }
        payload.update(data or {})
        return JsonResponse(payload)


class Bar(Chart):
    type = "bar"


class Line(Chart):
    type = "line"


class Pie(Chart):
    type = "pie"

    def fill_color(self, colors=None):
        # one colour per slice
        for item in self.data["datasets"]:
            if not item.get("backgroundColor"):
                palette = list(colors or self.colors)
                item["backgroundColor"] = [palette[i % len(palette)] for i in range(len(item["data"]))]


class Doughnut(Pie):
    type = "doughnut"


class Radar(Chart):
    type = "radar"
