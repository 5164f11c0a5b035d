"""
Cell displayers.

A displayer renders one cell from the raw value, the grid, the column and
the record. Inline editors (checkbox, radio, switch) send
``PUT <resource>/<key>`` with the column value; the resource controller
answers JSON.

    grid.column("tags").checkbox({1: "Python", 2: "Django"})
    grid.column("is_featured").switch("green")
"""

import json

from django.utils.html import conditional_escape, format_html, format_html_join
from django.utils.safestring import mark_safe

from .. import assets
from ..helpers import element_name, random_id, render, to_list
from .actions import Delete, Edit, QuickEdit, RowAction, Show


class AbstractDisplayer:
    js = []
    css = []

    def __init__(self, value, grid, column, record):
        self.value = value
        self.grid = grid
        self.column = column
        self.record = record
        self.collect_assets()

    def collect_assets(self):
        if self.js:
            assets.js(self.js)
        if self.css:
            assets.css(self.css)

    def get_element_name(self):
        return element_name(self.column.get_name())

    def get_key(self):
        return getattr(self.record, self.grid.get_key_name(), None)

    def get_resource(self):
        return self.grid.get_resource()

    def display(self, *args, **kwargs):
        raise NotImplementedError


class RowSelector(AbstractDisplayer):
    def display(self):
        options = self.grid.get_row_selector_options()
        label = ""
        if options["label_key"]:
            label = getattr(self.record, options["label_key"], "")
        return format_html(
            '<input type="checkbox" class="grid-row-checkbox {}" data-id="{}" data-label="{}"'
            ' data-style="{}">',
            "circle" if options["circle"] else "",
            self.get_key(),
            label,
            options["style"],
        )


def _values(value):
    if isinstance(value, str):
        return [item for item in value.split(",") if item != ""]
    items = to_list(value)
    return [getattr(item, "pk", item) for item in items]


def _options(options, record):
    if callable(options):
        options = options(record)
    return dict(options)


class Checkbox(AbstractDisplayer):
    def display(self, options=None):
        options = _options(options or {}, self.record)
        name = self.column.get_name()
        selected = [str(value) for value in _values(self.value)]
        boxes = format_html_join(
            "",
            '<div class="checkbox"><input id="{0}" type="checkbox" name="grid-checkbox-{1}[]"'
            ' value="{2}"{3}><label for="{0}">{4}</label></div>',
            (
                (random_id("ckb"), name, key, " checked" if str(key) in selected else "", label)
                for key, label in options.items()
            ),
        )
        assets.script(
            f"DjustPanel.gridCheckbox('form.grid-checkbox-{name}', "
            f"{json.dumps(self.get_resource())}, {json.dumps(name)});"
        )
        return format_html(
            '<form class="grid-checkbox-{}" data-key="{}">{}'
            '<button type="submit" class="btn btn-primary btn-xs">Save</button>'
            '<button type="reset" class="btn btn-warning btn-xs">Reset</button></form>',
            name,
            self.get_key(),
            boxes,
        )


class Radio(AbstractDisplayer):
    def display(self, options=None):
        options = _options(options or {}, self.record)
        name = self.column.get_name()
        current = "" if self.value is None else str(getattr(self.value, "pk", self.value))
        radios = format_html_join(
            "",
            '<div class="radio"><input id="{0}" type="radio" name="grid-radio-{1}" value="{2}"{3}>'
            '<label for="{0}">{4}</label></div>',
            (
                (random_id("rdo"), name, key, " checked" if str(key) == current else "", label)
                for key, label in options.items()
            ),
        )
        assets.script(
            f"DjustPanel.gridRadio('form.grid-radio-{name}', "
            f"{json.dumps(self.get_resource())}, {json.dumps(name)});"
        )
        return format_html(
            '<form class="grid-radio-{}" data-key="{}">{}'
            '<button type="submit" class="btn btn-primary btn-xs">Save</button>'
            '<button type="reset" class="btn btn-warning btn-xs">Reset</button></form>',
            name,
            self.get_key(),
            radios,
        )


class SwitchDisplay(AbstractDisplayer):
    COLORS = {
        "green": "var(--success)",
        "custom": "var(--custom)",
        "yellow": "var(--warning)",
        "red": "var(--danger)",
        "purple": "var(--purple)",
        "blue": "var(--blue)",
    }

    color = "var(--primary)"

    def set_color(self, color):
        self.color = self.COLORS.get(color, color)
        return self

    def display(self, color=""):
        if callable(color):
            color(self, self.record)
        elif color:
            self.set_color(color)
        selector = f".grid-switch-{self.grid.get_name() or 'default'}"
        assets.script(
            f"DjustPanel.gridSwitch({json.dumps(selector)}, {json.dumps(self.get_resource())});"
        )
        return format_html(
            '<input class="{}" type="checkbox" name="{}" data-key="{}" data-color="{}"{}>',
            selector[1:],
            self.get_element_name(),
            self.get_key(),
            self.color,
            mark_safe(" checked") if self.value else "",
        )


class Actions(AbstractDisplayer):
    """Inline row action links (edit, quick edit, view, delete + custom)."""

    default_classes = [Edit, QuickEdit, Show, Delete]

    def __init__(self, value, grid, column, record):
        super().__init__(value, grid, column, record)
        self._disabled = set()
        self.prepends = []
        self.appends = []

    def prepare_action(self, action):
        return action.set_grid(self.grid).set_column(self.column).set_row(self.record)

    def append(self, action):
        if isinstance(action, RowAction):
            self.prepare_action(action)
        self.appends.append(action)
        return self

    def prepend(self, action):
        if isinstance(action, RowAction):
            self.prepare_action(action)
        self.prepends.insert(0, action)
        return self

    def _toggle(self, action_class, disable):
        if disable:
            self._disabled.add(action_class)
        else:
            self._disabled.discard(action_class)
        return self

    def disable_view(self, disable=True):
        return self._toggle(Show, disable)

    def disable_edit(self, disable=True):
        return self._toggle(Edit, disable)

    def disable_quick_edit(self, disable=True):
        return self._toggle(QuickEdit, disable)

    def disable_delete(self, disable=True):
        return self._toggle(Delete, disable)

    def default_actions(self):
        return [
            self.prepare_action(action_class())
            for action_class in self.default_classes
            if action_class not in self._disabled
        ]

    def apply_grid_options(self):
        self.disable_view(not self.grid.option("show_view_button"))
        self.disable_edit(not self.grid.option("show_edit_button"))
        self.disable_quick_edit(not self.grid.option("show_quick_edit_button"))
        self.disable_delete(not self.grid.option("show_delete_button"))

    def display(self, callbacks=None):
        self.apply_grid_options()
        for callback in callbacks or []:
            callback(self, self.record)
        items = self.prepends + self.default_actions() + self.appends
        return mark_safe(
            '<span class="grid-row-actions">'
            + "&nbsp;".join(render(item) for item in items)
            + "</span>"
        )


class DropdownActions(Actions):
    """Row actions collapsed into a dropdown menu."""

    def wrap_custom_action(self, action):
        html = render(action)
        if "</a>" not in html:
            html = f"<a>{html}</a>"
        return mark_safe(html)

    def append(self, action):
        if isinstance(action, RowAction):
            self.prepare_action(action)
        self.appends.append(self.wrap_custom_action(action))
        return self

    def prepend(self, action):
        return self.append(action)

    def display(self, callbacks=None):
        self.apply_grid_options()
        for callback in callbacks or []:
            callback(self, self.record)
        default = self.default_actions()
        items = format_html_join("", "<li>{}</li>", ((render(item),) for item in default))
        custom = ""
        if self.appends:
            custom = mark_safe(
                '<li class="divider"></li>'
                + "".join(f"<li>{conditional_escape(item)}</li>" for item in self.appends)
            )
        return format_html(
            '<div class="grid-dropdown-actions dropdown">'
            '<a href="#" class="dropdown-toggle" data-toggle="dropdown">&#x22EF;</a>'
            '<ul class="dropdown-menu">{}{}</ul></div>',
            items,
            custom,
        )
