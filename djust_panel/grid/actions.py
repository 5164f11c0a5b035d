"""
Row and batch actions.

Row actions render a link for one record; batch actions act on the rows
ticked through the row selector.
"""

import json

from django.utils.html import format_html
from django.utils.text import slugify

from .. import assets
from ..helpers import html_attributes


class RowAction:
    name = ""

    def __init__(self, name=None):
        self._name = name
        self.grid = None
        self.column = None
        self.record = None
        self.attributes = {}

    def set_grid(self, grid):
        self.grid = grid
        return self

    def set_column(self, column):
        self.column = column
        return self

    def set_row(self, record):
        self.record = record
        return self

    def get_name(self):
        return self._name or self.name

    def get_key(self):
        return getattr(self.record, self.grid.get_key_name(), None)

    def get_resource(self):
        return self.grid.get_resource()

    def get_element_class(self):
        return f"grid-row-action-{slugify(type(self).__name__)}"

    def set_html_attribute(self, attributes):
        self.attributes.update(attributes)
        return self

    def href(self):
        return None

    def render(self):
        attributes = {"class": self.get_element_class(), **self.attributes}
        href = self.href()
        if href:
            attributes["href"] = href
        return format_html("<a {}>{}</a>", html_attributes(attributes), self.get_name())

    def __html__(self):
        return str(self.render())


class Edit(RowAction):
    name = "Edit"

    def href(self):
        return f"{self.get_resource()}/{self.get_key()}/edit"


class Show(RowAction):
    name = "View"

    def href(self):
        return f"{self.get_resource()}/{self.get_key()}"


class Delete(RowAction):
    name = "Delete"

    def render(self):
        assets.script(f"DjustPanel.bindDelete('.{self.get_element_class()}');")
        self.set_html_attribute(
            {"href": "#", "data-url": f"{self.get_resource()}/{self.get_key()}"}
        )
        return super().render()


class QuickEdit(RowAction):
    """Opens the edit form in a modal. The modal is registered once per grid."""

    name = "Quick edit"

    def render(self):
        from ..widgets.modal_form import ModalForm

        if not self.grid.resolved("quick_edit_modal"):
            width, height = self.grid.option("dialog_form_area")
            ModalForm("Edit").click(f".{self.get_element_class()}").dimensions(
                width, height
            ).success("DjustPanel.reload()").render()
        self.set_html_attribute(
            {"href": "#", "data-url": f"{self.get_resource()}/{self.get_key()}/edit"}
        )
        return super().render()


class BatchAction:
    title = ""

    def __init__(self, title=None):
        self._title = title
        self.grid = None

    def set_grid(self, grid):
        self.grid = grid
        return self

    def get_title(self):
        return self._title or self.title

    def get_element_class(self):
        return f"grid-batch-action-{slugify(type(self).__name__)}"

    def script(self):
        return ""

    def render(self):
        script = self.script()
        if script:
            assets.script(script)
        return format_html(
            '<li><a href="#" class="{}">{}</a></li>', self.get_element_class(), self.get_title()
        )


class BatchDelete(BatchAction):
    title = "Delete"

    def script(self):
        return (
            f"DjustPanel.bindBatchDelete('.{self.get_element_class()}', "
            f"{json.dumps(self.grid.get_resource())}, '#{self.grid.get_table_id()}');"
        )
