"""Grid toolbar: batch actions, filter button, refresh button and custom tools."""

from django.utils.html import format_html
from django.utils.safestring import mark_safe

from ..helpers import render
from .actions import BatchAction, BatchDelete


class AbstractTool:
    def __init__(self):
        self.grid = None
        self.disabled = False

    def set_grid(self, grid):
        self.grid = grid
        return self

    def disable(self, value=True):
        self.disabled = value
        return self

    def allowed(self):
        return not self.disabled

    def render(self):
        return ""


class RefreshButton(AbstractTool):
    def render(self):
        return mark_safe(
            '<button type="button" class="btn btn-sm btn-default grid-refresh" '
            'onclick="DjustPanel.reload()">&#x21BB; Refresh</button>'
        )


class FilterButton(AbstractTool):
    def allowed(self):
        return not self.disabled and self.grid.option("show_filter") and bool(
            self.grid.get_filter().conditions or self.grid.get_filter().scopes
        )

    def render(self):
        return self.grid.get_filter().render_button()


class BatchActions(AbstractTool):
    def __init__(self):
        super().__init__()
        self.actions = [BatchDelete()]
        self.enable_delete = True

    def add(self, action):
        if not isinstance(action, BatchAction):
            raise TypeError("Batch actions must be BatchAction instances")
        self.actions.append(action)
        return self

    def disable_delete(self, disable=True):
        self.enable_delete = not disable
        return self

    def allowed(self):
        return (
            not self.disabled
            and self.grid.option("show_row_selector")
            and bool(self.get_actions())
        )

    def get_actions(self):
        return [
            action
            for action in self.actions
            if self.enable_delete or not isinstance(action, BatchDelete)
        ]

    def render(self):
        items = mark_safe(
            "".join(str(action.set_grid(self.grid).render()) for action in self.get_actions())
        )
        return format_html(
            '<div class="btn-group grid-batch-actions dropdown">'
            '<button type="button" class="btn btn-sm btn-default dropdown-toggle" '
            'data-toggle="dropdown">Batch actions</button>'
            '<ul class="dropdown-menu">{}</ul></div>',
            items,
        )


class Tools:
    def __init__(self, grid):
        self.grid = grid
        self.batch_actions = BatchActions().set_grid(grid)
        self.filter_button = FilterButton().set_grid(grid)
        self.refresh_button = RefreshButton().set_grid(grid)
        self.prepends = []
        self.appends = []

    def append(self, tool):
        if isinstance(tool, AbstractTool):
            tool.set_grid(self.grid)
        self.appends.append(tool)
        return self

    def prepend(self, tool):
        if isinstance(tool, AbstractTool):
            tool.set_grid(self.grid)
        self.prepends.insert(0, tool)
        return self

    def batch(self, callback):
        """``callback(batch_actions)`` adds or disables batch actions."""
        callback(self.batch_actions)
        return self

    def disable_refresh_button(self, disable=True):
        self.refresh_button.disable(disable)
        return self

    def disable_filter_button(self, disable=True):
        self.filter_button.disable(disable)
        return self

    def disable_batch_actions(self, disable=True):
        self.batch_actions.disable(disable)
        return self

    def disable_batch_delete(self, disable=True):
        self.batch_actions.disable_delete(disable)
        return self

    def has(self):
        return bool(self.tools())

    def tools(self):
        tools = list(self.prepends)
        for tool in (self.batch_actions, self.filter_button, self.refresh_button):
            if tool.allowed():
                tools.append(tool)
        tools.extend(self.appends)
        return tools

    def render(self):
        return mark_safe("&nbsp;".join(render(tool) for tool in self.tools()))


class CreateButton:
    def __init__(self, grid):
        self.grid = grid

    def render_create_button(self):
        if not self.grid.option("show_create_btn"):
            return ""
        return format_html(
            '<a href="{}" class="btn btn-sm btn-success grid-create">+ New</a>',
            self.grid.get_create_url(),
        )

    def render_quick_create_button(self):
        if not self.grid.option("show_quick_create_btn"):
            return ""
        from ..widgets.modal_form import ModalForm

        selector = f"grid-quick-create-{self.grid.get_table_id()}"
        width, height = self.grid.option("dialog_form_area")
        ModalForm("Create", self.grid.get_create_url()).click(f".{selector}").dimensions(
            width, height
        ).success("DjustPanel.reload()").render()
        return format_html(
            '<a href="#" class="btn btn-sm btn-success {}">+ Quick create</a>', selector
        )

    def render(self):
        return format_html(
            '<div class="btn-group grid-create-buttons">{}{}</div>',
            self.render_quick_create_button(),
            self.render_create_button(),
        )
