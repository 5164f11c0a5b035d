from . import Grid


class MiniGrid(Grid):
    """
    Compact grid for picking rows inside a dialog.

    No create, actions or export; clicking a row ticks it. The filter panel
    is shown expanded above the table by the next ``Content`` rendered.
    """

    def __init__(self, repository=None, builder=None, request=None):
        super().__init__(repository, builder, request)
        self.set_name("mini")
        self.disable_create_button()
        self.disable_actions()
        self.disable_exporter()
        self.disable_quick_create_button()
        self.option("row_selector_clicktr", True)
        self.tools.disable_batch_actions()

        self.disable_filter()
        self.tools.disable_filter_button()
        self._filter.without_input_border().expand().disable_collapse().reset_position().hidden_reset_button_text()

        from ..layout.content import Content

        Content.composing(lambda content: content.simple().prepend(self._filter), once=True)
