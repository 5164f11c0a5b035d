from django.template.loader import render_to_string


class Footer:
    """
    Submit / reset buttons and the "after save" checks.

    The checks post ``after-save``: 1 continue editing, 2 continue creating,
    3 view the saved record.
    """

    template_name = "djust_panel/form/footer.html"

    AFTER_SAVE_KEY = "after-save"
    CONTINUE_EDITING = "1"
    CONTINUE_CREATING = "2"
    VIEW = "3"

    def __init__(self, builder):
        self.builder = builder
        self.buttons = {"reset": True, "submit": True}
        self.checkboxes = {"view": True, "continue_editing": True, "continue_creating": True}

    def disable_reset(self, disable=True):
        self.buttons["reset"] = not disable
        return self

    def disable_submit(self, disable=True):
        self.buttons["submit"] = not disable
        return self

    def disable_view_check(self, disable=True):
        self.checkboxes["view"] = not disable
        return self

    def disable_editing_check(self, disable=True):
        self.checkboxes["continue_editing"] = not disable
        return self

    def disable_creating_check(self, disable=True):
        self.checkboxes["continue_creating"] = not disable
        return self

    def checks(self):
        checks = []
        if self.checkboxes["continue_editing"]:
            checks.append((self.CONTINUE_EDITING, "Continue editing"))
        if self.checkboxes["continue_creating"]:
            checks.append((self.CONTINUE_CREATING, "Continue creating"))
        if self.checkboxes["view"]:
            checks.append((self.VIEW, "View"))
        return checks

    def render(self):
        context = {
            "buttons": self.buttons,
            "checks": self.checks(),
            "after_save_key": self.AFTER_SAVE_KEY,
            "width": self.builder.get_width(),
        }
        return render_to_string(self.template_name, context)
