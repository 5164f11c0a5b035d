"""
Forms opened in a modal dialog.

    ModalForm("New tag", "tags/create").click(".new-tag").success("DjustPanel.reload()").render()

The page loads ``<url>?_form_win_=1``; the controller notices the flag
(``ModalForm.is_modal(request)``) and renders the form without its chrome.
"""

import json

from django.middleware.csrf import get_token

from .. import assets
from ..conf import admin_url
from ..helpers import url_with_query


class ModalForm:
    QUERY_NAME = "_form_win_"

    content_template = "djust_panel/modal_form.html"

    def __init__(self, title=None, url=None):
        self.options = {
            "title": "Form",
            "area": ["700px", "670px"],
            "defaultUrl": None,
            "buttonSelector": None,
            "query": None,
            "lang": None,
            "forceRefresh": False,
            "disableReset": False,
        }
        self.handlers = {"saved": None, "success": None, "error": None}
        self.title(title)
        self.url(url)

    def set_options(self, options):
        self.options.update(options)
        return self

    def title(self, title):
        self.options["title"] = title
        return self

    def click(self, button_selector):
        self.options["buttonSelector"] = button_selector
        return self

    def force_refresh(self):
        self.options["forceRefresh"] = True
        return self

    def disable_reset_button(self):
        self.options["disableReset"] = True
        return self

    def saved(self, script):
        self.handlers["saved"] = script
        return self

    def success(self, script):
        self.handlers["success"] = script
        return self

    def error(self, script):
        self.handlers["error"] = script
        return self

    def dimensions(self, width, height):
        self.options["area"] = [width, height]
        return self

    def width(self, width):
        self.options["area"][0] = width
        return self

    def height(self, height):
        self.options["area"][1] = height
        return self

    def url(self, url):
        if url:
            self.options["defaultUrl"] = url_with_query(admin_url(url), {self.QUERY_NAME: 1})
        return self

    def setup_options(self):
        self.options["lang"] = {
            "submit": "Submit",
            "reset": "Reset",
            "save_failed": "Save failed",
        }
        self.options["query"] = self.QUERY_NAME

    def script(self):
        self.setup_options()
        handlers = "".join(
            f"opts.{name} = function (success, response) {{ {body or ''} }};\n"
            for name, body in self.handlers.items()
        )
        return f"(function () {{\nvar opts = {json.dumps(self.options)};\n{handlers}DjustPanel.modalForm(opts);\n}})();"

    def render(self):
        assets.script(self.script())
        return ""

    def __html__(self):
        return self.render()

    @classmethod
    def is_modal(cls, request):
        if request is None:
            return False
        return bool(request.GET.get(cls.QUERY_NAME) or request.POST.get(cls.QUERY_NAME))

    @classmethod
    def prepare(cls, form):
        """Strip chrome from ``form`` when it is rendered inside a modal."""
        if not cls.is_modal(form.request):
            return False
        from ..layout.content import Content

        form.wrap(lambda html: html)
        form.disable_header()
        form.disable_footer()
        form.set_width(9, 2)
        form.hidden("csrfmiddlewaretoken").value(get_token(form.request))
        Content.composing(lambda content: content.set_view(cls.content_template), once=True)
        return True
