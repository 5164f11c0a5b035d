from django.template.loader import render_to_string
from django.utils.html import format_html
from django.utils.safestring import mark_safe

from ..helpers import html_attributes, render


class Widget:
    """
    Base class of renderable boxes.

    Subclasses either set ``template_name`` and override ``variables()`` or
    override ``render()``.
    """

    template_name = None

    def __init__(self, content=None):
        self.content = content
        self.attributes = {}
        self._variables = {}

    def set_html_attribute(self, attribute, value=None):
        if isinstance(attribute, dict):
            self.attributes.update(attribute)
        else:
            self.attributes[attribute] = value
        return self

    def get_html_attribute(self, attribute, default=None):
        return self.attributes.get(attribute, default)

    def class_(self, css_class, append=False):
        if append and self.attributes.get("class"):
            css_class = f"{self.attributes['class']} {css_class}"
        return self.set_html_attribute("class", css_class)

    def style(self, style):
        return self.set_html_attribute("style", style)

    def format_html_attributes(self):
        return html_attributes(self.attributes)

    def with_(self, variables):
        self._variables.update(variables)
        return self

    def variables(self):
        return {
            **self._variables,
            "attributes": self.format_html_attributes(),
            "content": mark_safe(render(self.content)),
        }

    def render(self):
        if self.template_name:
            return mark_safe(render_to_string(self.template_name, self.variables()))
        return format_html("<div {}>{}</div>", self.format_html_attributes(), mark_safe(render(self.content)))

    def __html__(self):
        return str(self.render())

    def __str__(self):
        return str(self.render())
