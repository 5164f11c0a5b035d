"""
Tailwind adapter used to render form fields.

Extends djust's Tailwind adapter so that panel form fields (selects fed by
option lists, radio and checkbox groups, tag inputs, file inputs, read-only
displays) render with the same markup as djust's own live fields.
"""

from typing import Any, List

from django import forms
from django.utils.html import escape
from djust.frameworks import TailwindAdapter, register_adapter


class PanelTailwindAdapter(TailwindAdapter):
    """
    Renders one form field as a labelled row.

    Usage:
        from djust_panel.adapters import get_adapter
        html = get_adapter().render_field(field, "title", "Hello", [], widget="input")
    """

    FIELD_CLASS = (
        "block w-full rounded-md border-gray-300 shadow-sm "
        "focus:border-indigo-500 focus:ring-indigo-500 sm:text-sm"
    )
    FIELD_CLASS_INVALID = (
        "block w-full rounded-md border-red-300 shadow-sm "
        "focus:border-red-500 focus:ring-red-500 sm:text-sm"
    )
    LABEL_CLASS = "block text-sm font-medium text-gray-700"
    ERROR_CLASS = "mt-2 text-sm text-red-600"
    HELP_TEXT_CLASS = "mt-2 text-sm text-gray-500"
    WRAPPER_CLASS = "mb-4"
    HORIZONTAL_WRAPPER_CLASS = "mb-4 grid grid-cols-12 gap-4 items-start"
    CHECKBOX_CLASS = "h-4 w-4 text-indigo-600 focus:ring-indigo-500 border-gray-300 rounded"
    CHOICE_WRAPPER_CLASS = "flex items-center"
    CHOICE_LABEL_CLASS = "ml-2 block text-sm text-gray-900"
    DISPLAY_CLASS = "py-2 text-gray-900"

    def render_field(
        self, field: forms.Field, field_name: str, value: Any, errors: List[str], **kwargs
    ) -> str:
        """
        Render a panel form field.

        Args:
            field: Django form field carrying the rules (may be None for displays)
            field_name: Element name used in the submitted data
            value: Current value
            errors: Error messages for this field
            **kwargs: Rendering options:
                - widget: input, textarea, select, multiple_select, radio,
                  checkbox, tags, file, display or hidden
                - field_id: Element id
                - label: Label text
                - options: List of (value, label) pairs
                - attributes: Extra html attributes for the input
                - input_type: Type attribute for ``input`` widgets
                - help_text: Help line under the input
                - label_class: Extra label classes (``asterisk`` for required)
                - inline: Lay radio/checkbox options on one line
                - width: {"label": n, "field": n} grid columns, or None
        """
        widget = kwargs.pop("widget", "input")
        field_id = kwargs.pop("field_id", f"id_{field_name}")
        attributes = dict(kwargs.pop("attributes", None) or {})
        has_errors = len(errors) > 0

        if widget == "hidden":
            return (
                f'<input type="hidden" name="{escape(field_name)}" id="{escape(field_id)}" '
                f'value="{escape(self._format_value(value))}" />'
            )

        width = kwargs.get("width")
        wrapper_class = self.HORIZONTAL_WRAPPER_CLASS if width else self.WRAPPER_CLASS
        html = f'<div class="{wrapper_class}" data-field="{escape(field_name)}">'

        label_text = kwargs.get("label") or field_name.replace("_", " ").title()
        label_class = " ".join(filter(None, [self.LABEL_CLASS, kwargs.get("label_class", "")]))
        label_span = f' col-span-{width["label"]}' if width else ""
        required = ' <span class="text-red-500">*</span>' if "asterisk" in label_class else ""
        html += (
            f'<label for="{escape(field_id)}" class="{label_class}{label_span}">'
            f"{escape(label_text)}{required}</label>"
        )

        field_span = f' class="col-span-{width["field"]}"' if width else ' class="mt-1"'
        html += f"<div{field_span}>"

        if widget == "display":
            html += self._render_display(value)
        elif widget == "textarea":
            html += self._render_textarea(field_name, field_id, value, has_errors, attributes)
        elif widget in ("select", "multiple_select"):
            html += self._render_select(
                field_name,
                field_id,
                value,
                has_errors,
                kwargs.get("options") or [],
                attributes,
                multiple=widget == "multiple_select",
            )
        elif widget in ("radio", "checkbox"):
            html += self._render_choices(
                widget,
                field_name,
                field_id,
                value,
                kwargs.get("options") or [],
                attributes,
                kwargs.get("inline", True),
            )
        elif widget == "tags":
            html += self._render_tags(field_name, field_id, value, has_errors, kwargs.get("options") or [], attributes)
        elif widget == "file":
            html += self._render_file(field_name, field_id, value, attributes, kwargs.get("files") or [])
        else:
            html += self._render_input(
                field_name, field_id, value, has_errors, kwargs.get("input_type") or "text", attributes
            )

        if has_errors:
            html += self.render_errors(errors)
        help_text = kwargs.get("help_text")
        if help_text:
            html += f'<p class="{self.HELP_TEXT_CLASS}">{escape(help_text)}</p>'

        html += "</div></div>"
        return html

    def render_errors(self, errors: List[str], **kwargs) -> str:
        html = ""
        for error in errors:
            html += f'<p class="{self.ERROR_CLASS}">{escape(error)}</p>'
        return html

    def _input_class(self, has_errors, attributes):
        css = self.FIELD_CLASS_INVALID if has_errors else self.FIELD_CLASS
        extra = attributes.pop("class", "")
        return f"{css} {extra}".strip()

    def _format_value(self, value, input_type="text"):
        if value is None:
            return ""
        if hasattr(value, "strftime"):
            if input_type == "datetime-local":
                return value.strftime("%Y-%m-%dT%H:%M")
            if input_type == "date":
                return value.strftime("%Y-%m-%d")
            if input_type == "time":
                return value.strftime("%H:%M")
        if isinstance(value, (list, tuple)):
            return ",".join(str(item) for item in value)
        return str(value)

    def _attrs(self, attributes):
        html = ""
        for name, value in attributes.items():
            if value is None or value is False:
                continue
            if value is True:
                html += f" {escape(name)}"
            else:
                html += f' {escape(name)}="{escape(value)}"'
        return html

    def _render_display(self, value):
        display_value = value if value not in (None, "") else "-"
        return f'<p class="{self.DISPLAY_CLASS}">{escape(self._format_value(display_value))}</p>'

    def _render_input(self, field_name, field_id, value, has_errors, input_type, attributes):
        css = self._input_class(has_errors, attributes)
        formatted = "" if input_type == "password" else self._format_value(value, input_type)
        return (
            f'<input type="{escape(input_type)}" name="{escape(field_name)}" id="{escape(field_id)}" '
            f'value="{escape(formatted)}" class="{css}"{self._attrs(attributes)} />'
        )

    def _render_textarea(self, field_name, field_id, value, has_errors, attributes):
        css = self._input_class(has_errors, attributes)
        attributes.setdefault("rows", 4)
        return (
            f'<textarea name="{escape(field_name)}" id="{escape(field_id)}" class="{css}"'
            f"{self._attrs(attributes)}>{escape(self._format_value(value))}</textarea>"
        )

    def _render_select(self, field_name, field_id, value, has_errors, options, attributes, multiple=False):
        css = self._input_class(has_errors, attributes)
        if multiple:
            selected_values = {str(v) for v in (value or [])}
            html = (
                f'<select name="{escape(field_name)}" id="{escape(field_id)}" class="{css}" '
                f'multiple size="6"{self._attrs(attributes)}>'
            )
        else:
            selected_values = {"" if value is None else str(value)}
            html = (
                f'<select name="{escape(field_name)}" id="{escape(field_id)}" class="{css}"'
                f"{self._attrs(attributes)}>"
            )
            html += '<option value="">---------</option>'
        for option_value, option_label in options:
            selected = " selected" if str(option_value) in selected_values else ""
            html += (
                f'<option value="{escape(option_value)}"{selected}>{escape(option_label)}</option>'
            )
        html += "</select>"
        return html

    def _render_choices(self, widget, field_name, field_id, value, options, attributes, inline):
        if widget == "checkbox":
            checked_values = {str(v) for v in (value or [])}
        else:
            checked_values = {"" if value is None else str(value)}
        group_class = "flex flex-wrap gap-4" if inline else "space-y-2"
        html = f'<div class="{group_class}" id="{escape(field_id)}">'
        for index, (option_value, option_label) in enumerate(options):
            checked = " checked" if str(option_value) in checked_values else ""
            html += (
                f'<div class="{self.CHOICE_WRAPPER_CLASS}">'
                f'<input type="{widget}" name="{escape(field_name)}" id="{escape(field_id)}-{index}" '
                f'value="{escape(option_value)}" class="{self.CHECKBOX_CLASS}"{checked}'
                f"{self._attrs(attributes)} />"
                f'<label for="{escape(field_id)}-{index}" class="{self.CHOICE_LABEL_CLASS}">'
                f"{escape(option_label)}</label></div>"
            )
        html += "</div>"
        return html

    def _render_tags(self, field_name, field_id, value, has_errors, options, attributes):
        css = self._input_class(has_errors, attributes)
        list_id = f"{field_id}-options"
        html = (
            f'<input type="text" name="{escape(field_name)}" id="{escape(field_id)}" '
            f'value="{escape(self._format_value(value))}" class="{css}" list="{escape(list_id)}"'
            f"{self._attrs(attributes)} />"
        )
        html += f'<datalist id="{escape(list_id)}">'
        for option_value, option_label in options:
            html += f'<option value="{escape(option_value)}">{escape(option_label)}</option>'
        html += "</datalist>"
        return html

    def _render_file(self, field_name, field_id, value, attributes, files):
        html = ""
        for file in files:
            html += (
                f'<div class="flex items-center gap-2 text-sm" data-file="{escape(file["path"])}">'
                f'<a href="{escape(file["url"])}" target="_blank">{escape(file["name"])}</a>'
                f'<a href="#" class="text-red-600 file-delete" data-key="{escape(file["path"])}">&times;</a>'
                f"</div>"
            )
        html += (
            f'<input type="file" name="{escape(field_name)}" id="{escape(field_id)}" '
            f'class="block w-full text-sm"{self._attrs(attributes)} />'
        )
        return html


_adapter = PanelTailwindAdapter()


def get_adapter():
    return _adapter


def register_panel_adapters():
    """
    Register the panel adapter with djust.

    Called from ``AppConfig.ready()``.
    """
    register_adapter("panel_tailwind", _adapter)
