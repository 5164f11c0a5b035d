"""
Form field base class.

A field knows its column, how to read its value out of a record, how to
render itself and which Django form field validates its input. Concrete
types live in ``fields.py`` and ``files.py``.
"""

from django import forms
from django.core.validators import RegexValidator
from django.db import models
from django.utils.safestring import mark_safe

from ..adapters import get_adapter
from ..helpers import data_get, element_name, humanize


class Field:
    FILE_DELETE_FLAG = "_file_del_"

    widget = "input"
    input_type = "text"
    form_field_class = forms.CharField

    def __init__(self, column, label=None):
        self.column = column
        self._label = label if label is not None else humanize(column)
        self.id = self.format_id(column)
        self.form = None
        self.data = {}
        self._value = None
        self.original = None
        self._default = None
        self._options = []
        self._checked = []
        self._help = None
        self._placeholder = None
        self.attributes = {}
        self._required = False
        self._rules = {}
        self._validators = []
        self._custom_format = None
        self._saving = None
        self._display = True
        self._horizontal = True
        self._width = None
        self._element_classes = []
        self._label_classes = []
        self.errors = []

    def __repr__(self):
        return f"{type(self).__name__}({self.column!r})"

    @staticmethod
    def format_id(column):
        return "form-field-" + str(column).replace(".", "-")

    def set_form(self, form):
        self.form = form
        return self

    # ---- Identity ----

    def get_column(self):
        return self.column

    def get_label(self):
        return self._label

    def label(self, label):
        self._label = label
        return self

    def get_element_id(self):
        return self.id

    def get_element_name(self):
        return element_name(self.column)

    def set_width(self, field=8, label=2):
        self._width = {"label": label, "field": field}
        return self

    def get_width(self):
        if self._width is not None:
            return self._width
        if self.form is not None:
            return self.form.builder().get_width()
        return {"label": 2, "field": 8}

    # ---- Values ----

    def fill(self, data):
        self.data = data
        self._value = self.format_value(data_get(data, self.column))
        if self._custom_format is not None:
            self._value = self._custom_format(self._value, data)
        return self

    def set_original(self, data):
        self.original = self.format_value(data_get(data, self.column))
        if self._custom_format is not None:
            self.original = self._custom_format(self.original, data)
        return self

    def fill_input(self, data, files=None):
        """Show the submitted value again, e.g. after a failed validation."""
        value = self.get_input(data, files)
        if value is not None and self.widget not in ("file", "display"):
            self._value = value
        return self

    def format_value(self, value):
        """Records read through relations become primary keys."""
        if isinstance(value, models.Model):
            return value.pk
        if isinstance(value, (list, tuple)):
            return [item.pk if isinstance(item, models.Model) else item for item in value]
        return value

    def custom_format(self, callback):
        """``callback(value, data)`` rewrites the value read from the record."""
        self._custom_format = callback
        return self

    def value(self, *args):
        if not args:
            return self.get_default() if self._value in (None, "", []) else self._value
        self._value = args[0]
        return self

    def default(self, default):
        self._default = default
        return self

    def get_default(self):
        if callable(self._default):
            return self._default(self.form)
        return self._default

    def options(self, options):
        """Choices as a dict, a list of pairs, a list of values or a callable."""
        if callable(options):
            self._options = options
        elif isinstance(options, dict):
            self._options = list(options.items())
        else:
            self._options = [
                tuple(option) if isinstance(option, (list, tuple)) else (option, option)
                for option in options
            ]
        return self

    def get_options(self):
        options = self._options
        if callable(options):
            resolved = options(self.value())
            if isinstance(resolved, dict):
                return list(resolved.items())
            return [tuple(item) if isinstance(item, (list, tuple)) else (item, item) for item in resolved]
        return list(options)

    def checked(self, checked):
        self._checked.extend(checked if isinstance(checked, (list, tuple)) else [checked])
        return self

    # ---- Presentation ----

    def help(self, text):
        self._help = text
        return self

    def attribute(self, attribute, value=None):
        if isinstance(attribute, dict):
            self.attributes.update(attribute)
        else:
            self.attributes[attribute] = value
        return self

    def pattern(self, regex):
        self.attribute("pattern", regex)
        self._validators.append(RegexValidator(regex))
        return self

    def required(self, is_required=True):
        self._required = is_required
        if is_required:
            self.attribute("required", True)
            self._add_label_class("asterisk")
        else:
            self.attributes.pop("required", None)
            if "asterisk" in self._label_classes:
                self._label_classes.remove("asterisk")
        return self

    def is_required(self):
        return self._required

    def rules(self, *validators, **kwargs):
        """
        Validation rules.

        Positional arguments are Django validators (or ``"required"``);
        keyword arguments go to the Django form field (``max_length=20``).
        """
        for validator in validators:
            if validator == "required":
                self.required()
            else:
                self._validators.append(validator)
        self._rules.update(kwargs)
        return self

    def autofocus(self):
        return self.attribute("autofocus", True)

    def read_only(self):
        return self.attribute("readonly", True)

    def disable(self):
        return self.attribute("disabled", True)

    def placeholder(self, placeholder):
        self._placeholder = placeholder
        return self

    def get_placeholder(self):
        if self._placeholder is not None:
            return self._placeholder
        return f"Input {self._label}"

    def _add_label_class(self, css_class):
        if css_class not in self._label_classes:
            self._label_classes.append(css_class)

    def set_element_class(self, css_class):
        self._element_classes = list(css_class) if isinstance(css_class, (list, tuple)) else [css_class]
        return self

    def add_element_class(self, css_class):
        for item in css_class if isinstance(css_class, (list, tuple)) else [css_class]:
            if item not in self._element_classes:
                self._element_classes.append(item)
        return self

    def remove_element_class(self, css_class):
        for item in css_class if isinstance(css_class, (list, tuple)) else [css_class]:
            if item in self._element_classes:
                self._element_classes.remove(item)
        return self

    def get_element_class(self):
        if not self._element_classes:
            self._element_classes = [self.id.replace("form-field-", "field_")]
        return list(self._element_classes)

    def get_element_class_string(self):
        return " ".join(self.get_element_class())

    def get_element_class_selector(self):
        """CSS selector of the input, scoped by the form id."""
        selector = "." + ".".join(self.get_element_class())
        if self.form is not None:
            return f"#{self.form.builder().get_form_id()} {selector}"
        return selector

    def disable_horizontal(self):
        self._horizontal = False
        return self

    def hide_in_modal(self):
        if self.form is not None and self.form.in_modal():
            self.set_display(False)
        return self

    def set_display(self, display):
        """``display`` may be a callable receiving the form."""
        self._display = display
        return self

    def is_displayed(self):
        if callable(self._display):
            return bool(self._display(self.form))
        return bool(self._display)

    # ---- Saving ----

    def should_save(self):
        return True

    def get_input(self, data, files=None):
        """Raw submitted value, or ``None`` when the field was not posted."""
        name = self.get_element_name()
        if name not in data:
            return None
        return data.get(name)

    def prepare(self, value):
        return value

    def saving(self, callback):
        """``callback(value)`` transforms the value right before it is saved."""
        self._saving = callback
        return self

    def prepare_input_value(self, value):
        value = self.prepare(value)
        if self._saving is not None:
            value = self._saving(value)
        return value

    # ---- Validation ----

    def form_field_kwargs(self):
        return {
            "required": self._required,
            "label": self._label,
            "validators": list(self._validators),
            **self._rules,
        }

    def get_form_field(self):
        """Django form field used to validate this field's input."""
        return self.form_field_class(**self.form_field_kwargs())

    def set_errors(self, errors):
        self.errors = list(errors)
        return self

    # ---- Rendering ----

    def render_attributes(self):
        attributes = {"class": self.get_element_class_string(), **self.attributes}
        if self.widget in ("input", "textarea", "tags"):
            attributes.setdefault("placeholder", self.get_placeholder())
        return attributes

    def variables(self):
        return {
            "widget": self.widget,
            "field_id": self.id,
            "label": self._label,
            "input_type": self.input_type,
            "attributes": self.render_attributes(),
            "options": self.get_options(),
            "help_text": self._help,
            "label_class": " ".join(self._label_classes),
            "width": self.get_width() if self._horizontal else None,
        }

    def render(self):
        if not self.is_displayed():
            return ""
        return mark_safe(
            get_adapter().render_field(
                None, self.get_element_name(), self.value(), self.errors, **self.variables()
            )
        )

    def __html__(self):
        return str(self.render())
