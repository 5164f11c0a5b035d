from django import forms

from ..helpers import data_get, to_list
from .field import Field


class Text(Field):
    pass


class Email(Text):
    input_type = "email"
    form_field_class = forms.EmailField


class Password(Text):
    input_type = "password"


class Number(Text):
    input_type = "number"
    form_field_class = forms.IntegerField

    def min(self, value):
        self._rules["min_value"] = value
        return self.attribute("min", value)

    def max(self, value):
        self._rules["max_value"] = value
        return self.attribute("max", value)


class Icon(Text):
    def render(self):
        self.attributes.setdefault("style", "width: 200px")
        return super().render()


class Date(Text):
    input_type = "date"
    form_field_class = forms.DateField

    def form_field_kwargs(self):
        return {"input_formats": ["%Y-%m-%d"], **super().form_field_kwargs()}


class DateTime(Text):
    input_type = "datetime-local"
    form_field_class = forms.DateTimeField

    def form_field_kwargs(self):
        formats = ["%Y-%m-%dT%H:%M", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M"]
        return {"input_formats": formats, **super().form_field_kwargs()}


class Textarea(Field):
    widget = "textarea"

    def rows(self, rows=5):
        return self.attribute("rows", rows)


class Hidden(Field):
    widget = "hidden"


class Display(Field):
    """Read-only value. Never validated, never saved."""

    widget = "display"

    def format_value(self, value):
        if isinstance(value, (list, tuple)):
            return ", ".join(str(item) for item in value)
        return value

    def should_save(self):
        return False

    def get_form_field(self):
        return None


class Select(Field):
    widget = "select"
    form_field_class = forms.ChoiceField

    def form_field_kwargs(self):
        kwargs = super().form_field_kwargs()
        kwargs["choices"] = [("", "---------")] + [(str(v), str(l)) for v, l in self.get_options()]
        return kwargs

    def prepare(self, value):
        return None if value == "" else value


class MultipleSelect(Select):
    widget = "multiple_select"
    form_field_class = forms.MultipleChoiceField

    def format_value(self, value):
        return super().format_value(to_list(value))

    def form_field_kwargs(self):
        kwargs = super().form_field_kwargs()
        kwargs["choices"] = kwargs["choices"][1:]
        return kwargs

    def get_input(self, data, files=None):
        name = self.get_element_name()
        if name not in data:
            return None
        return data.getlist(name) if hasattr(data, "getlist") else to_list(data.get(name))

    def prepare(self, value):
        return to_list(value, filter_empty=True)


class Radio(Field):
    widget = "radio"
    form_field_class = forms.ChoiceField

    def __init__(self, column, label=None):
        super().__init__(column, label)
        self._inline = True
        self._style = "primary"

    def format_value(self, value):
        if isinstance(value, bool):
            return int(value)
        return super().format_value(value)

    def inline(self):
        self._inline = True
        return self

    def stacked(self):
        self._inline = False
        return self

    def style(self, style):
        self._style = style
        return self

    def values(self, values):
        return self.options(values)

    def form_field_kwargs(self):
        kwargs = super().form_field_kwargs()
        kwargs["choices"] = [(str(v), str(l)) for v, l in self.get_options()]
        return kwargs

    def variables(self):
        variables = super().variables()
        variables["inline"] = self._inline
        variables["attributes"]["data-style"] = self._style
        return variables


class Checkbox(Radio):
    """Group of checkboxes. The value is a list."""

    widget = "checkbox"
    form_field_class = forms.MultipleChoiceField

    def format_value(self, value):
        return super().format_value(to_list(value))

    def value(self, *args):
        if not args and not self._value and self._checked:
            return list(self._checked)
        return super().value(*args)

    def get_input(self, data, files=None):
        return MultipleSelect.get_input(self, data, files)

    def prepare(self, value):
        return to_list(value, filter_empty=True)


class Tags(Field):
    """
    Free text tags, saved comma separated.

    ``pluck("name", "id")`` edits a relation instead: the field shows the
    ``name`` of the related records and saves the list of their ``id``.
    """

    widget = "tags"

    def __init__(self, column, label=None):
        super().__init__(column, label)
        self._key_as_value = False
        self._visible_column = None
        self._key = None
        self._plucked = []

    def pluck(self, visible_column, key):
        if visible_column and key:
            self._key_as_value = True
        self._visible_column = visible_column
        self._key = key
        return self

    def format_value(self, value):
        items = to_list(value)
        if self._key_as_value:
            self._plucked = [
                (data_get(item, self._key), data_get(item, self._visible_column)) for item in items
            ]
            return [key for key, _ in self._plucked]
        return [str(item).strip() for item in items if str(item).strip()]

    def value(self, *args):
        if args:
            self._value = to_list(args[0])
            return self
        return self._value if self._value else to_list(self.get_default())

    def get_options(self):
        options = super().get_options()
        if self._key_as_value:
            known = {key for key, _ in options}
            return [pair for pair in self._plucked if pair[0] not in known] + options
        values = self.value()
        return [(v, v) for v in values] + [pair for pair in options if pair[0] not in values]

    def get_input(self, data, files=None):
        name = self.get_element_name()
        if name not in data:
            return None
        values = data.getlist(name) if hasattr(data, "getlist") else to_list(data.get(name))
        if len(values) == 1:
            values = to_list(values[0])
        return values

    def prepare(self, value):
        values = []
        for item in to_list(value):
            values.extend(to_list(item) if isinstance(item, str) else [item])
        values = [item for item in values if str(item).strip() != ""]
        if self._key_as_value:
            return values
        return ",".join(str(item).strip() for item in values)

    def get_form_field(self):
        return forms.Field(
            required=self._required,
            label=self._label,
            validators=list(self._validators),
            widget=forms.SelectMultiple,
        )

    def variables(self):
        variables = super().variables()
        if self._key_as_value:
            variables["widget"] = "multiple_select"
        return variables
