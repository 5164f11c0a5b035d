"""
Quick search for grids.

Besides searching a fixed set of columns, the search box understands a small
query language when the grid enables it without columns:

    title:django status:(draft,published) |pages:[100,300] created_at:year,2024

Each whitespace separated token is ``column:condition``; a leading ``|`` joins
the token with OR. Column is a column name or its label. Conditions:

    (a,b)  !(a,b)          in / not in, NULL matches empty values
    [start,end]            between, inclusive
    date,v time,v          date part equality (also day, month, year)
    %foo%  foo%            contains / starts with
    /regex/                regular expression
    >v >=v <v <=v !=v %v   comparisons, bare value means equality
    NULL  "quoted value"
"""

import re

from django import forms
from django.core.exceptions import FieldDoesNotExist, ValidationError
from django.db.models import Q
from django.utils.html import format_html

from ..helpers import url_with_query, url_without_query

SPLIT_PATTERN = re.compile(r'\s(?=(?:[^"]*"[^"]*")*[^"]*$)')
IN_PATTERN = re.compile(r"(?P<not>!?)\((?P<values>.+)\)")
BETWEEN_PATTERN = re.compile(r"\[(?P<start>.*?),(?P<end>.*?)]")
DATETIME_PATTERN = re.compile(r"(?P<function>date|time|day|month|year),(?P<value>.*)")
CONTAINS_PATTERN = re.compile(r"%(?P<value>[^%]+)%")
STARTS_WITH_PATTERN = re.compile(r"(?P<value>[^%]+)%")
REGEX_PATTERN = re.compile(r"/(?P<value>.*)/")
BASIC_PATTERN = re.compile(r"(?P<operator>>=?|<=?|!=|%)?(?P<value>.*)")

NULL = "NULL"

OPERATOR_LOOKUPS = {
    ">": "gt",
    ">=": "gte",
    "<": "lt",
    "<=": "lte",
    "%": "icontains",
}

DATE_PARTS = {
    "date": forms.DateField(),
    "time": forms.TimeField(),
    "day": forms.IntegerField(min_value=1, max_value=31),
    "month": forms.IntegerField(min_value=1, max_value=12),
    "year": forms.IntegerField(),
}


def split_query(query):
    """Split on whitespace that is not inside double quotes."""
    query = query.strip()
    if not query:
        return []
    return [token for token in SPLIT_PATTERN.split(query) if token]


def parse_query(query, column_map):
    """
    Parse a query into ``(column, condition, is_or)`` tuples.

    ``column_map`` maps labels and names to column names. Tokens without a
    ``:`` or naming an unknown column are dropped.
    """
    bindings = []
    for token in split_query(query):
        column, sep, condition = token.partition(":")
        if not sep:
            continue
        is_or = column.startswith("|")
        if is_or:
            column = column[1:]
        name = column_map.get(column)
        if not name:
            continue
        bindings.append((name, condition, is_or))
    return bindings


def _lookup(column, lookup=None):
    field = column.replace(".", "__")
    return f"{field}__{lookup}" if lookup else field


def _strip_quotes(value):
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    return value


def resolve_field(model, column):
    """Model field behind a dotted column, or None when it can't be followed."""
    field = None
    for segment in column.split("."):
        if model is None:
            return None
        try:
            field = model._meta.get_field(segment)
        except FieldDoesNotExist:
            return None
        model = field.related_model if field.is_relation else None
    if field is not None and field.is_relation:
        field = getattr(field, "target_field", None)
    if not hasattr(field, "to_python"):
        return None
    return field


def _coerce(field, value):
    if field is None:
        return value
    return field.to_python(value)


def parse_condition(column, condition, model=None):
    """
    Build the ``Q`` for a single ``column:condition`` token.

    With ``model`` the values are checked against the column's field; a value
    the field rejects turns the token into one that matches nothing.
    """
    try:
        return _parse_condition(column, condition, resolve_field(model, column) if model else None)
    except (ValidationError, ValueError, TypeError):
        return Q(pk__in=[])


def _parse_condition(column, condition, field):
    match = IN_PATTERN.search(condition)
    if match:
        values = match.group("values").split(",")
        present = [_coerce(field, value) for value in values if value != NULL]
        q = Q(**{_lookup(column, "in"): present})
        if len(present) != len(values):
            q |= Q(**{_lookup(column, "isnull"): True})
        return ~q if match.group("not") else q

    match = BETWEEN_PATTERN.search(condition)
    if match:
        bounds = (_coerce(field, match.group("start")), _coerce(field, match.group("end")))
        return Q(**{_lookup(column, "range"): bounds})

    match = DATETIME_PATTERN.search(condition)
    if match:
        function, value = match.group("function"), match.group("value")
        if field is not None:
            value = DATE_PARTS[function].clean(value)
        return Q(**{_lookup(column, function): value})

    match = CONTAINS_PATTERN.search(condition)
    if match:
        return Q(**{_lookup(column, "icontains"): match.group("value")})

    match = STARTS_WITH_PATTERN.search(condition)
    if match:
        return Q(**{_lookup(column, "istartswith"): match.group("value")})

    match = REGEX_PATTERN.search(condition)
    if match:
        return Q(**{_lookup(column, "regex"): match.group("value")})

    match = BASIC_PATTERN.match(condition)
    operator = match.group("operator") or "="
    value = match.group("value")
    if value == NULL:
        if operator == "!=":
            return Q(**{_lookup(column, "isnull"): False})
        return Q(**{_lookup(column, "isnull"): True})
    value = _strip_quotes(value)
    if operator == "%":
        return Q(**{_lookup(column, "icontains"): value})
    value = _coerce(field, value)
    if operator == "=":
        return Q(**{_lookup(column): value})
    if operator == "!=":
        return ~Q(**{_lookup(column): value})
    return Q(**{_lookup(column, OPERATOR_LOOKUPS[operator]): value})


def build_q(bindings, model=None):
    """
    Combine parsed bindings with SQL precedence: AND binds tighter than OR,
    and every OR token opens a new group. Returns ``None`` when empty.
    """
    groups = []
    for column, condition, is_or in bindings:
        q = parse_condition(column, condition, model)
        if is_or or not groups:
            groups.append(q)
        else:
            groups[-1] &= q
    if not groups:
        return None
    result = groups[0]
    for group in groups[1:]:
        result |= group
    return result


def search_columns_q(columns, query):
    """OR of ``column icontains query`` over ``columns``."""
    result = Q()
    for column in columns:
        result |= Q(**{_lookup(column, "icontains"): query})
    return result


class QuickSearch:
    """The quick search box rendered in the grid toolbar."""

    def __init__(self, grid, placeholder=None):
        self.grid = grid
        self._placeholder = placeholder
        self._width = 18
        self._auto = True

    def get_query_name(self):
        name = self.grid.get_name()
        return f"{name}__search" if name else "_search"

    def value(self):
        request = self.grid.request
        if request is None:
            return ""
        return request.GET.get(self.get_query_name(), "").strip()

    def placeholder(self, text):
        self._placeholder = text
        return self

    def width(self, rem):
        self._width = rem
        return self

    def auto(self, value=True):
        """Submit while typing instead of on enter."""
        self._auto = value
        return self

    def form_action(self):
        url = self.grid.current_url()
        return url_without_query(url, [self.get_query_name(), self.grid.model().get_page_name()])

    def render(self):
        action = self.form_action()
        return format_html(
            '<form action="{}" method="get" class="grid-quick-search" data-auto="{}">'
            '<input type="search" name="{}" value="{}" placeholder="{}" style="width:{}rem" '
            'class="rounded-md border-gray-300 text-sm">'
            '<a href="{}" class="grid-quick-search-clear">&times;</a></form>',
            action,
            "1" if self._auto else "0",
            self.get_query_name(),
            self.value(),
            self._placeholder or "Search",
            self._width,
            url_with_query(action, {self.get_query_name(): None}),
        )
