"""
The collapsible filter panel above a grid.

    grid.filter(lambda filter: (
        filter.equal("status"),
        filter.like("title"),
        filter.between("publish_date", date=True),
        filter.scope("featured", "Featured", lambda qs: qs.filter(is_featured=True)),
    ))
"""

from django.db.models import Q
from django.utils.html import format_html, format_html_join
from django.utils.safestring import mark_safe
from django.utils.text import slugify

from ..helpers import humanize, url_with_query, url_without_query


class Condition:
    """One input of the filter panel contributing a ``Q``."""

    lookup = None
    input_type = "text"

    def __init__(self, column, label=None, **options):
        self.column = column
        self.label = label or humanize(column)
        self.options = options
        self.panel = None

    def get_input_name(self):
        name = self.panel.grid.get_name()
        return f"{name}_{self.column}" if name else self.column

    def get_value(self):
        request = self.panel.grid.request
        if request is None:
            return ""
        return request.GET.get(self.get_input_name(), "")

    def get_field(self):
        return self.column.replace(".", "__")

    def condition(self, value):
        if value in ("", None):
            return None
        field = f"{self.get_field()}__{self.lookup}" if self.lookup else self.get_field()
        return Q(**{field: value})

    def render(self):
        return format_html(
            '<div class="filter-input"><label>{}</label>'
            '<input type="{}" name="{}" value="{}" class="form-control input-sm {}"></div>',
            self.label,
            self.input_type,
            self.get_input_name(),
            self.get_value(),
            "" if self.panel.input_border else "no-border",
        )


class Equal(Condition):
    pass


class Like(Condition):
    lookup = "contains"


class ILike(Condition):
    lookup = "icontains"


class Gt(Condition):
    lookup = "gt"


class Lt(Condition):
    lookup = "lt"


class Date(Condition):
    lookup = "date"
    input_type = "date"


class In(Condition):
    def get_value(self):
        request = self.panel.grid.request
        if request is None:
            return []
        return request.GET.getlist(self.get_input_name())

    def condition(self, value):
        if not value:
            return None
        return Q(**{f"{self.get_field()}__in": value})

    def render(self):
        options = self.options.get("options") or {}
        checked = [str(v) for v in self.get_value()]
        choices = format_html_join(
            "",
            '<option value="{}"{}>{}</option>',
            ((key, " selected" if str(key) in checked else "", text) for key, text in options.items()),
        )
        return format_html(
            '<div class="filter-input"><label>{}</label>'
            '<select multiple name="{}" class="form-control input-sm">{}</select></div>',
            self.label,
            self.get_input_name(),
            choices,
        )


class NotIn(In):
    def condition(self, value):
        q = super().condition(value)
        return ~q if q is not None else None


class Between(Condition):
    def get_value(self):
        request = self.panel.grid.request
        name = self.get_input_name()
        if request is None:
            return {"start": "", "end": ""}
        return {
            "start": request.GET.get(f"{name}[start]", ""),
            "end": request.GET.get(f"{name}[end]", ""),
        }

    def condition(self, value):
        q = Q()
        if value.get("start"):
            q &= Q(**{f"{self.get_field()}__gte": value["start"]})
        if value.get("end"):
            q &= Q(**{f"{self.get_field()}__lte": value["end"]})
        return q if q else None

    def render(self):
        name = self.get_input_name()
        value = self.get_value()
        input_type = "date" if self.options.get("date") else "text"
        return format_html(
            '<div class="filter-input"><label>{}</label>'
            '<input type="{}" name="{}[start]" value="{}" class="form-control input-sm">'
            '<span>To</span>'
            '<input type="{}" name="{}[end]" value="{}" class="form-control input-sm"></div>',
            self.label,
            input_type,
            name,
            value["start"],
            input_type,
            name,
            value["end"],
        )


class Where(Condition):
    """Custom condition: ``callback(value)`` returns a ``Q`` or None."""

    def __init__(self, column, label=None, callback=None, **options):
        super().__init__(column, label, **options)
        self.callback = callback

    def condition(self, value):
        if value in ("", None):
            return None
        return self.callback(value)


class Scope:
    def __init__(self, panel, key, label, callback):
        self.panel = panel
        self.key = key
        self.label = label or humanize(key)
        self.callback = callback

    def is_active(self):
        return self.panel.current_scope_key() == self.key

    def render(self):
        url = url_with_query(self.panel.grid.current_url(), {self.panel.get_scope_name(): self.key})
        active = " class=\"active\"" if self.is_active() else ""
        return format_html('<li{}><a href="{}">{}</a></li>', mark_safe(active), url, self.label)


class Filter:
    SCOPE_NAME = "_scope_"

    def __init__(self, grid):
        self.grid = grid
        self.conditions = []
        self.scopes = []
        self.expanded = False
        self.collapsible = True
        self.input_border = True
        self.reset_in_footer = True
        self.show_reset_text = True

    # ---- Conditions ----

    def add(self, condition):
        condition.panel = self
        self.conditions.append(condition)
        return condition

    def equal(self, column, label=None):
        return self.add(Equal(column, label))

    def like(self, column, label=None):
        return self.add(Like(column, label))

    def ilike(self, column, label=None):
        return self.add(ILike(column, label))

    def gt(self, column, label=None):
        return self.add(Gt(column, label))

    def lt(self, column, label=None):
        return self.add(Lt(column, label))

    def date(self, column, label=None):
        return self.add(Date(column, label))

    def between(self, column, label=None, date=False):
        return self.add(Between(column, label, date=date))

    def in_(self, column, label=None, options=None):
        return self.add(In(column, label, options=options))

    def not_in(self, column, label=None, options=None):
        return self.add(NotIn(column, label, options=options))

    def where(self, label, callback, column=None):
        """``callback(value)`` returns a ``Q`` or None; the input is named after ``column`` or the label."""
        column = column or slugify(label).replace("-", "_")
        return self.add(Where(column, label, callback=callback))

    # ---- Scopes ----

    def get_scope_name(self):
        name = self.grid.get_name()
        return f"{name}{self.SCOPE_NAME}" if name else self.SCOPE_NAME

    def scope(self, key, label, callback):
        """``callback(queryset)`` narrows the queryset while the scope is active."""
        scope = Scope(self, key, label, callback)
        self.scopes.append(scope)
        return scope

    def current_scope_key(self):
        request = self.grid.request
        if request is None:
            return None
        return request.GET.get(self.get_scope_name())

    def current_scope(self):
        key = self.current_scope_key()
        for scope in self.scopes:
            if scope.key == key:
                return scope
        return None

    # ---- Presentation ----

    def expand(self):
        self.expanded = True
        return self

    def disable_collapse(self):
        self.collapsible = False
        return self

    def without_input_border(self):
        self.input_border = False
        return self

    def reset_position(self):
        self.reset_in_footer = False
        return self

    def hidden_reset_button_text(self):
        self.show_reset_text = False
        return self

    # ---- Execution ----

    def conditions_q(self):
        q = Q()
        for condition in self.conditions:
            part = condition.condition(condition.get_value())
            if part is not None:
                q &= part
        return q

    def is_active(self):
        return bool(self.conditions_q()) or self.current_scope() is not None

    def execute(self):
        model = self.grid.model()
        q = self.conditions_q()
        if q:
            model.filter(q)
        scope = self.current_scope()
        if scope is not None:
            model.apply(scope.callback)
        return model.build_data()

    def url_without_filters(self):
        names = [self.get_scope_name()]
        for condition in self.conditions:
            name = condition.get_input_name()
            names += [name, f"{name}[start]", f"{name}[end]"]
        return url_without_query(self.grid.current_url(), names)

    def render(self):
        if not self.conditions:
            return ""
        inputs = mark_safe("".join(str(condition.render()) for condition in self.conditions))
        reset_text = "Reset" if self.show_reset_text else ""
        hidden = "" if (self.expanded or self.is_active() or not self.collapsible) else " hidden"
        return format_html(
            '<div class="grid-filter{}" id="{}-filter">'
            '<form action="{}" method="get">{}'
            '<div class="grid-filter-footer{}">'
            '<button type="submit" class="btn btn-sm btn-primary">Search</button>'
            '<a href="{}" class="btn btn-sm btn-default">&#x21BA; {}</a></div></form></div>',
            mark_safe(hidden),
            self.grid.get_table_id(),
            url_without_query(self.grid.current_url(), [self.grid.model().get_page_name()]),
            inputs,
            "" if self.reset_in_footer else " inline",
            self.url_without_filters(),
            reset_text,
        )

    def render_button(self):
        """Toolbar button toggling the panel, with the scope dropdown."""
        current = self.current_scope()
        scopes = ""
        if self.scopes:
            scopes = format_html(
                '<button type="button" class="btn btn-sm btn-primary dropdown-toggle" '
                'data-toggle="dropdown"><span>{}</span></button>'
                '<ul class="dropdown-menu" role="menu">{}<li role="separator" class="divider"></li>'
                '<li><a href="{}">Cancel</a></li></ul>',
                current.label if current else "Scope",
                mark_safe("".join(str(scope.render()) for scope in self.scopes)),
                url_without_query(self.grid.current_url(), [self.get_scope_name()]),
            )
        return format_html(
            '<div class="btn-group grid-filter-button">'
            '<label class="btn btn-sm btn-primary{}" data-toggle-filter="#{}-filter">Filter</label>{}</div>',
            " active" if self.is_active() else "",
            self.grid.get_table_id(),
            scopes,
        )
