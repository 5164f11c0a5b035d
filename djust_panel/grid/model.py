"""
Query state behind a grid: constraints, filters, ordering and pagination.
"""

import logging

from django.core.exceptions import ValidationError
from django.core.paginator import Paginator
from django.db.models import Q

from ..conf import panel_settings

logger = logging.getLogger(__name__)


class GridModel:
    def __init__(self, repository, request=None):
        self.repository = repository
        self.request = request
        self.grid = None
        self._queries = []
        self._constraints = {}
        self._per_page = panel_settings.get("grid.per_page", 20)
        self._per_pages = list(panel_settings.get("grid.per_pages", [10, 20, 30, 50, 100]))
        self._use_pagination = True
        self._page_name = "page"
        self._sort_name = "_sort"
        self._per_page_name = "per_page"
        self._page = None
        self._records = None

    def set_grid(self, grid):
        self.grid = grid
        name = grid.get_name()
        if name:
            self._page_name = f"{name}_page"
            self._sort_name = f"{name}_sort"
            self._per_page_name = f"{name}_per_page"
        return self

    # ---- Query params ----

    def get_page_name(self):
        return self._page_name

    def set_page_name(self, name):
        self._page_name = name
        return self

    def get_sort_name(self):
        return self._sort_name

    def get_per_page_name(self):
        return self._per_page_name

    def _param(self, name, default=None):
        if self.request is None:
            return default
        return self.request.GET.get(name, default)

    # ---- Constraints & filters ----

    def where(self, **constraints):
        """Filter and remember the constraint (used for create urls)."""
        self._constraints.update(constraints)
        return self.filter(**constraints)

    def get_constraints(self):
        return dict(self._constraints)

    def filter(self, *args, **kwargs):
        self._queries.append(lambda qs: qs.filter(*args, **kwargs))
        return self

    def exclude(self, *args, **kwargs):
        self._queries.append(lambda qs: qs.exclude(*args, **kwargs))
        return self

    def apply(self, callback):
        """``callback(queryset)`` returns the new queryset."""
        self._queries.append(callback)
        return self

    def match_nothing(self):
        return self.apply(lambda qs: qs.none())

    def order_by(self, *fields):
        self._queries.append(lambda qs: qs.order_by(*fields))
        return self

    # ---- Ordering ----

    def get_sort(self):
        """Return the requested sort (``col`` or ``-col``) when the column is sortable."""
        sort = self._param(self._sort_name)
        if not sort:
            return None
        name = sort[1:] if sort.startswith("-") else sort
        if not name or name.startswith("-"):
            return None
        if self.grid is not None and not self.grid.is_sortable(name):
            return None
        return sort

    # ---- Pagination ----

    def disable_pagination(self):
        self._use_pagination = False
        return self

    def uses_pagination(self):
        return self._use_pagination

    def set_per_page(self, per_page):
        self._per_page = int(per_page)
        if self._per_page not in self._per_pages:
            self._per_pages = sorted(self._per_pages + [self._per_page])
        return self

    def get_per_pages(self):
        return self._per_pages

    def get_per_page(self):
        requested = self._param(self._per_page_name)
        if requested and requested.isdigit() and int(requested) in self._per_pages:
            return int(requested)
        return self._per_page

    # ---- Execution ----

    def queryset(self):
        qs = self.repository.queryset()
        for query in self._queries:
            qs = query(qs)
        sort = self.get_sort()
        if sort:
            qs = qs.order_by(sort.replace(".", "__"))
        elif not qs.ordered:
            qs = qs.order_by(f"-{self.repository.get_key_name()}")
        return qs

    def build_data(self):
        """Return the records for the current page. Cached until ``reset()``."""
        if self._records is not None:
            return self._records
        qs = self.queryset()
        if self._use_pagination:
            paginator = Paginator(qs, self.get_per_page())
            self._page = paginator.get_page(self._param(self._page_name, 1))
            self._records = list(self._page.object_list)
        else:
            self._records = list(qs)
        logger.debug("Grid %r loaded %d record(s)", self.grid, len(self._records))
        return self._records

    def paginator(self):
        """The current ``Page`` (None without pagination)."""
        self.build_data()
        return self._page

    def offset(self):
        page = self.paginator()
        if page is None or not page.object_list:
            return 0
        return page.start_index() - 1

    def reset(self):
        self._records = None
        self._page = None
        return self

    def find_by_keys(self, keys):
        """Records with the given keys; keys the primary key field rejects are dropped."""
        pk = self.repository.model._meta.pk
        valid = []
        for key in keys:
            try:
                valid.append(pk.to_python(key))
            except ValidationError:
                continue
        if not valid:
            return []
        return list(self.queryset().filter(Q(pk__in=valid)))
