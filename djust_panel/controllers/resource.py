"""
Resource controllers: one class-based view serving the CRUD routes of a resource.

    class ArticleController(ResourceController):
        model = Article
        permission = "articles"

        def grid(self):
            grid = Grid(ModelRepository(Article, ["category"]), request=self.request)
            grid.column("id").sortable()
            grid.column("title")
            return grid

    site.register("articles", ArticleController)

``grid()``, ``detail(pk)`` and ``form()`` fall back to builders generated from
``model`` when a subclass does not override them.
"""

import logging

from django.core.exceptions import ImproperlyConfigured, PermissionDenied
from django.db import models
from django.http import QueryDict
from django.utils.text import capfirst
from django.views import View

from .. import auth
from ..form import Form
from ..grid import Grid
from ..helpers import is_ajax
from ..layout import Content
from ..repository import ModelRepository
from ..show import Show
from ..widgets.modal_form import ModalForm

logger = logging.getLogger(__name__)

# route -> {http method: action}
ROUTES = {
    "collection": {"GET": "index", "POST": "store"},
    "create": {"GET": "create"},
    "member": {"GET": "show", "PUT": "update", "PATCH": "update", "DELETE": "destroy"},
    "edit": {"GET": "edit"},
}

METHOD_OVERRIDES = ("PUT", "PATCH", "DELETE")


class ResourceController(View):
    model = None
    relations = None
    title = None
    permission = None

    # Set per url pattern by PanelSite.get_urls()
    route = "collection"

    http_method_names = ["get", "post", "put", "patch", "delete", "head", "options"]

    def get_method(self, request):
        """The request method, honouring a posted ``_method`` override."""
        method = request.method.upper()
        if method == "POST":
            override = request.POST.get("_method", "").upper()
            if override in METHOD_OVERRIDES:
                method = override
        if method == "HEAD":
            method = "GET"
        return method

    def dispatch(self, request, *args, **kwargs):
        method = self.get_method(request)
        action = ROUTES.get(self.route, {}).get(method)
        if action is None:
            return self.http_method_not_allowed(request, *args, **kwargs)
        self.action = action
        try:
            self.check_permission()
            return getattr(self, action)(request, *args, **kwargs)
        except PermissionDenied as exc:
            if is_ajax(request):
                raise
            return self.permission_denied(exc)

    def check_permission(self):
        if self.permission:
            auth.check(self.request.user, self.permission)

    def permission_denied(self, exc):
        logger.info("Denied %s %s to %s", self.request.method, self.request.path, self.request.user)
        content = Content(request=self.request).header("Permission denied")
        content.with_error("Permission denied", str(exc) or "You have no permission to access this page.")
        return content.response(status=403)

    def get_data(self, request):
        """Submitted data and files; real PUT/PATCH requests carry an urlencoded body."""
        if request.method.upper() == "POST":
            return request.POST, request.FILES
        return QueryDict(request.body, encoding=request.encoding), {}

    # ---- Builders ----

    def get_repository(self):
        if self.model is None:
            raise ImproperlyConfigured(
                f"{type(self).__name__} needs a 'model' or its own grid(), detail() and form()"
            )
        return ModelRepository(self.model, self.relations)

    def get_title(self):
        if self.title:
            return self.title
        if self.model is not None:
            return capfirst(str(self.model._meta.verbose_name_plural))
        return ""

    def grid(self):
        repository = self.get_repository()
        grid = Grid(repository, request=self.request)
        grid.column(repository.get_key_name(), "ID").sortable()
        for field in repository.editable_fields():
            if field.many_to_many or isinstance(field, (models.TextField, models.FileField)):
                continue
            column = grid.column(field.name)
            if not field.is_relation:
                column.sortable()
        return grid

    def detail(self, pk):
        return Show(pk, self.get_repository(), request=self.request)

    def form(self):
        repository = self.get_repository()
        form = Form(repository, request=self.request)
        form.display(repository.get_key_name(), "ID").set_display(lambda form: form.builder().is_editing())
        for field in repository.editable_fields():
            add_form_field(form, field)
        return form

    def content(self, description=""):
        return Content(request=self.request).header(self.get_title()).description(description)

    # ---- Actions ----

    def index(self, request, *args, **kwargs):
        grid = self.grid()
        response = grid.handle_export_request()
        if response is not None:
            return response
        return self.content("List").body(grid).response()

    def show(self, request, pk, *args, **kwargs):
        return self.content("Detail").body(self.detail(pk)).response()

    def create(self, request, *args, **kwargs):
        form = self.form()
        ModalForm.prepare(form)
        return self.content("Create").body(form).response()

    def edit(self, request, pk, *args, **kwargs):
        form = self.form().edit(pk)
        ModalForm.prepare(form)
        return self.content("Edit").body(form).response()

    def store(self, request, *args, **kwargs):
        data, files = self.get_data(request)
        return self.form().store(data, files)

    def update(self, request, pk, *args, **kwargs):
        data, files = self.get_data(request)
        return self.form().update(pk, data, files)

    def destroy(self, request, pk, *args, **kwargs):
        return self.form().destroy(pk)


def add_form_field(form, field):
    """Add the form field matching a model field."""
    label = capfirst(str(field.verbose_name))
    if field.many_to_many:
        item = form.multiple_select(field.name, label).options(_related_options(field))
    elif field.many_to_one or field.one_to_one:
        item = form.select(field.name, label).options(_related_options(field))
    elif field.choices:
        item = form.select(field.name, label).options(list(field.flatchoices))
    elif isinstance(field, models.BooleanField):
        item = form.radio(field.name, label).options({1: "Yes", 0: "No"}).default(1 if field.default is True else 0)
    elif isinstance(field, models.ImageField):
        item = form.image(field.name, label)
    elif isinstance(field, models.FileField):
        item = form.file(field.name, label)
    elif isinstance(field, models.DateTimeField):
        item = form.datetime(field.name, label)
    elif isinstance(field, models.DateField):
        item = form.date(field.name, label)
    elif isinstance(field, models.EmailField):
        item = form.email(field.name, label)
    elif isinstance(field, (models.IntegerField, models.DecimalField, models.FloatField)):
        item = form.number(field.name, label)
    elif isinstance(field, models.TextField):
        item = form.textarea(field.name, label)
    else:
        item = form.text(field.name, label)
    if not field.blank:
        item.required()
    if field.help_text:
        item.help(str(field.help_text))
    return item


def _related_options(field):
    def options(value):
        return [(obj.pk, str(obj)) for obj in field.related_model._default_manager.all()]

    return options
