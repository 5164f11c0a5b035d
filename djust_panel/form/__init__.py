"""
Form: the create / edit screen of a resource and its save endpoints.

    def form(self):
        form = Form(ModelRepository(Article), request=self.request)
        form.display("id")
        form.text("title").required()
        form.select("category").options(categories)
        form.multiple_file("attachments").limit(5)
        form.saving(lambda form, values: values.update(slug=slugify(values["title"])))
        return form

The same object renders the html form (``render()``) and answers the
submission (``store()``, ``update(pk)``, ``destroy(ids)``).
"""

import logging
from collections import defaultdict

from django import forms
from django.contrib import messages
from django.http import HttpResponse, HttpResponseRedirect, JsonResponse
from django.utils.safestring import mark_safe

from ..events import HasBuilderEvents
from ..helpers import is_ajax, to_list
from ..repository import ModelRepository
from .builder import Builder
from .field import Field
from .fields import (
    Checkbox,
    Date,
    DateTime,
    Display,
    Email,
    Hidden,
    Icon,
    MultipleSelect,
    Number,
    Password,
    Radio,
    Select,
    Tags,
    Text,
    Textarea,
)
from .files import File, Image, MultipleFile, UploadField
from .footer import Footer

logger = logging.getLogger(__name__)

__all__ = ["Form", "Field", "Builder"]


class Form(HasBuilderEvents):
    INLINE_EDIT_KEY = "_inline_edit_"

    field_classes = {
        "text": Text,
        "email": Email,
        "password": Password,
        "number": Number,
        "textarea": Textarea,
        "hidden": Hidden,
        "display": Display,
        "select": Select,
        "multiple_select": MultipleSelect,
        "radio": Radio,
        "checkbox": Checkbox,
        "tags": Tags,
        "icon": Icon,
        "date": Date,
        "datetime": DateTime,
        "file": File,
        "image": Image,
        "multiple_file": MultipleFile,
    }

    _extensions = {}

    def __init__(self, repository=None, builder=None, request=None):
        if repository is not None and not isinstance(repository, ModelRepository):
            repository = ModelRepository(repository)
        self.repository = repository
        self.request = request
        self.builder_callback = builder
        self._builder = Builder(self)
        self._resource = None
        self._ajax_submit = True
        self._builder_called = False
        self._callbacks = defaultdict(list)
        self.record = None
        self.input = {}
        self.cleaned_data = {}
        self.call_resolving()

    @classmethod
    def make(cls, *args, **kwargs):
        return cls(*args, **kwargs)

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls._extensions = {}

    @classmethod
    def extend(cls, name, field_class):
        """Register ``form.<name>(column, label)`` on this class and its subclasses."""
        cls._extensions[name] = field_class

    @classmethod
    def get_extension(cls, name):
        for klass in cls.__mro__:
            field_class = vars(klass).get("_extensions", {}).get(name)
            if field_class is not None:
                return field_class
        return None

    def __getattr__(self, name):
        field_class = type(self).field_classes.get(name) or type(self).get_extension(name)
        if field_class is None:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

        def factory(column, label=None):
            return self.push_field(field_class(column, label))

        return factory

    def push_field(self, field):
        field.set_form(self)
        self._builder.push_field(field)
        return field

    def builder(self):
        return self._builder

    def field(self, name):
        return self._builder.field(name)

    def call_builder(self):
        if self.builder_callback is not None and not self._builder_called:
            self._builder_called = True
            self.builder_callback(self)

    # ---- Resource ----

    def get_key(self):
        return self._builder.get_resource_id()

    def get_key_name(self):
        return self.repository.get_key_name() if self.repository is not None else "id"

    def resource(self, path):
        self._resource = path.rstrip("/") if path else path
        return self

    def get_resource(self, slice=-2):
        """
        Url of the resource list.

        Without an explicit ``resource()``, the current path with ``slice``
        trailing segments dropped (``/admin/articles/1/edit`` -> ``/admin/articles``).
        """
        if self._resource:
            return self._resource
        path = self.request.path if self.request is not None else ""
        segments = path.strip("/").split("/")
        if slice:
            segments = segments[:slice]
        return "/" + "/".join(segment for segment in segments if segment)

    def in_modal(self):
        from ..widgets.modal_form import ModalForm

        return ModalForm.is_modal(self.request)

    # ---- Builder options ----

    def edit(self, pk):
        """Load the record ``pk`` and fill the fields with it."""
        self.call_builder()
        self._builder.set_mode(Builder.MODE_EDIT)
        self._builder.set_resource_id(pk)
        self.record = self.repository.find(pk)
        for field in self._builder.fields():
            field.fill(self.record)
            field.set_original(self.record)
        self._call("editing")
        return self

    def disable_header(self, disable=True):
        self._builder.disable_header(disable)
        return self

    def disable_footer(self, disable=True):
        self._builder.disable_footer(disable)
        return self

    def disable_list_button(self, disable=True):
        self._builder.get_tools().disable_list(disable)
        return self

    def disable_view_button(self, disable=True):
        self._builder.get_tools().disable_view(disable)
        return self

    def disable_delete_button(self, disable=True):
        self._builder.get_tools().disable_delete(disable)
        return self

    def disable_submit_button(self, disable=True):
        self._builder.get_footer().disable_submit(disable)
        return self

    def disable_reset_button(self, disable=True):
        self._builder.get_footer().disable_reset(disable)
        return self

    def disable_view_check(self, disable=True):
        self._builder.get_footer().disable_view_check(disable)
        return self

    def disable_editing_check(self, disable=True):
        self._builder.get_footer().disable_editing_check(disable)
        return self

    def disable_creating_check(self, disable=True):
        self._builder.get_footer().disable_creating_check(disable)
        return self

    def tools(self, callback):
        callback(self._builder.get_tools())
        return self

    def set_width(self, field=8, label=2):
        for item in self._builder.fields():
            item.set_width(field, label)
        self._builder.set_width(field, label)
        return self

    def set_action(self, action):
        self._builder.set_action(action)
        return self

    def set_title(self, title):
        self._builder.set_title(title)
        return self

    def set_view(self, template_name):
        self._builder.set_view(template_name)
        return self

    def wrap(self, callback):
        self._builder.wrap(callback)
        return self

    def allow_ajax_submit(self):
        return self._ajax_submit

    def disable_ajax_submit(self, disable=True):
        self._ajax_submit = not disable
        return self

    # ---- Callbacks ----

    def submitted(self, callback):
        """``callback(form)`` before validation."""
        self._callbacks["submitted"].append(callback)
        return self

    def editing(self, callback):
        """``callback(form)`` once the record to edit is loaded."""
        self._callbacks["editing"].append(callback)
        return self

    def validating(self, callback):
        """``callback(form, data)`` returns extra error lists keyed by input name."""
        self._callbacks["validating"].append(callback)
        return self

    def saving(self, callback):
        """``callback(form, values)`` before the record is written."""
        self._callbacks["saving"].append(callback)
        return self

    def saved(self, callback):
        """``callback(form, record)`` after the record is written."""
        self._callbacks["saved"].append(callback)
        return self

    def deleting(self, callback):
        """``callback(form, ids)`` before records are deleted."""
        self._callbacks["deleting"].append(callback)
        return self

    def deleted(self, callback):
        """``callback(form, rows)`` after records are deleted."""
        self._callbacks["deleted"].append(callback)
        return self

    def _call(self, event, *args):
        for callback in self._callbacks[event]:
            response = callback(self, *args)
            if isinstance(response, HttpResponse):
                return response
        return None

    # ---- Validation ----

    def _fields(self, only=None):
        return [
            field
            for field in self._builder.fields()
            if only is None or field.get_element_name() in only
        ]

    def validate(self, data, files=None, only=None):
        """Validate submitted data; return a dict of error lists keyed by input name."""
        form_fields = {}
        for field in self._fields(only):
            form_field = field.get_form_field()
            if form_field is not None:
                form_fields[field.get_element_name()] = form_field
        form_class = type("PanelForm", (forms.Form,), form_fields)
        bound = form_class(data, files)
        errors = {name: list(messages_) for name, messages_ in bound.errors.items()}
        self.cleaned_data = bound.cleaned_data

        for field in self._fields(only):
            if isinstance(field, UploadField):
                upload_errors = field.validate_upload(files or {})
                if upload_errors:
                    errors[field.get_element_name()] = upload_errors
        for callback in self._callbacks["validating"]:
            for name, messages_ in (callback(self, data) or {}).items():
                errors.setdefault(name, []).extend(messages_)
        for field in self._builder.fields():
            field.set_errors(errors.get(field.get_element_name(), []))
        if errors:
            logger.debug("Form validation failed: %s", errors)
        return errors

    def prepare_input(self, data, files=None, only=None):
        """Submitted values keyed by column, ready for the repository."""
        values = {}
        for field in self._fields(only):
            if not field.should_save():
                continue
            value = field.get_input(data, files)
            # fields missing from the submission keep their stored value
            if value is None:
                continue
            name = field.get_element_name()
            if not isinstance(field, UploadField) and name in self.cleaned_data:
                value = self.cleaned_data[name]
            values[field.column] = field.prepare_input_value(value)
        return values

    # ---- Saving ----

    def store(self, data=None, files=None):
        data = self.request.POST if data is None else data
        files = self.request.FILES if files is None else files
        self.call_builder()
        self._builder.set_mode(Builder.MODE_CREATE)

        response = self.handle_upload_file(data, files) or self.handle_file_delete_when_creating(data)
        if response is not None:
            return response

        self.input = data
        response = self._call("submitted")
        if response is not None:
            return response

        errors = self.validate(data, files)
        if errors:
            return self.validation_error_response(errors, data, files)

        try:
            values = self.prepare_input(data, files)
            response = self._call("saving", values)
            if response is not None:
                return response
            self.record = self.repository.store(values)
            self._builder.set_resource_id(self.record.pk)
            response = self._call("saved", self.record)
            if response is not None:
                return response
        except Exception as exc:
            logger.exception("Failed to store %s", self.repository.model._meta.label)
            return self.error_response(str(exc) or "Save failed")

        return self.success_response("Save succeeded", self.redirect_url(data, self.get_resource(0)))

    def update(self, pk, data=None, files=None):
        data = self.request.POST if data is None else data
        files = self.request.FILES if files is None else files
        self.call_builder()
        self._builder.set_mode(Builder.MODE_EDIT)
        self._builder.set_resource_id(pk)
        self.record = self.repository.find(pk)
        for field in self._builder.fields():
            field.set_original(self.record)

        response = self.handle_upload_file(data, files) or self.handle_file_delete(data)
        if response is not None:
            return response

        inline = self.INLINE_EDIT_KEY in data
        only = None
        if inline:
            only = set(data) | set(files or {})

        self.input = data
        response = self._call("submitted")
        if response is not None:
            return response

        errors = self.validate(data, files, only)
        if errors:
            return self.validation_error_response(errors, data, files)

        try:
            values = self.prepare_input(data, files, only)
            response = self._call("saving", values)
            if response is not None:
                return response
            self.record = self.repository.update(pk, values)
            response = self._call("saved", self.record)
            if response is not None:
                return response
        except Exception as exc:
            logger.exception("Failed to update %s pk=%s", self.repository.model._meta.label, pk)
            return self.error_response(str(exc) or "Update failed")

        if inline:
            return JsonResponse({"status": True, "message": "Update succeeded"})
        return self.success_response("Update succeeded", self.redirect_url(data, self.get_resource(-1)))

    def destroy(self, ids):
        """Delete the records with the given (comma separated) ids and their files."""
        self._builder.set_mode(Builder.MODE_DELETE)
        self.call_builder()
        ids = to_list(ids, filter_empty=True)
        try:
            response = self._call("deleting", ids)
            if response is not None:
                return response
            rows = self.repository.delete(ids)
            self.delete_files(rows)
            response = self._call("deleted", rows)
            if response is not None:
                return response
        except Exception as exc:
            logger.exception("Failed to delete %s %s", self.repository.model._meta.label, ids)
            return JsonResponse({"status": False, "message": str(exc) or "Delete failed"})
        return JsonResponse({"status": True, "message": "Delete succeeded"})

    # ---- Files ----

    def _upload_fields(self):
        return [field for field in self._builder.fields() if isinstance(field, UploadField)]

    def handle_upload_file(self, data, files):
        """Answer an asynchronous upload (``upload_column`` + ``file``)."""
        column = data.get("upload_column")
        file = files.get("file") if files else None
        if not column or file is None:
            return None
        field = self._builder.field(column)
        if not isinstance(field, UploadField):
            return None
        path = field.upload(file)
        return JsonResponse({"status": True, "id": path, "path": path, "url": field.object_url(path)})

    def handle_file_delete(self, data):
        """Delete one stored file (``_file_del_`` + ``_column`` + ``key``)."""
        if Field.FILE_DELETE_FLAG not in data:
            return None
        column = data.get("_column")
        key = data.get("key")
        if not column or not key:
            return None
        field = self._builder.field(column)
        if not isinstance(field, UploadField):
            return None
        if self._builder.is_editing() and self.record is not None:
            if key not in to_list(field.original, filter_empty=True):
                logger.warning("Refused to delete %s: not a file of %s pk=%s", key, column, self.record.pk)
                return JsonResponse({"status": False, "message": "File not found."}, status=404)
            self.repository.update(self.record.pk, {column: field.remove_file(key)})
        else:
            if not field.in_directory(key) or self._file_is_stored(column, key):
                logger.warning("Refused to delete %s: not a pending upload of %s", key, column)
                return JsonResponse({"status": False, "message": "File not found."}, status=404)
            field.delete_file(key)
        return JsonResponse({"status": True})

    def _file_is_stored(self, column, key):
        """True when any saved row (soft deleted ones included) points to ``key``."""
        if self.repository is None:
            return False
        lookup = f"{column.replace('.', '__')}__contains"
        return self.repository.model._base_manager.filter(**{lookup: key}).exists()

    def handle_file_delete_when_creating(self, data):
        return self.handle_file_delete(data)

    def delete_files(self, data, force=False):
        """Delete the files of deleted rows. Soft deleted rows keep theirs."""
        if not force and self.repository is not None and self.repository.is_soft_deletes():
            return
        for row in data if isinstance(data, list) else [data]:
            for field in self._upload_fields():
                field.set_original(row)
                field.destroy()

    def delete_files_when_creating(self, data):
        for field in self._upload_fields():
            field.set_original(data)
            field.destroy()

    # ---- Responses ----

    def redirect_url(self, data, resource):
        after_save = data.get(Footer.AFTER_SAVE_KEY)
        key = self.record.pk if self.record is not None else None
        if after_save == Footer.CONTINUE_EDITING:
            return f"{resource}/{key}/edit"
        if after_save == Footer.CONTINUE_CREATING:
            return f"{resource}/create"
        if after_save == Footer.VIEW:
            return f"{resource}/{key}"
        return data.get(Builder.PREVIOUS_URL_KEY) or resource

    def _flash(self, level, message):
        if self.request is not None and hasattr(self.request, "_messages"):
            messages.add_message(self.request, level, message)

    def success_response(self, message, url):
        if is_ajax(self.request):
            return JsonResponse({"status": True, "message": message, "redirect": url})
        self._flash(messages.SUCCESS, message)
        return HttpResponseRedirect(url)

    def error_response(self, message):
        if is_ajax(self.request):
            return JsonResponse({"status": False, "message": message})
        self._flash(messages.ERROR, message)
        back = self.request.META.get("HTTP_REFERER") if self.request is not None else None
        return HttpResponseRedirect(back or self.get_resource(-1))

    def validation_error_response(self, errors, data, files=None):
        if is_ajax(self.request):
            return JsonResponse({"status": False, "errors": errors}, status=422)
        for field in self._builder.fields():
            field.fill_input(data, files)
        from ..layout import Content

        content = Content(request=self.request).header(self._builder.title()).body(self)
        return content.response()

    # ---- Rendering ----

    def render(self):
        self.call_builder()
        self.call_composing()
        return self._builder.render()

    def __html__(self):
        return str(self.render())
