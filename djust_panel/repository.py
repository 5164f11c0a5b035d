"""
Model repositories.

A repository is the seam between the builders and the ORM: grids read a
queryset from it, forms persist through it and detail views load records
from it. ``ModelRepository`` covers plain Django models; subclass it to put
a grid or form on top of anything else.
"""

import logging

from django.core.exceptions import FieldDoesNotExist
from django.db import models, transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone

from .helpers import to_list

logger = logging.getLogger(__name__)


class ModelRepository:
    created_at_column = "created_at"
    updated_at_column = "updated_at"
    deleted_at_column = "deleted_at"

    def __init__(self, model, relations=None):
        self.model = model
        self.relations = list(relations or [])

    def with_(self, *relations):
        """Eager load relations (``category``, ``tags``, ``book.author``)."""
        for relation in relations:
            if relation not in self.relations:
                self.relations.append(relation)
        return self

    # ---- Metadata ----

    def get_key_name(self):
        return self.model._meta.pk.name

    def get_field(self, name):
        try:
            return self.model._meta.get_field(name)
        except FieldDoesNotExist:
            return None

    def has_field(self, name):
        return self.get_field(name) is not None

    def get_created_at_column(self):
        return self.created_at_column if self.has_field(self.created_at_column) else None

    def get_updated_at_column(self):
        return self.updated_at_column if self.has_field(self.updated_at_column) else None

    def is_soft_deletes(self):
        return self.has_field(self.deleted_at_column)

    def get_verbose_name(self, plural=False):
        meta = self.model._meta
        return str(meta.verbose_name_plural if plural else meta.verbose_name)

    def get_field_label(self, name):
        """Verbose name of a field, following relations for dotted names."""
        model = self.model
        field = None
        for segment in name.split("."):
            if model is None:
                return None
            try:
                field = model._meta.get_field(segment)
            except FieldDoesNotExist:
                return None
            model = field.related_model if field.is_relation else None
        label = str(getattr(field, "verbose_name", "") or "")
        return label[:1].upper() + label[1:] if label else None

    def editable_fields(self):
        """Concrete and many-to-many fields a form can edit, in model order."""
        fields = []
        for field in self.model._meta.get_fields():
            if field.auto_created or not getattr(field, "editable", False):
                continue
            if field.concrete or field.many_to_many:
                fields.append(field)
        return fields

    # ---- Reading ----

    def queryset(self):
        qs = self.model._default_manager.all()
        selected, prefetched = [], []
        for relation in self.relations:
            lookup = relation.replace(".", "__")
            field = self.get_field(relation.split(".")[0])
            if field is not None and field.many_to_one and "." not in relation:
                selected.append(lookup)
            else:
                prefetched.append(lookup)
        if selected:
            qs = qs.select_related(*selected)
        if prefetched:
            qs = qs.prefetch_related(*prefetched)
        if self.is_soft_deletes():
            qs = qs.filter(**{f"{self.deleted_at_column}__isnull": True})
        return qs

    def find(self, pk):
        return get_object_or_404(self.queryset(), pk=pk)

    def find_many(self, pks):
        return list(self.queryset().filter(pk__in=to_list(pks, filter_empty=True)))

    def to_dict(self, obj):
        """Plain dict of a record: concrete values, FK ids and M2M pk lists."""
        data = {}
        for field in obj._meta.get_fields():
            if field.concrete and not field.many_to_many:
                data[field.name] = getattr(obj, field.attname)
            elif field.many_to_many and not field.auto_created and obj.pk is not None:
                data[field.name] = list(getattr(obj, field.name).values_list("pk", flat=True))
        return data

    # ---- Writing ----

    def store(self, data):
        obj = self.model()
        return self._save(obj, data)

    def update(self, pk, data):
        obj = self.find(pk)
        return self._save(obj, data)

    def _save(self, obj, data):
        many_to_many = {}
        with transaction.atomic():
            for name, value in data.items():
                field = self.get_field(name)
                if field is None:
                    continue
                if field.many_to_many:
                    many_to_many[name] = to_list(value, filter_empty=True)
                elif field.concrete and not field.primary_key:
                    self._assign(obj, field, value)
            obj.save()
            for name, values in many_to_many.items():
                getattr(obj, name).set(values)
        logger.debug("Saved %s pk=%s", obj._meta.label, obj.pk)
        return obj

    def _assign(self, obj, field, value):
        if value == "" and (field.null or isinstance(field, models.ForeignKey)):
            value = None
        if isinstance(value, models.Model):
            setattr(obj, field.name, value)
        elif field.is_relation:
            setattr(obj, field.attname, value)
        else:
            setattr(obj, field.name, value)

    def delete(self, pks, force=False):
        """
        Delete records by primary key and return their data.

        Soft deleting models get ``deleted_at`` stamped unless ``force``.
        """
        deleted = []
        with transaction.atomic():
            for obj in self.find_many(pks):
                deleted.append(self.to_dict(obj))
                if self.is_soft_deletes() and not force:
                    setattr(obj, self.deleted_at_column, timezone.now())
                    obj.save(update_fields=[self.deleted_at_column])
                else:
                    obj.delete()
        logger.info("Deleted %d %s record(s)", len(deleted), self.model._meta.label)
        return deleted
