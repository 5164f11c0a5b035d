"""
Upload fields.

Uploaded files are written through a Django storage (``upload.storage`` in
``DJUST_PANEL``, ``default_storage`` when unset) under a per-field
directory. The record keeps the stored path; ``MultipleFile`` keeps a comma
separated list of paths.
"""

import logging
import os
import uuid

from django.core.files.storage import default_storage, storages
from django.core.files.uploadedfile import UploadedFile

from ..conf import panel_settings
from ..exceptions import UploadError
from ..helpers import to_list
from .field import Field

logger = logging.getLogger(__name__)


class UploadField(Field):
    widget = "file"
    directory_key = "upload.directory.file"
    extensions = None

    def __init__(self, column, label=None):
        super().__init__(column, label)
        self._directory = None
        self._name = None
        self._disk = None
        self._storage = None
        self._generate_unique_name = False
        self._generate_sequence_name = False

    # ---- Storage ----

    def disk(self, alias):
        """Store through the storage registered under ``alias`` in ``STORAGES``."""
        self._disk = alias
        self._storage = None
        return self

    def get_storage(self):
        if self._storage is None:
            alias = self._disk or panel_settings.get("upload.storage")
            self._storage = storages[alias] if alias else default_storage
        return self._storage

    def move(self, directory, name=None):
        self.dir(directory)
        if name is not None:
            self.name(name)
        return self

    def dir(self, directory):
        self._directory = directory
        return self

    def get_directory(self):
        directory = self._directory
        if callable(directory):
            directory = directory(self.form)
        return directory or panel_settings.get(self.directory_key)

    def name(self, name):
        """A file name, or ``callback(uploaded_file)`` returning one."""
        self._name = name
        return self

    def unique_name(self):
        self._generate_unique_name = True
        return self

    def sequence_name(self):
        self._generate_sequence_name = True
        return self

    def get_store_name(self, file):
        if self._generate_unique_name:
            return self.generate_unique_name(file)
        if self._generate_sequence_name:
            return self.generate_sequence_name(file)
        if self._name:
            return self._name(file) if callable(self._name) else self._name
        return os.path.basename(file.name)

    def generate_unique_name(self, file):
        return uuid.uuid4().hex + os.path.splitext(file.name)[1].lower()

    def generate_sequence_name(self, file):
        base, extension = os.path.splitext(os.path.basename(file.name))
        directory = self.get_directory()
        candidate = f"{base}{extension}"
        index = 1
        while self.get_storage().exists(f"{directory}/{candidate}"):
            candidate = f"{base}_{index}{extension}"
            index += 1
        return candidate

    def upload(self, file):
        """Store ``file`` and return its path inside the storage."""
        path = f"{self.get_directory()}/{self.get_store_name(file)}"
        try:
            stored = self.get_storage().save(path, file)
        except OSError as exc:
            logger.exception("Failed to store upload %s", path)
            raise UploadError(f"Failed to store {file.name}") from exc
        logger.info("Stored upload %s for %s", stored, self.column)
        return stored

    def object_url(self, path):
        if str(path).startswith(("http://", "https://", "//")):
            return path
        return self.get_storage().url(path)

    def in_directory(self, path):
        path = str(path)
        parts = path.split("/")
        return path.startswith(f"{self.get_directory()}/") and ".." not in parts

    def delete_file(self, paths):
        storage = self.get_storage()
        for path in to_list(paths, filter_empty=True):
            if storage.exists(path):
                storage.delete(path)
                logger.info("Deleted upload %s", path)

    def destroy(self):
        """Delete the files the record currently points to."""
        self.delete_file(self.original)

    def destroy_if_changed(self, new):
        if not self.original:
            return
        kept = set(to_list(new, filter_empty=True))
        self.delete_file([path for path in to_list(self.original, filter_empty=True) if path not in kept])

    # ---- Form integration ----

    def get_input(self, data, files=None):
        if files is None:
            return None
        return files.get(self.get_element_name())

    def get_form_field(self):
        return None

    def _check_extension(self, file):
        if not self.extensions:
            return []
        extension = os.path.splitext(file.name)[1].lstrip(".").lower()
        if extension not in self.extensions:
            return [f"{file.name} is not an allowed file type."]
        return []

    def validate_upload(self, files):
        """Error messages for the uploaded file(s)."""
        file = self.get_input({}, files)
        if file is None:
            if self._required and not self.original:
                return ["This field is required."]
            return []
        return self._check_extension(file)

    def remove_file(self, key):
        """Delete one stored file and return the column's new value."""
        self.delete_file(key)
        return ""

    def prepare(self, value):
        if not isinstance(value, UploadedFile):
            return value
        path = self.upload(value)
        self.destroy_if_changed(path)
        return path

    def stored_files(self):
        return [
            {"path": path, "url": self.object_url(path), "name": os.path.basename(path)}
            for path in to_list(self.value(), filter_empty=True)
        ]

    def variables(self):
        variables = super().variables()
        variables["files"] = self.stored_files()
        variables["attributes"]["data-column"] = self.column
        if self.extensions:
            variables["attributes"]["accept"] = ",".join(f".{ext}" for ext in self.extensions)
        return variables


class File(UploadField):
    pass


class Image(File):
    directory_key = "upload.directory.image"
    extensions = ["jpg", "jpeg", "png", "gif", "bmp", "webp", "svg"]


class MultipleFile(UploadField):
    """Several files kept as a comma separated list of paths."""

    def __init__(self, column, label=None):
        super().__init__(column, label)
        self._limit = None

    def limit(self, limit):
        if limit < 2:
            return self
        self._limit = limit
        return self

    def format_value(self, value):
        return to_list(value, filter_empty=True)

    def get_input(self, data, files=None):
        if files is None:
            return None
        uploaded = files.getlist(self.get_element_name())
        return uploaded or None

    def validate_upload(self, files):
        uploaded = self.get_input({}, files) or []
        existing = to_list(self.original, filter_empty=True)
        if not uploaded and self._required and not existing:
            return ["This field is required."]
        errors = []
        if self._limit is not None and len(existing) + len(uploaded) > self._limit:
            errors.append(f"No more than {self._limit} files may be uploaded.")
        for file in uploaded:
            errors.extend(self._check_extension(file))
        return errors

    def prepare(self, value):
        paths = [self.upload(file) for file in to_list(value)]
        return ",".join(to_list(self.original, filter_empty=True) + paths)

    def remove_file(self, key):
        self.delete_file(key)
        return ",".join(path for path in to_list(self.original, filter_empty=True) if path != key)

    def destroy_key(self, index):
        """Remove the file at ``index`` of the stored list."""
        paths = to_list(self.original, filter_empty=True)
        if 0 <= index < len(paths):
            return self.remove_file(paths[index])
        return ",".join(paths)

    def variables(self):
        variables = super().variables()
        variables["attributes"]["multiple"] = True
        if self._limit is not None:
            variables["attributes"]["data-limit"] = self._limit
        return variables
