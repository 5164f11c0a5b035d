"""
Code generators behind the scaffold screen.

    ModelCreator("blog_posts", "BlogPost", "/srv/app/blog").create(fields, app_label="blog")
    ControllerCreator("BlogPostController", "/srv/app/blog").create("BlogPost", "blog.blog_post", fields)

Each ``create()`` writes one module and returns its path. Existing files are
never overwritten.
"""

import keyword
import logging
import os
import re

from django.utils.text import camel_case_to_spaces

from .exceptions import PanelError

logger = logging.getLogger(__name__)

# field type -> default keyword arguments
FIELD_TYPES = {
    "CharField": {"max_length": 255},
    "TextField": {},
    "SlugField": {"max_length": 50},
    "EmailField": {"max_length": 254},
    "URLField": {"max_length": 200},
    "IntegerField": {},
    "SmallIntegerField": {},
    "BigIntegerField": {},
    "PositiveIntegerField": {},
    "PositiveSmallIntegerField": {},
    "FloatField": {},
    "DecimalField": {"max_digits": 10, "decimal_places": 2},
    "BooleanField": {"default": False},
    "DateField": {},
    "DateTimeField": {},
    "TimeField": {},
    "DurationField": {},
    "UUIDField": {},
    "JSONField": {"default": "dict"},
    "BinaryField": {},
    "GenericIPAddressField": {},
    "FileField": {"upload_to": "'files'"},
    "ImageField": {"upload_to": "'images'"},
}

# form builder factory per field type
FORM_FIELDS = {
    "TextField": "textarea",
    "EmailField": "email",
    "IntegerField": "number",
    "SmallIntegerField": "number",
    "BigIntegerField": "number",
    "PositiveIntegerField": "number",
    "PositiveSmallIntegerField": "number",
    "BooleanField": "radio",
    "DateField": "date",
    "DateTimeField": "datetime",
    "FileField": "file",
    "ImageField": "image",
}

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def snake_case(name):
    return camel_case_to_spaces(name).replace(" ", "_")


def check_identifier(name, what):
    if not name or not _IDENTIFIER.match(name) or keyword.iskeyword(name):
        raise PanelError(f"Invalid {what}: {name!r}")
    return name


def normalize_fields(fields):
    """Drop blank rows and check names and types of the submitted fields."""
    result = []
    for field in fields:
        name = (field.get("name") or "").strip()
        if not name:
            continue
        check_identifier(name, "field name")
        field_type = field.get("type") or "CharField"
        if field_type not in FIELD_TYPES:
            raise PanelError(f"Unsupported field type: {field_type}")
        result.append(
            {
                "name": name,
                "type": field_type,
                "nullable": bool(field.get("nullable")),
                "default": field.get("default") or "",
                "comment": field.get("comment") or "",
            }
        )
    return result


class Creator:
    def __init__(self, output_dir):
        self.output_dir = str(output_dir)

    def get_path(self, module_name):
        return os.path.join(self.output_dir, f"{module_name}.py")

    def write(self, path, code):
        if os.path.exists(path):
            raise PanelError(f"File already exists: {path}")
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as fp:
            fp.write(code)
        logger.info("Scaffold wrote %s", path)
        return path


class ModelCreator(Creator):
    def __init__(self, table_name, model_name, output_dir):
        super().__init__(output_dir)
        self.table_name = check_identifier(table_name, "table name")
        self.model_name = check_identifier(model_name, "model name")

    def field_code(self, field):
        kwargs = dict(FIELD_TYPES[field["type"]])
        if field["nullable"]:
            kwargs["null"] = "True"
            kwargs["blank"] = "True"
        if field["default"] != "":
            kwargs["default"] = repr(field["default"])
        if field["comment"]:
            kwargs["help_text"] = repr(field["comment"])
        arguments = ", ".join(f"{key}={value}" for key, value in kwargs.items())
        return f"    {field['name']} = models.{field['type']}({arguments})"

    def build(self, fields, primary_key="id", timestamps=True, soft_deletes=False, app_label=None):
        lines = ["from django.db import models", "", "", f"class {self.model_name}(models.Model):"]
        if primary_key and primary_key != "id":
            lines.append(f"    {check_identifier(primary_key, 'primary key')} = models.BigAutoField(primary_key=True)")
        lines.extend(self.field_code(field) for field in fields)
        if timestamps:
            lines.append("    created_at = models.DateTimeField(auto_now_add=True)")
            lines.append("    updated_at = models.DateTimeField(auto_now=True)")
        if soft_deletes:
            lines.append("    deleted_at = models.DateTimeField(null=True, blank=True)")
        lines.extend(["", "    class Meta:", f"        db_table = {self.table_name!r}"])
        if app_label:
            lines.append(f"        app_label = {app_label!r}")
        return "\n".join(lines) + "\n"

    def create(self, fields, primary_key="id", timestamps=True, soft_deletes=False, app_label=None):
        code = self.build(fields, primary_key, timestamps, soft_deletes, app_label)
        return self.write(self.get_path(snake_case(self.model_name)), code)


class ControllerCreator(Creator):
    def __init__(self, controller_name, output_dir):
        super().__init__(output_dir)
        self.controller_name = check_identifier(controller_name, "controller name")

    def build(self, model_name, model_module, fields, primary_key="id"):
        names = [primary_key or "id"] + [field["name"] for field in fields]
        grid = "\n".join(f"        grid.column({name!r})" for name in names)
        show = "\n".join(f"        show.field({name!r})" for name in names)
        form = [f"        form.display({primary_key or 'id'!r})"]
        for field in fields:
            factory = FORM_FIELDS.get(field["type"], "text")
            line = f"        form.{factory}({field['name']!r})"
            if factory == "radio":
                line += ".options({1: 'Yes', 0: 'No'})"
            if not field["nullable"] and factory not in ("radio", "file", "image"):
                line += ".required()"
            form.append(line)
        return "\n".join(
            [
                "from djust_panel.controllers import ResourceController",
                "from djust_panel.form import Form",
                "from djust_panel.grid import Grid",
                "from djust_panel.repository import ModelRepository",
                "from djust_panel.show import Show",
                "",
                f"from {model_module} import {model_name}",
                "",
                "",
                f"class {self.controller_name}(ResourceController):",
                f"    model = {model_name}",
                "",
                "    def grid(self):",
                f"        grid = Grid(ModelRepository({model_name}), request=self.request)",
                grid,
                "        return grid",
                "",
                "    def detail(self, pk):",
                f"        show = Show(pk, ModelRepository({model_name}), request=self.request)",
                show,
                "        return show",
                "",
                "    def form(self):",
                f"        form = Form(ModelRepository({model_name}), request=self.request)",
                "\n".join(form),
                "        return form",
                "",
            ]
        )

    def create(self, model_name, model_module, fields, primary_key="id"):
        code = self.build(model_name, model_module, fields, primary_key)
        return self.write(self.get_path(snake_case(self.controller_name)), code)
