"""
Scaffold screen: generate a model module and a resource controller.

Only reachable while scaffolding is enabled (``scaffold.enable``, or
``DEBUG`` when unset).
"""

import io
import logging
import os
import re

from django.conf import settings
from django.contrib import messages
from django.core.management import call_command
from django.db import connections
from django.http import HttpResponseRedirect, JsonResponse
from django.template.loader import render_to_string
from django.utils.safestring import mark_safe

from .. import auth
from ..conf import panel_settings
from ..scaffold import FIELD_TYPES, ControllerCreator, ModelCreator, normalize_fields, snake_case
from .resource import ResourceController

logger = logging.getLogger(__name__)

_FIELD_KEY = re.compile(r"^fields-(\d+)-(\w+)$")


class ScaffoldController(ResourceController):
    title = "Scaffold"
    template_name = "djust_panel/scaffold.html"

    # introspected field class -> scaffold field type
    DATA_TYPE_MAP = {
        "AutoField": "IntegerField",
        "BigAutoField": "BigIntegerField",
        "SmallAutoField": "SmallIntegerField",
        "PositiveBigIntegerField": "BigIntegerField",
        "IPAddressField": "GenericIPAddressField",
    }

    def check_permission(self):
        if not panel_settings.scaffold_enabled():
            auth.error("Scaffolding is disabled.")
        super().check_permission()

    # ---- Introspection ----

    def get_database_columns(self, using="default", table=None):
        """``{table: {column: {type, nullable, default, id}}}`` of a connection."""
        connection = connections[using]
        introspection = connection.introspection
        data = {}
        with connection.cursor() as cursor:
            tables = [info.name for info in introspection.get_table_list(cursor) if info.type == "t"]
            if table is not None:
                tables = [name for name in tables if name == table]
            for name in tables:
                primary_key = introspection.get_primary_key_column(cursor, name)
                columns = {}
                for column in introspection.get_table_description(cursor, name):
                    try:
                        field_type = introspection.get_field_type(column.type_code, column)
                    except KeyError:
                        field_type = "TextField"
                    columns[column.name] = {
                        "type": self.DATA_TYPE_MAP.get(field_type, field_type),
                        "nullable": bool(column.null_ok),
                        "default": column.default,
                        "id": column.name == primary_key,
                    }
                data[name] = columns
        return data

    def get_output_dir(self):
        return panel_settings.get("scaffold.output_dir") or getattr(settings, "BASE_DIR", None) or os.getcwd()

    # ---- Actions ----

    def index(self, request, *args, **kwargs):
        table = request.GET.get("tb")
        if table is not None:
            columns = self.get_database_columns(request.GET.get("db") or "default", table)
            return JsonResponse({"status": 1, "list": columns.get(table, {})})

        tables = {name: list(columns) for name, columns in self.get_database_columns().items()}
        body = render_to_string(
            self.template_name,
            {
                "action": request.path,
                "tables": tables,
                "field_types": list(FIELD_TYPES),
                "output_dir": self.get_output_dir(),
            },
            request=request,
        )
        return self.content(" ").body(mark_safe(body)).response()

    def get_fields(self, data):
        rows = {}
        for key in data:
            match = _FIELD_KEY.match(key)
            if match:
                rows.setdefault(int(match.group(1)), {})[match.group(2)] = data.get(key)
        return normalize_fields(rows[index] for index in sorted(rows))

    def store(self, request, *args, **kwargs):
        data = request.POST
        creates = data.getlist("create")
        output_dir = self.get_output_dir()
        paths = {}
        message = ""
        try:
            fields = self.get_fields(data)
            model_name = data.get("model_name", "")
            primary_key = data.get("primary_key") or "id"
            app_label = data.get("app_label") or None

            if "model" in creates:
                creator = ModelCreator(data.get("table_name", ""), model_name, output_dir)
                paths["model"] = creator.create(
                    fields,
                    primary_key,
                    data.get("timestamps") == "1",
                    data.get("soft_deletes") == "1",
                    app_label,
                )

            if "controller" in creates:
                model_module = data.get("model_module") or snake_case(model_name)
                creator = ControllerCreator(data.get("controller_name", ""), output_dir)
                paths["controller"] = creator.create(model_name, model_module, fields, primary_key)

            if "migrate" in creates:
                output = io.StringIO()
                if app_label:
                    call_command("makemigrations", app_label, stdout=output)
                call_command("migrate", stdout=output)
                message = output.getvalue()
        except Exception as exc:
            logger.exception("Scaffold failed")
            for path in paths.values():
                if os.path.exists(path):
                    os.remove(path)
            messages.error(request, f"Error: {exc}")
            return HttpResponseRedirect(request.path)

        lines = [f"{name.capitalize()}: {path}" for name, path in paths.items()]
        if message:
            lines.append(message)
        messages.success(request, "Success: " + "\n".join(lines))
        return HttpResponseRedirect(request.path)
