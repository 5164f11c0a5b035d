"""
Roles, permissions and the sidebar menu.
"""

import fnmatch
import logging

from django.conf import settings
from django.core.cache import caches
from django.db import models, transaction

from .conf import panel_settings

logger = logging.getLogger(__name__)


def build_tree(nodes, parent_id=None):
    """Nest flat ``{"id", "parent_id", ...}`` dicts into ``children`` lists."""
    branch = []
    for node in nodes:
        if node["parent_id"] == parent_id:
            children = build_tree(nodes, node["id"])
            branch.append({**node, "children": children})
    return branch


class Permission(models.Model):
    HTTP_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]

    name = models.CharField(max_length=50, unique=True)
    slug = models.CharField(max_length=50, unique=True)
    http_method = models.CharField(max_length=255, blank=True, default="")
    http_path = models.TextField(blank=True, default="")
    parent = models.ForeignKey(
        "self", null=True, blank=True, on_delete=models.CASCADE, related_name="children"
    )
    order = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["order", "id"]

    def __str__(self):
        return self.name

    def get_http_methods(self):
        return [method.strip().upper() for method in self.http_method.split(",") if method.strip()]

    def get_http_paths(self):
        return [path.strip() for path in self.http_path.splitlines() if path.strip()]

    def matches(self, method, path):
        """True if a request with ``method`` and ``path`` falls under this permission."""
        methods = self.get_http_methods()
        if methods and method.upper() not in methods:
            return False
        for pattern in self.get_http_paths():
            if fnmatch.fnmatch(path, pattern):
                return True
        return False

    @classmethod
    def all_nodes(cls):
        return list(cls.objects.values("id", "parent_id", "name", "slug", "order"))

    @classmethod
    def tree(cls):
        return build_tree(cls.all_nodes())


class Role(models.Model):
    ADMINISTRATOR = "administrator"
    ADMINISTRATOR_ID = 1

    name = models.CharField(max_length=50, unique=True)
    slug = models.CharField(max_length=50, unique=True)
    permissions = models.ManyToManyField(Permission, blank=True, related_name="roles")
    administrators = models.ManyToManyField(
        settings.AUTH_USER_MODEL, blank=True, related_name="panel_roles"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return self.name

    def can(self, permission):
        return self.permissions.filter(slug=permission).exists()

    def cannot(self, permission):
        return not self.can(permission)

    @classmethod
    def get_permission_ids(cls, role_ids):
        """``{role_id: [permission_id, ...]}`` for the given roles."""
        if not role_ids:
            return {}
        result = {pk: [] for pk in cls.objects.filter(pk__in=role_ids).values_list("pk", flat=True)}
        rows = cls.permissions.through.objects.filter(role_id__in=role_ids).values_list(
            "role_id", "permission_id"
        )
        for role_id, permission_id in rows:
            result.setdefault(role_id, []).append(permission_id)
        return result

    @classmethod
    def is_administrator(cls, slug):
        return slug == cls.ADMINISTRATOR

    def delete(self, *args, **kwargs):
        with transaction.atomic():
            self.administrators.clear()
            self.permissions.clear()
            logger.info("Detached users and permissions from role %s", self.slug)
            return super().delete(*args, **kwargs)


class MenuCache:
    cache_key = "djust-panel-menus-%d"

    @classmethod
    def with_permission(cls):
        return bool(panel_settings.get("menu.bind_permission"))

    @classmethod
    def enable_cache(cls):
        return bool(panel_settings.get("menu.cache.enable"))

    @classmethod
    def get_store(cls):
        return caches[panel_settings.get("menu.cache.store") or "default"]

    @classmethod
    def get_cache_key(cls):
        return cls.cache_key % int(cls.with_permission())

    @classmethod
    def remember(cls, builder):
        if not cls.enable_cache():
            return builder()
        return cls.get_store().get_or_set(cls.get_cache_key(), builder, timeout=None)

    @classmethod
    def destroy_cache(cls):
        if not cls.enable_cache():
            return None
        return cls.get_store().delete(cls.get_cache_key())


class Menu(MenuCache, models.Model):
    parent = models.ForeignKey(
        "self", null=True, blank=True, on_delete=models.CASCADE, related_name="children"
    )
    order = models.IntegerField(default=0)
    title = models.CharField(max_length=50)
    icon = models.CharField(max_length=50, blank=True, default="")
    uri = models.CharField(max_length=255, blank=True, default="")
    roles = models.ManyToManyField(Role, blank=True, related_name="menus")
    permissions = models.ManyToManyField(Permission, blank=True, related_name="menus")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["order", "id"]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        super().save(*args, **kwargs)
        self.destroy_cache()

    def delete(self, *args, **kwargs):
        result = super().delete(*args, **kwargs)
        self.destroy_cache()
        return result

    @classmethod
    def all_nodes(cls):
        """Flat menu rows with role slugs (and permission slugs when bound)."""

        def build():
            nodes = []
            for menu in cls.objects.prefetch_related("roles", "permissions"):
                node = {
                    "id": menu.pk,
                    "parent_id": menu.parent_id,
                    "order": menu.order,
                    "title": menu.title,
                    "icon": menu.icon,
                    "uri": menu.uri,
                    "roles": [role.slug for role in menu.roles.all()],
                }
                if cls.with_permission():
                    node["permissions"] = [permission.slug for permission in menu.permissions.all()]
                nodes.append(node)
            return nodes

        return cls.remember(build)

    @classmethod
    def tree(cls):
        return build_tree(cls.all_nodes())


class UserProfile(models.Model):
    """Panel settings of a user that the user model has no column for."""

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="panel_profile")
    avatar = models.CharField(max_length=255, blank=True, default="")
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Profile of {self.user}"

    @classmethod
    def for_user(cls, user):
        profile, _ = cls.objects.get_or_create(user=user)
        return profile
