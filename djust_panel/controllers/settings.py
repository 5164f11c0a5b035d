"""
The signed in user's own settings: name, avatar and password.

Served at ``<panel>/auth/setting`` for anyone with panel access. A password
change needs the current password and a matching ``password_confirmation``;
leaving the password empty keeps it.
"""

import logging

from django.contrib.auth import get_user_model, update_session_auth_hash
from django.db import transaction
from django.views import View

from ..form import Form
from ..layout import Content
from ..models import UserProfile
from ..repository import ModelRepository

logger = logging.getLogger(__name__)


class AccountRepository(ModelRepository):
    """Users, with the avatar kept on their ``UserProfile``."""

    def __init__(self):
        super().__init__(get_user_model())

    def find(self, pk):
        user = super().find(pk)
        user.avatar = UserProfile.for_user(user).avatar
        return user

    def update(self, pk, data):
        data = dict(data)
        avatar = data.pop("avatar", None)
        password = data.pop("password", "")
        with transaction.atomic():
            user = super().update(pk, data)
            if password:
                user.set_password(password)
                user.save(update_fields=["password"])
                logger.info("Password changed for %s", user)
            if avatar is not None:
                profile = UserProfile.for_user(user)
                profile.avatar = avatar
                profile.save(update_fields=["avatar", "updated_at"])
                user.avatar = avatar
        return user


class UserSettingController(View):
    title = "User setting"
    http_method_names = ["get", "post"]

    def form(self):
        form = Form(AccountRepository(), request=self.request)
        form.resource(self.request.path.rstrip("/"))
        form.set_action(self.request.path)
        form.set_title(self.title)

        form.display(get_user_model().USERNAME_FIELD, "Username")
        form.text("first_name", "First name")
        form.text("last_name", "Last name")
        form.image("avatar").dir("avatars").unique_name()
        form.password("old_password", "Old password")
        form.password("password")
        form.password("password_confirmation", "Password confirmation")

        form.disable_list_button()
        form.disable_view_button()
        form.disable_delete_button()
        form.disable_view_check()
        form.disable_editing_check()
        form.disable_creating_check()

        form.validating(self.check_password_change)
        form.saved(self.keep_session)
        return form

    def check_password_change(self, form, data):
        password = data.get("password", "")
        if not password:
            return {}
        errors = {}
        if not self.request.user.check_password(data.get("old_password", "")):
            errors["old_password"] = ["The old password is incorrect."]
        if password != data.get("password_confirmation", ""):
            errors["password"] = ["The Password confirmation does not match."]
        return errors

    def keep_session(self, form, user):
        if form.input.get("password"):
            update_session_auth_hash(self.request, user)

    def content(self):
        return Content(request=self.request).header(self.title).description("Edit")

    def get(self, request, *args, **kwargs):
        form = self.form().edit(request.user.pk)
        return self.content().body(form).response()

    def post(self, request, *args, **kwargs):
        return self.form().update(request.user.pk, request.POST, request.FILES)
