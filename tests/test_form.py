"""Tests for forms: saving, validation, inline edits, callbacks, deletes and uploads."""

import json
import shutil
import tempfile

from django.contrib.auth.models import AnonymousUser
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.http import HttpResponse, JsonResponse
from django.test import RequestFactory, TestCase, override_settings

from djust_panel.form import Form
from djust_panel.repository import ModelRepository
from tests.models import Article, Category, Note, Tag

AJAX = {"HTTP_X_REQUESTED_WITH": "XMLHttpRequest"}


class FormTestCase(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.tech = Category.objects.create(name="Technology")
        cls.python = Tag.objects.create(name="Python")
        cls.django = Tag.objects.create(name="Django")
        cls.article = Article.objects.create(title="Hello", status="draft", views=3, category=cls.tech)
        cls.article.tags.set([cls.python])

    def setUp(self):
        self.factory = RequestFactory()

    def post(self, path, data=None, ajax=True):
        request = self.factory.post(path, data or {}, **(AJAX if ajax else {}))
        request.user = AnonymousUser()
        return request

    def make_form(self, request):
        form = Form(ModelRepository(Article), request=request)
        form.display("id", "ID").set_display(lambda form: form.builder().is_editing())
        form.text("title").required()
        form.select("status").options(dict(Article.STATUS_CHOICES))
        form.radio("is_featured").options({1: "Yes", 0: "No"})
        form.select("category").options(lambda value: Category.objects.values_list("id", "name"))
        form.multiple_select("tags").options(lambda value: Tag.objects.values_list("id", "name"))
        form.number("views").min(0)
        return form

    def json(self, response):
        return json.loads(response.content)


class TestStore(FormTestCase):
    def test_store_creates_record(self):
        request = self.post(
            "/admin/articles",
            {
                "title": "New one",
                "status": "published",
                "is_featured": "1",
                "category": str(self.tech.pk),
                "tags": [str(self.python.pk), str(self.django.pk)],
                "views": "5",
            },
        )
        response = self.make_form(request).store()
        payload = self.json(response)
        assert payload["status"] is True
        assert payload["message"] == "Save succeeded"
        assert payload["redirect"] == "/admin/articles"

        article = Article.objects.get(title="New one")
        assert article.status == "published"
        assert article.is_featured is True
        assert article.category == self.tech
        assert article.views == 5
        assert set(article.tags.values_list("name", flat=True)) == {"Python", "Django"}

    def test_after_save_continue_editing(self):
        request = self.post("/admin/articles", {"title": "Again", "after-save": "1"})
        payload = self.json(self.make_form(request).store())
        article = Article.objects.get(title="Again")
        assert payload["redirect"] == f"/admin/articles/{article.pk}/edit"

    def test_after_save_continue_creating_and_view(self):
        request = self.post("/admin/articles", {"title": "More", "after-save": "2"})
        assert self.json(self.make_form(request).store())["redirect"] == "/admin/articles/create"

        request = self.post("/admin/articles", {"title": "Look", "after-save": "3"})
        article_url = self.json(self.make_form(request).store())["redirect"]
        assert article_url == f"/admin/articles/{Article.objects.get(title='Look').pk}"

    def test_validation_errors_as_json(self):
        request = self.post("/admin/articles", {"status": "nope", "views": "-1"})
        response = self.make_form(request).store()
        assert response.status_code == 422
        errors = self.json(response)["errors"]
        assert errors["title"] == ["This field is required."]
        assert "status" in errors
        assert "views" in errors
        assert not Article.objects.filter(status="nope").exists()

    def test_validation_errors_rerender_form(self):
        request = self.post("/admin/articles", {"title": "", "views": "7"}, ajax=False)
        response = self.make_form(request).store()
        assert response.status_code == 200
        html = response.content.decode()
        assert "This field is required." in html
        assert 'value="7"' in html

    def test_non_ajax_success_redirects(self):
        request = self.post("/admin/articles", {"title": "Plain"}, ajax=False)
        response = self.make_form(request).store()
        assert response.status_code == 302
        assert response["Location"] == "/admin/articles"

    def test_previous_url_is_honoured(self):
        request = self.post("/admin/articles", {"title": "Back", "_previous_": "/admin/articles?page=2"})
        assert self.json(self.make_form(request).store())["redirect"] == "/admin/articles?page=2"


class TestUpdate(FormTestCase):
    def test_update_keeps_missing_fields(self):
        request = self.post(f"/admin/articles/{self.article.pk}", {"title": "Renamed", "_method": "PUT"})
        payload = self.json(self.make_form(request).update(self.article.pk))
        assert payload["status"] is True
        assert payload["message"] == "Update succeeded"
        assert payload["redirect"] == "/admin/articles"

        self.article.refresh_from_db()
        assert self.article.title == "Renamed"
        assert self.article.views == 3
        assert list(self.article.tags.all()) == [self.python]

    def test_update_relations(self):
        request = self.post(
            f"/admin/articles/{self.article.pk}",
            {"title": "Hello", "category": "", "tags": [str(self.django.pk)]},
        )
        self.make_form(request).update(self.article.pk)
        self.article.refresh_from_db()
        assert self.article.category is None
        assert list(self.article.tags.all()) == [self.django]

    def test_inline_update_only_touches_posted_field(self):
        request = self.post(
            f"/admin/articles/{self.article.pk}", {"_method": "PUT", "_inline_edit_": "1", "views": "42"}
        )
        response = self.make_form(request).update(self.article.pk)
        assert self.json(response) == {"status": True, "message": "Update succeeded"}
        self.article.refresh_from_db()
        assert self.article.views == 42
        assert self.article.title == "Hello"

    def test_inline_switch(self):
        request = self.post(f"/admin/articles/{self.article.pk}", {"_inline_edit_": "1", "is_featured": "1"})
        self.make_form(request).update(self.article.pk)
        self.article.refresh_from_db()
        assert self.article.is_featured is True

    def test_inline_update_is_validated(self):
        request = self.post(f"/admin/articles/{self.article.pk}", {"_inline_edit_": "1", "views": "many"})
        response = self.make_form(request).update(self.article.pk)
        assert response.status_code == 422
        assert list(self.json(response)["errors"]) == ["views"]

    def test_edit_fills_fields(self):
        request = self.factory.get(f"/admin/articles/{self.article.pk}/edit")
        form = self.make_form(request).edit(self.article.pk)
        assert form.field("title").value() == "Hello"
        assert form.field("category").value() == self.tech.pk
        assert form.field("tags").value() == [self.python.pk]
        assert form.field("is_featured").value() == 0

    def test_render_edit_form(self):
        request = self.factory.get(f"/admin/articles/{self.article.pk}/edit")
        html = str(self.make_form(request).edit(self.article.pk).render())
        assert f'action="/admin/articles/{self.article.pk}"' in html
        assert 'name="_method"' in html and 'value="PUT"' in html
        assert 'value="Hello"' in html
        assert f'<option value="{self.tech.pk}" selected>' in html
        assert 'data-field="id"' in html

    def test_render_create_form(self):
        request = self.factory.get("/admin/articles/create")
        form = self.make_form(request)
        form.display("created_at")
        html = str(form.render())
        assert 'action="/admin/articles"' in html
        assert 'data-field="id"' not in html
        assert 'data-field="created_at"' not in html
        assert 'name="_method"' not in html


class TestCallbacks(FormTestCase):
    def test_saving_and_saved(self):
        seen = []
        request = self.post("/admin/articles", {"title": "Callback"})
        form = self.make_form(request)
        form.saving(lambda form, values: values.update(slug="from-callback"))
        form.saved(lambda form, record: seen.append(record.pk))
        form.store()
        article = Article.objects.get(title="Callback")
        assert article.slug == "from-callback"
        assert seen == [article.pk]

    def test_submitted_response_short_circuits(self):
        request = self.post("/admin/articles", {"title": "Never"})
        form = self.make_form(request)
        form.submitted(lambda form: HttpResponse("stopped"))
        response = form.store()
        assert response.content == b"stopped"
        assert not Article.objects.filter(title="Never").exists()

    def test_saving_error_is_reported(self):
        def explode(form, values):
            raise RuntimeError("boom")

        request = self.post("/admin/articles", {"title": "Broken"})
        form = self.make_form(request)
        form.saving(explode)
        assert self.json(form.store()) == {"status": False, "message": "boom"}

    def test_field_saving_callback(self):
        request = self.post("/admin/articles", {"title": "  padded  "})
        form = self.make_form(request)
        form.field("title").saving(lambda value: value.upper())
        form.store()
        assert Article.objects.filter(title="PADDED").exists()

    def test_editing_sees_the_loaded_record(self):
        request = self.factory.get(f"/admin/articles/{self.article.pk}/edit")
        request.user = AnonymousUser()
        form = self.make_form(request)
        form.editing(lambda form: form.disable_delete_button(form.record.title == "Hello"))
        form.edit(self.article.pk)
        assert form.builder().get_tools().show_delete is False


class TestDestroy(FormTestCase):
    def test_destroy_many(self):
        other = Article.objects.create(title="Other")
        request = self.post(f"/admin/articles/{self.article.pk},{other.pk}", {"_method": "DELETE"})
        response = self.make_form(request).destroy(f"{self.article.pk},{other.pk}")
        assert self.json(response) == {"status": True, "message": "Delete succeeded"}
        assert not Article.objects.filter(pk__in=[self.article.pk, other.pk]).exists()

    def test_deleting_callback_can_refuse(self):
        request = self.post(f"/admin/articles/{self.article.pk}")
        form = self.make_form(request)
        form.deleting(lambda form, ids: JsonResponse({"status": False, "message": "Locked"}))
        assert self.json(form.destroy(self.article.pk)) == {"status": False, "message": "Locked"}
        assert Article.objects.filter(pk=self.article.pk).exists()

    def test_deleted_callback_receives_rows(self):
        rows = []
        request = self.post(f"/admin/articles/{self.article.pk}")
        form = self.make_form(request)
        form.deleted(lambda form, deleted: rows.extend(deleted))
        form.destroy(str(self.article.pk))
        assert rows[0]["title"] == "Hello"
        assert rows[0]["tags"] == [self.python.pk]

    def test_soft_delete(self):
        note = Note.objects.create(title="Keep me")
        request = self.post(f"/admin/notes/{note.pk}")
        form = Form(Note, request=request)
        form.text("title")
        form.destroy(note.pk)
        note.refresh_from_db()
        assert note.deleted_at is not None
        assert not ModelRepository(Note).queryset().filter(pk=note.pk).exists()


class TestUploads(FormTestCase):
    def setUp(self):
        super().setUp()
        self.media_root = tempfile.mkdtemp()
        self.settings_override = override_settings(MEDIA_ROOT=self.media_root)
        self.settings_override.enable()

    def tearDown(self):
        self.settings_override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def upload_form(self, request):
        form = self.make_form(request)
        form.image("cover").dir("covers")
        form.multiple_file("attachments").dir("attachments").limit(2)
        return form

    def test_image_upload_on_store(self):
        cover = SimpleUploadedFile("cover.png", b"png-bytes", content_type="image/png")
        request = self.post("/admin/articles", {"title": "With cover", "cover": cover})
        self.upload_form(request).store()
        article = Article.objects.get(title="With cover")
        assert article.cover == "covers/cover.png"
        assert default_storage.exists("covers/cover.png")

    def test_image_rejects_other_extensions(self):
        cover = SimpleUploadedFile("notes.txt", b"text")
        request = self.post("/admin/articles", {"title": "Bad cover", "cover": cover})
        response = self.upload_form(request).store()
        assert response.status_code == 422
        assert self.json(response)["errors"]["cover"] == ["notes.txt is not an allowed file type."]

    def test_replacing_a_file_deletes_the_old_one(self):
        old = default_storage.save("covers/old.png", ContentFile(b"old"))
        Article.objects.filter(pk=self.article.pk).update(cover=old)
        cover = SimpleUploadedFile("new.png", b"new")
        request = self.post(f"/admin/articles/{self.article.pk}", {"title": "Hello", "cover": cover})
        self.upload_form(request).update(self.article.pk)
        self.article.refresh_from_db()
        assert self.article.cover == "covers/new.png"
        assert not default_storage.exists(old)

    def test_multiple_files_are_appended(self):
        existing = default_storage.save("attachments/a.txt", ContentFile(b"a"))
        Article.objects.filter(pk=self.article.pk).update(attachments=existing)
        request = self.post(
            f"/admin/articles/{self.article.pk}",
            {"title": "Hello", "attachments": [SimpleUploadedFile("b.txt", b"b")]},
        )
        self.upload_form(request).update(self.article.pk)
        self.article.refresh_from_db()
        assert self.article.attachments == "attachments/a.txt,attachments/b.txt"

    def test_multiple_file_limit(self):
        existing = default_storage.save("attachments/a.txt", ContentFile(b"a"))
        Article.objects.filter(pk=self.article.pk).update(attachments=existing)
        files = [SimpleUploadedFile("b.txt", b"b"), SimpleUploadedFile("c.txt", b"c")]
        request = self.post(f"/admin/articles/{self.article.pk}", {"title": "Hello", "attachments": files})
        response = self.upload_form(request).update(self.article.pk)
        assert response.status_code == 422
        assert self.json(response)["errors"]["attachments"] == ["No more than 2 files may be uploaded."]

    def test_limit_below_two_is_ignored(self):
        request = self.post("/admin/articles")
        form = self.make_form(request)
        field = form.multiple_file("attachments").limit(1)
        assert "data-limit" not in field.variables()["attributes"]

    def test_delete_one_stored_file(self):
        first = default_storage.save("attachments/a.txt", ContentFile(b"a"))
        second = default_storage.save("attachments/b.txt", ContentFile(b"b"))
        Article.objects.filter(pk=self.article.pk).update(attachments=f"{first},{second}")
        request = self.post(
            f"/admin/articles/{self.article.pk}",
            {"_method": "PUT", "_file_del_": "1", "_column": "attachments", "key": first},
        )
        response = self.upload_form(request).update(self.article.pk)
        assert self.json(response) == {"status": True}
        self.article.refresh_from_db()
        assert self.article.attachments == second
        assert not default_storage.exists(first)
        assert default_storage.exists(second)

    def test_file_of_another_record_survives_a_delete(self):
        other = Article.objects.create(title="Other")
        foreign = default_storage.save("covers/other.png", ContentFile(b"other"))
        Article.objects.filter(pk=other.pk).update(cover=foreign)
        mine = default_storage.save("covers/mine.png", ContentFile(b"mine"))
        Article.objects.filter(pk=self.article.pk).update(cover=mine)

        request = self.post(
            f"/admin/articles/{self.article.pk}",
            {"_method": "PUT", "_file_del_": "1", "_column": "cover", "key": foreign},
        )
        response = self.upload_form(request).update(self.article.pk)
        assert response.status_code == 404
        assert self.json(response)["status"] is False
        assert default_storage.exists(foreign)
        self.article.refresh_from_db()
        assert self.article.cover == mine

    def test_delete_while_creating_only_touches_pending_uploads(self):
        stored = default_storage.save("covers/stored.png", ContentFile(b"x"))
        Article.objects.filter(pk=self.article.pk).update(cover=stored)
        pending = default_storage.save("covers/pending.png", ContentFile(b"y"))
        outside = default_storage.save("private/secret.txt", ContentFile(b"z"))

        for key in (stored, outside, "covers/../private/secret.txt"):
            request = self.post("/admin/articles", {"_file_del_": "1", "_column": "cover", "key": key})
            assert self.upload_form(request).store().status_code == 404
        assert default_storage.exists(stored)
        assert default_storage.exists(outside)

        request = self.post("/admin/articles", {"_file_del_": "1", "_column": "cover", "key": pending})
        assert self.json(self.upload_form(request).store()) == {"status": True}
        assert not default_storage.exists(pending)

    def test_async_upload(self):
        request = self.post(
            "/admin/articles",
            {"upload_column": "attachments", "file": SimpleUploadedFile("async.txt", b"x")},
        )
        payload = self.json(self.upload_form(request).store())
        assert payload["status"] is True
        assert payload["path"] == "attachments/async.txt"
        assert payload["url"].endswith("attachments/async.txt")
        assert default_storage.exists("attachments/async.txt")
        assert Article.objects.count() == 1

    def test_destroy_deletes_files(self):
        cover = default_storage.save("covers/gone.png", ContentFile(b"x"))
        Article.objects.filter(pk=self.article.pk).update(cover=cover)
        request = self.post(f"/admin/articles/{self.article.pk}")
        self.upload_form(request).destroy(self.article.pk)
        assert not default_storage.exists(cover)

    def test_soft_delete_keeps_files(self):
        attachment = default_storage.save("notes/keep.txt", ContentFile(b"x"))
        note = Note.objects.create(title="Soft", attachment=attachment)
        request = self.post(f"/admin/notes/{note.pk}")
        form = Form(Note, request=request)
        form.file("attachment").dir("notes")
        form.destroy(note.pk)
        assert default_storage.exists(attachment)

    def test_rendered_file_field_lists_stored_files(self):
        existing = default_storage.save("attachments/a.txt", ContentFile(b"a"))
        Article.objects.filter(pk=self.article.pk).update(attachments=existing)
        request = self.factory.get(f"/admin/articles/{self.article.pk}/edit")
        html = str(self.upload_form(request).edit(self.article.pk).render())
        assert 'enctype="multipart/form-data"' in html
        assert f'data-key="{existing}"' in html
        assert "file-delete" in html
