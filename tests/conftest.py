"""Pytest fixtures for djust-panel tests and the Playwright browser suite.

The browser suite runs the panel under Daphne against the same sqlite file
the tests use, so everything it needs is seeded once per session outside of
test transactions: catalogue rows, an editor role with its permissions and
menu entries, and notes (one soft deleted) with a stored upload.
"""

import os
import subprocess
import sys
import time
from dataclasses import dataclass, field
from datetime import date

import pytest
import requests

# Path to the test database file
TEST_DB_PATH = os.path.join(os.path.dirname(__file__), "test_db.sqlite3")

ADMIN_PASSWORD = "adminpass123"
EDITOR_PASSWORD = "editorpass123"


@pytest.fixture(scope="session")
def django_db_setup(django_db_blocker):
    """Start every session from a freshly migrated database file."""
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)

    with django_db_blocker.unblock():
        from django.core.management import call_command

        call_command("migrate", "--run-syncdb", verbosity=0)

    yield

    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)


@pytest.fixture(scope="session")
def session_admin_user(django_db_setup, django_db_blocker):
    """Superuser visible to the Daphne subprocess for the whole session."""
    with django_db_blocker.unblock():
        from django.contrib.auth import get_user_model

        user, _ = get_user_model().objects.get_or_create(
            username="admin",
            defaults={"email": "admin@example.com", "is_staff": True, "is_superuser": True},
        )
        user.set_password(ADMIN_PASSWORD)
        user.save()
        return user


@pytest.fixture
def admin_user(session_admin_user):
    return session_admin_user


class PanelServer:
    """Daphne serving ``tests.asgi`` for the Playwright suite."""

    def __init__(self, host="127.0.0.1", port=8765):
        self.host = host
        self.port = port
        self.process = None
        self.url = f"http://{host}:{port}"

    def start(self):
        self.process = subprocess.Popen(
            [sys.executable, "-m", "daphne", "-b", self.host, "-p", str(self.port), "tests.asgi:application"],
            env={**os.environ, "DJANGO_SETTINGS_MODULE": "tests.settings"},
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
        for _ in range(30):
            try:
                response = requests.get(f"{self.url}/admin/login/", timeout=1)
                if response.status_code in (200, 302):
                    return
            except requests.exceptions.RequestException:
                pass
            if self.process.poll() is not None:
                break
            time.sleep(0.5)

        stdout, stderr = self.process.communicate() if self.process.poll() is not None else (b"", b"")
        self.stop()
        raise RuntimeError(f"Panel server failed to start:\nstdout: {stdout.decode()}\nstderr: {stderr.decode()}")

    def stop(self):
        if self.process and self.process.poll() is None:
            self.process.terminate()
            try:
                self.process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                self.process.kill()


@pytest.fixture(scope="session")
def django_server(session_admin_user, panel_data):
    """The seeded rows must exist before the server starts serving them."""
    server = PanelServer()
    server.start()
    yield server
    server.stop()


# Override pytest-playwright's base_url fixture to use our server
@pytest.fixture(scope="session")
def base_url(django_server):
    return django_server.url


@pytest.fixture(scope="session")
def admin_url(django_server):
    return f"{django_server.url}/admin"


# ---- Seed data ----


@dataclass
class PanelData:
    categories: list = field(default_factory=list)
    tags: list = field(default_factory=list)
    authors: list = field(default_factory=list)
    editor: object = None
    editor_role: object = None
    permissions: list = field(default_factory=list)
    menus: dict = field(default_factory=dict)
    notes: list = field(default_factory=list)
    deleted_note: object = None


def seed_catalogue(data):
    from tests.models import Author, Category, Tag

    for name in ["Technology", "Science", "Arts"]:
        data.categories.append(Category.objects.get_or_create(name=name)[0])
    for name, color in [("Python", "blue"), ("Django", "green"), ("JavaScript", "yellow"), ("Testing", "red")]:
        data.tags.append(Tag.objects.get_or_create(name=name, defaults={"color": color})[0])
    for name, email in [("Alice Smith", "alice@example.com"), ("Bob Jones", "bob@example.com")]:
        data.authors.append(Author.objects.get_or_create(name=name, defaults={"email": email})[0])


def seed_access(data):
    """An editor that may work on articles and books but not on roles."""
    from django.contrib.auth import get_user_model

    from djust_panel.models import Menu, Permission, Role

    articles, _ = Permission.objects.get_or_create(
        slug="articles", defaults={"name": "Articles", "http_method": "", "http_path": "/admin/articles*"}
    )
    books, _ = Permission.objects.get_or_create(
        slug="library.books", defaults={"name": "Books", "http_path": "/admin/library/books*"}
    )
    roles, _ = Permission.objects.get_or_create(slug="auth.roles", defaults={"name": "Roles"})
    data.permissions = [articles, books, roles]

    Role.objects.get_or_create(slug=Role.ADMINISTRATOR, defaults={"name": "Administrator"})
    data.editor_role, _ = Role.objects.get_or_create(slug="editor", defaults={"name": "Editor"})
    data.editor_role.permissions.set([articles, books])

    data.editor, _ = get_user_model().objects.get_or_create(username="editor")
    data.editor.set_password(EDITOR_PASSWORD)
    data.editor.save()
    data.editor_role.administrators.add(data.editor)

    content, _ = Menu.objects.get_or_create(title="Content", defaults={"order": 1})
    articles_menu, _ = Menu.objects.get_or_create(title="Articles", defaults={"uri": "articles", "parent": content})
    library, _ = Menu.objects.get_or_create(title="Library", defaults={"uri": "library/books", "order": 2})
    library.permissions.set([books])
    admin_menu, _ = Menu.objects.get_or_create(title="Roles", defaults={"uri": "auth/roles", "order": 3})
    admin_menu.roles.set(Role.objects.filter(slug=Role.ADMINISTRATOR))
    data.menus = {"content": content, "articles": articles_menu, "library": library, "roles": admin_menu}


def seed_notes(data):
    from django.core.files.base import ContentFile
    from django.core.files.storage import default_storage
    from django.utils import timezone

    from tests.models import Note

    attachment = default_storage.save("notes/minutes.txt", ContentFile(b"meeting minutes"))
    note, _ = Note.objects.get_or_create(title="Meeting minutes", defaults={"attachment": attachment})
    data.notes = [note]
    data.deleted_note, _ = Note.objects.get_or_create(
        title="Binned draft", defaults={"deleted_at": timezone.now()}
    )


@pytest.fixture(scope="session")
def panel_data(django_db_setup, django_db_blocker):
    with django_db_blocker.unblock():
        data = PanelData()
        seed_catalogue(data)
        seed_access(data)
        seed_notes(data)
        return data


@pytest.fixture
def categories(panel_data):
    return panel_data.categories


@pytest.fixture
def tags(panel_data):
    return panel_data.tags


@pytest.fixture
def authors(panel_data):
    return panel_data.authors


@pytest.fixture
def notes(panel_data):
    return panel_data.notes


@pytest.fixture
def articles(categories, tags, django_db_blocker):
    with django_db_blocker.unblock():
        from tests.models import Article

        article, _ = Article.objects.get_or_create(
            slug="test-article",
            defaults={
                "title": "Test Article",
                "content": "This is test content",
                "status": "draft",
                "category": categories[0],
            },
        )
        article.tags.set([tags[0], tags[1]])
        return [article]


@pytest.fixture
def books(authors, django_db_blocker):
    with django_db_blocker.unblock():
        from tests.models import Book

        book, _ = Book.objects.get_or_create(
            title="Test Book",
            defaults={"author": authors[0], "publication_date": date(2024, 1, 15), "pages": 250},
        )
        return [book]


# ---- Browser sessions ----


def open_session(browser, django_server, username, password):
    """Log in through the plain form at ``/test-login/`` and keep the cookies."""
    admin_url = f"{django_server.url}/admin"
    context = browser.new_context()
    page = context.new_page()
    page.goto(f"{django_server.url}/test-login/?next={admin_url}/", wait_until="networkidle")
    page.locator('input[name="username"]').fill(username)
    page.locator('input[name="password"]').fill(password)
    page.locator('button[type="submit"]').click(no_wait_after=True)
    page.wait_for_url(f"{admin_url}/**", timeout=30000)
    page.close()
    return context


@pytest.fixture(scope="session")
def logged_in_context(browser, session_admin_user, django_server):
    context = open_session(browser, django_server, "admin", ADMIN_PASSWORD)
    yield context
    context.close()


@pytest.fixture(scope="session")
def editor_context(browser, panel_data, django_server):
    context = open_session(browser, django_server, "editor", EDITOR_PASSWORD)
    yield context
    context.close()


@pytest.fixture
def logged_in_page(logged_in_context):
    page = logged_in_context.new_page()
    yield page
    page.close()


@pytest.fixture
def editor_page(editor_context):
    page = editor_context.new_page()
    yield page
    page.close()
