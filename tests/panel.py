"""Panel resources and plugins for the test models."""

from django.utils.text import slugify

from djust_panel import register, site
from djust_panel.controllers import ResourceController
from djust_panel.dashboard import NavItem, PanelPlugin
from djust_panel.form import Form
from djust_panel.grid import Grid
from djust_panel.repository import ModelRepository
from djust_panel.show import Show
from djust_panel.widgets import Bar, DashboardWidget

from .models import Article, Book, Category, Note, Tag


@register("articles")
class ArticleController(ResourceController):
    """Articles with FK, M2M, choices, uploads and inline editing."""

    model = Article
    title = "Articles"

    def grid(self):
        grid = Grid(ModelRepository(Article, ["category", "tags"]), request=self.request)
        grid.column("id", "ID").sortable()
        grid.column("title").sortable()
        grid.column("category.name", "Category")
        grid.column("tags.name", "Tags").label()
        grid.column("status").using(dict(Article.STATUS_CHOICES))
        grid.column("is_featured", "Featured").switch("green")
        grid.column("views").sortable()

        grid.quick_search()

        panel = grid.filter()
        panel.equal("status")
        panel.like("title")
        panel.scope("featured", "Featured", lambda qs: qs.filter(is_featured=True))

        grid.show_exporter()
        return grid

    def detail(self, pk):
        show = Show(pk, ModelRepository(Article, ["category", "tags"]), request=self.request)
        show.field("id", "ID")
        show.field("title")
        show.field("status").using(dict(Article.STATUS_CHOICES))
        show.divider()
        show.field("category.name", "Category")
        show.field("tags.name", "Tags").label()
        return show

    def form(self):
        form = Form(ModelRepository(Article), request=self.request)
        form.display("id", "ID").set_display(lambda form: form.builder().is_editing())
        form.text("title").required()
        form.text("slug")
        form.textarea("content")
        form.select("status").options(dict(Article.STATUS_CHOICES)).default("draft")
        form.radio("is_featured", "Featured").options({1: "Yes", 0: "No"}).default(0)
        form.select("category").options(lambda value: Category.objects.values_list("id", "name"))
        form.multiple_select("tags").options(lambda value: Tag.objects.values_list("id", "name"))
        form.number("views").min(0)
        form.image("cover").dir("covers")
        form.multiple_file("attachments").dir("attachments").limit(3)

        form.saving(self.fill_slug)
        return form

    @staticmethod
    def fill_slug(form, values):
        if not values.get("slug") and values.get("title"):
            values["slug"] = slugify(values["title"])


@register("categories")
class CategoryController(ResourceController):
    model = Category


@register("library/books")
class BookController(ResourceController):
    model = Book
    relations = ["author"]
    permission = "library.books"


@register("notes")
class NoteController(ResourceController):
    """Soft deleting resource."""

    model = Note

    def form(self):
        form = Form(ModelRepository(Note), request=self.request)
        form.text("title").required()
        form.file("attachment").dir("notes")
        return form


def article_count(request):
    return f"{Article.objects.count()} articles"


def status_chart(request):
    counts = [Article.objects.filter(status=value).count() for value, _ in Article.STATUS_CHOICES]
    return Bar("Articles by status", [label for _, label in Article.STATUS_CHOICES]).add("Articles", counts)


class ReportsPlugin(PanelPlugin):
    name = "reports"
    verbose_name = "Reports"

    def get_widgets(self):
        return [
            DashboardWidget(article_count, widget_id="article_count", label="Articles", order=1),
            DashboardWidget(status_chart, widget_id="status_chart", label="Status", order=2, size="lg"),
            DashboardWidget(
                "Revenue", widget_id="revenue", label="Revenue", order=3, permission="reports.revenue"
            ),
        ]

    def get_nav_items(self):
        return [
            NavItem("All articles", url_name="articles_index", section="Content", order=1),
            NavItem("Documentation", url="https://example.com/docs", order=2),
        ]


site.register_plugin(ReportsPlugin)
