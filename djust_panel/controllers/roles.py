from django.http import JsonResponse

from ..form import Form
from ..grid import Grid
from ..grid.mini import MiniGrid
from ..models import Permission, Role
from ..repository import ModelRepository
from ..show import Show
from .resource import ResourceController


class RoleController(ResourceController):
    model = Role
    title = "Roles"
    permission = "auth.roles"

    MINI_QUERY_NAME = "_mini"

    def is_mini(self):
        return bool(self.request.GET.get(self.MINI_QUERY_NAME))

    def grid(self):
        if self.is_mini():
            return self.mini_grid()

        grid = Grid(ModelRepository(Role, ["permissions"]), request=self.request)
        grid.column("id", "ID").sortable()
        grid.column("slug").label("primary")
        grid.column("name")
        grid.column("permissions.name", "Permissions").label("primary")
        grid.column("created_at")
        grid.column("updated_at").sortable()

        grid.quick_search(["id", "name", "slug"])
        grid.actions(lambda actions, record: actions.disable_delete(Role.is_administrator(record.slug)))
        return grid

    def mini_grid(self):
        grid = MiniGrid(ModelRepository(Role), request=self.request)
        grid.column("id", "ID").sortable()
        grid.column("slug")
        grid.column("name")
        panel = grid.filter()
        panel.like("slug")
        panel.like("name")
        return grid

    def detail(self, pk):
        show = Show(pk, ModelRepository(Role, ["permissions"]), request=self.request)
        show.field("id", "ID")
        show.field("slug")
        show.field("name")
        show.field("permissions.name", "Permissions").label()
        show.field("created_at")
        show.field("updated_at")
        if str(pk) == str(Role.ADMINISTRATOR_ID):
            show.disable_delete_button()
        return show

    def form(self):
        form = Form(ModelRepository(Role), request=self.request)
        form.display("id", "ID").set_display(lambda form: form.builder().is_editing())
        form.text("slug").required()
        form.text("name").required()
        form.multiple_select("permissions", "Permissions").options(
            lambda value: Permission.objects.values_list("id", "name")
        )
        form.display("created_at").set_display(lambda form: form.builder().is_editing())
        form.display("updated_at").set_display(lambda form: form.builder().is_editing())

        form.editing(lambda form: form.disable_delete_button(Role.is_administrator(form.record.slug)))
        form.deleting(self.guard_administrator)
        return form

    def guard_administrator(self, form, ids):
        if Role.objects.filter(pk__in=ids, slug=Role.ADMINISTRATOR).exists():
            return JsonResponse({"status": False, "message": "The administrator role cannot be deleted."})
        return None
