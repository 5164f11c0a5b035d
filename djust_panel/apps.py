from django.apps import AppConfig


class DjustPanelConfig(AppConfig):
    name = "djust_panel"
    verbose_name = "Djust Panel"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        from . import autodiscover
        from .adapters import register_panel_adapters

        register_panel_adapters()
        autodiscover()
