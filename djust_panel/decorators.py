"""
Decorators for djust-panel.
"""


def register(*prefixes, site=None):
    """
    Register a resource controller under one or more url prefixes.

        from djust_panel import register
        from djust_panel.controllers import ResourceController

        @register("articles")
        class ArticleController(ResourceController):
            model = Article

    Or with a specific site:

        panel = PanelSite(name="backoffice")

        @register("articles", site=panel)
        class ArticleController(ResourceController):
            model = Article
    """
    from . import site as default_site

    def decorator(controller_class):
        panel_site = site or default_site

        if not prefixes:
            raise ValueError("At least one url prefix must be provided to register()")

        for prefix in prefixes:
            panel_site.register(prefix, controller_class)

        return controller_class

    return decorator


def displayer(name):
    """
    Make a displayer class available on every grid column as ``column.<name>(...)``.

        @displayer("money")
        class Money(AbstractDisplayer):
            def display(self, currency="$"):
                return f"{currency}{self.value:.2f}"
    """
    from .grid.column import Column

    def decorator(displayer_class):
        Column.extend(name, displayer_class)
        return displayer_class

    return decorator


def form_field(name):
    """
    Make a field class available on every form as ``form.<name>(column, label)``.

        @form_field("color")
        class Color(Text):
            input_type = "color"
    """
    from .form import Form

    def decorator(field_class):
        Form.extend(name, field_class)
        return field_class

    return decorator
