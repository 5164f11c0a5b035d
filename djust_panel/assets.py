"""
Per-request asset collection.

Builders (grids, displayers, modal forms, charts) register the inline scripts
and static files they need while rendering; ``Content.render`` drains the
collector into the page.
"""

from contextvars import ContextVar

from django.templatetags.static import static
from django.utils.html import format_html, format_html_join
from django.utils.safestring import mark_safe

_assets = ContextVar("djust_panel_assets", default=None)


def _bucket():
    bucket = _assets.get()
    if bucket is None:
        bucket = {"js": [], "css": [], "script": []}
        _assets.set(bucket)
    return bucket


def _add(kind, items):
    bucket = _bucket()[kind]
    if isinstance(items, str):
        items = [items]
    for item in items:
        if item not in bucket:
            bucket.append(item)


def js(urls):
    _add("js", urls)


def css(urls):
    _add("css", urls)


def script(code):
    """Register an inline script. Identical scripts are only emitted once."""
    _add("script", code)


def collect():
    """Return the collected assets and reset the collector."""
    bucket = _bucket()
    _assets.set(None)
    return bucket


def render(bucket=None):
    bucket = bucket if bucket is not None else collect()
    css_tags = format_html_join(
        "", '<link rel="stylesheet" href="{}">', ((_url(u),) for u in bucket["css"])
    )
    js_tags = format_html_join("", '<script src="{}"></script>', ((_url(u),) for u in bucket["js"]))
    scripts = ""
    if bucket["script"]:
        scripts = format_html("<script>{}</script>", mark_safe("\n".join(bucket["script"])))
    return mark_safe(css_tags + js_tags + scripts)


def _url(path):
    if path.startswith(("http://", "https://", "//", "/")):
        return path
    return static(path)
