"""Small helpers shared by the grid, form and show builders."""

import secrets
import string
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from django.db.models import Manager, QuerySet
from django.utils.html import conditional_escape, format_html_join
from django.utils.safestring import mark_safe

_ALPHABET = string.ascii_letters + string.digits


def random_id(prefix="", length=8):
    """Return ``prefix`` followed by ``length`` random alphanumerics."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(length))
    return f"{prefix}{suffix}"


def render(value, *args):
    """
    Turn anything a builder accepts as content into an HTML string.

    Callables are called with ``args`` first; objects exposing ``render()``
    are rendered; safe strings pass through; everything else is escaped.
    """
    if callable(value) and not hasattr(value, "render"):
        value = value(*args)
    if value is None:
        return ""
    if hasattr(value, "render") and not isinstance(value, str):
        value = value.render()
    if hasattr(value, "__html__"):
        return value.__html__()
    return str(conditional_escape(value))


def to_list(value, filter_empty=False):
    """Normalise comma strings, scalars, querysets and iterables into a list."""
    if value is None:
        items = []
    elif isinstance(value, str):
        items = value.split(",") if value else []
    elif isinstance(value, Manager):
        items = list(value.all())
    elif isinstance(value, (list, tuple, set, QuerySet)):
        items = list(value)
    else:
        items = [value]
    if filter_empty:
        items = [item for item in items if item not in ("", None)]
    return items


def humanize(name):
    """``publish_date`` / ``author.name`` -> ``Publish date`` / ``Author name``."""
    text = str(name).replace(".", " ").replace("_", " ").strip()
    return text[:1].upper() + text[1:]


def data_get(obj, key, default=None):
    """
    Resolve a dotted path against dicts, attributes and related managers.

    Related managers resolve to lists, so ``tags.name`` yields a list of names.
    """
    if key is None:
        return obj
    current = obj
    segments = str(key).split(".")
    for index, segment in enumerate(segments):
        if current is None:
            return default
        if isinstance(current, Manager):
            current = list(current.all())
        if isinstance(current, (list, tuple)):
            rest = ".".join(segments[index:])
            return [data_get(item, rest, default) for item in current]
        if isinstance(current, dict):
            current = current.get(segment, default)
        else:
            current = getattr(current, segment, default)
    if isinstance(current, Manager):
        current = list(current.all())
    return current


def html_attributes(attributes):
    """Render a dict of html attributes. ``None``/``False`` values are skipped."""
    pairs = []
    for name, value in (attributes or {}).items():
        if value is None or value is False:
            continue
        if value is True:
            value = name
        pairs.append((name, value))
    return format_html_join(" ", '{}="{}"', pairs)


def element_name(column):
    """``a.b.c`` -> ``a[b][c]``."""
    segments = str(column).split(".")
    if len(segments) == 1:
        return segments[0]
    return segments[0] + "".join(f"[{segment}]" for segment in segments[1:])


def url_with_query(url, query=None):
    """Merge ``query`` into ``url``. Keys mapped to ``None`` are removed."""
    parts = urlsplit(url)
    params = dict(parse_qsl(parts.query, keep_blank_values=True))
    for key, value in (query or {}).items():
        if value is None:
            params.pop(key, None)
        else:
            params[key] = value
    return urlunsplit(parts._replace(query=urlencode(params, doseq=True)))


def url_without_query(url, keys):
    return url_with_query(url, {key: None for key in to_list(keys)})


def full_url(request):
    """Current url with its query string, or ``""`` without a request."""
    if request is None:
        return ""
    return request.get_full_path()


def is_ajax(request):
    if request is None:
        return False
    return (
        request.headers.get("x-requested-with") == "XMLHttpRequest"
        or "application/json" in request.headers.get("accept", "")
    )


def join_html(parts, separator=""):
    return mark_safe(separator.join(render(part) for part in parts))
