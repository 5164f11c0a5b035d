"""Exceptions raised by djust-panel."""


class PanelError(Exception):
    """Base class for djust-panel errors."""


class BreadcrumbFormatError(PanelError, ValueError):
    """Raised when breadcrumb items are neither text/url pairs nor dicts with ``text``."""


class UploadError(PanelError):
    """Raised when an uploaded file cannot be stored."""
