from .resource import ResourceController

__all__ = ["ResourceController"]
