from .content import Content
from .row import Column, Row

__all__ = ["Content", "Row", "Column"]
