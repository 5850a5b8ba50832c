"""Investigation template catalog."""

from .templates import TEMPLATE_SCHEMA, get_template, get_templates

__all__ = [
    "TEMPLATE_SCHEMA",
    "get_template",
    "get_templates",
]
