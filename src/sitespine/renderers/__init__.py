"""Renderer steps and the template engine."""

from sitespine.renderers.base import (
    CustomRenderer,
    Renderer,
    RendererPipeline,
    TemplateRenderer,
    load_and_apply_template,
)
from sitespine.renderers.templates import TemplateEngine, date_fmt, sort_by_key

__all__ = [
    "Renderer",
    "TemplateRenderer",
    "RendererPipeline",
    "CustomRenderer",
    "load_and_apply_template",
    "TemplateEngine",
    "sort_by_key",
    "date_fmt",
]
