"""Recomposition of translated documents."""

from layoutrans.render.pdf import LayoutCompositor, RenderConfig, compose_pdf

__all__ = ["LayoutCompositor", "RenderConfig", "compose_pdf"]
