"""Cosecha document templates.

Jinja2 HTML layouts for the receipt and summary documents, and the renderer
that selects one per document variant.
"""

from cosecha.templates.renderer import ROOT_SELECTOR, DocumentRenderer

__all__ = ["DocumentRenderer", "ROOT_SELECTOR"]
