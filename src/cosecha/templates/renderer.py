"""HTML renderer for receipts and payment reports.

Renders a document variant to a standalone HTML page using Jinja2 templates.
Every page wraps its content in ``#document-root``, a fixed-width container on
an opaque white background, which is the element the export pipeline captures.
"""

import logging
from typing import Any

from jinja2 import Environment, PackageLoader, TemplateError, select_autoescape

from cosecha.config import CosechaConfig
from cosecha.models import Document, ReceiptDocument, SummaryDocument, TemplateKind
from cosecha.renderers.filters import format_cop, format_kg

logger = logging.getLogger(__name__)

ROOT_SELECTOR = "#document-root"

TEMPLATE_NAMES: dict[TemplateKind, str] = {
    TemplateKind.RECEIPT: "receipt.html.j2",
    TemplateKind.SUMMARY: "summary.html.j2",
}


class DocumentRenderer:
    """Renders document variants to HTML.

    Usage:
        renderer = DocumentRenderer(config)
        html = renderer.render(ReceiptDocument(entry))
    """

    def __init__(self, config: CosechaConfig | None = None) -> None:
        """Initialize the document renderer.

        Args:
            config: Cosecha configuration (farm name, container width)
        """
        self.config = config or CosechaConfig()

        self._env = Environment(
            loader=PackageLoader("cosecha", "templates"),
            autoescape=select_autoescape(["html", "html.j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._env.filters["cop"] = format_cop
        self._env.filters["kg"] = format_kg

    def render(self, document: Document) -> str:
        """Render a document to an HTML page.

        Args:
            document: Receipt or summary document

        Returns:
            Rendered HTML string

        Raises:
            ValueError: If the template is missing or fails to render
        """
        template_name = TEMPLATE_NAMES[document.kind]

        try:
            template = self._env.get_template(template_name)
        except TemplateError as e:
            logger.error("Failed to load template %s: %s", template_name, e)
            raise ValueError(f"Template not found: {template_name}") from e

        context = self._build_context(document)

        try:
            rendered = template.render(**context)
        except TemplateError as e:
            logger.error("Template rendering failed: %s", e)
            raise ValueError(f"Template rendering failed: {e}") from e

        logger.debug("Rendered %s document (%d characters)", document.kind.value, len(rendered))
        return rendered

    def _build_context(self, document: Document) -> dict[str, Any]:
        context: dict[str, Any] = {
            "farm_name": self.config.farm.name,
            "currency": self.config.farm.currency,
            "container_width": self.config.export.container_width,
        }

        if isinstance(document, ReceiptDocument):
            context["entry"] = document.entry.to_dict()
        elif isinstance(document, SummaryDocument):
            context["entries"] = [entry.to_dict() for entry in document.entries]
            context["totals"] = document.totals.to_dict()
            context["report_date"] = document.report_date
        else:
            raise ValueError(f"Unsupported document: {document!r}")

        return context
