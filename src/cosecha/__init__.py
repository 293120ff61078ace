"""Cosecha - Coffee harvest payment records.

Cosecha logs harvest entries for a coffee farm (picker, kilograms, price per
kilogram) and exports payment receipts and aggregate payment reports as PDF
documents.

Core principles:
- In-Memory Session: Entries live only as long as the session that created them
- Immutable Records: An entry's total is fixed when it is created
- Faithful Capture: Documents are rasterized from the rendered layout, never re-typeset
- Guaranteed Cleanup: Off-screen renderings never outlive the export that made them
"""

__version__ = "0.1.0"
__author__ = "Cosecha Contributors"
