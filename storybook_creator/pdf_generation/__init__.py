"""
Document composition and PDF rendering for storybooks.
"""

from .builder import PAGE_SIZES, StorybookPDFBuilder
from .composer import (
    DocumentComposer,
    DocumentRenderingService,
    DocumentSection,
    RenderedDocument,
    build_sections,
    storybook_filename,
)

__all__ = [
    "PAGE_SIZES",
    "StorybookPDFBuilder",
    "DocumentComposer",
    "DocumentRenderingService",
    "DocumentSection",
    "RenderedDocument",
    "build_sections",
    "storybook_filename",
]
