"""
Assemble a validated story and its illustrations into renderable sections.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from typing import Literal, Protocol, Sequence

from storybook_creator.common import RenderError
from storybook_creator.illustration import IllustrationRef
from storybook_creator.story_generation import StoryDocument

logger = logging.getLogger(__name__)

TITLE_SUBTITLE = "A Magical Story Created with AI"
PDF_MEDIA_TYPE = "application/pdf"


@dataclass(frozen=True)
class DocumentSection:
    kind: Literal["title", "page"]
    heading: str
    body: str
    illustration: str | None = None
    page_number: int | None = None


@dataclass(frozen=True)
class RenderedDocument:
    content: bytes
    filename: str
    media_type: str = PDF_MEDIA_TYPE


class DocumentRenderingService(Protocol):
    def render(self, sections: Sequence[DocumentSection]) -> bytes:
        ...


def build_sections(
    story: StoryDocument,
    illustrations: Sequence[IllustrationRef],
) -> list[DocumentSection]:
    """
    One title section followed by one section per page, paired with illustrations by position.
    """
    if len(illustrations) != len(story.pages):
        raise ValueError(
            f"Expected {len(story.pages)} illustrations, received {len(illustrations)}."
        )

    sections = [
        DocumentSection(
            kind="title",
            heading=story.title,
            body=story.characters_summary or "",
        )
    ]
    for page, illustration in zip(story.pages, illustrations):
        sections.append(
            DocumentSection(
                kind="page",
                heading=f"Page {page.page_number}",
                body=page.narrative_text,
                illustration=illustration.url,
                page_number=page.page_number,
            )
        )
    return sections


def storybook_filename(title: str, *, timestamp_ms: int | None = None) -> str:
    safe_title = re.sub(r"[^a-zA-Z0-9\s]", "", title)
    safe_title = re.sub(r"\s+", "_", safe_title.strip())
    stamp = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    return f"{safe_title or 'storybook'}_{stamp}.pdf"


class DocumentComposer:
    """
    Builds the section list and delegates layout-to-binary conversion to a renderer.
    """

    def __init__(self, renderer: DocumentRenderingService) -> None:
        self._renderer = renderer

    def compose(
        self,
        story: StoryDocument,
        illustrations: Sequence[IllustrationRef],
    ) -> RenderedDocument:
        sections = build_sections(story, illustrations)

        try:
            content = self._renderer.render(sections)
        except RenderError:
            raise
        except Exception as exc:
            raise RenderError(f"Failed to render PDF: {exc}") from exc

        logger.info("Rendered %d sections into %d bytes", len(sections), len(content))
        return RenderedDocument(content=content, filename=storybook_filename(story.title))
