"""
Structural validation of parsed model output against the storybook schema.
"""

from __future__ import annotations

from typing import Any, Mapping

from storybook_creator.common.errors import InvalidPage, MissingField, WrongPageCount

from .models import PAGE_COUNT, PageDraft, StoryDocument

_PAGE_FIELDS = ("pageNumber", "text", "imagePrompt")


def _non_empty_text(value: Any) -> str | None:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def _is_present(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _coerce_page_number(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        stripped = value.strip()
        # isdigit() also admits superscripts and other digits int() rejects
        if stripped.isascii() and stripped.isdigit():
            return int(stripped)
    return None


class SchemaValidator:
    """
    Turns a parsed candidate object into a :class:`StoryDocument`.

    Checks run in a fixed order and stop at the first failure:

    1. ``title`` is a non-empty string.
    2. ``pages`` is a list.
    3. there are exactly five pages.
    4. each page has non-empty ``pageNumber``, ``text`` and ``imagePrompt``, and its
       ``pageNumber`` equals its 1-based position.
    """

    def __init__(self, page_count: int = PAGE_COUNT) -> None:
        self._page_count = page_count

    def validate(self, candidate: Any) -> StoryDocument:
        if not isinstance(candidate, Mapping):
            raise MissingField("title")

        title = _non_empty_text(candidate.get("title"))
        if title is None:
            raise MissingField("title")

        pages = candidate.get("pages")
        if not isinstance(pages, (list, tuple)):
            raise MissingField("pages")

        if len(pages) != self._page_count:
            raise WrongPageCount(len(pages), expected=self._page_count)

        drafts = tuple(self._validate_page(index, page) for index, page in enumerate(pages))

        return StoryDocument(
            title=title,
            pages=drafts,
            characters_summary=_non_empty_text(candidate.get("characters")),
        )

    @staticmethod
    def _validate_page(index: int, page: Any) -> PageDraft:
        if not isinstance(page, Mapping):
            raise InvalidPage(index, "page")

        for field in _PAGE_FIELDS:
            if not _is_present(page.get(field)):
                raise InvalidPage(index, field)

        text = _non_empty_text(page["text"])
        if text is None:
            raise InvalidPage(index, "text")
        image_prompt = _non_empty_text(page["imagePrompt"])
        if image_prompt is None:
            raise InvalidPage(index, "imagePrompt")

        page_number = _coerce_page_number(page["pageNumber"])
        if page_number != index + 1:
            raise InvalidPage(index, "pageNumber")

        return PageDraft(
            page_number=page_number,
            narrative_text=text,
            illustration_description=image_prompt,
        )
