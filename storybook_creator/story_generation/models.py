"""
In-memory representations of a storybook request and its validated story.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from storybook_creator.common.errors import InvalidPromptError

PAGE_COUNT = 5
MAX_PROMPT_LENGTH = 500


@dataclass(frozen=True)
class StoryRequest:
    """
    A single storybook request; the prompt must be non-blank and at most 500 characters.
    """

    prompt_text: str

    def __post_init__(self) -> None:
        if not isinstance(self.prompt_text, str) or not self.prompt_text.strip():
            raise InvalidPromptError("Prompt is required.")
        if len(self.prompt_text) > MAX_PROMPT_LENGTH:
            raise InvalidPromptError(
                f"Prompt is too long. Please keep it under {MAX_PROMPT_LENGTH} characters."
            )


@dataclass(frozen=True)
class PageDraft:
    page_number: int
    narrative_text: str
    illustration_description: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "pageNumber": self.page_number,
            "text": self.narrative_text,
            "imagePrompt": self.illustration_description,
        }


@dataclass(frozen=True)
class StoryDocument:
    """
    A validated five-page story. Instances are only built by the schema validator.
    """

    title: str
    pages: tuple[PageDraft, ...]
    characters_summary: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"title": self.title}
        if self.characters_summary:
            payload["characters"] = self.characters_summary
        payload["pages"] = [page.as_dict() for page in self.pages]
        return payload
