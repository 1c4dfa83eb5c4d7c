"""
Service layer that turns a prompt into a validated five-page story.
"""

from __future__ import annotations

import logging

from storybook_creator.common import GenerationError, StorybookError, TextGenerationService

from .extraction import ResponseExtractor
from .models import StoryDocument
from .prompting import build_story_prompt
from .validation import SchemaValidator

logger = logging.getLogger(__name__)

REDACTED = "[prompt redacted]"


class StoryGenerator:
    """
    Prompts the text model once and validates its answer.

    Retries are not attempted here; callers that want them re-invoke
    :meth:`generate` with the same prompt.
    """

    def __init__(
        self,
        text_service: TextGenerationService,
        *,
        extractor: ResponseExtractor | None = None,
        validator: SchemaValidator | None = None,
    ) -> None:
        self._text_service = text_service
        self._extractor = extractor or ResponseExtractor()
        self._validator = validator or SchemaValidator()

    def generate(self, prompt_text: str) -> StoryDocument:
        prompt = build_story_prompt(prompt_text)

        try:
            raw_text = self._text_service.complete(prompt)
        except Exception as exc:
            raise self._wrap(exc, prompt_text) from exc

        logger.debug("Received %d characters from the text model", len(raw_text))

        try:
            candidate = self._extractor.extract(raw_text)
            story = self._validator.validate(candidate)
        except StorybookError as exc:
            raise self._wrap(exc, prompt_text) from exc

        logger.info("Generated story %r", story.title)
        return story

    @staticmethod
    def _wrap(exc: BaseException, prompt_text: str) -> GenerationError:
        message = str(exc)
        if prompt_text.strip():
            message = message.replace(prompt_text, REDACTED)
        error = GenerationError(exc, detail=f"Story generation failed: {message}")
        logger.warning("Story generation failed (%s)", error.reason)
        return error
