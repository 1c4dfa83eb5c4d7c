"""
Typed failures raised by the storybook pipeline.

Every error carries a ``kind`` (the component that failed) and a human-readable
``detail``. Extraction and validation errors additionally expose a ``reason``
naming the specific variant.
"""

from __future__ import annotations

from typing import Any


class StorybookError(Exception):
    """
    Base class for all classified pipeline failures.
    """

    kind = "storybook"
    reason: str | None = None

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"kind": self.kind, "detail": self.detail}
        if self.reason is not None:
            payload["reason"] = self.reason
        return payload


class InvalidPromptError(StorybookError):
    """Raised when a prompt is empty or exceeds the length ceiling."""

    kind = "invalid_prompt"


class TextServiceError(StorybookError):
    """Raised by text-generation collaborators on transport or quota failures."""

    kind = "text_service"


# ---------------------------------------------------------------------- extraction


class ExtractionError(StorybookError):
    kind = "extraction"


class NoJsonFound(ExtractionError):
    reason = "no_json_found"

    def __init__(self) -> None:
        super().__init__("No JSON object found in the model response.")


class MalformedJson(ExtractionError):
    reason = "malformed_json"

    def __init__(self, parser_message: str) -> None:
        super().__init__(f"Model response contained malformed JSON: {parser_message}")
        self.parser_message = parser_message


# ---------------------------------------------------------------------- validation


class ValidationError(StorybookError):
    kind = "validation"


class MissingField(ValidationError):
    reason = "missing_field"

    def __init__(self, field: str) -> None:
        super().__init__(f"Story is missing required field '{field}'.")
        self.field = field


class WrongPageCount(ValidationError):
    reason = "wrong_page_count"

    def __init__(self, actual: int, expected: int = 5) -> None:
        super().__init__(f"Expected {expected} pages, got {actual}.")
        self.actual = actual
        self.expected = expected


class InvalidPage(ValidationError):
    reason = "invalid_page"

    def __init__(self, index: int, field: str) -> None:
        super().__init__(f"Page at index {index} has a missing or invalid '{field}'.")
        self.index = index
        self.field = field


# ---------------------------------------------------------------------- wrappers


class GenerationError(StorybookError):
    """
    Story generation failed; ``cause`` holds the originating error.
    """

    kind = "generation"

    def __init__(self, cause: BaseException, detail: str | None = None) -> None:
        super().__init__(detail or f"Story generation failed: {cause}")
        self.cause = cause

    @property
    def reason(self) -> str | None:  # type: ignore[override]
        if isinstance(self.cause, StorybookError):
            return self.cause.reason or self.cause.kind
        return TextServiceError.kind

    @property
    def cause_kind(self) -> str:
        if isinstance(self.cause, StorybookError):
            return self.cause.kind
        return TextServiceError.kind


class RenderError(StorybookError):
    """Raised when the document rendering collaborator fails."""

    kind = "render"


FRIENDLY_MESSAGES = {
    "invalid_prompt": "Please enter a story idea of at most 500 characters.",
    "text_service": "The AI story service is unavailable right now. Please try again.",
    "extraction": "AI service returned an invalid response. Please try again.",
    "validation": "Failed to parse story content. Please try with a different prompt.",
    "render": "Failed to create PDF. Please try again.",
}

DEFAULT_FRIENDLY_MESSAGE = "Failed to generate storybook."


def describe_failure(error: BaseException) -> str:
    """
    Map an error onto a short user-facing message without internal diagnostics.
    """
    if isinstance(error, GenerationError):
        return FRIENDLY_MESSAGES.get(error.cause_kind, DEFAULT_FRIENDLY_MESSAGE)
    if isinstance(error, StorybookError):
        return FRIENDLY_MESSAGES.get(error.kind, DEFAULT_FRIENDLY_MESSAGE)
    return DEFAULT_FRIENDLY_MESSAGE
