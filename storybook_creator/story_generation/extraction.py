"""
Locate and parse the JSON payload embedded in free-form model output.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Optional, Sequence

from storybook_creator.common.errors import MalformedJson, NoJsonFound

SpanFinder = Callable[[str], Optional[str]]

_OUTER_BRACES = re.compile(r"\{.*\}", re.DOTALL)
_FENCED_JSON = re.compile(r"```json\s*(\{.*?\})\s*```", re.DOTALL)


def outer_brace_span(raw_text: str) -> str | None:
    """First ``{`` through the last ``}``."""
    match = _OUTER_BRACES.search(raw_text)
    return match.group(0) if match else None


def fenced_json_span(raw_text: str) -> str | None:
    """Inner content of a code fence labelled ``json``."""
    match = _FENCED_JSON.search(raw_text)
    return match.group(1) if match else None


DEFAULT_STRATEGIES: tuple[SpanFinder, ...] = (outer_brace_span, fenced_json_span)


class ResponseExtractor:
    """
    Tries each span strategy in order and returns the first span that parses as JSON.

    There is deliberately no repair step: unbalanced braces or trailing commas surface
    as :class:`MalformedJson` and are left to a retry at the generation level.
    """

    def __init__(self, strategies: Sequence[SpanFinder] = DEFAULT_STRATEGIES) -> None:
        self._strategies = tuple(strategies)

    def extract_json_text(self, raw_text: str) -> str:
        span, _ = self._extract(raw_text)
        return span

    def extract(self, raw_text: str) -> Any:
        _, parsed = self._extract(raw_text)
        return parsed

    def _extract(self, raw_text: str) -> tuple[str, Any]:
        first_error: Exception | None = None
        for strategy in self._strategies:
            span = strategy(raw_text)
            if span is None:
                continue
            try:
                return span, json.loads(span)
            except (json.JSONDecodeError, RecursionError) as exc:
                if first_error is None:
                    first_error = exc

        if first_error is not None:
            raise MalformedJson(str(first_error)) from first_error
        raise NoJsonFound()
