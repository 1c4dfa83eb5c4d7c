"""
LiteLLM-powered text generation collaborator.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, MutableMapping, Protocol, Sequence

from litellm import completion

from .config import TextModelConfig
from .errors import TextServiceError

ChatMessage = Mapping[str, Any]

logger = logging.getLogger(__name__)


@dataclass
class ChatResult:
    """
    Structured response returned from an LLM chat completion.
    """

    text: str
    raw: Any


CompletionCallable = Callable[..., ChatResult]


class TextGenerationService(Protocol):
    def complete(self, prompt_text: str) -> str:
        ...


def call_chat_completion(
    *,
    model: str,
    messages: Sequence[ChatMessage],
    temperature: float | None = None,
    max_tokens: int | None = None,
    api_key: str | None = None,
    **extra_kwargs: Any,
) -> ChatResult:
    """
    Invoke LiteLLM's `completion` API and return the consolidated text.
    """
    payload: MutableMapping[str, Any] = {
        "model": model,
        "messages": list(messages),
    }

    if temperature is not None:
        payload["temperature"] = temperature

    if max_tokens is not None:
        payload["max_tokens"] = max_tokens

    if api_key is not None:
        payload["api_key"] = api_key

    payload.update(extra_kwargs)

    response = completion(**payload)

    try:
        message = response["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise TextServiceError("Unexpected LiteLLM response format.") from exc

    text = str(message or "").strip()
    return ChatResult(text=text, raw=response)


class LiteLLMTextService:
    """
    TextGenerationService that sends the prompt as a single user message.
    """

    def __init__(
        self,
        config: TextModelConfig,
        *,
        completion_fn: CompletionCallable | None = None,
    ) -> None:
        self._config = config
        self._completion_fn: CompletionCallable = completion_fn or call_chat_completion

    @property
    def model(self) -> str:
        """Return the model identifier in use."""
        return self._config.model

    def complete(self, prompt_text: str) -> str:
        logger.debug("Requesting completion from %s", self._config.model)
        try:
            result = self._completion_fn(
                model=self._config.model,
                messages=[{"role": "user", "content": prompt_text}],
                temperature=self._config.temperature,
                max_tokens=self._config.max_tokens,
                api_key=self._config.api_key,
                timeout=self._config.timeout,
            )
        except TextServiceError:
            raise
        except Exception as exc:
            raise TextServiceError(
                f"Text generation request to {self._config.model} failed: {type(exc).__name__}"
            ) from exc

        if not result.text:
            raise TextServiceError("LLM response did not contain any text content.")

        return result.text
