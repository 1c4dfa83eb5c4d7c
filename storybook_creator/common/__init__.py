"""
Common utilities shared across storybook modules.
"""

from .config import (
    IllustrationConfig,
    RenderingConfig,
    StorybookConfig,
    TextModelConfig,
    load_config,
)
from .errors import (
    ExtractionError,
    GenerationError,
    InvalidPage,
    InvalidPromptError,
    MalformedJson,
    MissingField,
    NoJsonFound,
    RenderError,
    StorybookError,
    TextServiceError,
    ValidationError,
    WrongPageCount,
    describe_failure,
)
from .llm import (
    ChatResult,
    CompletionCallable,
    LiteLLMTextService,
    TextGenerationService,
    call_chat_completion,
)

__all__ = [
    "ChatResult",
    "CompletionCallable",
    "call_chat_completion",
    "LiteLLMTextService",
    "TextGenerationService",
    "IllustrationConfig",
    "RenderingConfig",
    "StorybookConfig",
    "TextModelConfig",
    "load_config",
    "StorybookError",
    "InvalidPromptError",
    "TextServiceError",
    "ExtractionError",
    "NoJsonFound",
    "MalformedJson",
    "ValidationError",
    "MissingField",
    "WrongPageCount",
    "InvalidPage",
    "GenerationError",
    "RenderError",
    "describe_failure",
]
