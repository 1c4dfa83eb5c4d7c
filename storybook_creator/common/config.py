"""
Explicit configuration objects handed to the storybook collaborators at start-up.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

DEFAULT_STORY_MODEL = "gemini/gemini-1.5-flash"

_API_KEY_VARIABLES = (
    "STORYBOOK_API_KEY",
    "GEMINI_API_KEY",
    "OPENAI_API_KEY",
    "LITELLM_API_KEY",
)
_MODEL_VARIABLES = ("STORYBOOK_STORY_MODEL", "LITELLM_STORY_MODEL", "LITELLM_MODEL")


@dataclass(frozen=True)
class TextModelConfig:
    model: str = DEFAULT_STORY_MODEL
    api_key: str | None = None
    temperature: float = 0.7
    max_tokens: int = 1500
    timeout: float = 120.0


@dataclass(frozen=True)
class IllustrationConfig:
    width: int = 400
    height: int = 300
    builder: str = "picsum"
    base_url: str | None = None


@dataclass(frozen=True)
class RenderingConfig:
    page_size: str = "a4"
    margin_mm: float = 20.0
    request_timeout: float = 30.0
    staging_dir: str | None = None


@dataclass(frozen=True)
class StorybookConfig:
    """
    Top-level configuration for one storybook process.
    """

    text: TextModelConfig = field(default_factory=TextModelConfig)
    illustration: IllustrationConfig = field(default_factory=IllustrationConfig)
    rendering: RenderingConfig = field(default_factory=RenderingConfig)
    max_generation_attempts: int = 1

    def __post_init__(self) -> None:
        if self.max_generation_attempts < 1:
            raise ValueError("max_generation_attempts must be at least 1.")


def load_config(
    path: Path | str | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> StorybookConfig:
    """
    Build the configuration from defaults, an optional YAML file, then the environment.
    """
    environ = os.environ if env is None else env
    config = StorybookConfig()

    if path is not None:
        config = _apply_file(config, Path(path))

    return _apply_environment(config, environ)


def _apply_file(config: StorybookConfig, path: Path) -> StorybookConfig:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, Mapping):
        raise ValueError("Storybook config YAML must deserialize to a mapping.")

    unknown = set(data) - {"text", "illustration", "rendering", "pipeline"}
    if unknown:
        raise ValueError(f"Unknown config sections: {', '.join(sorted(unknown))}.")

    text = _merge_section(config.text, data.get("text"), "text")
    illustration = _merge_section(config.illustration, data.get("illustration"), "illustration")
    rendering = _merge_section(config.rendering, data.get("rendering"), "rendering")

    pipeline = data.get("pipeline") or {}
    if not isinstance(pipeline, Mapping):
        raise ValueError("Config section 'pipeline' must be a mapping.")
    attempts = pipeline.get("max_generation_attempts", config.max_generation_attempts)

    return StorybookConfig(
        text=text,
        illustration=illustration,
        rendering=rendering,
        max_generation_attempts=_coerce_int(attempts, "max_generation_attempts"),
    )


def _merge_section(current: Any, overrides: Any, name: str) -> Any:
    if overrides is None:
        return current
    if not isinstance(overrides, Mapping):
        raise ValueError(f"Config section '{name}' must be a mapping.")

    allowed = {item.name: item for item in fields(current)}
    unknown = set(overrides) - set(allowed)
    if unknown:
        raise ValueError(f"Unknown keys in '{name}': {', '.join(sorted(unknown))}.")

    coerced: dict[str, Any] = {}
    for key, value in overrides.items():
        default = getattr(current, key)
        if value is None or default is None or isinstance(default, str):
            coerced[key] = value
        elif isinstance(default, int):
            coerced[key] = _coerce_int(value, key)
        elif isinstance(default, float):
            try:
                coerced[key] = float(value)
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Expected a number for '{key}', got {value!r}.") from exc
        else:
            coerced[key] = value
    return replace(current, **coerced)


def _apply_environment(config: StorybookConfig, env: Mapping[str, str]) -> StorybookConfig:
    text = config.text
    model = _first_env(env, _MODEL_VARIABLES)
    if model:
        text = replace(text, model=model)
    api_key = _first_env(env, _API_KEY_VARIABLES)
    if api_key:
        text = replace(text, api_key=api_key)

    illustration = config.illustration
    builder = env.get("STORYBOOK_ILLUSTRATIONS")
    if builder:
        illustration = replace(illustration, builder=builder)

    rendering = config.rendering
    staging_dir = env.get("STORYBOOK_STAGING_DIR")
    if staging_dir:
        rendering = replace(rendering, staging_dir=staging_dir)

    attempts = config.max_generation_attempts
    if env.get("STORYBOOK_MAX_ATTEMPTS"):
        attempts = _coerce_int(env["STORYBOOK_MAX_ATTEMPTS"], "STORYBOOK_MAX_ATTEMPTS")

    return replace(
        config,
        text=text,
        illustration=illustration,
        rendering=rendering,
        max_generation_attempts=attempts,
    )


def _first_env(env: Mapping[str, str], names: tuple[str, ...]) -> str | None:
    for name in names:
        value = env.get(name)
        if value:
            return value
    return None


def _coerce_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Expected an integer for '{name}', got {value!r}.")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Expected an integer for '{name}', got {value!r}.") from exc
