"""
Orchestrates one storybook request from prompt to rendered PDF.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from tenacity import Retrying, before_sleep_log, retry_if_exception_type, stop_after_attempt

from storybook_creator.common import (
    GenerationError,
    LiteLLMTextService,
    StorybookConfig,
    StorybookError,
)
from storybook_creator.illustration import (
    IllustrationRef,
    IllustrationResolver,
    make_reference_builder,
)
from storybook_creator.pdf_generation import (
    DocumentComposer,
    RenderedDocument,
    StorybookPDFBuilder,
)
from storybook_creator.story_generation import StoryDocument, StoryGenerator, StoryRequest

ProgressCallback = Callable[[str, dict[str, Any]], None]

logger = logging.getLogger(__name__)


class PipelineState(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    RESOLVING = "resolving"
    COMPOSING = "composing"
    DONE = "done"
    FAILED = "failed"


_TRANSITIONS: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.IDLE: frozenset({PipelineState.GENERATING}),
    PipelineState.GENERATING: frozenset({PipelineState.RESOLVING, PipelineState.FAILED}),
    PipelineState.RESOLVING: frozenset({PipelineState.COMPOSING, PipelineState.FAILED}),
    PipelineState.COMPOSING: frozenset({PipelineState.DONE, PipelineState.FAILED}),
    PipelineState.DONE: frozenset(),
    PipelineState.FAILED: frozenset(),
}


@dataclass
class _PipelineRun:
    """Mutable state owned by a single invocation."""

    state: PipelineState = PipelineState.IDLE
    history: list[PipelineState] = field(default_factory=lambda: [PipelineState.IDLE])

    def transition(self, target: PipelineState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal pipeline transition {self.state.value} -> {target.value}.")
        logger.debug("Pipeline %s -> %s", self.state.value, target.value)
        self.state = target
        self.history.append(target)


@dataclass(frozen=True)
class PipelineResult:
    """
    Outcome of one pipeline run. On failure only ``error`` is populated.
    """

    state: PipelineState
    states: tuple[PipelineState, ...]
    document: RenderedDocument | None = None
    story: StoryDocument | None = None
    illustrations: tuple[IllustrationRef, ...] | None = None
    error: StorybookError | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is PipelineState.DONE


class PipelineOrchestrator:
    """
    Sequences story generation, illustration resolution and document composition.

    ``max_generation_attempts`` bounds how many times the story generator is
    re-invoked with the same prompt after a :class:`GenerationError`.
    """

    def __init__(
        self,
        *,
        story_generator: StoryGenerator,
        document_composer: DocumentComposer,
        illustration_resolver: IllustrationResolver | None = None,
        max_generation_attempts: int = 1,
    ) -> None:
        if max_generation_attempts < 1:
            raise ValueError("max_generation_attempts must be at least 1.")
        self._story_generator = story_generator
        self._illustration_resolver = illustration_resolver or IllustrationResolver()
        self._document_composer = document_composer
        self._max_generation_attempts = max_generation_attempts

    def create_storybook(
        self,
        prompt_text: str,
        *,
        progress_callback: ProgressCallback | None = None,
    ) -> RenderedDocument:
        """
        Turn a prompt into a rendered storybook or raise the classified failure.
        """
        result = self.run(StoryRequest(prompt_text), progress_callback=progress_callback)
        if result.error is not None:
            raise result.error
        if result.document is None:
            raise RuntimeError("Pipeline finished without a document or an error.")
        return result.document

    def run(
        self,
        request: StoryRequest,
        *,
        progress_callback: ProgressCallback | None = None,
    ) -> PipelineResult:
        pipeline_run = _PipelineRun()

        try:
            pipeline_run.transition(PipelineState.GENERATING)
            self._notify(progress_callback, "story:generating", attempts=self._max_generation_attempts)
            story = self._generate_story(request.prompt_text)
            self._notify(
                progress_callback,
                "story:generated",
                title=story.title,
                total_pages=len(story.pages),
            )

            pipeline_run.transition(PipelineState.RESOLVING)
            self._notify(progress_callback, "illustrations:resolving")
            illustrations = self._illustration_resolver.resolve(story)
            self._notify(
                progress_callback,
                "illustrations:ready",
                seeds=[ref.seed for ref in illustrations],
            )

            pipeline_run.transition(PipelineState.COMPOSING)
            self._notify(progress_callback, "document:composing")
            document = self._document_composer.compose(story, illustrations)
        except StorybookError as exc:
            failed_stage = pipeline_run.state
            pipeline_run.transition(PipelineState.FAILED)
            logger.warning("Pipeline failed while %s: %s", failed_stage.value, exc.to_dict())
            self._notify(
                progress_callback,
                "pipeline:failed",
                failed_stage=failed_stage.value,
                kind=exc.kind,
                reason=exc.reason,
            )
            return PipelineResult(
                state=pipeline_run.state,
                states=tuple(pipeline_run.history),
                error=exc,
            )

        pipeline_run.transition(PipelineState.DONE)
        self._notify(
            progress_callback,
            "pipeline:complete",
            filename=document.filename,
            size_bytes=len(document.content),
        )
        return PipelineResult(
            state=pipeline_run.state,
            states=tuple(pipeline_run.history),
            document=document,
            story=story,
            illustrations=illustrations,
        )

    def _generate_story(self, prompt_text: str) -> StoryDocument:
        retrying = Retrying(
            stop=stop_after_attempt(self._max_generation_attempts),
            retry=retry_if_exception_type(GenerationError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retrying(self._story_generator.generate, prompt_text)

    @staticmethod
    def _notify(
        callback: ProgressCallback | None,
        stage: str,
        **payload: Any,
    ) -> None:
        if callback is not None:
            callback(stage, payload)


def build_orchestrator(config: StorybookConfig) -> PipelineOrchestrator:
    """
    Wire the LiteLLM, illustration and ReportLab collaborators from configuration.

    Raises ``ValueError`` for an unknown illustration builder or page size.
    """
    story_generator = StoryGenerator(LiteLLMTextService(config.text))
    resolver = IllustrationResolver(
        make_reference_builder(config.illustration.builder, config.illustration.base_url),
        width=config.illustration.width,
        height=config.illustration.height,
    )
    composer = DocumentComposer(StorybookPDFBuilder.from_config(config.rendering))
    return PipelineOrchestrator(
        story_generator=story_generator,
        document_composer=composer,
        illustration_resolver=resolver,
        max_generation_attempts=config.max_generation_attempts,
    )
