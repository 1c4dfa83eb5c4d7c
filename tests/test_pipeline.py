"""Tests for PipelineOrchestrator."""

import json

import pytest

from conftest import PIP_PROMPT, RecordingRenderer, StubTextService, make_story_payload
from storybook_creator.common import (
    GenerationError,
    InvalidPromptError,
    MalformedJson,
    NoJsonFound,
    RenderError,
    StorybookError,
    WrongPageCount,
)
from storybook_creator.pdf_generation import DocumentComposer
from storybook_creator.pipeline import PipelineOrchestrator, PipelineResult, PipelineState
from storybook_creator.story_generation import StoryGenerator, StoryRequest

HAPPY_STATES = (
    PipelineState.IDLE,
    PipelineState.GENERATING,
    PipelineState.RESOLVING,
    PipelineState.COMPOSING,
    PipelineState.DONE,
)


def make_orchestrator(service, renderer=None, attempts=1):
    return PipelineOrchestrator(
        story_generator=StoryGenerator(service),
        document_composer=DocumentComposer(renderer or RecordingRenderer()),
        max_generation_attempts=attempts,
    )


def _payload_with_first_page_number(page_number):
    payload = make_story_payload()
    payload["pages"][0]["pageNumber"] = page_number
    return payload


class TestCreateStorybook:
    """End-to-end scenarios for create_storybook."""

    def test_pip_story_renders(self, story_json):
        """Should return a rendered document for a well-formed five-page answer."""
        renderer = RecordingRenderer()
        orchestrator = make_orchestrator(StubTextService(story_json), renderer)

        document = orchestrator.create_storybook(PIP_PROMPT)

        assert document.content.startswith(b"%PDF")
        assert len(renderer.calls[0]) == 6

    def test_seeds_reproducible_across_runs(self, story_json):
        """Should derive identical illustration seeds for identical input."""
        first = make_orchestrator(StubTextService(story_json)).run(StoryRequest(PIP_PROMPT))
        second = make_orchestrator(StubTextService(story_json)).run(StoryRequest(PIP_PROMPT))

        assert len(first.illustrations) == 5
        assert [ref.seed for ref in first.illustrations] == [ref.seed for ref in second.illustrations]
        assert first.illustrations == second.illustrations

    def test_three_pages_fail_with_wrong_page_count(self):
        """Should raise GenerationError wrapping WrongPageCount(3)."""
        service = StubTextService("Here you go! " + json.dumps(make_story_payload(3)))

        with pytest.raises(GenerationError) as excinfo:
            make_orchestrator(service).create_storybook(PIP_PROMPT)

        assert isinstance(excinfo.value.cause, WrongPageCount)
        assert excinfo.value.cause.actual == 3

    @pytest.mark.parametrize("prompt", ["", "   ", "x" * 501])
    def test_rejects_invalid_prompt_before_generation(self, prompt, story_json):
        """Should refuse blank or over-long prompts without calling the model."""
        service = StubTextService(story_json)

        with pytest.raises(InvalidPromptError):
            make_orchestrator(service).create_storybook(prompt)

        assert service.prompts == []

    def test_accepts_prompt_at_length_limit(self, story_json):
        """Should accept a prompt of exactly 500 characters."""
        orchestrator = make_orchestrator(StubTextService(story_json))

        assert orchestrator.create_storybook("y" * 500).content

    @pytest.mark.parametrize(
        ("raw", "cause_type"),
        [
            ("The model forgot the JSON entirely.", NoJsonFound),
            ('{"title": "Broken", "pages": [1, 2,]}', MalformedJson),
        ],
    )
    def test_unusable_output_raises_typed_error(self, raw, cause_type):
        """Should raise GenerationError wrapping the extraction failure."""
        with pytest.raises(GenerationError) as excinfo:
            make_orchestrator(StubTextService(raw)).create_storybook(PIP_PROMPT)

        assert isinstance(excinfo.value.cause, cause_type)

    def test_result_without_document_raises_runtime_error(self, story_json):
        """Should raise RuntimeError rather than return None when run() yields no document."""

        class EmptyRunOrchestrator(PipelineOrchestrator):
            def run(self, request, *, progress_callback=None):
                return PipelineResult(state=PipelineState.DONE, states=HAPPY_STATES)

        orchestrator = EmptyRunOrchestrator(
            story_generator=StoryGenerator(StubTextService(story_json)),
            document_composer=DocumentComposer(RecordingRenderer()),
        )

        with pytest.raises(RuntimeError, match="without a document"):
            orchestrator.create_storybook(PIP_PROMPT)


class TestRun:
    """Tests for the state machine exposed by run()."""

    def test_success_visits_every_state(self, story_json):
        """Should move through every state to DONE."""
        result = make_orchestrator(StubTextService(story_json)).run(StoryRequest(PIP_PROMPT))

        assert result.succeeded
        assert result.states == HAPPY_STATES
        assert result.error is None
        assert result.story.title == "Pip and the Magical Garden"

    def test_generation_failure_exposes_nothing_partial(self):
        """Should stop in FAILED from GENERATING with only the error populated."""
        result = make_orchestrator(StubTextService("no json here")).run(StoryRequest(PIP_PROMPT))

        assert result.state is PipelineState.FAILED
        assert result.states == (PipelineState.IDLE, PipelineState.GENERATING, PipelineState.FAILED)
        assert isinstance(result.error, GenerationError)
        assert result.document is None
        assert result.story is None
        assert result.illustrations is None

    def test_render_failure_fails_from_composing(self, story_json):
        """Should surface RenderError after reaching COMPOSING."""
        renderer = RecordingRenderer(error=RuntimeError("printer on fire"))

        result = make_orchestrator(StubTextService(story_json), renderer).run(StoryRequest(PIP_PROMPT))

        assert isinstance(result.error, RenderError)
        assert result.states[-2:] == (PipelineState.COMPOSING, PipelineState.FAILED)
        assert result.document is None

    def test_progress_callback_stages(self, story_json):
        """Should report each stage to the progress callback in order."""
        stages = []

        make_orchestrator(StubTextService(story_json)).run(
            StoryRequest(PIP_PROMPT),
            progress_callback=lambda stage, payload: stages.append(stage),
        )

        assert stages == [
            "story:generating",
            "story:generated",
            "illustrations:resolving",
            "illustrations:ready",
            "document:composing",
            "pipeline:complete",
        ]

    def test_failure_is_reported_to_callback(self):
        """Should report the failing stage and kind."""
        events = []

        make_orchestrator(StubTextService("nope")).run(
            StoryRequest(PIP_PROMPT),
            progress_callback=lambda stage, payload: events.append((stage, payload)),
        )

        stage, payload = events[-1]
        assert stage == "pipeline:failed"
        assert payload["failed_stage"] == "generating"
        assert payload["kind"] == "generation"
        assert payload["reason"] == "no_json_found"

    def test_failure_without_callback_returns_failed_result(self):
        """Should return a FAILED result when no progress callback is given."""
        result = make_orchestrator(StubTextService("nope")).run(
            StoryRequest(PIP_PROMPT),
            progress_callback=None,
        )

        assert result.state is PipelineState.FAILED
        assert not result.succeeded
        assert result.error.reason == "no_json_found"

    def test_render_failure_is_reported_to_callback(self, story_json):
        """Should report the composing stage when rendering fails."""
        events = []
        renderer = RecordingRenderer(error=RuntimeError("printer on fire"))

        result = make_orchestrator(StubTextService(story_json), renderer).run(
            StoryRequest(PIP_PROMPT),
            progress_callback=lambda stage, payload: events.append((stage, payload)),
        )

        assert result.state is PipelineState.FAILED
        assert events[-1] == (
            "pipeline:failed",
            {"failed_stage": "composing", "kind": "render", "reason": None},
        )

    @pytest.mark.parametrize(
        ("raw", "reason"),
        [
            (json.dumps(_payload_with_first_page_number("²")), "invalid_page"),
            ('{"title": "T", "pages": ' + "[" * 100000 + "]" * 100000 + "}", "malformed_json"),
        ],
    )
    def test_hostile_output_only_surfaces_typed_errors(self, raw, reason):
        """Should classify hostile model output instead of letting other exceptions escape."""
        result = make_orchestrator(StubTextService(raw)).run(StoryRequest(PIP_PROMPT))

        assert result.state is PipelineState.FAILED
        assert isinstance(result.error, StorybookError)
        assert result.error.reason == reason


class TestGenerationRetry:
    """Tests for the bounded generation retry policy."""

    def test_retries_until_valid_story(self, story_json):
        """Should re-invoke generation with the same prompt after a failure."""
        service = StubTextService("garbage", json.dumps(make_story_payload(4)), story_json)

        result = make_orchestrator(service, attempts=3).run(StoryRequest(PIP_PROMPT))

        assert result.succeeded
        assert len(service.prompts) == 3
        assert len(set(service.prompts)) == 1

    def test_stops_after_max_attempts(self):
        """Should give up after the configured number of attempts."""
        service = StubTextService("still garbage")

        result = make_orchestrator(service, attempts=2).run(StoryRequest(PIP_PROMPT))

        assert isinstance(result.error, GenerationError)
        assert len(service.prompts) == 2

    def test_does_not_retry_by_default(self):
        """Should make a single attempt unless configured otherwise."""
        service = StubTextService("garbage", "more garbage")

        make_orchestrator(service).run(StoryRequest(PIP_PROMPT))

        assert len(service.prompts) == 1

    def test_rejects_non_positive_attempts(self):
        """Should require at least one attempt."""
        with pytest.raises(ValueError):
            make_orchestrator(StubTextService("x"), attempts=0)
