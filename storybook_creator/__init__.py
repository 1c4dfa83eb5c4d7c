"""
Storybook creator: turns a short prompt into an illustrated five-page PDF storybook.
"""

from .common import StorybookConfig, StorybookError, describe_failure, load_config
from .illustration import IllustrationResolver
from .pdf_generation import DocumentComposer, RenderedDocument, StorybookPDFBuilder
from .pipeline import PipelineOrchestrator, PipelineResult, PipelineState, build_orchestrator
from .story_generation import StoryDocument, StoryGenerator, StoryRequest

__all__ = [
    "DocumentComposer",
    "IllustrationResolver",
    "PipelineOrchestrator",
    "PipelineResult",
    "PipelineState",
    "RenderedDocument",
    "StoryDocument",
    "StoryGenerator",
    "StoryRequest",
    "StorybookConfig",
    "StorybookError",
    "StorybookPDFBuilder",
    "build_orchestrator",
    "describe_failure",
    "load_config",
]
