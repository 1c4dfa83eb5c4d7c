"""
End-to-end orchestration of storybook generation.
"""

from .pipeline import (
    PipelineOrchestrator,
    PipelineResult,
    PipelineState,
    ProgressCallback,
    build_orchestrator,
)

__all__ = [
    "PipelineOrchestrator",
    "PipelineResult",
    "PipelineState",
    "ProgressCallback",
    "build_orchestrator",
]
