"""
CLI to turn a story idea into an illustrated five-page PDF storybook.

Usage:
    python scripts/create_storybook.py \
        --prompt "A brave little mouse named Pip who discovers a magical garden" \
        --output pip.pdf

Environment variables:
    GEMINI_API_KEY / OPENAI_API_KEY / STORYBOOK_API_KEY - API key for the text model
    STORYBOOK_STORY_MODEL                               - optional LiteLLM model override
    STORYBOOK_ILLUSTRATIONS                             - illustration source: picsum or placeholder
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict

from tqdm.auto import tqdm

# Ensure project root is on the Python path when running as a script.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from storybook_creator import (  # noqa: E402
    StorybookError,
    StoryRequest,
    build_orchestrator,
    describe_failure,
    load_config,
)
from storybook_creator.illustration import REFERENCE_BUILDERS  # noqa: E402
from storybook_creator.story_generation import save_story_yaml  # noqa: E402


class ProgressReporter:
    """
    Prints user-friendly progress updates for the storybook pipeline.
    """

    def __call__(self, stage: str, payload: Dict[str, Any]) -> None:
        match stage:
            case "story:generating":
                self._write("[1/3] Writing the story...")
            case "story:generated":
                self._write(f"[1/3] Story ready: {payload.get('title', 'Untitled')}")
            case "illustrations:resolving":
                self._write("[2/3] Picking illustrations...")
            case "document:composing":
                self._write("[3/3] Creating the PDF...")
            case "pipeline:complete":
                size = payload.get("size_bytes", 0)
                self._write(f"Done ({size} bytes).")
            case "pipeline:failed":
                self._write(f"Failed while {payload.get('failed_stage', 'running')}.")

    @staticmethod
    def _write(message: str) -> None:
        tqdm.write(message)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create an illustrated storybook PDF from a prompt.")
    parser.add_argument("--prompt", required=True, help="Story idea (at most 500 characters).")
    parser.add_argument("--output", default=None, help="Destination PDF path (default: derived from the title).")
    parser.add_argument("--config", default=None, help="Optional YAML configuration file.")
    parser.add_argument(
        "--attempts",
        type=int,
        default=None,
        help="Maximum story generation attempts when the model answer is unusable.",
    )
    parser.add_argument("--model", default=None, help="Optional LiteLLM model override.")
    parser.add_argument(
        "--illustrations",
        choices=sorted(REFERENCE_BUILDERS),
        default=None,
        help="Illustration source (default: picsum).",
    )
    parser.add_argument(
        "--save-story",
        default=None,
        help="Optional path to also save the validated story as YAML.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        request = StoryRequest(args.prompt)
    except StorybookError as exc:
        print(describe_failure(exc), file=sys.stderr)
        return 2

    config = load_config(args.config)
    if args.model:
        config = replace(config, text=replace(config.text, model=args.model))
    if args.attempts is not None:
        config = replace(config, max_generation_attempts=args.attempts)
    if args.illustrations:
        config = replace(config, illustration=replace(config.illustration, builder=args.illustrations))

    orchestrator = build_orchestrator(config)
    result = orchestrator.run(request, progress_callback=ProgressReporter())

    if result.error is not None:
        print(describe_failure(result.error), file=sys.stderr)
        return 1

    if result.document is None or result.story is None:
        print("Pipeline finished without a document.", file=sys.stderr)
        return 1
    output_path = Path(args.output or result.document.filename)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(result.document.content)
    print(f"Saved storybook to {output_path}")

    if args.save_story:
        story_path = save_story_yaml(result.story, args.save_story)
        print(f"Saved story to {story_path}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
