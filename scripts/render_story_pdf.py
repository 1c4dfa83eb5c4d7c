"""
Render a saved story YAML into a printable PDF without calling the text model.

Usage:
    python scripts/render_story_pdf.py \
        --story pip_story.yaml \
        --output pip_story.pdf
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure project root is on the Python path.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from storybook_creator import (  # noqa: E402
    DocumentComposer,
    IllustrationResolver,
    StorybookError,
    StorybookPDFBuilder,
    describe_failure,
)
from storybook_creator.pdf_generation import PAGE_SIZES  # noqa: E402
from storybook_creator.story_generation import load_story_yaml  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Convert a saved storybook YAML into a storybook PDF."
    )
    parser.add_argument(
        "--story",
        required=True,
        help="Path to the story YAML (written by create_storybook.py --save-story).",
    )
    parser.add_argument(
        "--output",
        required=True,
        help="Destination PDF file path.",
    )
    parser.add_argument(
        "--page-size",
        choices=sorted(PAGE_SIZES.keys()),
        default="a4",
        help="Page size to render (default: a4).",
    )
    parser.add_argument(
        "--margin-mm",
        type=float,
        default=20.0,
        help="Page margin in millimetres (default: 20).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Timeout in seconds for downloading illustration assets (default: 30).",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()

    try:
        story = load_story_yaml(args.story)
    except StorybookError as exc:
        print(f"Invalid story file: {exc.detail}", file=sys.stderr)
        return 1

    builder = StorybookPDFBuilder(
        page_size=PAGE_SIZES[args.page_size],
        margin_mm=args.margin_mm,
        request_timeout=args.timeout,
    )
    composer = DocumentComposer(builder)
    try:
        document = composer.compose(story, IllustrationResolver().resolve(story))
    except StorybookError as exc:
        print(describe_failure(exc), file=sys.stderr)
        return 1

    output_file = Path(args.output)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_bytes(document.content)

    print(f"Rendered storybook PDF to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
