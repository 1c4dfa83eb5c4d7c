"""
YAML export and import of validated stories.
"""

from __future__ import annotations

from pathlib import Path

import yaml

from .models import StoryDocument
from .validation import SchemaValidator


def dump_story_yaml(story: StoryDocument) -> str:
    return yaml.safe_dump(story.to_dict(), sort_keys=False, allow_unicode=True)


def save_story_yaml(story: StoryDocument, path: Path | str) -> Path:
    output_file = Path(path)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(dump_story_yaml(story), encoding="utf-8")
    return output_file


def load_story_yaml(path: Path | str) -> StoryDocument:
    """
    Load a saved story, re-applying the schema so edited files keep the same invariants.
    """
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    return SchemaValidator().validate(data)
