"""
Story generation: prompting, response extraction and schema validation.
"""

from .extraction import ResponseExtractor
from .models import MAX_PROMPT_LENGTH, PAGE_COUNT, PageDraft, StoryDocument, StoryRequest
from .prompting import build_story_prompt
from .serialization import dump_story_yaml, load_story_yaml, save_story_yaml
from .story_service import StoryGenerator
from .validation import SchemaValidator

__all__ = [
    "MAX_PROMPT_LENGTH",
    "PAGE_COUNT",
    "PageDraft",
    "StoryDocument",
    "StoryRequest",
    "ResponseExtractor",
    "SchemaValidator",
    "StoryGenerator",
    "build_story_prompt",
    "dump_story_yaml",
    "load_story_yaml",
    "save_story_yaml",
]
