"""Shared fixtures and collaborator stubs for storybook tests."""

import copy
import json

import pytest

from storybook_creator.story_generation import SchemaValidator

PIP_PROMPT = "A brave little mouse named Pip who discovers a magical garden"

PIP_CHARACTER = "Pip, a tiny grey mouse with a red scarf and round glasses"


def make_story_payload(page_count=5):
    return {
        "title": "Pip and the Magical Garden",
        "characters": PIP_CHARACTER,
        "pages": [
            {
                "pageNumber": number,
                "text": f"Page {number}: Pip tiptoes further into the glowing garden.",
                "imagePrompt": f"{PIP_CHARACTER}, scene {number} among giant glowing flowers",
            }
            for number in range(1, page_count + 1)
        ],
    }


class StubTextService:
    """Returns canned responses in order and records every prompt it receives."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []

    def complete(self, prompt_text):
        self.prompts.append(prompt_text)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


class RecordingRenderer:
    """Renders sections to fake PDF bytes and keeps them for inspection."""

    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def render(self, sections):
        self.calls.append(list(sections))
        if self.error is not None:
            raise self.error
        return b"%PDF-1.4 fake " + str(len(sections)).encode()


@pytest.fixture
def story_payload():
    return copy.deepcopy(make_story_payload())


@pytest.fixture
def story_json(story_payload):
    return json.dumps(story_payload)


@pytest.fixture
def story(story_payload):
    return SchemaValidator().validate(story_payload)


@pytest.fixture
def renderer():
    return RecordingRenderer()
