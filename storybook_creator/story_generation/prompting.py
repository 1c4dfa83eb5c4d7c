"""
Prompt construction for the five-page storybook request.
"""

from __future__ import annotations

from .models import PAGE_COUNT

STORY_GUIDELINES = (
    f"1. Maintain consistent main characters throughout all {PAGE_COUNT} pages\n"
    "2. Create a clear story arc with beginning, middle, and end\n"
    "3. Use age-appropriate language for children aged 3-8\n"
    "4. Each page should have 2-4 sentences maximum\n"
    "5. Include descriptive image prompts that maintain character appearance consistency\n"
    "6. Make the story educational and positive with a good moral lesson"
)

STORY_SCHEMA_EXAMPLE = """{
  "title": "Story Title (should be catchy and child-friendly)",
  "characters": "Brief description of main characters for consistency",
  "pages": [
    {
      "pageNumber": 1,
      "text": "Page 1 text content (introduction of characters and setting)",
      "imagePrompt": "Detailed visual description including character appearance, setting, and scene. Be specific about character features, colors, and style for consistency."
    },
    {
      "pageNumber": 2,
      "text": "Page 2 text content (conflict or adventure begins)",
      "imagePrompt": "Detailed visual description maintaining same character appearance from page 1. Describe the new scene while keeping character consistency."
    },
    {
      "pageNumber": 3,
      "text": "Page 3 text content (middle of story, building tension)",
      "imagePrompt": "Detailed visual description with consistent characters. Show progression of the story while maintaining visual continuity."
    },
    {
      "pageNumber": 4,
      "text": "Page 4 text content (climax or problem resolution)",
      "imagePrompt": "Detailed visual description showing the climax scene with same consistent character designs throughout."
    },
    {
      "pageNumber": 5,
      "text": "Page 5 text content (happy ending and moral lesson)",
      "imagePrompt": "Detailed visual description of the resolution with consistent characters, showing a happy ending scene."
    }
  ]
}"""


def build_story_prompt(prompt_text: str) -> str:
    """
    Embed the user's idea verbatim in the fixed storybook instruction template.
    """
    return f"""Create a {PAGE_COUNT}-page children's storybook based on this prompt: "{prompt_text}".

IMPORTANT GUIDELINES:
{STORY_GUIDELINES}

Return the response in this exact JSON format:
{STORY_SCHEMA_EXAMPLE}

Example character consistency: If you create a character like "a small brown rabbit with blue overalls and floppy ears", mention these specific details in ALL image prompts to maintain visual consistency.

Make sure the story flows naturally from page to page, has educational value, and ends with a positive message.
Respond with the JSON object only."""
