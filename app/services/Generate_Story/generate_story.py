import logging
from typing import Optional

import openai

from app.utils.config import Settings
from app.utils.story_normalizer import normalize_book
from app.utils.story_templates import build_template_book, resolve_story_inputs
from .generate_story_schema import GenerateStoryRequest, GenerateStoryResponse

logger = logging.getLogger(__name__)


def build_story_prompt(request: GenerateStoryRequest) -> str:
    inputs = resolve_story_inputs(request)
    pages = inputs.pages

    return f"""You are a children's author and coloring-book designer.

Create a JSON object for a kids' story coloring book based on this request:

Title: {inputs.title}
Main character: {inputs.character}
Story idea: {inputs.idea}
Target age range: {inputs.age_range} years
Number of story pages: {pages}

RULES:
- Aim for calm, gentle, cozy bedtime energy.
- Use SHORT, simple sentences for young kids.
- The JSON MUST be valid and match this exact schema:

{{
  "title": "string",
  "tagline": "string",
  "ageRange": "string",
  "paragraphs": [
    "paragraph 1 of the story...",
    "paragraph 2...",
    "..."
  ],
  "prompts": [
    {{
      "page": 1,
      "prompt": "line-art prompt for coloring page 1"
    }}
  ]
}}

- title, tagline and ageRange are strings.
- paragraphs is an array of strings: 1-2 paragraphs per 4 pages. Keep it short and cozy.
- prompts is an array of objects with an integer "page" and a string "prompt": exactly {pages} items (page 1 to page {pages}).
- prompts: describe black-and-white line art with thick outlines and no shading, ideal for kids coloring pages.
- DO NOT include code fences, comments, or any extra text. Respond with JSON ONLY."""


class GenerateStory:
    def __init__(self, settings: Settings, client: Optional[openai.OpenAI] = None):
        self.settings = settings
        self.model = settings.openai_story_model
        self.client = client
        if self.client is None and settings.openai_api_key:
            self.client = openai.OpenAI(
                api_key=settings.openai_api_key,
                timeout=settings.request_timeout,
            )

    def generate_book(self, request: GenerateStoryRequest) -> GenerateStoryResponse:
        """Story + illustration prompts for one request. Never raises for provider trouble."""
        if self.client is None:
            logger.warning("OPENAI_API_KEY is not configured; using the template story")
            return build_template_book(request)

        prompt = build_story_prompt(request)
        try:
            raw_output = self.get_openai_response(prompt)
        except openai.OpenAIError as e:
            logger.warning("Story generation failed (%s: %s); using the template story",
                           type(e).__name__, e)
            return build_template_book(request)

        return normalize_book(raw_output, request)

    def get_openai_response(self, prompt: str) -> str:
        completion = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=0.7,
            response_format={"type": "json_object"}
        )

        content = completion.choices[0].message.content if completion.choices else None
        return (content or "").strip()
