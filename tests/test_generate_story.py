"""Story prompt, template fallback and story service tests"""

import json
from unittest.mock import MagicMock

import httpx
import openai
import pytest

from app.services.Generate_Story.generate_story import GenerateStory, build_story_prompt
from app.services.Generate_Story.generate_story_schema import GenerateStoryRequest
from app.utils.story_templates import (
    DEFAULT_CHARACTER,
    DEFAULT_TITLE,
    build_template_book,
    helper_page,
)


def _completion(content):
    completion = MagicMock()
    completion.choices = [MagicMock()]
    completion.choices[0].message.content = content
    return completion


def _openai_request():
    return httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


class TestBuildStoryPrompt:
    def test_uses_defaults_for_blank_fields(self):
        prompt = build_story_prompt(GenerateStoryRequest(storyIdea="   "))

        assert f"Title: {DEFAULT_TITLE}" in prompt
        assert f"Main character: {DEFAULT_CHARACTER}" in prompt
        assert "Target age range: 3-5 years" in prompt
        assert "Number of story pages: 8" in prompt

    def test_embeds_request_values(self):
        prompt = build_story_prompt(GenerateStoryRequest(
            title="Moon Boat",
            mainCharacter="a sleepy otter",
            storyIdea="sails to the moon",
            ageRange="4-6",
            pageCount=6,
        ))

        assert "Title: Moon Boat" in prompt
        assert "Main character: a sleepy otter" in prompt
        assert "Story idea: sails to the moon" in prompt
        assert "Target age range: 4-6 years" in prompt
        assert "exactly 6 items (page 1 to page 6)" in prompt

    @pytest.mark.parametrize("requested, expected", [
        (1, 4), (50, 16), (12, 12), (None, 8), (0, 8), (-3, 4),
        ("10", 10), (" 5 ", 5), ("lots", 8), (True, 8), (float("nan"), 8),
    ])
    def test_page_count_is_clamped(self, requested, expected):
        prompt = build_story_prompt(GenerateStoryRequest(mainCharacter="Sam", pageCount=requested))

        assert f"Number of story pages: {expected}" in prompt

    def test_describes_schema_and_json_only_output(self):
        prompt = build_story_prompt(GenerateStoryRequest(mainCharacter="Sam"))

        for field in ('"title"', '"tagline"', '"ageRange"', '"paragraphs"', '"prompts"', '"page"', '"prompt"'):
            assert field in prompt
        assert "children's author and coloring-book designer" in prompt
        assert "Respond with JSON ONLY" in prompt
        assert "code fences" in prompt

    def test_is_deterministic(self):
        request = GenerateStoryRequest(mainCharacter="Sam", storyIdea="a picnic")

        assert build_story_prompt(request) == build_story_prompt(request)


class TestTemplateBook:
    def test_one_prompt_per_page(self):
        book = build_template_book(GenerateStoryRequest(mainCharacter="a brave fox", pageCount=10))

        assert [p.page for p in book.prompts] == list(range(1, 11))
        assert all("a brave fox" in p.prompt for p in book.prompts)

    def test_special_pages_use_their_own_templates(self):
        book = build_template_book(GenerateStoryRequest(mainCharacter="Pip", pageCount=8))
        by_page = {p.page: p.prompt for p in book.prompts}

        special = {by_page[1], by_page[2], by_page[helper_page(8)], by_page[8]}
        assert len(special) == 4
        assert "helper" in by_page[helper_page(8)]
        assert "bed" in by_page[8]

    def test_story_uses_character_and_idea(self):
        book = build_template_book(GenerateStoryRequest(
            title="Pip's Picnic", mainCharacter="Pip the mouse", storyIdea="Pip plans a picnic."
        ))

        assert book.title == "Pip's Picnic"
        assert book.ageRange == "3-5"
        assert book.paragraphs[0] == "Once upon a time, there was Pip the mouse."
        assert "Pip plans a picnic." in book.paragraphs[1]
        assert book.tagline

    def test_is_deterministic(self):
        request = GenerateStoryRequest(storyIdea="learning to swim", pageCount=4)

        assert build_template_book(request) == build_template_book(request)


class TestGenerateStory:
    @pytest.fixture
    def client(self):
        return MagicMock()

    @pytest.fixture
    def service(self, settings, client):
        return GenerateStory(settings, client=client)

    def test_normalizes_model_output(self, service, client):
        client.chat.completions.create.return_value = _completion(json.dumps({
            "title": "Sam Sails",
            "tagline": "Off we go",
            "ageRange": "3-5",
            "paragraphs": ["Sam found a boat."],
            "prompts": [{"page": 1, "prompt": "Sam in a boat"}],
        }))

        book = service.generate_book(GenerateStoryRequest(mainCharacter="Sam"))

        assert book.title == "Sam Sails"
        assert book.prompts[0].prompt == "Sam in a boat"
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["response_format"] == {"type": "json_object"}

    def test_unparseable_output_returns_soft_fallback(self, service, client):
        client.chat.completions.create.return_value = _completion("Once upon a time...")

        book = service.generate_book(GenerateStoryRequest(mainCharacter="Sam", title="T"))

        assert book.paragraphs == ["Once upon a time..."]
        assert book.prompts == []
        assert book.title == "T"

    @pytest.mark.parametrize("error", [
        openai.APIConnectionError(request=_openai_request()),
        openai.APITimeoutError(request=_openai_request()),
        openai.InternalServerError(
            "upstream down",
            response=httpx.Response(503, request=_openai_request()),
            body=None,
        ),
    ])
    def test_provider_failure_uses_template(self, service, client, error):
        client.chat.completions.create.side_effect = error
        request = GenerateStoryRequest(mainCharacter="Sam", pageCount=6)

        book = service.generate_book(request)

        assert book == build_template_book(request)

    def test_missing_api_key_uses_template_without_calling(self, unconfigured_settings):
        service = GenerateStory(unconfigured_settings)
        request = GenerateStoryRequest(storyIdea="a rainy day")

        assert service.client is None
        assert service.generate_book(request) == build_template_book(request)
