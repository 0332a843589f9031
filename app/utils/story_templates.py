from dataclasses import dataclass
from typing import List

from app.services.Generate_Story.generate_story_schema import (
    GenerateStoryRequest,
    GenerateStoryResponse,
    PagePrompt,
)

DEFAULT_TITLE = "Sammy the Brave Iguana"
DEFAULT_CHARACTER = "an iguana named Sammy who's afraid of the dark"
DEFAULT_STORY_IDEA = (
    "They learn to feel safe at night with help from gentle forest friends "
    "and cozy night lights."
)
DEFAULT_AGE_RANGE = "3-5"
FALLBACK_TAGLINE = "A cozy story to read, imagine, and color."


@dataclass(frozen=True)
class StoryInputs:
    title: str
    character: str
    idea: str
    age_range: str
    pages: int


def _clean(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def resolve_story_inputs(request: GenerateStoryRequest) -> StoryInputs:
    """Fill blank request fields with the house defaults"""
    return StoryInputs(
        title=_clean(request.title) or DEFAULT_TITLE,
        character=_clean(request.mainCharacter) or DEFAULT_CHARACTER,
        idea=_clean(request.storyIdea) or DEFAULT_STORY_IDEA,
        age_range=_clean(request.ageRange) or DEFAULT_AGE_RANGE,
        pages=request.resolved_page_count(),
    )


def _lower_first(text: str) -> str:
    return text[:1].lower() + text[1:] if text else text


def _story_paragraphs(character: str, idea: str) -> List[str]:
    idea_sentence = idea.rstrip(".!?")
    return [
        f"Once upon a time, there was {character}.",
        f"One day, something new began. {idea_sentence}.",
        "There were small worries along the way, but friends were close by. "
        "They took slow, deep breaths and tried again, one little step at a time.",
        f"By the end of the day, {_lower_first(character)} felt proud and calm. "
        "Everyone snuggled in, smiling, ready for sweet dreams.",
    ]


def helper_page(pages: int) -> int:
    """Page where the friendly helper shows up, somewhere in the middle of the book"""
    return pages // 2 + 1


def _page_prompt(page: int, pages: int, character: str) -> str:
    if page == 1:
        return (
            f"{character} standing in front of a cozy home, smiling and waving hello, "
            "simple trees and a big round sun in the background"
        )
    if page == 2:
        return (
            f"{character} looking curious at the start of a small adventure, "
            "a winding path with flowers and rocks along the sides"
        )
    if page == pages:
        return (
            f"{character} tucked in bed with a soft blanket, a crescent moon and "
            "stars in the window, feeling safe and happy"
        )
    if page == helper_page(pages):
        return (
            f"{character} meeting a kind helper friend, a friendly owl or rabbit, "
            "who offers a gentle hand and a warm smile"
        )
    return (
        f"{character} exploring a calm outdoor scene on page {page}, "
        "with big simple shapes like leaves, clouds, and friendly animals"
    )


def build_template_book(request: GenerateStoryRequest) -> GenerateStoryResponse:
    """Deterministic book used when the text model cannot be reached"""
    inputs = resolve_story_inputs(request)
    return GenerateStoryResponse(
        title=inputs.title,
        tagline=FALLBACK_TAGLINE,
        ageRange=inputs.age_range,
        paragraphs=_story_paragraphs(inputs.character, inputs.idea),
        prompts=[
            PagePrompt(page=page, prompt=_page_prompt(page, inputs.pages, inputs.character))
            for page in range(1, inputs.pages + 1)
        ],
    )
