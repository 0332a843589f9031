import json
import logging
import re
from typing import Any, List, Optional

from app.services.Generate_Story.generate_story_schema import (
    GenerateStoryRequest,
    GenerateStoryResponse,
    PagePrompt,
)

logger = logging.getLogger(__name__)

_FENCE_START = re.compile(r"^```[a-zA-Z0-9_-]*\s*")
_FENCE_END = re.compile(r"\s*```$")


def strip_code_fences(text: str) -> str:
    """Remove a ```json ... ``` wrapper if the model added one anyway"""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_START.sub("", cleaned, count=1)
        cleaned = _FENCE_END.sub("", cleaned, count=1)
    return cleaned.strip()


def _as_page_number(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int) and value > 0:
        return value
    # "²" passes isdigit() but int() rejects it
    if isinstance(value, str) and value.strip().isdecimal():
        number = int(value)
        return number if number > 0 else None
    return None


def coerce_paragraphs(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def coerce_prompts(value: Any, limit: Optional[int] = None) -> List[PagePrompt]:
    """Turn whatever the model sent as `prompts` into PagePrompts.

    Entries may be dicts or bare strings. A missing or invalid page number falls
    back to the entry's 1-based position; entries without prompt text are dropped.
    """
    if not isinstance(value, list):
        return []

    prompts = []
    for position, entry in enumerate(value, start=1):
        if isinstance(entry, str):
            text, page = entry, None
        elif isinstance(entry, dict):
            text, page = entry.get("prompt"), _as_page_number(entry.get("page"))
        else:
            continue

        if not isinstance(text, str) or not text.strip():
            continue
        prompts.append(PagePrompt(page=page or position, prompt=text))

    if limit is not None:
        prompts = prompts[:limit]
    return prompts


def soft_fallback_book(raw_output: str, request: GenerateStoryRequest) -> GenerateStoryResponse:
    return GenerateStoryResponse(
        title=request.title or "",
        tagline="",
        ageRange=request.ageRange or "",
        paragraphs=[raw_output],
        prompts=[],
    )


def normalize_book(raw_output: str, request: GenerateStoryRequest) -> GenerateStoryResponse:
    """Validate model output against the book schema, repairing what can be repaired.

    Unparseable output never fails the request: the raw text becomes the only
    paragraph of an otherwise empty book.
    """
    try:
        data = json.loads(strip_code_fences(raw_output))
    except json.JSONDecodeError as e:
        logger.warning("Model output is not valid JSON (%s); returning raw text as the story", e)
        return soft_fallback_book(raw_output, request)

    if not isinstance(data, dict):
        logger.warning("Model output is JSON but not an object (%s); returning raw text as the story",
                       type(data).__name__)
        return soft_fallback_book(raw_output, request)

    title = data.get("title")
    tagline = data.get("tagline")
    age_range = data.get("ageRange")

    return GenerateStoryResponse(
        title=title if isinstance(title, str) else (request.title or ""),
        tagline=tagline if isinstance(tagline, str) else "",
        ageRange=age_range if isinstance(age_range, str) else (request.ageRange or ""),
        paragraphs=coerce_paragraphs(data.get("paragraphs")),
        prompts=coerce_prompts(data.get("prompts"), limit=request.resolved_page_count()),
    )
