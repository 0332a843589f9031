import math

from pydantic import BaseModel, Field, field_validator
from typing import Any, Optional, List

MIN_PAGES = 4
MAX_PAGES = 16
DEFAULT_PAGES = 8


class GenerateStoryRequest(BaseModel):
    title: Optional[str] = None
    mainCharacter: Optional[str] = None
    storyIdea: Optional[str] = None
    ageRange: Optional[str] = Field(default=None, description="Free-form age range, e.g. '3-5'")
    pageCount: Optional[int] = Field(
        default=None,
        description="Number of coloring pages. Clamped to 4-16, defaults to 8."
    )

    @field_validator("pageCount", mode="before")
    @classmethod
    def _lenient_page_count(cls, value: Any) -> Optional[int]:
        """Anything that is not a finite number counts as "not given" and becomes the default"""
        if isinstance(value, bool) or value is None:
            return None
        if isinstance(value, str):
            try:
                value = float(value.strip())
            except ValueError:
                return None
        if isinstance(value, int):
            return value
        if isinstance(value, float) and math.isfinite(value):
            return int(value)
        return None

    def has_story_seed(self) -> bool:
        """True when there is something to write a story about"""
        return bool((self.mainCharacter or "").strip() or (self.storyIdea or "").strip())

    def resolved_page_count(self) -> int:
        if not self.pageCount:
            return DEFAULT_PAGES
        return max(MIN_PAGES, min(MAX_PAGES, int(self.pageCount)))


class PagePrompt(BaseModel):
    page: int = Field(gt=0, description="1-based coloring page number")
    prompt: str = Field(description="Line-art scene description for this page")


class GenerateStoryResponse(BaseModel):
    title: str = ""
    tagline: str = ""
    ageRange: str = ""
    paragraphs: List[str] = Field(default_factory=list, description="Story text in reading order")
    prompts: List[PagePrompt] = Field(default_factory=list, description="One illustration prompt per page")
