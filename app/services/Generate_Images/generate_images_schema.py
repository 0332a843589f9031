from pydantic import BaseModel, Field
from typing import Optional, List, Union


class ImagePromptItem(BaseModel):
    page: Optional[int] = None
    prompt: Optional[str] = None


class GenerateImageRequest(BaseModel):
    prompts: Optional[List[Union[ImagePromptItem, str]]] = Field(
        default=None,
        description="Scene prompts, either plain strings or {page, prompt} objects. Only the first 8 are used."
    )
    mainCharacter: Optional[str] = None
    title: Optional[str] = None


class GeneratedImage(BaseModel):
    page: int
    url: str = Field(description="Hosted image URL or a data:image/png;base64 URL")


class GenerateImageResponse(BaseModel):
    images: List[GeneratedImage]
