import asyncio

from fastapi import APIRouter, Depends, HTTPException

from app.utils.config import Settings, get_settings
from .generate_story import GenerateStory
from .generate_story_schema import GenerateStoryRequest, GenerateStoryResponse

router = APIRouter()


def get_generate_story(settings: Settings = Depends(get_settings)) -> GenerateStory:
    return GenerateStory(settings)


@router.post("/generate-book", response_model=GenerateStoryResponse)
async def generate_book(
    request: GenerateStoryRequest,
    generate_story: GenerateStory = Depends(get_generate_story),
):
    """Write a short story and one coloring-page prompt per page"""
    if not request.has_story_seed():
        raise HTTPException(
            status_code=400,
            detail="Please provide at least a main character or a story idea."
        )

    return await asyncio.to_thread(generate_story.generate_book, request)
