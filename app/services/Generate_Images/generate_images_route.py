import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from app.utils.config import Settings, get_settings
from .generate_images import (
    GenerateImages,
    ImageBillingError,
    ImageProviderNotConfigured,
    NoImagesGenerated,
)
from .generate_images_schema import GenerateImageRequest, GenerateImageResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def get_generate_images(settings: Settings = Depends(get_settings)) -> GenerateImages:
    return GenerateImages(settings)


@router.post("/generate-images", response_model=GenerateImageResponse)
async def generate_images(
    request: GenerateImageRequest,
    generate_images_service: GenerateImages = Depends(get_generate_images),
):
    """Render up to 8 coloring-page images, one per prompt"""
    if not request.prompts:
        raise HTTPException(status_code=400, detail="No prompts provided.")

    try:
        images = await asyncio.to_thread(
            generate_images_service.generate_images,
            request.prompts,
            request.mainCharacter,
            request.title,
        )
    except ImageProviderNotConfigured as e:
        logger.error("Image generation requested but %s", e)
        return JSONResponse(
            status_code=500,
            content={"error": "Image generation not configured.", "details": str(e)},
        )
    except ImageBillingError as e:
        logger.error("Image batch aborted: %s", e)
        return JSONResponse(
            status_code=402,
            content={
                "error": "Image generation billing limit reached.",
                "details": "The image provider reported a billing or quota problem.",
            },
        )
    except NoImagesGenerated:
        return JSONResponse(
            status_code=500,
            content={
                "error": "No images could be generated.",
                "details": "Check server logs for image provider errors.",
            },
        )

    return GenerateImageResponse(images=images)
