import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from app.utils.config import Settings
from app.utils.image_providers import (
    ImageFatal,
    ImageSkipped,
    ImageSuccess,
    OpenAIImageProvider,
    StabilityImageProvider,
)
from .generate_images_schema import GeneratedImage, ImagePromptItem

logger = logging.getLogger(__name__)

MAX_IMAGES = 8

STYLE_DIRECTIVE = """STYLE:
- Black-and-white line-art coloring page for young children
- Thick outlines, no shading
- Simple, cute, kid-friendly
- Keep areas open and uncluttered for coloring"""


class ImageGenerationError(Exception):
    pass


class ImageProviderNotConfigured(ImageGenerationError):
    def __init__(self, credential_name: str):
        super().__init__(f"Missing {credential_name}")
        self.credential_name = credential_name


class ImageBillingError(ImageGenerationError):
    def __init__(self, page: int, reason: str):
        super().__init__(f"Billing failure on page {page}: {reason}")
        self.page = page
        self.reason = reason


class NoImagesGenerated(ImageGenerationError):
    pass


@dataclass(frozen=True)
class ImageRequest:
    page: int
    prompt: str


def _page_and_text(item: Union[ImagePromptItem, str], position: int):
    if isinstance(item, str):
        return position, item
    page = item.page if item.page and item.page > 0 else position
    return page, item.prompt or ""


def build_image_prompt(page: int, scene: str, main_character: Optional[str] = None,
                       title: Optional[str] = None) -> str:
    lines = [f"PAGE {page} ILLUSTRATION."]
    if title and title.strip():
        lines.append(f'BOOK TITLE: "{title.strip()}".')
    if main_character and main_character.strip():
        lines.append(
            f"MAIN CHARACTER: {main_character.strip()}. This character must appear clearly and be "
            "the focus of the page. Keep the character's look consistent from page to page."
        )
    lines.append(f"SCENE DESCRIPTION: {scene.strip()}")
    lines.append("")
    lines.append(STYLE_DIRECTIVE)
    return "\n".join(lines)


def build_image_requests(
    prompts: Sequence[Union[ImagePromptItem, str]],
    main_character: Optional[str] = None,
    title: Optional[str] = None,
) -> List[ImageRequest]:
    """One provider request per page, capped at MAX_IMAGES and ordered by page"""
    requests_ = []
    for position, item in enumerate(list(prompts)[:MAX_IMAGES], start=1):
        page, scene = _page_and_text(item, position)
        requests_.append(ImageRequest(page=page, prompt=build_image_prompt(page, scene, main_character, title)))
    return sorted(requests_, key=lambda r: r.page)


class GenerateImages:
    def __init__(self, settings: Settings, provider=None):
        self.settings = settings
        self.provider = provider
        self.batch_deadline = settings.image_batch_deadline

    def _get_provider(self):
        if self.provider is not None:
            return self.provider

        if not self.settings.image_credential:
            raise ImageProviderNotConfigured(self.settings.image_credential_name)

        if self.settings.image_provider == "openai":
            self.provider = OpenAIImageProvider(
                api_key=self.settings.openai_api_key,
                model=self.settings.openai_image_model,
                timeout=self.settings.request_timeout,
            )
        else:
            self.provider = StabilityImageProvider(
                api_key=self.settings.stability_api_key,
                timeout=self.settings.request_timeout,
            )
        return self.provider

    def generate_images(
        self,
        prompts: Sequence[Union[ImagePromptItem, str]],
        main_character: Optional[str] = None,
        title: Optional[str] = None,
    ) -> List[GeneratedImage]:
        """Generate coloring pages one at a time.

        A failed page is logged and skipped. A billing failure stops the batch
        at once and raises ImageBillingError. Raises NoImagesGenerated when
        every page was skipped.
        """
        provider = self._get_provider()
        image_requests = build_image_requests(prompts, main_character, title)
        deadline = time.monotonic() + self.batch_deadline

        images = []
        for index, image_request in enumerate(image_requests):
            if time.monotonic() > deadline:
                remaining = [r.page for r in image_requests[index:]]
                logger.warning("Image batch deadline reached; skipping pages %s", remaining)
                break

            outcome = provider.generate(image_request.page, image_request.prompt)

            if isinstance(outcome, ImageFatal):
                raise ImageBillingError(outcome.page, outcome.reason)
            if isinstance(outcome, ImageSkipped):
                logger.warning("Skipping page %s: %s", outcome.page, outcome.reason)
                continue
            if isinstance(outcome, ImageSuccess):
                images.append(outcome.image)

        if not images:
            raise NoImagesGenerated("No images could be generated.")

        logger.info("Generated %d of %d coloring pages", len(images), len(image_requests))
        return images
