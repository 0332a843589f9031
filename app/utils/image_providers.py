import base64
import logging
from dataclasses import dataclass
from typing import Optional, Union

import openai
import requests

from app.services.Generate_Images.generate_images_schema import GeneratedImage

logger = logging.getLogger(__name__)

STABILITY_CORE_URL = "https://api.stability.ai/v2beta/stable-image/generate/core"
OPENAI_BILLING_CODES = {"billing_hard_limit_reached", "insufficient_quota"}


@dataclass(frozen=True)
class ImageSuccess:
    image: GeneratedImage


@dataclass(frozen=True)
class ImageSkipped:
    page: int
    reason: str


@dataclass(frozen=True)
class ImageFatal:
    page: int
    reason: str


ImageOutcome = Union[ImageSuccess, ImageSkipped, ImageFatal]


def png_data_url(image_bytes: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(image_bytes).decode("utf-8")


class StabilityImageProvider:
    """Stable Image Core. Answers with raw PNG bytes, returned as a data URL."""

    def __init__(self, api_key: str, timeout: float = 120, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def generate(self, page: int, prompt: str) -> ImageOutcome:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "image/*",
        }
        data = {
            "prompt": prompt,
            "output_format": "png",
            "aspect_ratio": "1:1",
        }

        try:
            # files= forces multipart/form-data, which this endpoint requires
            response = self.session.post(
                STABILITY_CORE_URL,
                headers=headers,
                files={"none": ""},
                data=data,
                timeout=self.timeout
            )
        except requests.RequestException as e:
            return ImageSkipped(page, f"request failed: {e}")

        if response.status_code == 402:
            logger.error("Stability billing error for page %s: %s", page, response.text)
            return ImageFatal(page, "billing limit reached")

        if not response.ok:
            logger.warning("Stability image error for page %s: %s %s",
                           page, response.status_code, response.text)
            return ImageSkipped(page, f"HTTP {response.status_code}")

        if not response.content:
            return ImageSkipped(page, "empty image payload")

        return ImageSuccess(GeneratedImage(page=page, url=png_data_url(response.content)))


class OpenAIImageProvider:
    """OpenAI Images API. Hosted URL when one is returned, otherwise inline base64."""

    def __init__(self, api_key: str, model: str = "gpt-image-1", timeout: float = 120,
                 client: Optional[openai.OpenAI] = None):
        self.model = model
        self.client = client or openai.OpenAI(api_key=api_key, timeout=timeout)

    @staticmethod
    def _is_billing_error(error: openai.APIStatusError) -> bool:
        if error.status_code == 402:
            return True
        return getattr(error, "code", None) in OPENAI_BILLING_CODES

    def generate(self, page: int, prompt: str) -> ImageOutcome:
        try:
            result = self.client.images.generate(
                model=self.model,
                prompt=prompt,
                size="1024x1024"
            )
        except openai.APIStatusError as e:
            if self._is_billing_error(e):
                logger.error("OpenAI billing error for page %s: %s", page, e)
                return ImageFatal(page, "billing limit reached")
            logger.warning("OpenAI image error for page %s: %s %s", page, e.status_code, e)
            return ImageSkipped(page, f"HTTP {e.status_code}")
        except openai.OpenAIError as e:
            return ImageSkipped(page, f"request failed: {e}")

        data = result.data[0] if result.data else None
        if data is None:
            return ImageSkipped(page, "empty image payload")
        if data.url:
            return ImageSuccess(GeneratedImage(page=page, url=data.url))
        if data.b64_json:
            return ImageSuccess(GeneratedImage(page=page, url="data:image/png;base64," + data.b64_json))
        return ImageSkipped(page, "empty image payload")
