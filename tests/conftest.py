"""Shared fixtures: settings with fake credentials and a scripted image provider"""

from unittest.mock import MagicMock

import pytest

from app.services.Generate_Images.generate_images_schema import GeneratedImage
from app.utils.config import Settings
from app.utils.image_providers import ImageFatal, ImageSkipped, ImageSuccess


@pytest.fixture
def settings():
    return Settings(
        openai_api_key="test-openai-key",
        stability_api_key="test-stability-key",
        image_provider="stability",
        request_timeout=5,
    )


@pytest.fixture
def unconfigured_settings():
    return Settings(openai_api_key="", stability_api_key="")


@pytest.fixture
def scripted_provider():
    """Provider whose generate() answers per page: "ok", "skip" or "billing"."""

    def _make(script: dict):
        def _generate(page, prompt):
            action = script.get(page, "ok")
            if action == "skip":
                return ImageSkipped(page, "HTTP 500")
            if action == "billing":
                return ImageFatal(page, "billing limit reached")
            return ImageSuccess(GeneratedImage(page=page, url=f"https://img.test/{page}.png"))

        provider = MagicMock()
        provider.generate.side_effect = _generate
        return provider

    return _make
