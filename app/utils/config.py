import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


class Settings(BaseModel):
    """Provider credentials and runtime knobs, read once from the environment."""

    openai_api_key: str = ""
    openai_story_model: str = "gpt-4o-mini"
    openai_image_model: str = "gpt-image-1"
    stability_api_key: str = ""
    image_provider: str = "stability"
    request_timeout: float = 120.0
    image_batch_deadline: float = 600.0
    static_dir: str = "public"
    port: int = 3000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            openai_story_model=os.getenv("OPENAI_STORY_MODEL", "gpt-4o-mini"),
            openai_image_model=os.getenv("OPENAI_IMAGE_MODEL", "gpt-image-1"),
            stability_api_key=os.getenv("STABILITY_API_KEY", ""),
            image_provider=os.getenv("IMAGE_PROVIDER", "stability").strip().lower(),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT_SECONDS", "120")),
            image_batch_deadline=float(os.getenv("IMAGE_BATCH_DEADLINE_SECONDS", "600")),
            static_dir=os.getenv("STATIC_DIR", "public"),
            port=int(os.getenv("PORT", "3000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def image_credential_name(self) -> str:
        """Environment variable holding the key for the active image provider"""
        if self.image_provider == "openai":
            return "OPENAI_API_KEY"
        return "STABILITY_API_KEY"

    @property
    def image_credential(self) -> str:
        if self.image_provider == "openai":
            return self.openai_api_key
        return self.stability_api_key


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
