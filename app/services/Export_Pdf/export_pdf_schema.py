from pydantic import BaseModel, Field
from typing import Optional, List, Any


class ExportPdfRequest(BaseModel):
    title: Optional[str] = None
    tagline: Optional[str] = None
    paragraphs: Optional[List[Any]] = Field(default=None, description="Story paragraphs in reading order")
    prompts: Optional[List[Any]] = Field(
        default=None,
        description="Coloring-page prompts as {page, prompt} objects or plain strings"
    )
