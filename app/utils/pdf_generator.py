import io
import logging
import re
from typing import List, Optional
from xml.sax.saxutils import escape

from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer

logger = logging.getLogger(__name__)

DEFAULT_BOOK_TITLE = "Custom Story Coloring Book"
ATTRIBUTION = "Generated with Magic Story Colorbooks"
MARGIN = 50  # points

TITLE_STYLE = ParagraphStyle(name="CoverTitle", fontName="Helvetica-Bold", fontSize=24,
                             leading=30, alignment=TA_CENTER)
TAGLINE_STYLE = ParagraphStyle(name="CoverTagline", fontName="Helvetica", fontSize=14,
                               leading=18, alignment=TA_CENTER)
ATTRIBUTION_STYLE = ParagraphStyle(name="Attribution", fontName="Helvetica", fontSize=10,
                                   leading=12, alignment=TA_CENTER)
HEADING_STYLE = ParagraphStyle(name="SectionHeading", fontName="Helvetica-Bold", fontSize=18,
                               leading=22, alignment=TA_LEFT, spaceAfter=14)
BODY_STYLE = ParagraphStyle(name="StoryBody", fontName="Helvetica", fontSize=12,
                            leading=16, alignment=TA_LEFT, spaceAfter=12)
PAGE_LABEL_STYLE = ParagraphStyle(name="PageLabel", fontName="Helvetica-Bold", fontSize=11,
                                  leading=14, spaceAfter=3)
PROMPT_STYLE = ParagraphStyle(name="PagePromptText", fontName="Helvetica", fontSize=10,
                              leading=13, leftIndent=15, spaceAfter=12)


def _text(value: str) -> str:
    """Escape for reportlab's mini-markup and keep line breaks"""
    return escape(value).replace("\n", "<br/>")


def pdf_filename(title: Optional[str]) -> str:
    safe_title = (title or "").strip() or DEFAULT_BOOK_TITLE
    return re.sub(r"[^A-Za-z0-9\-]", "_", safe_title) + ".pdf"


def _cover(title: str, tagline: str) -> list:
    flowables = [Paragraph(_text(title), TITLE_STYLE)]
    if tagline:
        flowables += [Spacer(1, 14), Paragraph(_text(tagline), TAGLINE_STYLE)]
    flowables += [Spacer(1, 28), Paragraph(ATTRIBUTION, ATTRIBUTION_STYLE)]
    return flowables


def _story_section(paragraphs: List[str]) -> list:
    flowables = [PageBreak(), Paragraph("<u>Story</u>", HEADING_STYLE)]
    flowables += [Paragraph(_text(p), BODY_STYLE) for p in paragraphs]
    return flowables


def _prompts_section(prompts) -> list:
    flowables = [PageBreak(), Paragraph("<u>Coloring Pages (Prompts)</u>", HEADING_STYLE)]
    for item in prompts:
        flowables.append(Paragraph(f"Page {item.page}:", PAGE_LABEL_STYLE))
        flowables.append(Paragraph(_text(item.prompt), PROMPT_STYLE))
    return flowables


def generate_pdf(
    title: Optional[str],
    tagline: Optional[str] = None,
    paragraphs: Optional[List[str]] = None,
    prompts: Optional[list] = None,
) -> bytes:
    """Lay a book out as a LETTER-size PDF and return the bytes.

    The cover page is always present. The story and coloring-prompt sections
    each start on a new page and are left out when they would be empty.
    """
    safe_title = (title or "").strip() or DEFAULT_BOOK_TITLE
    paragraphs = [p for p in (paragraphs or []) if p]
    prompts = prompts or []

    story = _cover(safe_title, (tagline or "").strip())
    if paragraphs:
        story += _story_section(paragraphs)
    if prompts:
        story += _prompts_section(prompts)

    pdf_buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        pdf_buffer,
        pagesize=letter,
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=MARGIN,
        bottomMargin=MARGIN,
        title=safe_title,
    )
    doc.build(story)

    logger.info("Rendered PDF '%s' (%d paragraphs, %d prompts)", safe_title, len(paragraphs), len(prompts))
    return pdf_buffer.getvalue()
