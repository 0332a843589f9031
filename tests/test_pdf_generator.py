"""PDF layout tests"""

import re

import pytest

from app.services.Generate_Story.generate_story_schema import PagePrompt
from app.utils.pdf_generator import generate_pdf, pdf_filename

PAGE_OBJECT = re.compile(rb"/Type /Page(?!s)")


def _page_count(pdf_bytes: bytes) -> int:
    return len(PAGE_OBJECT.findall(pdf_bytes))


class TestGeneratePdf:
    def test_cover_only_when_book_is_empty(self):
        pdf_bytes = generate_pdf(title="T", tagline="", paragraphs=[], prompts=[])

        assert pdf_bytes.startswith(b"%PDF")
        assert _page_count(pdf_bytes) == 1

    def test_cover_story_and_prompts_each_get_a_page(self):
        pdf_bytes = generate_pdf(
            title="Sammy and the Night Lights",
            tagline="A brave little iguana",
            paragraphs=["Sammy lived by the river.", "At night, the stars came out."],
            prompts=[PagePrompt(page=1, prompt="Sammy by the river"),
                     PagePrompt(page=2, prompt="Sammy under the stars")],
        )

        assert _page_count(pdf_bytes) == 3

    def test_story_without_prompts(self):
        pdf_bytes = generate_pdf(title="T", paragraphs=["Just a story."])

        assert _page_count(pdf_bytes) == 2

    def test_prompts_without_story(self):
        pdf_bytes = generate_pdf(title="T", prompts=[PagePrompt(page=1, prompt="a kite")])

        assert _page_count(pdf_bytes) == 2

    def test_markup_characters_are_escaped(self):
        pdf_bytes = generate_pdf(
            title="Tom & Jerry <3",
            tagline="<b>bold?</b>",
            paragraphs=["5 < 6 & 7 > 2"],
        )

        assert _page_count(pdf_bytes) == 2

    def test_blank_title_uses_default(self):
        assert generate_pdf(title=None).startswith(b"%PDF")


class TestPdfFilename:
    @pytest.mark.parametrize("title", ["Sam's Night: Part 1!", "Ünïcode & émoji 🌙", "a/b\\c", "plain-title"])
    def test_only_safe_characters(self, title):
        assert re.match(r"^[a-z0-9\-_]+\.pdf$", pdf_filename(title), re.IGNORECASE)

    def test_replaces_unsafe_characters(self):
        assert pdf_filename("Sam's Night: Part 1!") == "Sam_s_Night__Part_1_.pdf"

    def test_blank_title_uses_default(self):
        assert pdf_filename("   ") == "Custom_Story_Coloring_Book.pdf"
        assert pdf_filename(None) == "Custom_Story_Coloring_Book.pdf"
