from app.utils.pdf_generator import generate_pdf, pdf_filename
from app.utils.story_normalizer import coerce_paragraphs, coerce_prompts
from .export_pdf_schema import ExportPdfRequest


class ExportPdf:
    def export(self, request: ExportPdfRequest) -> tuple[str, bytes]:
        """Returns (download filename, PDF bytes)"""
        prompts = coerce_prompts(request.prompts or [])
        pdf_bytes = generate_pdf(
            title=request.title,
            tagline=request.tagline,
            paragraphs=coerce_paragraphs(request.paragraphs or []),
            prompts=prompts,
        )
        return pdf_filename(request.title), pdf_bytes
