import asyncio

from fastapi import APIRouter
from fastapi.responses import Response

from .export_pdf import ExportPdf
from .export_pdf_schema import ExportPdfRequest

router = APIRouter()
export_pdf_service = ExportPdf()


@router.post("/export-pdf", response_class=Response)
async def export_pdf(request: ExportPdfRequest):
    """Download the book as a PDF: cover, story, then the coloring-page prompts"""
    filename, pdf_bytes = await asyncio.to_thread(export_pdf_service.export, request)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
