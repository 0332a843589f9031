import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.services.Generate_Story.generate_story_route import router as generate_story_router
from app.services.Generate_Images.generate_images_route import router as generate_images_router
from app.services.Export_Pdf.export_pdf_route import router as export_pdf_router
from app.utils.config import Settings, get_settings

API_PREFIX = "/api"

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("story_colorbook")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Warn about missing provider credentials; the affected endpoint degrades instead"""
    current = get_settings()
    if not current.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; /api/generate-book will return template stories")
    if not current.image_credential:
        logger.warning("%s is not set; /api/generate-images will report it as not configured",
                       current.image_credential_name)
    logger.info("Image provider: %s", current.image_provider)
    yield


# Create FastAPI app
app = FastAPI(
    title="Story Coloring Book API",
    description="Generates children's story coloring books: story text, line-art pages and a printable PDF",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(generate_story_router, prefix=API_PREFIX)
app.include_router(generate_images_router, prefix=API_PREFIX)
app.include_router(export_pdf_router, prefix=API_PREFIX)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body."})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error in %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error."})


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running"}


def _api_methods(path: str) -> list:
    return sorted({
        method
        for route in app.routes
        if isinstance(route, APIRoute) and route.path == path
        for method in route.methods
    })


@app.get("/{full_path:path}", include_in_schema=False)
async def serve_frontend(full_path: str, current: Settings = Depends(get_settings)):
    """Static frontend files, falling back to index.html for client-side routes"""
    request_path = "/" + full_path
    if request_path == API_PREFIX or request_path.startswith(API_PREFIX + "/"):
        allowed = _api_methods(request_path)
        if allowed:
            raise HTTPException(status_code=405, detail="Method Not Allowed",
                                headers={"Allow": ", ".join(allowed)})
        raise HTTPException(status_code=404, detail="Not found")

    static_dir = Path(current.static_dir).resolve()

    if full_path:
        candidate = (static_dir / full_path).resolve()
        if static_dir in candidate.parents and candidate.is_file():
            return FileResponse(candidate)

    index_file = static_dir / "index.html"
    if index_file.is_file():
        return FileResponse(index_file)
    raise HTTPException(status_code=404, detail="Not found")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=settings.port, reload=True)
