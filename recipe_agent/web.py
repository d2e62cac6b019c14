"""
JSON API: recipe URL or recipe photo -> ExtractionResult.

  POST /api/extract        {"url": "...", "ai": true}
  POST /api/extract-image  multipart form, field "image"

Status: 200 on success, 400 for bad input, 422 when no recipe could be
extracted, 500 for unexpected errors.
"""
import base64
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from recipe_agent.config import Settings
from recipe_agent.extractor import RecipeExtractor
from recipe_agent.models import ErrorKind, ExtractionResult
from recipe_agent.validation import MAX_IMAGE_BYTES

logger = logging.getLogger(__name__)

load_dotenv()


class ExtractRequest(BaseModel):
    url: str = ""
    ai: bool = True


@asynccontextmanager
async def lifespan(app: FastAPI):
    """One extractor (and headless browser) for the app's lifetime, closed on shutdown."""
    extractor = RecipeExtractor(Settings.from_env())
    app.state.extractor = extractor
    try:
        yield
    finally:
        await extractor.close()


app = FastAPI(title="Recipe Agent", lifespan=lifespan)


def get_extractor(request: Request) -> RecipeExtractor:
    return request.app.state.extractor


def _status_for(result: ExtractionResult) -> int:
    if result.success:
        return 200
    if result.error_kind == ErrorKind.INPUT:
        return 400
    return 422


def _respond(result: ExtractionResult) -> JSONResponse:
    return JSONResponse(status_code=_status_for(result), content=result.model_dump(mode="json"))


def _server_error(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"success": False, "error": message})


def _bad_request(message: str) -> JSONResponse:
    result = ExtractionResult(success=False, error=message, error_kind=ErrorKind.INPUT)
    return JSONResponse(status_code=400, content=result.model_dump(mode="json"))


@app.post("/api/extract")
async def api_extract(body: ExtractRequest, extractor: RecipeExtractor = Depends(get_extractor)):
    """Extract a recipe from a URL. "ai": false forces structured data only."""
    if not body.url.strip():
        return _bad_request("URL is required")
    try:
        result = await extractor.extract(body.url, ai_enabled=body.ai)
    except Exception:
        logger.exception("Unexpected error extracting %s", body.url)
        return _server_error("Internal server error")
    return _respond(result)


@app.post("/api/extract-image")
async def api_extract_image(
    image: UploadFile | None = File(None),
    extractor: RecipeExtractor = Depends(get_extractor),
):
    """Extract a recipe from an uploaded photo or screenshot (jpeg, png, gif, webp; max 10MB)."""
    if image is None:
        return _bad_request("No image provided")
    data = await image.read(MAX_IMAGE_BYTES + 1)
    if len(data) > MAX_IMAGE_BYTES:
        return _bad_request("Image too large. Maximum size is 10MB")
    try:
        image_b64 = base64.b64encode(data).decode("ascii")
        result = await extractor.extract_image(image_b64, image.content_type or "")
    except Exception:
        logger.exception("Unexpected error extracting recipe from image %s", image.filename)
        return _server_error("Internal server error")
    return _respond(result)


def run() -> None:
    """Run the API server (uv run start)."""
    import uvicorn
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    uvicorn.run("recipe_agent.web:app", host="0.0.0.0", port=8000, reload=True)
