"""
Link Preview Service - FastAPI Application
Main entry point with REST API endpoints.
"""
from typing import Optional

import httpx
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from linkpreview import __version__
from linkpreview.adapters.html_fetcher import NonTextResponseError
from linkpreview.config import config
from linkpreview.layers.ingestion import IngestionLayer
from linkpreview.models.preview import PreviewData
from linkpreview.utils.logger import get_logger, set_trace_id


# Initialize FastAPI app
app = FastAPI(
    title="Link Preview Service",
    description="Resolves title, description, images, favicons and price metadata for link previews",
    version=__version__,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ingestion_layer = IngestionLayer()

logger = get_logger("main")


# Request/Response models
class HtmlPreviewRequest(BaseModel):
    """Request model for previews of caller-supplied HTML."""
    html: str
    url: Optional[str] = None  # where the HTML came from, if known


class PreviewResponse(PreviewData):
    """Preview data plus the request trace id."""
    trace_id: str
    url: Optional[str] = None


# API Routes
@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.get("/api/preview", response_model=PreviewResponse)
async def preview_url(url: str = Query(..., description="URL to build a preview for")):
    """
    Fetch a URL and resolve its link preview.

    The returned url is the final URL after redirects.
    """
    trace_id = set_trace_id()

    logger.info("preview_request", url=url, trace_id=trace_id)

    try:
        preview = await ingestion_layer.from_url(url)
    except NonTextResponseError as e:
        logger.error("preview_non_text", error=str(e), url=url)
        raise HTTPException(status_code=415, detail=str(e))
    except httpx.HTTPError as e:
        logger.error("preview_fetch_error", error=str(e), url=url)
        raise HTTPException(status_code=502, detail=f"Failed to fetch URL: {e}")

    return PreviewResponse(trace_id=trace_id, **preview.model_dump())


@app.post("/api/preview/html", response_model=PreviewResponse)
def preview_html(request: HtmlPreviewRequest):
    """Resolve a link preview from HTML supplied in the request body."""
    trace_id = set_trace_id()

    logger.info(
        "preview_html_request",
        url=request.url,
        content_length=len(request.html),
        trace_id=trace_id
    )

    preview = ingestion_layer.from_html(request.html, source_url=request.url)

    return PreviewResponse(trace_id=trace_id, url=request.url, **preview.model_dump())


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
