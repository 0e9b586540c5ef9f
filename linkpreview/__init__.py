"""Link preview metadata resolution from HTML documents."""
from linkpreview.adapters.html_fetcher import LinkPreviewError, NonTextResponseError
from linkpreview.layers.ingestion import resolve_from_html, resolve_from_url
from linkpreview.models.preview import PreviewData, UrlPreviewData

__version__ = "1.0.0"

__all__ = [
    "resolve_from_html",
    "resolve_from_url",
    "PreviewData",
    "UrlPreviewData",
    "LinkPreviewError",
    "NonTextResponseError",
]
