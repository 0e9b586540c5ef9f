"""Adapters package initialization."""
from linkpreview.adapters.html_fetcher import (
    FetchedPage,
    HTMLFetcher,
    LinkPreviewError,
    NonTextResponseError,
)

__all__ = ["FetchedPage", "HTMLFetcher", "LinkPreviewError", "NonTextResponseError"]
