"""
Ingestion Layer for the Link Preview service.
Entry points: resolve a preview from raw HTML or from a URL to fetch.
"""
from typing import Mapping, Optional

from linkpreview.adapters.html_fetcher import HTMLFetcher
from linkpreview.layers.resolution import MetadataResolver
from linkpreview.models.preview import PreviewData, UrlPreviewData
from linkpreview.utils.html import parse_document
from linkpreview.utils.logger import LayerLogger


class IngestionLayer:
    """
    Ingestion Layer - hands documents to the resolver.

    This layer:
    - Fetches HTML when given a URL
    - Parses HTML into a document tree
    - Runs the resolver and returns a complete preview record

    Fetch and parse failures propagate; per-field failures never do.
    """

    def __init__(
        self,
        fetcher: Optional[HTMLFetcher] = None,
        resolver: Optional[MetadataResolver] = None,
    ):
        self.logger = LayerLogger("ingestion_layer")
        self.fetcher = fetcher or HTMLFetcher()
        self.resolver = resolver or MetadataResolver()

    def from_html(self, html: str, source_url: Optional[str] = None) -> PreviewData:
        """
        Resolve preview data from an HTML string.

        Args:
            html: The page HTML
            source_url: Where the HTML came from, used to absolutize URLs

        Returns:
            PreviewData model
        """
        self.logger.log_action(
            "resolve_html",
            "started",
            url=source_url,
            content_length=len(html or "")
        )
        soup = parse_document(html)
        return self.resolver.resolve(soup, source_url)

    async def from_url(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
    ) -> UrlPreviewData:
        """
        Fetch a URL and resolve preview data from the response.

        The final URL after redirects is both the base for relative
        references and the url field of the result.
        """
        page = await self.fetcher.fetch(url, headers=headers)

        if page.url != url:
            self.logger.log_decision(
                decision="use_final_url",
                reason="request was redirected",
                url=url,
                final_url=page.url
            )

        preview = self.from_html(page.html, source_url=page.url)
        return UrlPreviewData(url=page.url, **preview.model_dump())


def resolve_from_html(html: str, source_url: Optional[str] = None) -> PreviewData:
    """Resolve link preview metadata from raw HTML."""
    return IngestionLayer().from_html(html, source_url)


async def resolve_from_url(
    url: str,
    headers: Optional[Mapping[str, str]] = None,
) -> UrlPreviewData:
    """Fetch a URL and resolve link preview metadata from it."""
    return await IngestionLayer().from_url(url, headers=headers)
