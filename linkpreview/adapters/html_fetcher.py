"""
HTML Fetcher Adapter for the Link Preview service.
Turns a URL into the final (post-redirect) URL and the page's HTML text.
"""
from dataclasses import dataclass
from typing import Mapping, Optional

import httpx

from linkpreview.config import config
from linkpreview.utils.logger import LayerLogger

TEXT_CONTENT_TYPES = ("application/xhtml+xml", "application/xml")


class LinkPreviewError(Exception):
    """Base error for failures that abort a whole preview."""


class NonTextResponseError(LinkPreviewError):
    """The URL answered with something that is not an HTML/text document."""

    def __init__(self, url: str, content_type: str):
        self.url = url
        self.content_type = content_type
        super().__init__(f"Expected a text response from {url}, got {content_type}")


@dataclass
class FetchedPage:
    """A fetched document and where it ended up after redirects."""
    url: str
    html: str
    status_code: int
    content_type: Optional[str] = None


def is_text_content_type(content_type: Optional[str]) -> bool:
    """Missing content types are given the benefit of the doubt."""
    if not content_type:
        return True
    mime = content_type.split(";")[0].strip().lower()
    return (
        mime.startswith("text/")
        or mime in TEXT_CONTENT_TYPES
        or mime.endswith("+xml")
    )


class HTMLFetcher:
    """
    Single-request HTML fetcher.

    Follows redirects, sends crawler-friendly headers and raises on
    transport errors, error statuses and non-text bodies. No retries.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self.user_agent = user_agent or config.USER_AGENT
        self.transport = transport
        self.logger = LayerLogger("html_fetcher")

    def _get_headers(self, overrides: Optional[Mapping[str, str]] = None) -> httpx.Headers:
        """Default request headers with caller overrides merged on top."""
        headers = httpx.Headers({
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
        })
        if overrides:
            headers.update(overrides)
        return headers

    async def fetch(self, url: str, headers: Optional[Mapping[str, str]] = None) -> FetchedPage:
        """
        Fetch a page.

        Args:
            url: The URL to fetch
            headers: Extra headers, overriding the defaults

        Returns:
            FetchedPage with the final URL and body text

        Raises:
            httpx.HTTPError: network failure or error status
            NonTextResponseError: body is not a text document
        """
        self.logger.log_action("fetch_html", "started", url=url)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                response = await client.get(url, headers=self._get_headers(headers))
                response.raise_for_status()
        except httpx.HTTPError as e:
            self.logger.log_error(
                f"Failed to fetch URL: {str(e)}",
                error_type="http_error",
                url=url
            )
            raise

        content_type = response.headers.get("content-type")
        if not is_text_content_type(content_type):
            self.logger.log_error(
                f"Non-text response: {content_type}",
                error_type="non_text_response",
                url=url
            )
            raise NonTextResponseError(url, content_type)

        page = FetchedPage(
            url=str(response.url),
            html=response.text,
            status_code=response.status_code,
            content_type=content_type,
        )

        self.logger.log_action(
            "fetch_html",
            "completed",
            url=url,
            final_url=page.url,
            status_code=page.status_code,
            content_length=len(page.html)
        )
        return page
