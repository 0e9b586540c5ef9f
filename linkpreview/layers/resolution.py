"""
Resolution Layer for the Link Preview service.

Runs seven independent field resolvers over one parsed document and
assembles a PreviewData record. Each field is a fixed-priority fallback
chain over OpenGraph, Twitter Cards, itemprop microdata and JSON-LD, and
each runs behind its own failure boundary.
"""
import json
import re
from typing import Any, Callable, Iterable, List, Optional, Sequence
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from linkpreview.config import config
from linkpreview.layers.jsonld import JsonLdLookup, get_path
from linkpreview.models.preview import PreviewData
from linkpreview.utils.html import document_title, get_attr, strip_markup
from linkpreview.utils.logger import LayerLogger
from linkpreview.utils.urls import (
    absolutize_protocol_relative,
    get_hostname,
    is_valid_url,
    resolve_root_relative,
    unique_valid_urls,
)

Candidate = Callable[[], Any]

NAME_SELECTORS = (
    'meta[property="og:title"]',
    'meta[name="twitter:title"]',
    'meta[property="twitter:title"]',
)

DESCRIPTION_SELECTORS = (
    'meta[name="description"]',
    'meta[property="og:description"]',
    'meta[name="twitter:description"]',
    'meta[property="twitter:description"]',
    'meta[itemprop="description"]',
)

IMAGE_SELECTORS = (
    'meta[property="og:image:secure_url"]',
    'meta[property="og:image:url"]',
    'meta[property="og:image"]',
    'meta[name="twitter:image:src"]',
    'meta[property="twitter:image:src"]',
    'meta[name="twitter:image"]',
    'meta[property="twitter:image"]',
    'meta[itemprop="image"]',
)

# Last resort when no metadata names an image
IMG_TAG_SELECTORS = (
    "article img[src]",
    "#content img[src]",
    'img[alt*="author" i]',
    'img[src]:not([aria-hidden="true"])',
)

FAVICON_SELECTORS = (
    'link[rel="icon"]',
    'link[rel="shortcut icon"]',
    'link[rel="apple-touch-icon"]',
)

PRICE_AMOUNT_SELECTORS = (
    'meta[property="og:price:amount"]',
    'meta[property="product:price:amount"]',
)

PRICE_CURRENCY_SELECTORS = (
    'meta[property="product:price:currency"]',
    'meta[property="og:price:currency"]',
)

SITE_NAME_SELECTORS = (
    'meta[property="og:site_name"]',
)

LANDING_IMAGE_SCRIPT = 'script[data-a-state*="desktop-landing-image-data"]'

_THOUSANDS_COMMA = re.compile(r"(?<=\d),(?=\d{3}(?!\d))")
_LEADING_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def is_present(value: Any) -> bool:
    """A candidate counts only if it is not None and not a blank string."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def first_present(candidates: Iterable[Candidate]) -> Any:
    """Evaluate candidates in order and return the first present value."""
    for candidate in candidates:
        value = candidate()
        if is_present(value):
            return value
    return None


def as_text(value: Any) -> Optional[str]:
    """Keep strings only; JSON-LD may hold objects where text is expected."""
    return value if isinstance(value, str) else None


def parse_price(value: Any) -> Optional[float]:
    """
    Parse a price from meta content or JSON-LD.

    Commas between digit groups of three are thousands separators
    ("1,299.99" -> 1299.99, "1,299" -> 1299.0); other strings are read up to
    the end of their leading number ("19.99 USD" -> 19.99). Anything that
    does not start with a number yields None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return None

    text = value.strip()
    text = _THOUSANDS_COMMA.sub("", text)

    match = _LEADING_NUMBER.match(text)
    if not match:
        return None
    return float(match.group())


class ResolutionContext:
    """
    Read-only lookups shared by the field resolvers of one resolution.

    Holds the document, the page URL (if known) and the lazy JSON-LD
    index. Created per resolve() call and dropped afterwards.
    """

    def __init__(self, soup: BeautifulSoup, source_url: Optional[str] = None):
        self.soup = soup
        self.source_url = source_url
        self.jsonld = JsonLdLookup(soup)

    def meta_content(self, selector: str) -> Optional[str]:
        """content attribute of the first element matching selector."""
        return get_attr(self.soup.select_one(selector), "content")

    def meta_contents(self, selector: str) -> List[str]:
        """content attributes of every element matching selector."""
        values = []
        for node in self.soup.select(selector):
            content = get_attr(node, "content")
            if content:
                values.append(content)
        return values

    def jsonld_value(self, schema_type: str, path: str) -> Any:
        """Value at path inside the first JSON-LD node of schema_type."""
        node = self.jsonld.get(schema_type)
        if node is None:
            return None
        return get_path(node, path)


class MetadataResolver:
    """
    Resolves link preview metadata from a parsed document.

    First-match fields (name, description, price, currency, site name) take
    the first non-empty candidate of their chain. List fields (images,
    favicons) take the union of all their sources, normalized, validated
    and deduplicated in first-seen order.
    """

    def __init__(
        self,
        landing_image_hosts: Optional[Sequence[str]] = None,
        default_scheme: Optional[str] = None,
    ):
        if landing_image_hosts is None:
            landing_image_hosts = config.LANDING_IMAGE_HOSTS
        self.landing_image_hosts = frozenset(h.lower() for h in landing_image_hosts)
        self.default_scheme = default_scheme or config.DEFAULT_URL_SCHEME
        self.logger = LayerLogger("resolution_layer")

    def resolve(self, soup: BeautifulSoup, source_url: Optional[str] = None) -> PreviewData:
        """Run every field resolver against the document."""
        ctx = ResolutionContext(soup, source_url)

        fields = (
            ("name", self.resolve_name, None),
            ("description", self.resolve_description, None),
            ("images", self.resolve_images, list),
            ("favicons", self.resolve_favicons, list),
            ("price_amount", self.resolve_price_amount, None),
            ("price_currency", self.resolve_price_currency, None),
            ("site_name", self.resolve_site_name, None),
        )
        values = {
            field_name: self._isolate(field_name, resolver, ctx, default)
            for field_name, resolver, default in fields
        }

        preview = PreviewData(**values)

        self.logger.log_resolution(
            fields_present=preview.get_present_fields(),
            fields_missing=preview.get_missing_fields(),
            url=source_url,
        )
        return preview

    def _isolate(
        self,
        field_name: str,
        resolver: Callable[[ResolutionContext], Any],
        ctx: ResolutionContext,
        default: Optional[Callable[[], Any]],
    ) -> Any:
        """Run one field resolver; any failure leaves that field empty."""
        try:
            return resolver(ctx)
        except Exception as e:
            self.logger.log_error(
                f"Failed to resolve {field_name}: {e}",
                error_type=type(e).__name__,
                field=field_name,
                url=ctx.source_url,
            )
            return default() if default else None

    # =========================================================================
    # FIRST-MATCH FIELDS
    # =========================================================================

    def resolve_name(self, ctx: ResolutionContext) -> Optional[str]:
        candidates = self._meta_candidates(ctx, NAME_SELECTORS) + [
            lambda: as_text(ctx.jsonld_value("Product", "name")),
            lambda: document_title(ctx.soup),
        ]
        return strip_markup(first_present(candidates)) or None

    def resolve_description(self, ctx: ResolutionContext) -> Optional[str]:
        candidates = self._meta_candidates(ctx, DESCRIPTION_SELECTORS) + [
            lambda: as_text(ctx.jsonld_value("Product", "description")),
        ]
        return strip_markup(first_present(candidates)) or None

    def resolve_price_amount(self, ctx: ResolutionContext) -> Optional[float]:
        candidates = self._meta_candidates(ctx, PRICE_AMOUNT_SELECTORS) + [
            lambda: ctx.jsonld_value("Product", "offers.price"),
            lambda: ctx.jsonld_value("Product", "offers.lowPrice"),
            lambda: ctx.jsonld_value("Product", "offers.0.price"),
        ]
        return parse_price(first_present(candidates))

    def resolve_price_currency(self, ctx: ResolutionContext) -> Optional[str]:
        candidates = self._meta_candidates(ctx, PRICE_CURRENCY_SELECTORS) + [
            lambda: as_text(ctx.jsonld_value("Product", "offers.priceCurrency")),
            lambda: as_text(ctx.jsonld_value("Product", "offers.0.priceCurrency")),
        ]
        currency = first_present(candidates)
        return currency.strip() if currency else None

    def resolve_site_name(self, ctx: ResolutionContext) -> Optional[str]:
        candidates = self._meta_candidates(ctx, SITE_NAME_SELECTORS) + [
            lambda: as_text(ctx.jsonld_value("WebSite", "name")),
        ]
        site_name = first_present(candidates)
        return site_name.strip() if site_name else None

    def _meta_candidates(self, ctx: ResolutionContext, selectors: Sequence[str]) -> List[Candidate]:
        return [lambda selector=selector: ctx.meta_content(selector) for selector in selectors]

    # =========================================================================
    # UNION FIELDS
    # =========================================================================

    def resolve_images(self, ctx: ResolutionContext) -> List[str]:
        """
        Collect preview images.

        Priority:
        1. Marketplace landing image (sole result when present)
        2. Union of image meta tags and JSON-LD Product.image
        3. First usable <img> in the page
        """
        landing_image = self._landing_image(ctx)
        if landing_image:
            return [landing_image]

        candidates: List[str] = []
        for selector in IMAGE_SELECTORS:
            candidates.extend(ctx.meta_contents(selector))
        candidates.extend(self._jsonld_images(ctx.jsonld_value("Product", "image")))

        images = unique_valid_urls(self._absolutize_image(ctx, c) for c in candidates)
        if images:
            return images

        return self._img_tag_image(ctx)

    def resolve_favicons(self, ctx: ResolutionContext) -> List[str]:
        hrefs = []
        for selector in FAVICON_SELECTORS:
            for node in ctx.soup.select(selector):
                href = (get_attr(node, "href") or "").strip()
                if not href:
                    continue
                href = resolve_root_relative(href, ctx.source_url)
                hrefs.append(absolutize_protocol_relative(href, ctx.source_url, self.default_scheme))
        return unique_valid_urls(hrefs)

    def _absolutize_image(self, ctx: ResolutionContext, url: str) -> str:
        return absolutize_protocol_relative(url.strip(), ctx.source_url, self.default_scheme)

    def _landing_image(self, ctx: ResolutionContext) -> Optional[str]:
        """
        Landing image blob some marketplaces embed in a data-a-state script.

        Never raises: any parse or shape problem falls through to the
        generic image chain.
        """
        host = get_hostname(ctx.source_url)
        if not host or host not in self.landing_image_hosts:
            return None

        try:
            script = ctx.soup.select_one(LANDING_IMAGE_SCRIPT)
            if script is None or not script.string:
                return None
            data = json.loads(script.string)
            landing_url = data.get("landingImageUrl") if isinstance(data, dict) else None
            if isinstance(landing_url, str) and is_valid_url(landing_url):
                self.logger.log_decision(
                    decision="use_landing_image",
                    reason="marketplace landing image data found",
                    url=ctx.source_url,
                )
                return landing_url
        except Exception as e:
            self.logger.log_fallback(
                from_source="landing_image_data",
                to_source="meta_images",
                reason=str(e),
                url=ctx.source_url,
            )
        return None

    def _jsonld_images(self, image_data: Any) -> List[str]:
        """
        Normalize JSON-LD image field to list of URLs.

        Handles:
        - String: single URL
        - List[str]: array of URLs
        - List[dict]: array of ImageObject
        - dict: single ImageObject
        """
        items = image_data if isinstance(image_data, list) else [image_data]
        images = []
        for item in items:
            if isinstance(item, dict):
                item = item.get("url") or item.get("contentUrl") or item.get("@id")
            if isinstance(item, str):
                images.append(item)
        return images

    def _img_tag_image(self, ctx: ResolutionContext) -> List[str]:
        """First <img> from the content heuristics that yields a valid URL."""
        for selector in IMG_TAG_SELECTORS:
            src = (get_attr(ctx.soup.select_one(selector), "src") or "").strip()
            if not src:
                continue
            src = self._absolutize_image(ctx, src)
            if ctx.source_url:
                src = urljoin(ctx.source_url, src)
            if is_valid_url(src):
                return [src]
        return []
