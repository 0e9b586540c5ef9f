"""
URL normalization helpers for extracted image and favicon references.
"""
from typing import Iterable, List, Optional
from urllib.parse import urljoin, urlparse

from pydantic import AnyUrl, TypeAdapter, ValidationError

_url_adapter = TypeAdapter(AnyUrl)


def is_valid_url(value: str) -> bool:
    """
    Check that a string is a syntactically valid absolute URL.

    Relative references ("/favicon.ico", "img.png", "//host/a.jpg") are
    rejected since they carry no scheme.
    """
    if not isinstance(value, str) or not value:
        return False
    try:
        _url_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


def get_scheme(url: Optional[str]) -> Optional[str]:
    """Return the lowercase scheme of a URL, or None."""
    if not url:
        return None
    try:
        scheme = urlparse(url).scheme
    except ValueError:
        return None
    return scheme.lower() or None


def get_hostname(url: Optional[str]) -> Optional[str]:
    """Return the lowercase hostname of a URL, or None."""
    if not url:
        return None
    try:
        host = urlparse(url).hostname
    except ValueError:
        return None
    return host.lower() if host else None


def get_origin(url: Optional[str]) -> Optional[str]:
    """Return scheme://host[:port] for a URL, without credentials."""
    if not url:
        return None
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None
    host = parsed.netloc.rsplit("@", 1)[-1]
    return f"{parsed.scheme.lower()}://{host}"


def is_protocol_relative(url: str) -> bool:
    return url.startswith("//")


def is_root_relative(url: str) -> bool:
    return url.startswith("/") and not url.startswith("//")


def absolutize_protocol_relative(
    url: str,
    source_url: Optional[str],
    default_scheme: str = "https",
) -> str:
    """
    Give a protocol-relative URL ("//cdn.example.com/a.jpg") the scheme of
    the page it came from. Other URLs are returned untouched.
    """
    if not is_protocol_relative(url):
        return url
    scheme = get_scheme(source_url) or default_scheme
    return f"{scheme}:{url}"


def resolve_root_relative(url: str, source_url: Optional[str]) -> str:
    """
    Resolve a root-relative path ("/favicon.ico") against the origin of the
    page URL. Left as-is when the origin is unknown.
    """
    if not is_root_relative(url):
        return url
    origin = get_origin(source_url)
    if not origin:
        return url
    return urljoin(origin, url)


def unique_valid_urls(candidates: Iterable[Optional[str]]) -> List[str]:
    """Drop invalid URLs and duplicates, keeping first-seen order."""
    seen = set()
    urls = []
    for candidate in candidates:
        if not candidate or candidate in seen:
            continue
        if not is_valid_url(candidate):
            continue
        seen.add(candidate)
        urls.append(candidate)
    return urls
