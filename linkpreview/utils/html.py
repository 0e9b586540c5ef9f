"""
Thin wrappers around BeautifulSoup for document parsing and markup stripping.
"""
from typing import Optional

from bs4 import BeautifulSoup, Tag

HTML_PARSER = "lxml"


def parse_document(html: str) -> BeautifulSoup:
    """Parse HTML text into a best-effort document tree."""
    return BeautifulSoup(html or "", HTML_PARSER)


def strip_markup(text: Optional[str]) -> Optional[str]:
    """Remove tags from a string and trim surrounding whitespace."""
    if text is None:
        return None
    if "<" in text:
        text = BeautifulSoup(text, "html.parser").get_text()
    return text.strip()


def get_attr(node: Optional[Tag], name: str) -> Optional[str]:
    """Read a string attribute, joining multi-valued attributes like rel."""
    if node is None:
        return None
    value = node.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return value


def document_title(soup: BeautifulSoup) -> Optional[str]:
    """Return the text of the document's <title> element."""
    title_tag = soup.find("title")
    if title_tag is None:
        return None
    return title_tag.get_text()
