"""
JSON-LD lookup for the resolution layer.

Parses <script type="application/ld+json"> blocks on demand and answers
"first node of @type X" queries, memoized per type for one document.
"""
import json
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from linkpreview.utils.logger import LayerLogger


def get_path(data: Any, path: str) -> Any:
    """
    Absence-tolerant lookup into untyped JSON.

    Segments are separated by dots; integer segments index into lists,
    e.g. get_path(product, "offers.0.price"). Any missing key, wrong
    shape, or out-of-range index yields None.
    """
    current = data
    for segment in path.split("."):
        if isinstance(current, dict):
            current = current.get(segment)
        elif isinstance(current, list) and segment.isdigit():
            index = int(segment)
            current = current[index] if index < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


def _declared_types(node: Dict[str, Any]) -> List[str]:
    """Return the lowercase @type names of a node (string or list form)."""
    schema_type = node.get("@type")
    if isinstance(schema_type, str):
        return [schema_type.lower()]
    if isinstance(schema_type, list):
        return [t.lower() for t in schema_type if isinstance(t, str)]
    return []


class JsonLdLookup:
    """
    Lazy, per-document JSON-LD index.

    Scripts are parsed on the first lookup. Each @type is resolved once;
    later lookups of the same type (in any letter case) hit the cache.
    """

    def __init__(self, soup: BeautifulSoup):
        self.soup = soup
        self.logger = LayerLogger("jsonld_lookup")
        self._nodes: Optional[List[Dict[str, Any]]] = None
        self._by_type: Dict[str, Optional[Dict[str, Any]]] = {}

    def get(self, schema_type: str) -> Optional[Dict[str, Any]]:
        """Return the first JSON-LD node declaring schema_type, or None."""
        key = schema_type.lower()
        if key not in self._by_type:
            self._by_type[key] = next(
                (node for node in self._all_nodes() if key in _declared_types(node)),
                None,
            )
        return self._by_type[key]

    def _all_nodes(self) -> List[Dict[str, Any]]:
        if self._nodes is None:
            self._nodes = self._parse_scripts()
        return self._nodes

    def _parse_scripts(self) -> List[Dict[str, Any]]:
        """Parse every JSON-LD script in document order, skipping bad ones."""
        nodes: List[Dict[str, Any]] = []
        skipped = 0

        for script in self.soup.find_all("script", type="application/ld+json"):
            text = script.string
            if not text or not text.strip():
                continue
            try:
                data = json.loads(text, strict=False)
            except (ValueError, RecursionError):
                # malformed or nested deeper than the decoder allows
                skipped += 1
                continue
            nodes.extend(self._flatten(data))

        self.logger.log_action(
            "jsonld_parse",
            "completed",
            total_nodes=len(nodes),
            skipped_scripts=skipped,
        )
        return nodes

    def _flatten(self, data: Any) -> List[Dict[str, Any]]:
        """
        Flatten one level of JSON-LD containers.

        Handles:
        - Single object
        - Array of objects (one script carrying several nodes)
        - @graph container
        """
        if isinstance(data, list):
            return [item for item in data if isinstance(item, dict)]

        if not isinstance(data, dict):
            return []

        nodes = [data]
        graph = data.get("@graph")
        if isinstance(graph, list):
            nodes.extend(item for item in graph if isinstance(item, dict))
        return nodes
