"""Layers package initialization."""
from linkpreview.layers.ingestion import IngestionLayer, resolve_from_html, resolve_from_url
from linkpreview.layers.jsonld import JsonLdLookup, get_path
from linkpreview.layers.resolution import MetadataResolver, ResolutionContext

__all__ = [
    "IngestionLayer",
    "resolve_from_html",
    "resolve_from_url",
    "JsonLdLookup",
    "get_path",
    "MetadataResolver",
    "ResolutionContext",
]
