"""Unit tests for the per-document JSON-LD lookup."""

from linkpreview.layers.jsonld import JsonLdLookup, get_path
from linkpreview.utils.html import parse_document


def lookup_for(*scripts: str) -> JsonLdLookup:
    tags = "".join(f'<script type="application/ld+json">{s}</script>' for s in scripts)
    return JsonLdLookup(parse_document(f"<html><head>{tags}</head><body></body></html>"))


class TestJsonLdLookup:
    def test_first_match_wins(self):
        lookup = lookup_for(
            '{"@type": "Product", "name": "First"}',
            '{"@type": "Product", "name": "Second"}',
        )
        assert lookup.get("Product")["name"] == "First"

    def test_type_is_case_insensitive(self):
        lookup = lookup_for('{"@type": "product", "name": "Lower"}')
        assert lookup.get("Product")["name"] == "Lower"
        assert lookup.get("PRODUCT") is lookup.get("product")

    def test_array_script_flattened(self):
        lookup = lookup_for('[{"@type": "Organization"}, {"@type": "Product", "name": "In array"}]')
        assert lookup.get("Product")["name"] == "In array"

    def test_graph_container(self):
        lookup = lookup_for(
            '{"@context": "https://schema.org", "@graph": ['
            '{"@type": "WebSite", "name": "Site"}, {"@type": "WebPage"}]}'
        )
        assert lookup.get("WebSite")["name"] == "Site"

    def test_list_type(self):
        lookup = lookup_for('{"@type": ["Product", "Thing"], "name": "Multi"}')
        assert lookup.get("Thing")["name"] == "Multi"

    def test_malformed_scripts_skipped(self):
        lookup = lookup_for("{not json", "", '{"@type": "Product", "name": "Ok"}')
        assert lookup.get("Product")["name"] == "Ok"

    def test_too_deeply_nested_script_skipped(self):
        nested = "[" * 100000 + "]" * 100000
        lookup = lookup_for(nested, '{"@type": "WebSite", "name": "Site"}')
        assert lookup.get("WebSite")["name"] == "Site"
        nodes = lookup._nodes
        assert lookup.get("Product") is None
        assert lookup._nodes is nodes

    def test_missing_type(self):
        lookup = lookup_for('{"@type": "Product"}')
        assert lookup.get("WebSite") is None

    def test_parsed_lazily_once(self):
        lookup = lookup_for('{"@type": "Product"}')
        assert lookup._nodes is None
        lookup.get("Product")
        nodes = lookup._nodes
        lookup.get("WebSite")
        assert lookup._nodes is nodes


class TestGetPath:
    DATA = {
        "offers": [{"price": "10.00"}, {"price": "12.00"}],
        "brand": {"name": "Acme"},
        "zero": 0,
    }

    def test_nested_keys(self):
        assert get_path(self.DATA, "brand.name") == "Acme"

    def test_list_index(self):
        assert get_path(self.DATA, "offers.1.price") == "12.00"

    def test_absent_paths(self):
        assert get_path(self.DATA, "offers.price") is None
        assert get_path(self.DATA, "offers.5.price") is None
        assert get_path(self.DATA, "brand.name.first") is None
        assert get_path(None, "anything") is None

    def test_falsy_values_kept(self):
        assert get_path(self.DATA, "zero") == 0
