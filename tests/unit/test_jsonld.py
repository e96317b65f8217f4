"""
Тесты для извлечения schema.org Product из HTML (JSON-LD)
"""

import json
import logging
from decimal import Decimal
from typing import Any

import pytest

from shopless.adapters.jsonld import extract_product_jsonld, is_product, parse_product_descriptor
from shopless.core.errors import TransportError

from tests.unit.samples import PRODUCTS


def page(*blocks: Any, raw: str = "") -> str:
    scripts = "".join(
        f'<script type="application/ld+json">{json.dumps(block)}</script>' for block in blocks
    )
    return f"<html><head><title>Shop</title>{raw}{scripts}</head><body><h1>Shirt</h1></body></html>"


class TestIsProduct:
    @pytest.mark.parametrize(
        "data, expected",
        [
            ({"@context": "http://schema.org", "@type": "Product"}, True),
            ({"@context": "https://schema.org/", "@type": "Product"}, True),
            ({"@context": "http://schema.org", "@type": "Organization"}, False),
            ({"@context": "https://example.org", "@type": "Product"}, False),
            ({"@type": "Product"}, False),
            (["Product"], False),
        ],
    )
    def test_context_and_type(self, data: Any, expected: bool) -> None:
        assert is_product(data) is expected


class TestExtract:
    def test_product_block(self) -> None:
        data = extract_product_jsonld(page(PRODUCTS["/products/shirt"]))
        assert data == PRODUCTS["/products/shirt"]

    def test_skips_invalid_blocks(self, caplog: pytest.LogCaptureFixture) -> None:
        html = page(
            {"@context": "http://schema.org", "@type": "Organization", "name": "Shop"},
            PRODUCTS["/products/book"],
            raw='<script type="application/ld+json">{broken</script>',
        )
        with caplog.at_level(logging.WARNING, logger="shopless.adapters.jsonld"):
            data = extract_product_jsonld(html)

        assert data["sku"] == "BOOK"
        assert "Invalid JSON-LD has been ignored" in caplog.text
        assert "invalid @context/@type" in caplog.text

    def test_list_form(self) -> None:
        product = dict(PRODUCTS["/products/book"], **{"@context": "https://schema.org"})
        html = page([{"@context": "https://schema.org", "@type": "BreadcrumbList"}, product])
        assert extract_product_jsonld(html)["sku"] == "BOOK"

    def test_ignores_other_script_types(self) -> None:
        html = (
            "<html><head>"
            f'<script type="application/json">{json.dumps(PRODUCTS["/products/shirt"])}</script>'
            "</head></html>"
        )
        assert extract_product_jsonld(html) is None

    def test_no_product(self) -> None:
        assert extract_product_jsonld("<html><body>Nothing here</body></html>") is None


class TestParseDescriptor:
    def test_single_offer_object(self) -> None:
        product = parse_product_descriptor(PRODUCTS["/products/book"])
        assert product.product_type == "book"
        assert product.offer_for("EUR").price == Decimal("21.40")
        assert product.offer_for("USD") is None

    def test_options_and_constraints(self) -> None:
        product = parse_product_descriptor(PRODUCTS["/products/shirt"])
        assert [o.sku for o in product.options] == ["color", "gift_wrap"]
        assert len(product.option("color").constraints) == 2
        assert product.option("missing") is None

    def test_malformed_product(self) -> None:
        with pytest.raises(TransportError):
            parse_product_descriptor({"@context": "http://schema.org", "@type": "Product"})
