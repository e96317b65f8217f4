"""
Тесты для HTTP коллабораторов (httpx.MockTransport)

Проверяет:
1. HttpSettingsProvider: статус, content-type, валидация settings
2. HttpCatalogResolver: HTML с JSON-LD, application/ld+json, неизвестный content-type
3. HttpOrderTransport: успех только на 201, тело ошибки в OrderFailed
"""

import asyncio
import json
from decimal import Decimal
from typing import Any, Callable

import httpx
import pytest

from shopless.adapters.http import HttpCatalogResolver, HttpOrderTransport, HttpSettingsProvider
from shopless.cart import Cart, CartConfig, Payment
from shopless.core.errors import OrderFailed, TransportError

from tests.unit.samples import PRODUCTS, SETTINGS_DATA, SHIPPING_ADDRESS


Handler = Callable[[httpx.Request], httpx.Response]


def run_with_client(handler: Handler, action: Callable[[httpx.AsyncClient], Any]) -> Any:
    async def scenario() -> Any:
        async with httpx.AsyncClient(
            transport=httpx.MockTransport(handler), base_url="https://shop.example"
        ) as client:
            return await action(client)

    return asyncio.run(scenario())


def product_page(data: dict[str, Any]) -> str:
    return f'<html><head><script type="application/ld+json">{json.dumps(data)}</script></head></html>'


# =============================================================================
# ТЕСТЫ: Settings
# =============================================================================


class TestSettingsProvider:
    def test_fetch(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200, json=SETTINGS_DATA)

        settings = run_with_client(handler, lambda c: HttpSettingsProvider(c).fetch_settings())
        assert seen == ["/.well-known/shopless/settings.json"]
        assert settings.is_enabled("DE")
        assert settings.country("AT").taxrate == Decimal("20")

    def test_error_status(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="oops")

        with pytest.raises(TransportError, match="status: 500"):
            run_with_client(handler, lambda c: HttpSettingsProvider(c).fetch_settings())

    def test_not_json(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="DE=19")

        with pytest.raises(TransportError, match="expected JSON"):
            run_with_client(handler, lambda c: HttpSettingsProvider(c).fetch_settings())

    def test_malformed_settings(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"DE": {"taxrate": -5}})

        with pytest.raises(TransportError, match="Malformed"):
            run_with_client(handler, lambda c: HttpSettingsProvider(c).fetch_settings())

    def test_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError):
            run_with_client(handler, lambda c: HttpSettingsProvider(c).fetch_settings())


# =============================================================================
# ТЕСТЫ: Catalog
# =============================================================================


class TestCatalogResolver:
    def test_html_page(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert "text/html" in request.headers["accept"]
            return httpx.Response(200, html=product_page(PRODUCTS["/products/shirt"]))

        product = run_with_client(
            handler, lambda c: HttpCatalogResolver(c).fetch_product("/products/shirt")
        )
        assert product.sku == "SHIRT"
        assert product.offer_for("USD").price == Decimal("12")

    def test_ld_json(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                content=json.dumps(PRODUCTS["/products/book"]).encode(),
                headers={"content-type": "application/ld+json"},
            )

        product = run_with_client(
            handler, lambda c: HttpCatalogResolver(c).fetch_product("/products/book")
        )
        assert product.product_type == "book"

    def test_page_without_product(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, html="<html><body>About us</body></html>")

        assert run_with_client(handler, lambda c: HttpCatalogResolver(c).fetch_product("/about")) is None

    def test_unexpected_content_type(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"%PDF", headers={"content-type": "application/pdf"})

        assert run_with_client(handler, lambda c: HttpCatalogResolver(c).fetch_product("/p.pdf")) is None

    def test_not_found(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="not found")

        with pytest.raises(TransportError, match="/products/gone"):
            run_with_client(handler, lambda c: HttpCatalogResolver(c).fetch_product("/products/gone"))


# =============================================================================
# ТЕСТЫ: Orders
# =============================================================================


class TestOrderTransport:
    def test_created(self) -> None:
        received: list[tuple[str, dict[str, Any]]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            received.append((str(request.url), json.loads(request.content)))
            return httpx.Response(201, json={"id": "order-42"})

        result = run_with_client(
            handler,
            lambda c: HttpOrderTransport(c, "https://shop.example/api").submit_order({"total": "1.00"}),
        )
        assert result == {"id": "order-42"}
        assert received == [("https://shop.example/api/orders", {"total": "1.00"})]

    def test_created_without_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(201)

        result = run_with_client(
            handler, lambda c: HttpOrderTransport(c, "https://shop.example/api/").submit_order({})
        )
        assert result is None

    @pytest.mark.parametrize("status", [200, 400, 500])
    def test_non_created_fails(self, status: int) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, text='{"error": "rejected"}')

        with pytest.raises(OrderFailed) as exc_info:
            run_with_client(
                handler, lambda c: HttpOrderTransport(c, "https://shop.example/api/").submit_order({})
            )
        assert exc_info.value.status_code == status
        assert exc_info.value.body == '{"error": "rejected"}'


# =============================================================================
# ТЕСТЫ: Корзина поверх HTTP
# =============================================================================


def test_cart_checkout_over_http() -> None:
    orders: list[dict[str, Any]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/.well-known/shopless/settings.json":
            return httpx.Response(200, json=SETTINGS_DATA)
        if path in PRODUCTS:
            return httpx.Response(200, html=product_page(PRODUCTS[path]))
        if path == "/api/orders" and request.method == "POST":
            orders.append(json.loads(request.content))
            return httpx.Response(201, json={"id": "order-7"})
        return httpx.Response(404)

    async def checkout(client: httpx.AsyncClient) -> Any:
        config = CartConfig(endpoint="https://shop.example/api")
        cart = Cart(
            config,
            settings_provider=HttpSettingsProvider(client),
            catalog=HttpCatalogResolver(client),
            transport=HttpOrderTransport(client, config.endpoint),
        )
        await cart.add("/products/shirt", 1, selections={"color": 5})
        cart.set_shipping_address(SHIPPING_ADDRESS)
        cart.select_shipping_method("standard")
        return await cart.order(Payment("invoice"))

    assert run_with_client(handler, checkout) == {"id": "order-7"}
    assert orders[0]["total"] == "17.40"
    assert orders[0]["lineItems"][0]["url"] == "https://shop.example/products/shirt"
