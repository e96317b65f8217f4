"""
HTTP collaborators на httpx.AsyncClient

- HttpSettingsProvider: GET /.well-known/shopless/settings.json
- HttpCatalogResolver: GET страницы продукта (HTML с JSON-LD или application/ld+json)
- HttpOrderTransport: POST {endpoint}orders, успех только 201

Клиент передаётся снаружи (base_url, таймауты, транспорт задаёт вызывающий код).
"""

import logging
from typing import Any, Optional

import httpx
import pydantic

from shopless.adapters.jsonld import extract_product_jsonld, parse_product_descriptor
from shopless.cart.config import SETTINGS_PATH
from shopless.core.domain.product import ProductDescriptor
from shopless.core.domain.settings import Settings
from shopless.core.errors import OrderFailed, TransportError


logger = logging.getLogger(__name__)


def _content_type(response: httpx.Response) -> str:
    return response.headers.get("content-type", "")


class HttpSettingsProvider:
    def __init__(self, client: httpx.AsyncClient, settings_url: str = SETTINGS_PATH):
        self.client = client
        self.settings_url = settings_url

    async def fetch_settings(self) -> Settings:
        """
        Raises:
            TransportError: статус != 200, не JSON или невалидные settings
        """
        try:
            res = await self.client.get(self.settings_url, headers={"Accept": "application/json"})
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to retrieve shopless settings: {e}") from e

        if res.status_code != 200:
            raise TransportError(
                f"Failed to retrieve shopless settings with status: {res.status_code}"
            )

        content_type = _content_type(res)
        if "application/json" not in content_type:
            raise TransportError(
                "Failed to retrieve shopless settings, expected JSON, "
                f"received content-type: {content_type or None}"
            )

        try:
            return Settings.model_validate(res.json())
        except (ValueError, pydantic.ValidationError) as e:
            raise TransportError(f"Malformed shopless settings: {e}") from e


class HttpCatalogResolver:
    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def fetch_product(self, product_ref: str) -> Optional[ProductDescriptor]:
        """
        Returns:
            ProductDescriptor или None, если на странице нет JSON-LD Product

        Raises:
            TransportError: статус != 200 или невалидные данные продукта
        """
        try:
            res = await self.client.get(
                product_ref, headers={"Accept": "text/html, application/ld+json"}
            )
        except httpx.HTTPError as e:
            raise TransportError(f"Failed to retrieve product with URL: {product_ref}") from e

        if res.status_code != 200:
            raise TransportError(f"Failed to retrieve product with URL: {product_ref}")

        content_type = _content_type(res)
        if "text/html" in content_type:
            data = extract_product_jsonld(res.text)
        elif "application/ld+json" in content_type:
            try:
                data = res.json()
            except ValueError as e:
                raise TransportError(f"Invalid JSON-LD for product {product_ref}") from e
        else:
            logger.warning("Unexpected content-type %r for product %s", content_type, product_ref)
            data = None

        if data is None:
            return None
        return parse_product_descriptor(data)


class HttpOrderTransport:
    def __init__(self, client: httpx.AsyncClient, endpoint: str):
        self.client = client
        self.endpoint = endpoint if endpoint.endswith("/") else endpoint + "/"

    async def submit_order(self, payload: dict[str, Any]) -> Any:
        """
        Returns:
            JSON тело ответа (или None, если тело не JSON)

        Raises:
            OrderFailed: статус != 201, тело ответа передаётся в ошибке
        """
        try:
            res = await self.client.post(self.endpoint + "orders", json=payload)
        except httpx.HTTPError as e:
            raise TransportError(f"Order submission failed: {e}") from e

        if res.status_code != 201:
            raise OrderFailed(res.text, status_code=res.status_code)

        logger.info("Order accepted by %s", self.endpoint)
        try:
            return res.json()
        except ValueError:
            return None
