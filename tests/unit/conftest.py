"""
Общие fixtures и fake-коллабораторы для тестов корзины.
"""

import asyncio
from collections import Counter
from typing import Any, Callable, Optional

import pytest

from shopless.adapters.storage import InMemoryStorage
from shopless.cart import Cart, CartConfig
from shopless.core.domain import ProductDescriptor, Settings
from shopless.core.errors import OrderFailed
from tests.unit.samples import PRODUCTS, SETTINGS_DATA


# =============================================================================
# FAKES
# =============================================================================


class FakeSettingsProvider:
    def __init__(self, data: Optional[dict[str, Any]] = None):
        self.data = SETTINGS_DATA if data is None else data
        self.calls = 0

    async def fetch_settings(self) -> Settings:
        self.calls += 1
        await asyncio.sleep(0)
        return Settings.model_validate(self.data)


class FakeCatalog:
    def __init__(self, products: Optional[dict[str, dict[str, Any]]] = None):
        self.products = PRODUCTS if products is None else products
        self.calls: Counter[str] = Counter()

    async def fetch_product(self, product_ref: str) -> Optional[ProductDescriptor]:
        self.calls[product_ref] += 1
        await asyncio.sleep(0)
        data = self.products.get(product_ref)
        return None if data is None else ProductDescriptor.model_validate(data)


class FakeTransport:
    def __init__(self, fail_with: Optional[OrderFailed] = None):
        self.fail_with = fail_with
        self.submitted: list[dict[str, Any]] = []

    async def submit_order(self, payload: dict[str, Any]) -> Any:
        await asyncio.sleep(0)
        if self.fail_with is not None:
            raise self.fail_with
        self.submitted.append(payload)
        return {"id": "order-1"}


class BrokenStorage:
    def load(self) -> Optional[str]:
        raise OSError("storage unavailable")

    def save(self, data: str) -> None:
        raise OSError("quota exceeded")


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def settings_provider() -> FakeSettingsProvider:
    return FakeSettingsProvider()


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def make_cart(
    settings_provider: FakeSettingsProvider,
    catalog: FakeCatalog,
    storage: InMemoryStorage,
    transport: FakeTransport,
) -> Callable[..., Cart]:
    """Фабрика корзины с fake-коллабораторами; kwargs переопределяют CartConfig."""

    def factory(**overrides: Any) -> Cart:
        config = CartConfig(endpoint="https://shop.example/api", **overrides)
        return Cart(
            config,
            settings_provider=settings_provider,
            catalog=catalog,
            storage=storage,
            transport=transport,
        )

    return factory
