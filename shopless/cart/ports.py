"""
Ports — Контракты внешних коллабораторов корзины

Корзина получает коллабораторов через конструктор; реализации на httpx
находятся в shopless.adapters, in-memory fakes — в тестах.
"""

from dataclasses import dataclass
from typing import Any, Optional, Protocol

from shopless.core.domain.product import ProductDescriptor
from shopless.core.domain.settings import Settings


class SettingsProvider(Protocol):
    async def fetch_settings(self) -> Settings:
        """Настройки магазина; TransportError при сбое."""
        ...


class CatalogResolver(Protocol):
    async def fetch_product(self, product_ref: str) -> Optional[ProductDescriptor]:
        """Product descriptor по ссылке; None — не найден."""
        ...


class CartStorage(Protocol):
    """Хранилище snapshot корзины (last-write-wins)."""

    def load(self) -> Optional[str]:
        ...

    def save(self, data: str) -> None:
        ...


class OrderTransport(Protocol):
    async def submit_order(self, payload: dict[str, Any]) -> Any:
        """Отправка заказа; OrderFailed при неуспешном ответе."""
        ...


@dataclass(frozen=True)
class Payment:
    """Непрозрачная тройка платёжных данных, передаётся в заказ как есть."""

    method: str
    id: Optional[str] = None
    meta: Any = None
