"""
Errors — Таксономия ошибок корзины

Все ошибки являются синхронными отказами вызвавшей операции.
Иерархия:
- ValidationError: некорректный ввод конструктора, неположительная цена
- NotFoundError: продукт или оффер не найден
- ConstraintError: неизвестная опция, несовместимый выбор, неподдерживаемое значение
- PreconditionError: заказ без адреса/метода доставки, settings не загружены
- TransportError: сбой запроса settings/catalog/order
"""

from typing import Any, Sequence


class CartError(Exception):
    """Базовая ошибка корзины."""


# =============================================================================
# VALIDATION
# =============================================================================


class ValidationError(CartError, ValueError):
    """Некорректные входные данные (конструктор LineItem, Money, Address)."""


class InvalidPrice(ValidationError):
    """Цена единицы товара должна быть строго положительной."""

    def __init__(self, price: Any):
        super().__init__(
            f"Price must be positive, got {price} (use a negative quantity instead)"
        )
        self.price = price


# =============================================================================
# NOT FOUND
# =============================================================================


class NotFoundError(CartError):
    """Сущность не найдена во внешнем источнике."""


class ProductNotFound(NotFoundError):
    """Catalog resolver не вернул product descriptor."""

    def __init__(self, product_ref: str):
        super().__init__(f"Product data couldn't be extracted from: {product_ref}")
        self.product_ref = product_ref


class NoMatchingOffer(NotFoundError):
    """У продукта нет оффера в валюте корзины."""

    def __init__(self, product_ref: str, currency: str):
        super().__init__(f"Product {product_ref} has no offer in currency {currency}")
        self.product_ref = product_ref
        self.currency = currency


# =============================================================================
# CONSTRAINTS
# =============================================================================


class ConstraintError(CartError):
    """Нарушение ограничений опций, доставки или страны."""


class UnknownOption(ConstraintError):
    def __init__(self, sku: str):
        super().__init__(f"Option with sku {sku} does not exist")
        self.sku = sku


class IncompatibleSelection(ConstraintError):
    def __init__(self, sku: str, other_sku: str):
        super().__init__(f"Incompatible options {sku} and {other_sku}")
        self.sku = sku
        self.other_sku = other_sku


class UnsupportedValue(ConstraintError):
    def __init__(self, sku: str, value: Any):
        super().__init__(f"Unsupported value {value} for option {sku}")
        self.sku = sku
        self.value = value


class InvalidShippingMethod(ConstraintError):
    """Выбранный метод доставки недоступен для страны доставки."""

    def __init__(self, key: str, valid_keys: Sequence[str]):
        valid = ", ".join(valid_keys) if valid_keys else "none"
        super().__init__(f"Unknown shipping method {key!r}, valid methods: {valid}")
        self.key = key
        self.valid_keys = list(valid_keys)


class UnsupportedCountry(ConstraintError):
    def __init__(self, country: str):
        super().__init__(f"Country {country} is not enabled in shop settings")
        self.country = country


# =============================================================================
# PRECONDITIONS
# =============================================================================


class PreconditionError(CartError):
    """Операция вызвана в неподходящем состоянии корзины."""


class MissingShippingAddress(PreconditionError):
    def __init__(self) -> None:
        super().__init__("Must set a shipping address before creating an order")


class MissingShippingMethod(PreconditionError):
    def __init__(self) -> None:
        super().__init__("Must select a shipping method before creating an order")


class SettingsNotLoaded(PreconditionError):
    def __init__(self) -> None:
        super().__init__("Settings not loaded")


class OriginRequired(PreconditionError):
    """Относительный URL позиции при отсутствии origin в конфигурации."""

    def __init__(self, url: str):
        super().__init__(f"Origin required to build an absolute URL for {url!r}")
        self.url = url


# =============================================================================
# TRANSPORT
# =============================================================================


class TransportError(CartError):
    """Сбой внешнего запроса или неожиданный content-type/status."""


class OrderFailed(TransportError):
    """Order submission вернул неуспешный ответ."""

    def __init__(self, body: str, status_code: int | None = None):
        super().__init__(body or f"Order submission failed with status {status_code}")
        self.body = body
        self.status_code = status_code
