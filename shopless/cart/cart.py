"""
Cart — Агрегат корзины

Владеет позициями, адресами, email и выбранным методом доставки.
Делегирует оценку опций constraint resolver, расчёт налога — tax allocation engine.

Производные значения (subtotal, shipping, tax, total) всегда вычисляются
заново из текущего состояния — settings и адрес могут меняться между чтениями.

Асинхронные точки: загрузка settings, загрузка product descriptor,
отправка заказа. Мутации add() сериализуются asyncio.Lock.
"""

import asyncio
import json
import logging
from decimal import Decimal
from typing import Any, Mapping, Optional, Union
from urllib.parse import urljoin

import jsonschema
import pydantic

from shopless.cart.config import CartConfig
from shopless.cart.ports import CartStorage, CatalogResolver, OrderTransport, Payment, SettingsProvider
from shopless.cart.state import CartState, derive_state
from shopless.core.contracts import validate_cart_snapshot, validate_order_payload
from shopless.core.domain.address import Address
from shopless.core.domain.line_item import LineItem, to_line_item
from shopless.core.domain.product import ProductDescriptor
from shopless.core.domain.settings import Settings, ShippingMethod, localize
from shopless.core.domain.tax_policy import TaxPolicy
from shopless.core.errors import (
    InvalidPrice,
    InvalidShippingMethod,
    MissingShippingAddress,
    MissingShippingMethod,
    NoMatchingOffer,
    OriginRequired,
    PreconditionError,
    ProductNotFound,
    SettingsNotLoaded,
    UnsupportedCountry,
    ValidationError,
)
from shopless.core.math.money import ZERO, format_money, money_sum, plain_decimal, round2, to_money
from shopless.pricing.constraint_resolver import resolve_options
from shopless.pricing.tax_allocation import NO_TAX, TaxAllocation, allocate_tax


logger = logging.getLogger(__name__)


AddressInput = Union[Address, Mapping[str, Any], None]


class Cart:
    """
    Корзина покупателя.

    Args:
        config: Конфигурация (endpoint, валюта, stacking, origin, язык)
        settings_provider: Источник настроек магазина
        catalog: Catalog resolver для product descriptors
        storage: Хранилище snapshot (опционально)
        transport: Отправка заказов (опционально, нужен только для order())
    """

    def __init__(
        self,
        config: CartConfig,
        settings_provider: SettingsProvider,
        catalog: CatalogResolver,
        storage: Optional[CartStorage] = None,
        transport: Optional[OrderTransport] = None,
    ):
        self.config = config
        self.currency = config.currency
        self.settings: Optional[Settings] = None

        self.line_items: list[LineItem] = []
        self.email: Optional[str] = None
        self.invoice_address: Optional[Address] = None
        self.shipping_address: Optional[Address] = None
        self.selected_shipping_method: Optional[str] = None

        self._settings_provider = settings_provider
        self._catalog = catalog
        self._storage = storage
        self._transport = transport

        # Кэш product descriptors на время жизни корзины, без инвалидации
        self._products: dict[str, ProductDescriptor] = {}
        self._lock = asyncio.Lock()
        self._ordered = False

    # =========================================================================
    # COLLABORATORS
    # =========================================================================

    async def load_settings(self) -> Settings:
        """
        Ленивая загрузка settings; кэшируется на время жизни корзины.

        Адреса, заданные до загрузки, проверяются по разрешённым странам
        и получают локализованное имя страны.
        """
        if self.settings is None:
            logger.debug("Fetching shop settings")
            self.settings = await self._settings_provider.fetch_settings()
            if self._resolve_addresses():
                self._persist()
        return self.settings

    async def _product(self, product_ref: str) -> ProductDescriptor:
        cached = self._products.get(product_ref)
        if cached is not None:
            return cached

        logger.debug("Resolving product descriptor for %s", product_ref)
        product = await self._catalog.fetch_product(product_ref)
        if product is None:
            raise ProductNotFound(product_ref)

        self._products[product_ref] = product
        return product

    # =========================================================================
    # LINE ITEMS
    # =========================================================================

    async def add(
        self,
        product_ref: str,
        quantity: Any,
        meta: Any = None,
        selections: Optional[Mapping[str, Any]] = None,
    ) -> Optional[LineItem]:
        """
        Добавление продукта в корзину.

        Args:
            product_ref: URL/идентификатор продукта
            quantity: Количество (0/None — no-op; отрицательное — возврат)
            meta: Непрозрачные метаданные позиции
            selections: Выбор опций {sku: value}

        Returns:
            Добавленная или увеличенная позиция; None для нулевого количества

        Raises:
            ProductNotFound, NoMatchingOffer, InvalidPrice, ConstraintError,
            TransportError. При ошибке состояние корзины не меняется.
        """
        if not quantity:
            return None
        qty = to_money(quantity)
        if qty == 0:
            return None

        async with self._lock:
            await self.load_settings()
            product = await self._product(product_ref)

            offer = product.offer_for(self.currency)
            if offer is None:
                raise NoMatchingOffer(product_ref, self.currency)
            if offer.price <= 0:
                raise InvalidPrice(offer.price)

            options = resolve_options(product.options, selections, self.currency)
            candidate = to_line_item(
                {
                    "product_sku": product.sku,
                    "url": product_ref,
                    "quantity": qty,
                    "price": offer.price,
                    "name": product.name,
                    "meta": meta,
                    "options": options,
                    "product_type": product.product_type,
                }
            )

            target = None
            if self.config.stack_line_items:
                target = next((item for item in self.line_items if item.stacks_with(candidate)), None)

            if target is not None:
                target.quantity = target.quantity + candidate.quantity
            else:
                self.line_items.append(candidate)
                target = candidate

            self._ordered = False
            self._persist()
            return target

    def remove(self, line_item: LineItem) -> bool:
        """
        Удаление позиции по identity.

        Returns:
            True если позиция была в корзине; отсутствие — no-op
        """
        for index, item in enumerate(self.line_items):
            if item is line_item:
                del self.line_items[index]
                self._ordered = False
                self._persist()
                return True
        return False

    def reset(self) -> None:
        self.line_items = []
        self.invoice_address = None
        self.shipping_address = None
        self.email = None
        self.selected_shipping_method = None
        self._ordered = False
        self._persist()

    # =========================================================================
    # ADDRESSES / CONTACT
    # =========================================================================

    def _build_address(self, data: AddressInput) -> Optional[Address]:
        if data is None:
            return None
        if isinstance(data, Address):
            address = data
        else:
            try:
                address = Address.model_validate(dict(data))
            except pydantic.ValidationError as e:
                raise ValidationError(f"Invalid address: {e}") from e

        if self.settings is not None:
            if not self.settings.is_enabled(address.country):
                raise UnsupportedCountry(address.country)
            address = address.with_country_name(
                self.settings.country_name(address.country, self.config.language)
            )
        return address

    def _resolve_addresses(self) -> bool:
        """
        Повторная проверка текущих адресов по загруженным settings.

        Адрес в отключённой или неизвестной стране сбрасывается (с ним и
        выбранный метод доставки), остальные получают имя страны.

        Returns:
            True если какой-либо адрес был сброшен
        """
        if self.settings is None:
            return False

        dropped = False
        for attr in ("invoice_address", "shipping_address"):
            address = getattr(self, attr)
            if address is None:
                continue
            if not self.settings.is_enabled(address.country):
                logger.warning("Dropping %s in unsupported country %s", attr, address.country)
                setattr(self, attr, None)
                if attr == "shipping_address":
                    self.selected_shipping_method = None
                dropped = True
                continue
            name = self.settings.country_name(address.country, self.config.language)
            setattr(self, attr, address.with_country_name(name))
        return dropped

    def set_invoice_address(self, data: AddressInput) -> Optional[Address]:
        self.invoice_address = self._build_address(data)
        self._ordered = False
        self._persist()
        return self.invoice_address

    def set_shipping_address(self, data: AddressInput) -> Optional[Address]:
        """Замена адреса доставки; сбрасывает выбранный метод доставки."""
        self.shipping_address = self._build_address(data)
        self.selected_shipping_method = None
        self._ordered = False
        self._persist()
        return self.shipping_address

    def set_email(self, email: Optional[str]) -> None:
        self.email = email or None
        self._persist()

    def countries(self) -> dict[str, str]:
        """Разрешённые страны: код → локализованное имя."""
        if self.settings is None:
            return {}
        return self.settings.enabled_countries(self.config.language)

    def country_provinces(self, country: str) -> list[str]:
        if self.settings is None:
            return []
        entry = self.settings.country(country)
        if entry is None or not entry.provinces:
            return []
        return [localize(p, self.config.language) for p in entry.provinces]

    # =========================================================================
    # SHIPPING
    # =========================================================================

    def shipping_methods(self) -> dict[str, ShippingMethod]:
        """Методы доставки для страны текущего адреса доставки в валюте корзины."""
        if self.settings is None or self.shipping_address is None:
            return {}
        return self.settings.shipping_methods(self.shipping_address.country, self.currency)

    def select_shipping_method(self, key: str) -> None:
        """
        Выбор метода доставки.

        Raises:
            SettingsNotLoaded: settings ещё не загружены
            MissingShippingAddress: адрес доставки не задан
            InvalidShippingMethod: метод недоступен для страны доставки
        """
        if self.settings is None:
            raise SettingsNotLoaded()
        if self.shipping_address is None:
            raise MissingShippingAddress()

        methods = self.shipping_methods()
        if key not in methods:
            raise InvalidShippingMethod(key, sorted(methods))

        self.selected_shipping_method = key
        self._ordered = False

    def _selected_method(self) -> Optional[ShippingMethod]:
        if self.selected_shipping_method is None:
            return None
        return self.shipping_methods().get(self.selected_shipping_method)

    # =========================================================================
    # DERIVED TOTALS
    # =========================================================================

    @property
    def subtotal(self) -> Decimal:
        return round2(money_sum(item.total for item in self.line_items))

    @property
    def shipping(self) -> Decimal:
        method = self._selected_method()
        if method is None:
            return round2(ZERO)
        return round2(method.price_in(self.currency) or ZERO)

    @property
    def tax_policy(self) -> Optional[TaxPolicy]:
        if self.config.tax_policy is not None:
            return self.config.tax_policy
        if self.settings is None:
            return None
        return self.settings.tax_policy()

    @property
    def tax_allocation(self) -> TaxAllocation:
        policy = self.tax_policy
        if policy is None or self.shipping_address is None:
            return NO_TAX
        return allocate_tax(self.line_items, self.shipping_address.country, policy, self.shipping)

    @property
    def tax(self) -> Decimal:
        return self.tax_allocation.total

    @property
    def total(self) -> Decimal:
        # shipping == 0 если метод не выбран
        return self.subtotal + self.shipping

    @property
    def state(self) -> CartState:
        return derive_state(
            has_items=bool(self.line_items),
            has_shipping_address=self.shipping_address is not None,
            has_shipping_method=self.selected_shipping_method is not None,
            ordered=self._ordered,
        )

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def snapshot(self) -> dict[str, Any]:
        """Внешне видимое значение корзины (формат хранилища)."""
        return {
            "currency": self.currency,
            "lineItems": [item.to_snapshot() for item in self.line_items],
            "invoiceAddress": self._dump_address(self.invoice_address),
            "shippingAddress": self._dump_address(self.shipping_address),
            "email": self.email,
        }

    @staticmethod
    def _dump_address(address: Optional[Address]) -> Optional[dict[str, Any]]:
        return address.model_dump(mode="json", by_alias=True) if address else None

    def _persist(self) -> None:
        # Best-effort: сбой хранилища не прерывает пользовательскую операцию
        if self._storage is None:
            return
        try:
            self._storage.save(json.dumps(self.snapshot()))
        except Exception:  # noqa: BLE001
            logger.warning("Failed to persist cart snapshot", exc_info=True)

    async def restore(self) -> bool:
        """
        Восстановление корзины из хранилища.

        Если сохранённая валюта отличается от сконфигурированной и в snapshot
        есть позиции, корзина принимает сохранённую валюту. Пустой snapshot
        валюту не переопределяет.

        Returns:
            True если snapshot восстановлен
        """
        if self._storage is None:
            return False

        try:
            raw = self._storage.load()
        except Exception:  # noqa: BLE001
            logger.warning("Failed to load cart snapshot", exc_info=True)
            return False
        if not raw:
            return False

        try:
            data = json.loads(raw)
            validate_cart_snapshot(data)
            line_items = [to_line_item(item) for item in data["lineItems"]]
            invoice = data.get("invoiceAddress")
            shipping = data.get("shippingAddress")
            invoice_address = Address.model_validate(invoice) if invoice else None
            shipping_address = Address.model_validate(shipping) if shipping else None
        except (ValueError, jsonschema.ValidationError) as e:
            logger.warning("Ignoring unreadable cart snapshot: %s", e)
            return False

        await self.load_settings()

        stored_currency = data["currency"]
        if stored_currency != self.currency and line_items:
            logger.info(
                "Adopting stored cart currency %s over configured %s",
                stored_currency,
                self.currency,
            )
            self.currency = stored_currency

        self.line_items = line_items
        self.invoice_address = invoice_address
        self.shipping_address = shipping_address
        self.email = data.get("email")
        self.selected_shipping_method = None
        self._ordered = False
        self._resolve_addresses()
        return True

    # =========================================================================
    # ORDER
    # =========================================================================

    def absolute_url(self, url: str) -> str:
        """
        Raises:
            OriginRequired: URL относительный, а origin не сконфигурирован
        """
        if url.startswith(("http://", "https://")):
            return url
        if not self.config.origin:
            raise OriginRequired(url)
        return urljoin(self.config.origin, url)

    def order_payload(self, payment: Optional[Payment] = None) -> dict[str, Any]:
        """
        Финальный snapshot заказа.

        Raises:
            MissingShippingAddress: адрес доставки не задан
            MissingShippingMethod: метод доставки не выбран
            OriginRequired: относительный URL позиции без origin
        """
        if self.shipping_address is None:
            raise MissingShippingAddress()
        if self.selected_shipping_method is None:
            raise MissingShippingMethod()

        method = self._selected_method()
        method_name = localize(method.name, self.config.language) if method else ""

        return {
            "paymentMethod": payment.method if payment else None,
            "paymentId": payment.id if payment else None,
            "paymentMeta": payment.meta if payment else None,
            "currency": self.currency,
            "email": self.email,
            "lineItems": [
                {
                    "sku": item.product_sku,
                    "url": self.absolute_url(item.url),
                    "name": item.name,
                    "quantity": plain_decimal(item.quantity),
                    "price": format_money(item.price),
                    "total": format_money(item.total),
                    "meta": item.meta,
                    "options": [
                        {
                            "sku": o.sku,
                            "name": o.name,
                            "value": self._wire_value(o.value),
                            "price": format_money(o.price),
                        }
                        for o in item.options
                    ],
                }
                for item in self.line_items
            ],
            "shippingAddress": self._dump_address(self.shipping_address),
            "invoiceAddress": self._dump_address(self.invoice_address),
            "shippingMethod": self.selected_shipping_method,
            "shippingMethodName": method_name or self.selected_shipping_method,
            "subtotal": format_money(self.subtotal),
            "shipping": format_money(self.shipping),
            "tax": format_money(self.tax),
            "total": format_money(self.total),
        }

    @staticmethod
    def _wire_value(value: Any) -> Any:
        if value is None:
            return None
        raw = value.raw()
        return raw if isinstance(raw, bool) else format(raw, "f")

    async def order(self, payment: Payment) -> Any:
        """
        Отправка заказа.

        Raises:
            MissingShippingAddress, MissingShippingMethod: см. order_payload()
            jsonschema.ValidationError: payload нарушает контракт
            OrderFailed: транспорт вернул неуспешный ответ
        """
        if self._transport is None:
            raise PreconditionError("No order transport configured")

        payload = self.order_payload(payment)
        validate_order_payload(payload)

        logger.info(
            "Submitting order: %d line items, total %s %s",
            len(self.line_items),
            payload["total"],
            self.currency,
        )
        result = await self._transport.submit_order(payload)
        self._ordered = True
        return result
