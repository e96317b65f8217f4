"""
ProductDescriptor — Структурированное описание продукта из каталога

Соответствует schema.org Product (JSON-LD), который catalog resolver
извлекает со страницы продукта. Один или несколько офферов по валютам,
список опций с constraints.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from shopless.core.domain.option import Constraint
from shopless.core.math.money import Money


class Offer(BaseModel):
    """Ценовое предложение в конкретной валюте."""

    currency: str = Field(..., min_length=1, alias="priceCurrency")
    price: Money

    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}


class ProductOption(BaseModel):
    """Опция продукта из каталога со списком constraints."""

    sku: str = Field(..., min_length=1)
    name: str = ""
    constraints: list[Constraint] = Field(default_factory=list)

    model_config = {"frozen": True, "extra": "ignore"}


class ProductDescriptor(BaseModel):
    """
    Описание продукта.

    product_type (schema.org additionalType) используется ruled-налоговой
    политикой для выбора ставки по типу продукта.
    """

    sku: str = ""
    name: str = Field(..., min_length=1)
    url: Optional[str] = None
    offers: list[Offer] = Field(default_factory=list)
    options: list[ProductOption] = Field(default_factory=list)
    product_type: Optional[str] = Field(default=None, alias="additionalType")

    model_config = {"frozen": True, "populate_by_name": True, "extra": "ignore"}

    @field_validator("options", mode="before")
    @classmethod
    def default_options(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("offers", mode="before")
    @classmethod
    def wrap_single_offer(cls, v: Any) -> Any:
        # JSON-LD допускает один объект Offer вместо списка
        if v is None:
            return []
        if isinstance(v, dict):
            return [v]
        return v

    def offer_for(self, currency: str) -> Optional[Offer]:
        """Первый оффер в заданной валюте или None."""
        for offer in self.offers:
            if offer.currency == currency:
                return offer
        return None

    def option(self, sku: str) -> Optional[ProductOption]:
        for candidate in self.options:
            if candidate.sku == sku:
                return candidate
        return None
