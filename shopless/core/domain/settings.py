"""
Settings — Настройки магазина по странам

Формат (ключ — ISO код страны):
    {
        "DE": {
            "enabled": true,
            "name": {"en": "Germany", "de": "Deutschland"},
            "taxrate": 19,
            "shippingMethods": {
                "standard": {"name": {"en": "Standard"}, "price": {"EUR": 4.90}}
            },
            "provinces": [...]
        },
        ...
    }

Допускается обёртка {"countries": {...}, "taxrates": [...]}, где taxrates —
исторический список налоговых правил (включает RuledRate политику).

Исторический формат документа тоже читается:
    {
        "allowedCountries": {"DE": "Germany", ...},
        "taxrates": [{"countries": ["DE"], "productType": "book", "taxrate": 7}, ...],
        "shipping": [{"name": "Standard", "price": 4.9, "currency": "EUR", "countries": ["DE"]}]
    }
Страны из allowedCountries включены, правила shipping раскладываются по
странам в методы с ключом name и ценой по валютам.
"""

from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, model_validator

from shopless.core.domain.tax_policy import FlatRate, RuledRate, TaxPolicy, TaxRule
from shopless.core.math.money import Money


# Локализованная строка: {"en": "...", "de": "..."} или просто строка
LocalizedText = Union[str, dict[str, str]]

DEFAULT_LANGUAGE = "en"


def localize(text: Optional[LocalizedText], language: str = DEFAULT_LANGUAGE) -> str:
    """
    Выбор локализации: запрошенный язык → en → первая доступная.

    Examples:
        >>> localize({"en": "Germany", "de": "Deutschland"}, "de")
        'Deutschland'
        >>> localize("Austria", "fr")
        'Austria'
    """
    if text is None:
        return ""
    if isinstance(text, str):
        return text
    for lang in (language, DEFAULT_LANGUAGE):
        if lang in text:
            return text[lang]
    return next(iter(text.values()), "")


class ShippingMethod(BaseModel):
    """Метод доставки с ценами по валютам."""

    name: LocalizedText = ""
    price: dict[str, Money] = Field(default_factory=dict)

    model_config = {"frozen": True}

    def price_in(self, currency: str) -> Optional[Decimal]:
        return self.price.get(currency)


class CountrySettings(BaseModel):
    enabled: bool = True
    name: LocalizedText = ""
    taxrate: Money = Field(default=Decimal("0"), ge=0)
    shipping_methods: dict[str, ShippingMethod] = Field(
        default_factory=dict, alias="shippingMethods"
    )
    provinces: Optional[list[LocalizedText]] = None

    model_config = {"frozen": True, "populate_by_name": True}


def _from_legacy_document(data: dict[str, Any]) -> dict[str, Any]:
    countries: dict[str, dict[str, Any]] = {
        code.upper(): {"enabled": True, "name": name, "shippingMethods": {}}
        for code, name in (data.get("allowedCountries") or {}).items()
    }

    for rule in data.get("shipping") or []:
        if not rule.get("name") or not rule.get("currency"):
            raise ValueError(f"Shipping rule needs a name and a currency: {rule!r}")
        for code in rule.get("countries") or []:
            entry = countries.get(code.upper())
            if entry is None:
                continue
            method = entry["shippingMethods"].setdefault(
                rule["name"], {"name": rule["name"], "price": {}}
            )
            # Первое правило для пары (страна, валюта) определяет цену
            method["price"].setdefault(rule["currency"], rule["price"])

    return {"countries": countries, "taxrates": data.get("taxrates")}


class Settings(BaseModel):
    countries: dict[str, CountrySettings] = Field(default_factory=dict)
    taxrates: Optional[list[TaxRule]] = None

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def unwrap_country_map(cls, data: Any) -> Any:
        # Плоский формат: ключи верхнего уровня это коды стран
        if not isinstance(data, dict):
            return data
        if "allowedCountries" in data:
            return _from_legacy_document(data)
        if "countries" in data:
            countries = data["countries"] or {}
        else:
            countries = {k: v for k, v in data.items() if k != "taxrates"}
        return {
            "countries": {code.upper(): entry for code, entry in countries.items()},
            "taxrates": data.get("taxrates"),
        }

    def country(self, code: str) -> Optional[CountrySettings]:
        return self.countries.get(code.upper())

    def is_enabled(self, code: str) -> bool:
        entry = self.country(code)
        return entry is not None and entry.enabled

    def country_name(self, code: str, language: str = DEFAULT_LANGUAGE) -> Optional[str]:
        entry = self.country(code)
        if entry is None:
            return None
        return localize(entry.name, language) or None

    def enabled_countries(self, language: str = DEFAULT_LANGUAGE) -> dict[str, str]:
        return {
            code: localize(entry.name, language)
            for code, entry in self.countries.items()
            if entry.enabled
        }

    def shipping_methods(self, code: str, currency: str) -> dict[str, ShippingMethod]:
        """Методы доставки страны, у которых есть цена в валюте корзины."""
        entry = self.country(code)
        if entry is None or not entry.enabled:
            return {}
        return {
            key: method
            for key, method in entry.shipping_methods.items()
            if method.price_in(currency) is not None
        }

    def tax_policy(self) -> TaxPolicy:
        if self.taxrates:
            return RuledRate(tuple(self.taxrates))
        return FlatRate({code: entry.taxrate for code, entry in self.countries.items()})
