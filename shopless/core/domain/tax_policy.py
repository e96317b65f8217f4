"""
TaxPolicy — Политика выбора налоговой ставки

Два варианта, выбираемых конфигурацией:
- FlatRate: одна ставка на страну назначения
- RuledRate: список правил {countries, product_type?, rate}; правила для
  типа продукта имеют приоритет, иначе применяются правила без типа

Ставки в процентах (19 = 19%).
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping, Optional, Protocol, Sequence

from pydantic import BaseModel, Field, field_validator

from shopless.core.math.money import ZERO, Money


class TaxPolicy(Protocol):
    def rate_for(self, country: str, product_type: Optional[str] = None) -> Decimal:
        """Ставка налога (%) для страны назначения и типа продукта."""
        ...


class TaxRule(BaseModel):
    """Правило налоговой ставки (исторический формат settings.taxrates)."""

    countries: list[str] = Field(default_factory=list)
    product_type: Optional[str] = Field(default=None, alias="productType")
    rate: Money = Field(..., alias="taxrate")

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("countries")
    @classmethod
    def normalize_countries(cls, v: list[str]) -> list[str]:
        return [c.upper() for c in v]


@dataclass(frozen=True)
class FlatRate:
    """Плоская ставка по стране; тип продукта игнорируется."""

    rates: Mapping[str, Decimal] = field(default_factory=dict)

    def rate_for(self, country: str, product_type: Optional[str] = None) -> Decimal:
        rate = self.rates.get(country.upper(), ZERO)
        return rate if rate > 0 else ZERO


@dataclass(frozen=True)
class RuledRate:
    """
    Ставка по списку правил.

    Порядок выбора:
    1. Правила с product_type == типу продукта (если тип задан)
    2. Если таких нет — правила без product_type
    3. Первое правило, содержащее страну, определяет ставку
       (неположительная ставка → 0, дальнейшие правила не смотрим)
    """

    rules: Sequence[TaxRule] = field(default_factory=tuple)

    def rate_for(self, country: str, product_type: Optional[str] = None) -> Decimal:
        candidates = [r for r in self.rules if product_type and r.product_type == product_type]
        if not candidates:
            candidates = [r for r in self.rules if not r.product_type]

        country = country.upper()
        for rule in candidates:
            if country in rule.countries:
                return rule.rate if rule.rate > 0 else ZERO
        return ZERO
