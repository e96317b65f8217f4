"""
Tax Allocation Engine — расчёт налога корзины

Цены уже включают налог (tax-inclusive), поэтому налог извлекается:
    tax_line = line.total × rate / (rate + 100)

Доставка не имеет собственной ставки: налог на доставку распределяется
пропорционально долям ставок в subtotal:
    tax += tax_extract(shipping × bucket_subtotal / subtotal, rate)

Округление (2 знака, ROUND_HALF_UP) выполняется один раз — в самом конце.
Чистая функция текущего состояния, без кэширования.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from shopless.core.domain.line_item import LineItem
from shopless.core.domain.tax_policy import FlatRate, TaxPolicy
from shopless.core.math.money import ZERO, money_sum, round2, tax_extract


@dataclass(frozen=True)
class TaxAllocation:
    """Результат распределения налога."""

    total: Decimal  # Округлённый итог
    line_tax: Decimal = ZERO  # Налог в позициях (без округления)
    shipping_tax: Decimal = ZERO  # Налог в доставке (без округления)
    # Сумма line totals по применённой ставке, read-only
    buckets: Mapping[Decimal, Decimal] = field(default_factory=lambda: MappingProxyType({}))


NO_TAX = TaxAllocation(total=round2(ZERO))


def allocate_tax(
    line_items: Sequence[LineItem],
    destination_country: Optional[str],
    policy: TaxPolicy,
    shipping: Decimal = ZERO,
) -> TaxAllocation:
    """
    Распределение налога по позициям и доставке.

    Args:
        line_items: Позиции корзины
        destination_country: ISO код страны доставки (None — адрес не задан)
        policy: Политика выбора ставки
        shipping: Стоимость выбранного метода доставки

    Returns:
        TaxAllocation; total == 0 если нет страны или subtotal == 0
    """
    if not destination_country:
        return NO_TAX

    subtotal = round2(money_sum(item.total for item in line_items))
    if subtotal == 0:
        return NO_TAX

    buckets: dict[Decimal, Decimal] = {}
    line_tax = ZERO
    for item in line_items:
        rate = policy.rate_for(destination_country, item.product_type)
        line_tax += tax_extract(item.total, rate)
        buckets[rate] = buckets.get(rate, ZERO) + item.total

    shipping_tax = ZERO
    if shipping > 0:
        for rate, part in buckets.items():
            shipping_tax += tax_extract(shipping * part / subtotal, rate)

    return TaxAllocation(
        total=round2(line_tax + shipping_tax),
        line_tax=line_tax,
        shipping_tax=shipping_tax,
        buckets=MappingProxyType(buckets),
    )


def calculate_tax(
    line_items: Sequence[LineItem],
    destination_country: Optional[str],
    policy: TaxPolicy,
    shipping: Decimal = ZERO,
) -> Decimal:
    """Налог корзины, округлённый до 2 знаков."""
    return allocate_tax(line_items, destination_country, policy, shipping).total


def calculate_flat_tax(
    line_items: Sequence[LineItem],
    destination_country: Optional[str],
    country_tax_rate: Decimal,
    shipping: Decimal = ZERO,
) -> Decimal:
    """Налог при единой ставке страны назначения."""
    if not destination_country:
        return NO_TAX.total
    policy = FlatRate({destination_country.upper(): country_tax_rate})
    return calculate_tax(line_items, destination_country, policy, shipping)
