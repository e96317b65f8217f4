"""
Money — Десятичная арифметика для денежных величин

Единственный допустимый способ создания денежных значений в корзине.
Все суммы хранятся как decimal.Decimal (точное base-10 представление).

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. float никогда не попадает в вычисления напрямую (конверсия через str)
2. NaN/Infinity отклоняются на входе
3. Округление только до 2 знаков и только ROUND_HALF_UP
4. Промежуточные вычисления (распределение налога) не округляются
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Annotated, Any, Final, Iterable

from pydantic import BeforeValidator, PlainSerializer

from shopless.core.errors import ValidationError


# =============================================================================
# КОНСТАНТЫ
# =============================================================================

ZERO: Final[Decimal] = Decimal("0")

# Шаг квантования для внешне отображаемых сумм
CENT: Final[Decimal] = Decimal("0.01")

HUNDRED: Final[Decimal] = Decimal("100")


# =============================================================================
# КОНВЕРСИЯ
# =============================================================================


def to_money(value: Any) -> Decimal:
    """
    Конверсия произвольного числового ввода в Decimal.

    Args:
        value: int, str, float или Decimal

    Returns:
        Конечное Decimal значение (без округления)

    Raises:
        ValidationError: Если значение не число, NaN или Infinity

    Examples:
        >>> to_money(10)
        Decimal('10')
        >>> to_money(0.1)
        Decimal('0.1')
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise ValidationError(f"Boolean is not a monetary value: {value!r}")
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(value)
        except InvalidOperation:
            raise ValidationError(f"Not a decimal value: {value!r}") from None
    elif isinstance(value, float):
        # repr(float) даёт кратчайшее точное представление: 0.1 -> "0.1"
        result = Decimal(str(value))
    else:
        raise ValidationError(f"Not a decimal value: {value!r}")

    if not result.is_finite():
        raise ValidationError(f"Monetary value must be finite: {value!r}")
    return result


def _coerce(value: Any) -> Any:
    # pydantic-хук: None пропускаем для Optional полей
    if value is None:
        return value
    try:
        return to_money(value)
    except ValidationError as e:
        raise ValueError(str(e)) from None


def plain_decimal(value: Decimal) -> str:
    """
    Запись Decimal без экспоненты для wire-форматов.

    Examples:
        >>> plain_decimal(Decimal("1E+1"))
        '10'
        >>> plain_decimal(Decimal("2.50"))
        '2.50'
    """
    return format(value, "f")


# Pydantic-тип для денежных полей моделей; в JSON всегда fixed-point строка
Money = Annotated[
    Decimal,
    BeforeValidator(_coerce),
    PlainSerializer(plain_decimal, return_type=str, when_used="json"),
]


# =============================================================================
# ОКРУГЛЕНИЕ И АГРЕГАЦИЯ
# =============================================================================


def round2(value: Decimal) -> Decimal:
    """
    Округление до 2 знаков, round-half-up.

    Examples:
        >>> round2(Decimal("0.125"))
        Decimal('0.13')
        >>> round2(Decimal("2"))
        Decimal('2.00')
    """
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def money_sum(values: Iterable[Decimal]) -> Decimal:
    """Сумма Decimal значений без округления (пустая сумма = 0)."""
    return sum(values, ZERO)


# =============================================================================
# НАЛОГ (tax-inclusive extraction)
# =============================================================================


def tax_extract(gross: Decimal, rate: Decimal) -> Decimal:
    """
    Налоговая часть tax-inclusive суммы.

    tax = gross × (rate/100) / (1 + rate/100)  ==  gross × rate / (rate + 100)

    Args:
        gross: Сумма с налогом (brutto)
        rate: Ставка налога в процентах (например, 19)

    Returns:
        Налоговая часть (без округления). 0 если rate <= 0.

    Examples:
        >>> round2(tax_extract(Decimal("119"), Decimal("19")))
        Decimal('19.00')
    """
    if rate <= 0:
        return ZERO
    return gross * rate / (rate + HUNDRED)


def net_of_tax(gross: Decimal, rate: Decimal) -> Decimal:
    """
    Сумма без налога: gross / (1 + rate/100).

    tax_extract(gross, rate) + net_of_tax(gross, rate) == gross
    """
    if rate <= 0:
        return gross
    return gross * HUNDRED / (rate + HUNDRED)


def format_money(value: Decimal) -> str:
    """Строковое представление для wire-форматов: всегда 2 знака."""
    return str(round2(value))
