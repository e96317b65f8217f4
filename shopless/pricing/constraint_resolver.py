"""
Option Constraint Resolver — валидация и оценка выбора опций

Для каждого выбранного sku:
1. sku должен существовать в каталоге (иначе UnknownOption)
2. Ни один incompatible constraint опции не должен ссылаться на другой
   выбранный sku (иначе IncompatibleSelection). Проверка выполняется для
   всех выборов до матчинга, независимо от порядка итерации.
3. Первый constraint, совпадающий по валюте и значению, задаёт базовую цену
   (иначе UnsupportedValue)
4. Adjustment constraints добавляют дельту цены, если зависимая опция выбрана
   и не равна False; unique-тег применяется не более одного раза за проход,
   condition (eq/gt/ge/lt/le) должен выполняться для значения зависимости.

Порядок результата — порядок итерации selections.
"""

from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from shopless.core.domain.option import (
    AdjustmentConstraint,
    BooleanConstraint,
    BooleanValue,
    IncompatibleConstraint,
    NumberConstraint,
    NumberValue,
    Option,
    OptionValue,
    is_false,
    option_value,
)
from shopless.core.domain.product import ProductOption
from shopless.core.errors import (
    IncompatibleSelection,
    UnknownOption,
    UnsupportedValue,
    ValidationError,
)


# =============================================================================
# MATCHING
# =============================================================================


def number_matches(constraint: NumberConstraint, value: Optional[OptionValue]) -> bool:
    """
    Числовой constraint матчит значение, если оно не указано, равно
    фиксированному value или лежит в [min, max] и кратно step.
    """
    if value is None:
        return True
    if not isinstance(value, NumberValue):
        return False

    number = value.value
    if constraint.value is not None and number == constraint.value:
        return True
    return (
        (constraint.min is None or number >= constraint.min)
        and (constraint.max is None or number <= constraint.max)
        and (constraint.step is None or number % constraint.step == 0)
    )


def boolean_matches(constraint: BooleanConstraint, value: Optional[OptionValue]) -> bool:
    # falsy value у constraint матчит любой булев выбор
    if value is None:
        return True
    if not isinstance(value, BooleanValue):
        return False
    return not constraint.value or value.value == constraint.value


def find_price_constraint(
    option: ProductOption, value: Optional[OptionValue], currency: str
) -> Optional[NumberConstraint | BooleanConstraint]:
    """Первый number/boolean constraint, совпадающий по валюте и значению."""
    for constraint in option.constraints:
        if isinstance(constraint, NumberConstraint):
            if constraint.currency == currency and number_matches(constraint, value):
                return constraint
        elif isinstance(constraint, BooleanConstraint):
            if constraint.currency == currency and boolean_matches(constraint, value):
                return constraint
    return None


# =============================================================================
# RESOLUTION
# =============================================================================


def _check_compatibility(option: ProductOption, selected: Mapping[str, Any]) -> None:
    for constraint in option.constraints:
        if isinstance(constraint, IncompatibleConstraint) and constraint.option in selected:
            raise IncompatibleSelection(option.sku, constraint.option)


def _adjustment_applies(
    constraint: AdjustmentConstraint,
    own_value: Optional[OptionValue],
    selected: Mapping[str, Optional[OptionValue]],
    currency: str,
) -> bool:
    if constraint.currency != currency or constraint.option not in selected:
        return False

    dependency = selected[constraint.option]
    if is_false(dependency) or is_false(own_value):
        return False

    if constraint.condition is not None:
        if not isinstance(dependency, NumberValue):
            return False
        return constraint.condition.holds(dependency.value)
    return True


def resolve_options(
    catalog: Sequence[ProductOption],
    selections: Optional[Mapping[str, Any]],
    currency: str,
) -> list[Option]:
    """
    Разрешение выбранных опций в оценённые Option.

    Args:
        catalog: Опции продукта из каталога
        selections: Выбор покупателя {sku: value}; value — число, bool или None
        currency: Валюта корзины (валюта оффера)

    Returns:
        Список Option в порядке итерации selections

    Raises:
        UnknownOption: sku отсутствует в каталоге
        IncompatibleSelection: выбраны несовместимые опции
        UnsupportedValue: ни один constraint не матчит значение
    """
    if not selections:
        return []

    by_sku = {option.sku: option for option in catalog}

    parsed: dict[str, Optional[OptionValue]] = {}
    for sku, raw in selections.items():
        try:
            parsed[sku] = option_value(raw)
        except ValidationError:
            raise UnsupportedValue(sku, raw) from None

    # Первый проход: существование и несовместимость для всего набора
    for sku in parsed:
        option = by_sku.get(sku)
        if option is None:
            raise UnknownOption(sku)
        _check_compatibility(option, parsed)

    used_unique_tags: set[str] = set()
    resolved: list[Option] = []

    for sku, value in parsed.items():
        option = by_sku[sku]
        matched = find_price_constraint(option, value, currency)
        if matched is None:
            raise UnsupportedValue(sku, selections[sku])

        price: Decimal = matched.price
        for constraint in option.constraints:
            if not isinstance(constraint, AdjustmentConstraint):
                continue
            if not _adjustment_applies(constraint, value, parsed, currency):
                continue
            if constraint.unique is not None:
                if constraint.unique in used_unique_tags:
                    continue
                used_unique_tags.add(constraint.unique)
            price += constraint.price

        resolved.append(Option(sku=sku, name=option.name, value=value, price=price))

    return resolved
