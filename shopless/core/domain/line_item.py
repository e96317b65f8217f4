"""
LineItem — Позиция корзины

Оценённая, количественная запись покупки: продукт + количество + опции.

Инварианты:
- price > 0 (возвраты моделируются отрицательным quantity, не ценой)
- total = round2(quantity × (price + Σ option.price))
- Равенство для stacking: url, price, name и сериализованный список опций.
  meta в сравнении не участвует.
"""

from decimal import Decimal
from typing import Any, Mapping, Optional, Union

import pydantic
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from shopless.core.domain.option import Option
from shopless.core.errors import InvalidPrice, ValidationError
from shopless.core.math.money import Money, money_sum, round2


class LineItem(BaseModel):
    """
    Модель позиции корзины.

    Не frozen: quantity изменяется на месте при stacking.
    Все присваивания валидируются (validate_assignment=True).
    Удаление из корзины выполняется по identity, поэтому для stacking
    используется stacks_with(), а не __eq__.
    """

    product_sku: str = Field(default="", alias="sku")
    url: str = Field(..., min_length=1)
    quantity: Money
    price: Money
    name: str = ""
    meta: Any = None
    options: list[Option] = Field(default_factory=list)
    product_type: Optional[str] = None

    model_config = {
        "validate_assignment": True,
        "populate_by_name": True,
        "alias_generator": to_camel,
    }

    @field_validator("price")
    @classmethod
    def validate_price_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Price cannot be negative (use a negative quantity instead)")
        return v

    @field_validator("options", mode="before")
    @classmethod
    def default_options(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def unit_total(self) -> Decimal:
        """Цена единицы вместе с опциями (без округления)."""
        return self.price + money_sum(o.price for o in self.options)

    @property
    def total(self) -> Decimal:
        return round2(self.quantity * self.unit_total)

    def stacks_with(self, other: "LineItem") -> bool:
        """
        Проверка равенства для stacking.

        meta намеренно не сравнивается.
        """
        return (
            self.url == other.url
            and self.price == other.price
            and self.name == other.name
            and self._serialized_options() == other._serialized_options()
        )

    def _serialized_options(self) -> list[dict[str, Any]]:
        return [o.model_dump(mode="json") for o in self.options]

    def to_snapshot(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def to_line_item(value: Union[LineItem, Mapping[str, Any]]) -> LineItem:
    """
    Приведение значения к LineItem.

    Уже готовый LineItem возвращается без изменений, сырые данные
    валидируются и конструируются.

    Args:
        value: LineItem или mapping (snapshot/внутренние данные)

    Returns:
        LineItem

    Raises:
        InvalidPrice: Если price <= 0
        ValidationError: Любая другая ошибка валидации
    """
    if isinstance(value, LineItem):
        return value
    if not isinstance(value, Mapping):
        raise ValidationError(f"Cannot build a line item from {type(value).__name__}")

    try:
        return LineItem.model_validate(dict(value))
    except pydantic.ValidationError as e:
        if any(err["loc"] == ("price",) for err in e.errors()):
            raise InvalidPrice(value.get("price")) from e
        raise ValidationError(f"Invalid line item: {e}") from e
