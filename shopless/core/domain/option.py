"""
Option — Значения опций и ограничения (constraints) каталога

Значение опции — tagged union:
    OptionValue = NumberValue(Decimal) | BooleanValue(bool)

Constraint — discriminated union по полю kind:
- number: фиксированное значение или диапазон [min, max] с шагом step
- boolean: флаг
- incompatible: опция несовместима с другой выбранной опцией
- adjustment: корректировка цены при выборе зависимой опции
Неизвестные kind сохраняются как инертный constraint, который никогда не матчится.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    Discriminator,
    Field,
    SerializationInfo,
    Tag,
    field_serializer,
    field_validator,
)

from shopless.core.errors import ValidationError
from shopless.core.math.money import Money, plain_decimal, to_money


# =============================================================================
# OPTION VALUE (tagged union)
# =============================================================================


@dataclass(frozen=True)
class NumberValue:
    """Числовое значение опции (количество, размер и т.п.)"""

    value: Decimal

    def raw(self) -> Decimal:
        return self.value


@dataclass(frozen=True)
class BooleanValue:
    """Булево значение опции (включено/выключено)"""

    value: bool

    def raw(self) -> bool:
        return self.value


OptionValue = Union[NumberValue, BooleanValue]


def option_value(raw: Any) -> Optional[OptionValue]:
    """
    Конверсия пользовательского ввода в OptionValue.

    bool проверяется раньше int (bool — подкласс int в Python).

    Args:
        raw: bool, число, строка-число, уже готовый OptionValue или None

    Returns:
        OptionValue или None (значение не указано)

    Raises:
        ValidationError: Если значение нельзя интерпретировать
    """
    if raw is None or isinstance(raw, (NumberValue, BooleanValue)):
        return raw
    if isinstance(raw, bool):
        return BooleanValue(raw)
    return NumberValue(to_money(raw))


def is_false(value: Optional[OptionValue]) -> bool:
    """True только для явно выбранного BooleanValue(False)."""
    return isinstance(value, BooleanValue) and value.value is False


# =============================================================================
# CONSTRAINTS
# =============================================================================


class ConstraintKind(str, Enum):
    NUMBER = "number"
    BOOLEAN = "boolean"
    INCOMPATIBLE = "incompatible"
    ADJUSTMENT = "adjustment"


class NumberConstraint(BaseModel):
    """Числовой constraint: value, либо [min, max] кратно step (все границы опциональны)."""

    kind: Literal["number"] = "number"
    value: Optional[Money] = None
    min: Optional[Money] = None
    max: Optional[Money] = None
    step: Optional[Money] = Field(default=None, gt=0)
    price: Money
    currency: str = Field(..., min_length=1)

    model_config = {"frozen": True, "extra": "ignore"}


class BooleanConstraint(BaseModel):
    """Булев constraint; falsy value матчит любой булев выбор."""

    kind: Literal["boolean"] = "boolean"
    value: Optional[bool] = None
    price: Money
    currency: str = Field(..., min_length=1)

    model_config = {"frozen": True, "extra": "ignore"}


class IncompatibleConstraint(BaseModel):
    kind: Literal["incompatible"] = "incompatible"
    option: str = Field(..., min_length=1, description="SKU несовместимой опции")

    model_config = {"frozen": True, "extra": "ignore"}


class ComparisonOp(str, Enum):
    EQ = "eq"
    GT = "gt"
    GE = "ge"
    LT = "lt"
    LE = "le"


class AdjustmentCondition(BaseModel):
    """Предикат над числовым значением зависимой опции."""

    op: ComparisonOp
    value: Money

    model_config = {"frozen": True}

    def holds(self, candidate: Decimal) -> bool:
        if self.op is ComparisonOp.EQ:
            return candidate == self.value
        if self.op is ComparisonOp.GT:
            return candidate > self.value
        if self.op is ComparisonOp.GE:
            return candidate >= self.value
        if self.op is ComparisonOp.LT:
            return candidate < self.value
        return candidate <= self.value


class AdjustmentConstraint(BaseModel):
    """
    Корректировка цены опции при выборе зависимой опции.

    price может быть отрицательным (скидка за комплект).
    unique: тег взаимоисключающих надбавок, применяется не более одного раза
    за проход разрешения (первый выигрывает).
    """

    kind: Literal["adjustment"] = "adjustment"
    option: str = Field(..., min_length=1, description="SKU зависимой опции")
    price: Money
    currency: str = Field(..., min_length=1)
    unique: Optional[str] = None
    condition: Optional[AdjustmentCondition] = None

    model_config = {"frozen": True, "extra": "ignore"}


class UnknownConstraint(BaseModel):
    """Constraint неизвестного вида из каталога; не участвует в матчинге."""

    kind: str

    model_config = {"frozen": True, "extra": "allow"}


_KNOWN_KINDS = frozenset(kind.value for kind in ConstraintKind)


def _constraint_tag(data: Any) -> str:
    kind = data.get("kind") if isinstance(data, dict) else getattr(data, "kind", None)
    return kind if kind in _KNOWN_KINDS else "unknown"


Constraint = Annotated[
    Union[
        Annotated[NumberConstraint, Tag("number")],
        Annotated[BooleanConstraint, Tag("boolean")],
        Annotated[IncompatibleConstraint, Tag("incompatible")],
        Annotated[AdjustmentConstraint, Tag("adjustment")],
        Annotated[UnknownConstraint, Tag("unknown")],
    ],
    Discriminator(_constraint_tag),
]


# =============================================================================
# RESOLVED OPTION
# =============================================================================


class Option(BaseModel):
    """
    Разрешённая (оценённая) опция line item.

    Создаётся один раз при разрешении constraints, immutable.
    Две опции равны, если совпадают sku, value и price.
    """

    sku: str = Field(..., min_length=1)
    name: str = ""
    value: Optional[Union[NumberValue, BooleanValue]] = None
    price: Money

    model_config = {"frozen": True}

    @field_validator("value", mode="before")
    @classmethod
    def coerce_value(cls, v: Any) -> Optional[OptionValue]:
        try:
            return option_value(v)
        except ValidationError as e:
            raise ValueError(str(e)) from None

    @field_serializer("value")
    def serialize_value(self, v: Optional[OptionValue], info: SerializationInfo) -> Any:
        if v is None:
            return None
        if isinstance(v, NumberValue) and info.mode_is_json():
            return plain_decimal(v.value)
        return v.raw()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Option):
            return NotImplemented
        return self.sku == other.sku and self.value == other.value and self.price == other.price

    def __hash__(self) -> int:
        return hash((self.sku, self.value, self.price))
