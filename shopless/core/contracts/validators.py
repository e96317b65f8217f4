"""
JSON Schema контракты wire-данных корзины

Схемы лежат в пакете (shopless/core/contracts/schema/):
- cart_snapshot.json: состояние корзины в хранилище
- order_payload.json: финальный payload заказа

Скомпилированный валидатор кэшируется на имя схемы; ошибки контракта
пробрасываются как jsonschema.ValidationError.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, ClassVar, Iterator, Mapping

import jsonschema
from jsonschema import Draft202012Validator, ValidationError


SCHEMA_DIR = Path(__file__).parent / "schema"


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Чтение и meta-валидация схем из каталога.

    Args:
        schema_dir: Каталог со схемами; по умолчанию схемы пакета
    """

    def __init__(self, schema_dir: Path | None = None):
        self.schema_dir = schema_dir or SCHEMA_DIR
        if not self.schema_dir.is_dir():
            raise RuntimeError(f"Schema directory not found: {self.schema_dir}")
        self._cache: dict[str, dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> dict[str, Any]:
        """
        Args:
            schema_name: Имя файла схемы без .json

        Returns:
            Схема (один и тот же объект при повторных вызовах)

        Raises:
            FileNotFoundError: Файла схемы нет
            ValueError: Схема не проходит проверку Draft 2020-12
        """
        cached = self._cache.get(schema_name)
        if cached is not None:
            return cached

        path = self.schema_dir / f"{schema_name}.json"
        if not path.is_file():
            raise FileNotFoundError(f"Schema not found: {path}")

        schema = json.loads(path.read_text(encoding="utf-8"))
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"{path.name} is not a valid Draft 2020-12 schema: {e.message}") from e

        self._cache[schema_name] = schema
        return schema


_PACKAGE_SCHEMAS = SchemaLoader()


@lru_cache(maxsize=None)
def _compiled(schema_name: str) -> Draft202012Validator:
    return Draft202012Validator(_PACKAGE_SCHEMAS.load_schema(schema_name))


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """Валидатор одной схемы пакета; подклассы задают schema_name."""

    schema_name: ClassVar[str]

    def __init__(self) -> None:
        self.validator = _compiled(self.schema_name)

    @property
    def schema(self) -> Mapping[str, Any]:
        return self.validator.schema

    def validate(self, data: Any) -> None:
        """
        Raises:
            ValidationError: Данные нарушают контракт
        """
        self.validator.validate(data)

    def is_valid(self, data: Any) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Any) -> Iterator[ValidationError]:
        return self.validator.iter_errors(data)


class CartSnapshotValidator(ContractValidator):
    schema_name = "cart_snapshot"


class OrderPayloadValidator(ContractValidator):
    schema_name = "order_payload"


def validate_cart_snapshot(data: Any) -> None:
    CartSnapshotValidator().validate(data)


def validate_order_payload(data: Any) -> None:
    """Проверка payload заказа перед отправкой."""
    OrderPayloadValidator().validate(data)
