"""
Contract Validation Module

Модуль для валидации JSON контрактов shopless (snapshot корзины, payload заказа).
"""

from .validators import (
    CartSnapshotValidator,
    ContractValidator,
    OrderPayloadValidator,
    SchemaLoader,
    validate_cart_snapshot,
    validate_order_payload,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "CartSnapshotValidator",
    "OrderPayloadValidator",
    # Functions
    "validate_cart_snapshot",
    "validate_order_payload",
]
