"""Cart — агрегат корзины, конфигурация, контракты коллабораторов."""

from .cart import Cart
from .config import SETTINGS_PATH, STORAGE_KEY, CartConfig
from .ports import CartStorage, CatalogResolver, OrderTransport, Payment, SettingsProvider
from .state import CartState, derive_state

__all__ = [
    "Cart",
    "CartConfig",
    "CartState",
    "derive_state",
    "SETTINGS_PATH",
    "STORAGE_KEY",
    # Ports
    "CartStorage",
    "CatalogResolver",
    "OrderTransport",
    "Payment",
    "SettingsProvider",
]
