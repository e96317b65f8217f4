"""
CartState — Производное состояние корзины

Состояния выводятся из наличия полей, не хранятся:
    EMPTY → HAS_ITEMS → ADDRESS_SET → SHIPPING_SELECTED → ORDERED

- reset() безусловно возвращает в EMPTY
- удаление последней позиции: HAS_ITEMS → EMPTY
- смена адреса доставки из SHIPPING_SELECTED → ADDRESS_SET
- любая мутация после заказа снимает ORDERED
"""

from enum import Enum


class CartState(str, Enum):
    EMPTY = "EMPTY"
    HAS_ITEMS = "HAS_ITEMS"
    ADDRESS_SET = "ADDRESS_SET"
    SHIPPING_SELECTED = "SHIPPING_SELECTED"
    ORDERED = "ORDERED"


def derive_state(
    has_items: bool,
    has_shipping_address: bool,
    has_shipping_method: bool,
    ordered: bool = False,
) -> CartState:
    if not has_items:
        return CartState.EMPTY
    if ordered:
        return CartState.ORDERED
    if has_shipping_address and has_shipping_method:
        return CartState.SHIPPING_SELECTED
    if has_shipping_address:
        return CartState.ADDRESS_SET
    return CartState.HAS_ITEMS
