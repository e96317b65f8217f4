"""
Тесты для производного состояния корзины (CartState)
"""

import pytest

from shopless.cart.state import CartState, derive_state


@pytest.mark.parametrize(
    "has_items, has_address, has_method, ordered, expected",
    [
        (False, False, False, False, CartState.EMPTY),
        (False, True, True, False, CartState.EMPTY),
        (False, True, True, True, CartState.EMPTY),
        (True, False, False, False, CartState.HAS_ITEMS),
        (True, False, True, False, CartState.HAS_ITEMS),
        (True, True, False, False, CartState.ADDRESS_SET),
        (True, True, True, False, CartState.SHIPPING_SELECTED),
        (True, True, True, True, CartState.ORDERED),
    ],
)
def test_derive_state(
    has_items: bool, has_address: bool, has_method: bool, ordered: bool, expected: CartState
) -> None:
    assert derive_state(has_items, has_address, has_method, ordered) is expected


def test_state_is_string_enum() -> None:
    assert CartState.SHIPPING_SELECTED == "SHIPPING_SELECTED"
    assert CartState("ORDERED") is CartState.ORDERED
