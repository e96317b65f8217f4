"""
shopless — client-side shopping cart engine.

Line items with option constraints, tax-inclusive allocation across rates,
shipping selection and finalized order payloads.
"""

from shopless.cart import Cart, CartConfig, CartState, Payment

__all__ = ["Cart", "CartConfig", "CartState", "Payment"]

__version__ = "0.1.0"
