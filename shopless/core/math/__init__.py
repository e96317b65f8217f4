"""
Core math modules для shopless

Десятичные денежные примитивы с гарантией отсутствия float drift.
"""

from shopless.core.math.money import (
    CENT,
    HUNDRED,
    ZERO,
    Money,
    format_money,
    money_sum,
    net_of_tax,
    plain_decimal,
    round2,
    tax_extract,
    to_money,
)

__all__ = [
    # Constants
    "CENT",
    "HUNDRED",
    "ZERO",
    # Types
    "Money",
    # Functions
    "format_money",
    "money_sum",
    "net_of_tax",
    "plain_decimal",
    "round2",
    "tax_extract",
    "to_money",
]
