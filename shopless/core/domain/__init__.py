"""
Domain models and value objects.

Contains fundamental cart entities like LineItem, Option, Address, Settings.
"""

from shopless.core.domain.address import Address
from shopless.core.domain.line_item import LineItem, to_line_item
from shopless.core.domain.option import (
    AdjustmentCondition,
    AdjustmentConstraint,
    BooleanConstraint,
    BooleanValue,
    ComparisonOp,
    Constraint,
    ConstraintKind,
    IncompatibleConstraint,
    NumberConstraint,
    NumberValue,
    Option,
    OptionValue,
    UnknownConstraint,
    is_false,
    option_value,
)
from shopless.core.domain.product import Offer, ProductDescriptor, ProductOption
from shopless.core.domain.settings import (
    CountrySettings,
    LocalizedText,
    Settings,
    ShippingMethod,
    localize,
)
from shopless.core.domain.tax_policy import FlatRate, RuledRate, TaxPolicy, TaxRule

__all__ = [
    # Option values
    "OptionValue",
    "NumberValue",
    "BooleanValue",
    "option_value",
    "is_false",
    # Constraints
    "Constraint",
    "ConstraintKind",
    "NumberConstraint",
    "BooleanConstraint",
    "IncompatibleConstraint",
    "AdjustmentConstraint",
    "AdjustmentCondition",
    "ComparisonOp",
    "UnknownConstraint",
    "Option",
    # Product
    "Offer",
    "ProductOption",
    "ProductDescriptor",
    # Line item
    "LineItem",
    "to_line_item",
    # Address
    "Address",
    # Settings
    "LocalizedText",
    "localize",
    "ShippingMethod",
    "CountrySettings",
    "Settings",
    # Tax policy
    "TaxPolicy",
    "TaxRule",
    "FlatRate",
    "RuledRate",
]
