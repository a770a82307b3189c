"""
Cross-field consistency validators.
"""

import math
from datetime import date
from typing import Any

from .base_validator import Record, RecordValidator, ValidationError


class ProductEqualsValidator(RecordValidator):
    """
    Validates that a derived field equals the product of two other fields.

    e.g. sales_amount == quantity * price

    Parameters:
    - factors: The two multiplied field names
    - tolerance: Absolute tolerance (default 1e-6)
    - skip_nulls: Skip records where any operand is None (default False,
      so missing operands are reported)
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        factors = self.parameters.get("factors")
        if not factors or len(factors) != 2:
            raise ValueError("ProductEqualsValidator requires exactly two 'factors'")

        self.factors = tuple(factors)
        self.tolerance = float(self.parameters.get("tolerance", 1e-6))
        self.skip_nulls = self.parameters.get("skip_nulls", False)

    def validate(self, value: Any, record: Record) -> None:
        left, right = (record.get(f) for f in self.factors)

        if value is None or left is None or right is None:
            if self.skip_nulls:
                return
            raise ValidationError(
                rule_name="product_equals",
                field_name=self.field_name,
                message=f"Cannot check {self.field_name} = {' * '.join(self.factors)}: missing operand"
            )

        expected = left * right
        if not math.isclose(value, expected, abs_tol=self.tolerance):
            raise ValidationError(
                rule_name="product_equals",
                field_name=self.field_name,
                message=f"{value} != {left} * {right}"
            )

    @property
    def rule_type(self) -> str:
        return "product_equals"


class NotAfterValidator(RecordValidator):
    """
    Validates that a date field is not later than another date field.

    e.g. order_date <= ship_date, start_date <= end_date

    Parameters:
    - other: Name of the field this one must not come after

    Records where either date is None are skipped.
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        self.other = self.parameters.get("other")
        if not self.other:
            raise ValueError("NotAfterValidator requires 'other' parameter")

    def validate(self, value: Any, record: Record) -> None:
        other_value = record.get(self.other)
        if value is None or other_value is None:
            return

        if not isinstance(value, date) or not isinstance(other_value, date):
            raise ValidationError(
                rule_name="not_after",
                field_name=self.field_name,
                message="Both fields must be dates"
            )

        if value > other_value:
            raise ValidationError(
                rule_name="not_after",
                field_name=self.field_name,
                message=f"{self.field_name} {value} is after {self.other} {other_value}"
            )

    @property
    def rule_type(self) -> str:
        return "not_after"
