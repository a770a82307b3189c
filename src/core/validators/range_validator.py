"""
RangeValidator - validates numeric or date values are within a specified range.
"""

from datetime import date, datetime
from typing import Any

from .base_validator import Record, RecordValidator, ValidationError

TODAY = "today"


def _resolve_bound(bound: Any) -> Any:
    """Resolve the "today" keyword and ISO date strings to dates."""
    if bound is None or isinstance(bound, int | float | date):
        return bound
    if isinstance(bound, str):
        if bound.strip().lower() == TODAY:
            return date.today()
        return date.fromisoformat(bound.strip())
    raise ValueError(f"Unsupported range bound: {bound!r}")


class RangeValidator(RecordValidator):
    """
    Validates that a numeric or date field is within a specified range.

    Parameters:
    - min: Minimum value (inclusive)
    - max: Maximum value (inclusive)
    - min_exclusive: Minimum value (exclusive)
    - max_exclusive: Maximum value (exclusive)

    Date bounds may be dates, ISO strings or the keyword "today".
    Bounds are resolved on every check so "today" never goes stale.
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        bounds = [self.parameters.get(k) for k in ("min", "max", "min_exclusive", "max_exclusive")]
        if all(v is None for v in bounds):
            raise ValueError("RangeValidator requires at least one of: min, max, min_exclusive, max_exclusive")

        # Fail fast on malformed bounds
        for bound in bounds:
            _resolve_bound(bound)

    def validate(self, value: Any, record: Record) -> None:
        """
        Validate that the value is within the specified range.

        Args:
            value: The field value to validate
            record: The entire record

        Raises:
            ValidationError: If value is outside the range
        """
        # Skip validation for None (handled by required_field validator)
        if value is None:
            return

        if isinstance(value, datetime):
            value = value.date()
        if isinstance(value, bool) or not isinstance(value, int | float | date):
            raise ValidationError(
                rule_name="range",
                field_name=self.field_name,
                message=f"Value must be numeric or a date, got {type(value).__name__}"
            )

        min_value = _resolve_bound(self.parameters.get("min"))
        max_value = _resolve_bound(self.parameters.get("max"))
        min_exclusive = _resolve_bound(self.parameters.get("min_exclusive"))
        max_exclusive = _resolve_bound(self.parameters.get("max_exclusive"))

        try:
            if min_value is not None and value < min_value:
                raise ValidationError(
                    rule_name="range",
                    field_name=self.field_name,
                    message=f"Value {value} is less than minimum {min_value}"
                )

            if min_exclusive is not None and value <= min_exclusive:
                raise ValidationError(
                    rule_name="range",
                    field_name=self.field_name,
                    message=f"Value {value} must be greater than {min_exclusive}"
                )

            if max_value is not None and value > max_value:
                raise ValidationError(
                    rule_name="range",
                    field_name=self.field_name,
                    message=f"Value {value} exceeds maximum {max_value}"
                )

            if max_exclusive is not None and value >= max_exclusive:
                raise ValidationError(
                    rule_name="range",
                    field_name=self.field_name,
                    message=f"Value {value} must be less than {max_exclusive}"
                )
        except TypeError:
            raise ValidationError(
                rule_name="range",
                field_name=self.field_name,
                message=f"Value {value!r} is not comparable with the configured bounds"
            )

    @property
    def rule_type(self) -> str:
        return "range"
