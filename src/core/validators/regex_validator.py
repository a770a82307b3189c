"""
RegexValidator - validates code-shaped text fields against a pattern.
"""

import re
from typing import Any

from .base_validator import Record, RecordValidator, ValidationError


class RegexValidator(RecordValidator):
    """
    Validates that a text field matches a regular expression in full.

    Used for identifier formats such as category ids ("AC_BR") or
    customer numbers ("AW00011000").

    Parameters:
    - pattern: Regular expression the whole value must match
    - ignore_case: Match case-insensitively (default False)
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        pattern = self.parameters.get("pattern")
        if not pattern:
            raise ValueError("RegexValidator requires 'pattern' parameter")

        flags = re.IGNORECASE if self.parameters.get("ignore_case", False) else 0
        try:
            self.pattern = re.compile(pattern, flags)
        except re.error as e:
            raise ValueError(f"Invalid regex pattern: {e}") from e

    def validate(self, value: Any, record: Record) -> None:
        # Skip validation for None (handled by required_field validator)
        if value is None:
            return

        if not self.pattern.fullmatch(str(value)):
            raise ValidationError(
                rule_name="regex",
                field_name=self.field_name,
                message=f"Value '{value}' does not match pattern '{self.pattern.pattern}'"
            )

    @property
    def rule_type(self) -> str:
        return "regex"
