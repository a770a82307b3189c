"""
CustomValidator - validates records with a caller-supplied predicate.
"""

from typing import Any

from .base_validator import Record, RecordValidator, ValidationError


class CustomValidator(RecordValidator):
    """
    Validates using a predicate over the whole record.

    The predicate returns True when the record is healthy. Rules of this
    type can only be registered programmatically (RuleConfigBuilder), since
    YAML cannot carry a callable.

    Parameters:
    - predicate: Callable (value, record) -> bool
    - description: Optional text used in the failure message

    Example:
        def has_name(value, record):
            return bool(record.get("first_name") or record.get("last_name"))
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        self.predicate = self.parameters.get("predicate")
        if not callable(self.predicate):
            raise ValueError("CustomValidator requires a callable 'predicate' parameter")

        self.description = self.parameters.get("description", "custom predicate")

    def validate(self, value: Any, record: Record) -> None:
        """
        Raises:
            ValidationError: If the predicate is not satisfied
        """
        if not self.predicate(value, record):
            raise ValidationError(
                rule_name="custom",
                field_name=self.field_name,
                message=f"Record does not satisfy {self.description}"
            )

    @property
    def rule_type(self) -> str:
        return "custom"
