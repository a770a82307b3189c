"""
String hygiene and domain consistency validators.
"""

from typing import Any

from .base_validator import Record, RecordValidator, ValidationError

DEFAULT_SENTINEL = "n/a"


class TrimmedValidator(RecordValidator):
    """Validates that no leading or trailing whitespace survived cleaning."""

    def validate(self, value: Any, record: Record) -> None:
        if isinstance(value, str) and value != value.strip():
            raise ValidationError(
                rule_name="trimmed",
                field_name=self.field_name,
                message=f"Value {value!r} has surrounding whitespace"
            )

    @property
    def rule_type(self) -> str:
        return "trimmed"


class DomainValidator(RecordValidator):
    """
    Validates that a categorical value belongs to its canonical vocabulary.

    Parameters:
    - allowed: Canonical values (the rule engine fills this in from the
      normalizer when the rule names a vocabulary)
    - vocabulary: Name of the normalizer vocabulary (resolved by the engine)
    - allow_sentinel: Whether the "n/a" sentinel counts as valid (default
      True). Set it False on an advisory rule to surface values that fell
      through the vocabulary.
    - sentinel: Sentinel value (default "n/a")
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        allowed = self.parameters.get("allowed")
        if not allowed:
            raise ValueError("DomainValidator requires 'allowed' values or a 'vocabulary'")

        self.allowed = frozenset(allowed)
        self.allow_sentinel = self.parameters.get("allow_sentinel", True)
        self.sentinel = self.parameters.get("sentinel", DEFAULT_SENTINEL)

    def validate(self, value: Any, record: Record) -> None:
        if value in self.allowed:
            return
        if value == self.sentinel and self.allow_sentinel:
            return
        raise ValidationError(
            rule_name="domain",
            field_name=self.field_name,
            message=f"Value {value!r} is not in the canonical vocabulary"
        )

    @property
    def rule_type(self) -> str:
        return "domain"
