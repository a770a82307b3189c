"""
Base validator interface for all quality rules.

Record validators check one record at a time and implement validate().
Dataset validators look at a whole dataset (and possibly other datasets)
and implement find_violations() directly.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

Record = dict[str, Any]
Datasets = Mapping[str, Sequence[Record]]


class ValidationError(Exception):
    """Raised when a record does not satisfy a validation rule."""

    def __init__(self, rule_name: str, field_name: str, message: str):
        self.rule_name = rule_name
        self.field_name = field_name
        self.message = message
        super().__init__(f"[{rule_name}] {field_name}: {message}")


class BaseValidator(ABC):
    """
    Abstract base class for all validators.

    Each validator implements one rule type and reports the positions of
    the records that violate it.
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        """
        Initialize validator.

        Args:
            field_name: Name of the field to validate
            parameters: Rule-specific parameters (e.g., min/max for range)
        """
        self.field_name = field_name
        self.parameters = parameters or {}

    @abstractmethod
    def find_violations(self, records: Sequence[Record], datasets: Datasets) -> list[int]:
        """
        Find the records that violate this rule.

        Args:
            records: Records of the dataset the rule is scoped to
            datasets: All datasets of the layer, by name (for cross-dataset rules)

        Returns:
            Indices (into records) of violating records, ascending
        """
        pass

    @property
    @abstractmethod
    def rule_type(self) -> str:
        """Return the rule type identifier."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(field={self.field_name}, params={self.parameters})"


class RecordValidator(BaseValidator):
    """Validator whose rule can be decided for each record on its own."""

    @abstractmethod
    def validate(self, value: Any, record: Record) -> None:
        """
        Validate a value against this rule.

        Args:
            value: The field value to validate
            record: The entire record (for context-dependent validation)

        Raises:
            ValidationError: If validation fails
        """
        pass

    def find_violations(self, records: Sequence[Record], datasets: Datasets) -> list[int]:
        violations = []
        for idx, record in enumerate(records):
            try:
                self.validate(record.get(self.field_name), record)
            except ValidationError:
                violations.append(idx)
        return violations


def require_dataset(datasets: Datasets, name: str, rule_type: str) -> Sequence[Record]:
    """
    Look up another dataset a cross-dataset rule depends on.

    Raises:
        ValueError: If the dataset is not part of the evaluated layer
    """
    if name not in datasets:
        raise ValueError(f"{rule_type} rule references unknown dataset '{name}'")
    return datasets[name]
