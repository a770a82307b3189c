"""
Referential integrity and orphan detection between datasets.
"""

from collections.abc import Sequence
from typing import Any

from .base_validator import BaseValidator, Datasets, Record, require_dataset


class ReferenceValidator(BaseValidator):
    """
    Validates that every value of the field resolves to a row of another dataset.

    A None value counts as unresolved (a fact whose lookup failed).

    Parameters:
    - target: Name of the referenced dataset
    - target_field: Field of the referenced dataset (defaults to field_name)
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        self.target = self.parameters.get("target")
        if not self.target:
            raise ValueError("ReferenceValidator requires 'target' parameter")
        self.target_field = self.parameters.get("target_field", field_name)

    def find_violations(self, records: Sequence[Record], datasets: Datasets) -> list[int]:
        targets = require_dataset(datasets, self.target, self.rule_type)
        known = {row.get(self.target_field) for row in targets}
        known.discard(None)

        return [
            idx for idx, record in enumerate(records)
            if record.get(self.field_name) not in known
        ]

    @property
    def rule_type(self) -> str:
        return "reference"


class OrphanValidator(BaseValidator):
    """
    Reports rows of a dimension that no row of another dataset references.

    Orphans are not errors; configure these rules as advisory.

    Parameters:
    - referenced_by: Name of the referencing dataset (e.g. "fact_sales")
    - referencing_field: Field of the referencing dataset (defaults to field_name)
    """

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        self.referenced_by = self.parameters.get("referenced_by")
        if not self.referenced_by:
            raise ValueError("OrphanValidator requires 'referenced_by' parameter")
        self.referencing_field = self.parameters.get("referencing_field", field_name)

    def find_violations(self, records: Sequence[Record], datasets: Datasets) -> list[int]:
        referencing = require_dataset(datasets, self.referenced_by, self.rule_type)
        used = {row.get(self.referencing_field) for row in referencing}

        return [
            idx for idx, record in enumerate(records)
            if record.get(self.field_name) not in used
        ]

    @property
    def rule_type(self) -> str:
        return "orphan"
