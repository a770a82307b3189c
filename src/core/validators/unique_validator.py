"""
UniqueValidator - ensures a key field holds no duplicate values.
"""

from collections import defaultdict
from collections.abc import Sequence

from .base_validator import BaseValidator, Datasets, Record


class UniqueValidator(BaseValidator):
    """
    Validates that no two records of a dataset share a value of the field.

    Every record carrying a duplicated value is reported. None values are
    ignored here; pair with a required_field rule to reject them.
    """

    def find_violations(self, records: Sequence[Record], datasets: Datasets) -> list[int]:
        positions: dict[object, list[int]] = defaultdict(list)
        for idx, record in enumerate(records):
            value = record.get(self.field_name)
            if value is not None:
                positions[value].append(idx)

        return sorted(idx for group in positions.values() if len(group) > 1 for idx in group)

    @property
    def rule_type(self) -> str:
        return "unique"
