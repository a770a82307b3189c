"""
Validation rule implementations.

Provides validators for key integrity, string hygiene, domain consistency,
ranges, cross-field consistency, referential integrity and orphan detection.
"""

from .base_validator import BaseValidator, RecordValidator, ValidationError
from .cross_field_validator import NotAfterValidator, ProductEqualsValidator
from .custom_validator import CustomValidator
from .range_validator import RangeValidator
from .reference_validator import OrphanValidator, ReferenceValidator
from .regex_validator import RegexValidator
from .required_field_validator import RequiredFieldValidator
from .string_validators import DomainValidator, TrimmedValidator
from .unique_validator import UniqueValidator

__all__ = [
    "BaseValidator",
    "RecordValidator",
    "ValidationError",
    "RequiredFieldValidator",
    "UniqueValidator",
    "TrimmedValidator",
    "DomainValidator",
    "RangeValidator",
    "RegexValidator",
    "ProductEqualsValidator",
    "NotAfterValidator",
    "ReferenceValidator",
    "OrphanValidator",
    "CustomValidator",
]
