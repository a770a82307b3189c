"""
Core data models for the sales warehouse pipeline.

All models use Pydantic for runtime validation and type safety.
"""

from .conformed import (
    CategoryRecord,
    CustomerRecord,
    ErpCustomerRecord,
    LocationRecord,
    ProductRecord,
    SalesLineRecord,
)
from .dimensional import CustomerDimensionRow, ProductDimensionRow, SalesFactRow
from .raw_record import RawRecord
from .run_result import RunResult
from .validation_report import RuleOutcome, ValidationReport
from .validation_rule import ValidationRule

__all__ = [
    "RawRecord",
    "CustomerRecord",
    "ProductRecord",
    "SalesLineRecord",
    "ErpCustomerRecord",
    "LocationRecord",
    "CategoryRecord",
    "CustomerDimensionRow",
    "ProductDimensionRow",
    "SalesFactRow",
    "ValidationRule",
    "RuleOutcome",
    "ValidationReport",
    "RunResult",
]
