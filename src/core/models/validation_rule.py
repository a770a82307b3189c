"""
ValidationRule model representing a declarative data quality check.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class ValidationRule(BaseModel):
    """
    A declarative quality check over one dataset of a warehouse layer.

    The rule describes the healthy state; records that do not satisfy it are
    reported as violations.

    Attributes:
        rule_name: Human-readable name ("customers_id_unique")
        layer: Warehouse layer the dataset lives in: "conformed" or "dimensional"
        dataset: Target dataset the rule is scoped to ("customers", "fact_sales")
        field_name: Which field this rule applies to
        rule_type: Validator type registered in the rule engine
        parameters: Rule-specific params (e.g., {"min": 0})
        severity: "blocking" (fails the run status) or "advisory" (report only)
        enabled: Whether rule is active
    """

    rule_name: str = Field(..., min_length=1)
    layer: Literal["conformed", "dimensional"]
    dataset: str = Field(..., min_length=1)
    field_name: str
    rule_type: Literal[
        "required_field",
        "unique",
        "trimmed",
        "domain",
        "range",
        "regex",
        "product_equals",
        "not_after",
        "reference",
        "orphan",
        "custom",
    ]
    parameters: dict[str, Any] = Field(default_factory=dict)
    severity: Literal["blocking", "advisory"] = "blocking"
    enabled: bool = True

    class Config:
        json_schema_extra = {
            "example": {
                "rule_name": "fact_sales_product_resolves",
                "layer": "dimensional",
                "dataset": "fact_sales",
                "field_name": "product_key",
                "rule_type": "reference",
                "parameters": {"target": "dim_products", "target_field": "product_key"},
                "severity": "advisory",
                "enabled": True
            }
        }
