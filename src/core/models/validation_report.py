"""
ValidationReport model: the ordered outcome of one quality-check pass.
"""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class RuleOutcome(BaseModel):
    """
    Result of evaluating one rule against its dataset.

    Attributes:
        rule_name: Name of the evaluated rule
        layer: Layer of the evaluated dataset
        dataset: Dataset the rule was scoped to
        severity: Rule severity
        violating_record_identifiers: record_id of every violating record
        count: Number of violating records
    """

    rule_name: str
    layer: str
    dataset: str
    severity: Literal["blocking", "advisory"]
    violating_record_identifiers: list[str] = Field(default_factory=list)
    count: int = Field(0, ge=0)

    @field_validator("count")
    @classmethod
    def check_count_matches_identifiers(cls, v, info):
        """Validate that count equals the number of reported identifiers."""
        identifiers = info.data.get("violating_record_identifiers", [])
        if v != len(identifiers):
            raise ValueError(
                f"count ({v}) must match number of violating identifiers ({len(identifiers)})"
            )
        return v

    @property
    def passed(self) -> bool:
        return self.count == 0


class ValidationReport(BaseModel):
    """
    Ordered sequence of rule outcomes, produced per run for operator review.

    Never persisted as a system of record. The report does not decide
    whether the run is blocked; callers inspect blocking_violations.
    """

    scope: str
    outcomes: list[RuleOutcome] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def violations(self) -> list[RuleOutcome]:
        return [o for o in self.outcomes if not o.passed]

    @property
    def blocking_violations(self) -> list[RuleOutcome]:
        return [o for o in self.violations if o.severity == "blocking"]

    @property
    def advisory_violations(self) -> list[RuleOutcome]:
        return [o for o in self.violations if o.severity == "advisory"]

    @property
    def has_blocking_violations(self) -> bool:
        return bool(self.blocking_violations)

    def get(self, rule_name: str) -> RuleOutcome | None:
        """Return the outcome of a rule by name, if it was evaluated."""
        for outcome in self.outcomes:
            if outcome.rule_name == rule_name:
                return outcome
        return None

    def merge(self, other: "ValidationReport", scope: str | None = None) -> "ValidationReport":
        """Concatenate two reports, keeping rule order."""
        return ValidationReport(
            scope=scope or f"{self.scope}+{other.scope}",
            outcomes=[*self.outcomes, *other.outcomes],
        )

    def summary(self) -> dict[str, int]:
        return {
            "rules_evaluated": len(self.outcomes),
            "rules_violated": len(self.violations),
            "blocking_violations": len(self.blocking_violations),
            "advisory_violations": len(self.advisory_violations),
        }
