"""
Rule engine for evaluating quality rules over warehouse datasets.

The rule engine builds one validator per enabled rule, applies each to the
dataset it is scoped to, and produces a ValidationReport. It never changes
the data it inspects and never decides whether a run is blocked.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import BaseModel

from src.core.models import RuleOutcome, ValidationReport, ValidationRule
from src.core.transforms import FieldNormalizer
from src.core.validators import (
    BaseValidator,
    CustomValidator,
    DomainValidator,
    NotAfterValidator,
    OrphanValidator,
    ProductEqualsValidator,
    RangeValidator,
    ReferenceValidator,
    RegexValidator,
    RequiredFieldValidator,
    TrimmedValidator,
    UniqueValidator,
)

Dataset = Sequence[BaseModel | dict[str, Any]]


def _as_row(record: BaseModel | dict[str, Any]) -> dict[str, Any]:
    if isinstance(record, BaseModel):
        return record.model_dump()
    return dict(record)


def _identity(record: BaseModel | dict[str, Any], position: int) -> str:
    """record_id of a model, the 'record_id' key of a dict, else its position."""
    if isinstance(record, BaseModel):
        return str(getattr(record, "record_id", position))
    return str(record.get("record_id", position))


class RuleEngine:
    """
    Orchestrates quality rules over the datasets of a warehouse layer.

    Rules are evaluated in configuration order; every enabled rule yields
    exactly one outcome in the report, whether or not it found violations.
    """

    VALIDATOR_REGISTRY: dict[str, type[BaseValidator]] = {
        "required_field": RequiredFieldValidator,
        "unique": UniqueValidator,
        "trimmed": TrimmedValidator,
        "domain": DomainValidator,
        "range": RangeValidator,
        "regex": RegexValidator,
        "product_equals": ProductEqualsValidator,
        "not_after": NotAfterValidator,
        "reference": ReferenceValidator,
        "orphan": OrphanValidator,
        "custom": CustomValidator,
    }

    def __init__(
        self,
        rules: Iterable[ValidationRule | dict[str, Any]],
        normalizer: FieldNormalizer | None = None
    ):
        """
        Initialize the rule engine with quality rules.

        Args:
            rules: ValidationRule models, or dicts with the same fields
            normalizer: Source of canonical vocabularies for domain rules
                        that name a vocabulary instead of listing values
        """
        self.rules = [
            rule if isinstance(rule, ValidationRule) else ValidationRule(**rule)
            for rule in rules
        ]
        self.normalizer = normalizer
        self.validators: list[tuple[ValidationRule, BaseValidator]] = []
        self._build_validators()

    def _build_validators(self) -> None:
        """Build validator instances from rule configurations."""
        for rule in self.rules:
            if not rule.enabled:
                continue

            validator_class = self.VALIDATOR_REGISTRY.get(rule.rule_type)
            if not validator_class:
                raise ValueError(f"Unknown rule type: {rule.rule_type}")

            parameters = self._resolve_parameters(rule)
            try:
                validator = validator_class(rule.field_name, parameters)
            except ValueError as e:
                raise ValueError(f"Failed to create validator for rule '{rule.rule_name}': {e}") from e
            self.validators.append((rule, validator))

    def _resolve_parameters(self, rule: ValidationRule) -> dict[str, Any]:
        """Fill in the allowed values of domain rules from the normalizer."""
        parameters = dict(rule.parameters)
        if rule.rule_type != "domain" or "allowed" in parameters:
            return parameters

        vocabulary = parameters.get("vocabulary", rule.field_name)
        if self.normalizer is None:
            raise ValueError(
                f"Rule '{rule.rule_name}' needs vocabulary '{vocabulary}' but no normalizer was given"
            )
        parameters["allowed"] = sorted(self.normalizer.canonical_values(vocabulary))
        parameters.setdefault("sentinel", self.normalizer.sentinel)
        return parameters

    def evaluate(
        self,
        datasets: Mapping[str, Dataset],
        layer: str | None = None,
        scope: str | None = None
    ) -> ValidationReport:
        """
        Evaluate the rules of a layer against its datasets.

        Args:
            datasets: Records of every dataset in the layer, by dataset name
            layer: Only evaluate rules of this layer (default: all rules)
            scope: Report scope label (defaults to the layer)

        Returns:
            ValidationReport with one outcome per evaluated rule

        Raises:
            ValueError: If a rule targets a dataset that was not supplied
        """
        rows = {name: [_as_row(r) for r in records] for name, records in datasets.items()}

        outcomes = []
        for rule, validator in self.validators:
            if layer is not None and rule.layer != layer:
                continue
            if rule.dataset not in datasets:
                raise ValueError(f"Rule '{rule.rule_name}' targets unknown dataset '{rule.dataset}'")

            records = datasets[rule.dataset]
            positions = validator.find_violations(rows[rule.dataset], rows)
            identifiers = [_identity(records[idx], idx) for idx in positions]
            outcomes.append(RuleOutcome(
                rule_name=rule.rule_name,
                layer=rule.layer,
                dataset=rule.dataset,
                severity=rule.severity,
                violating_record_identifiers=identifiers,
                count=len(identifiers),
            ))

        return ValidationReport(scope=scope or layer or "all", outcomes=outcomes)

    def layers(self) -> set[str]:
        """Layers that have at least one enabled rule."""
        return {rule.layer for rule, _ in self.validators}

    def get_rule_summary(self) -> dict[str, Any]:
        """
        Get summary of loaded rules.

        Returns:
            Dictionary with rule counts by type, severity and layer
        """
        return {
            "total_rules": len(self.validators),
            "rules_by_type": self._count_by(lambda rule, validator: validator.rule_type),
            "rules_by_severity": self._count_by(lambda rule, validator: rule.severity),
            "rules_by_layer": self._count_by(lambda rule, validator: rule.layer),
        }

    def _count_by(self, key) -> dict[str, int]:
        counts: dict[str, int] = {}
        for rule, validator in self.validators:
            k = key(rule, validator)
            counts[k] = counts.get(k, 0) + 1
        return counts
