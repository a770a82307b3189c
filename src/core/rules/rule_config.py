"""
Rule configuration management.

Loads quality rules from YAML files and provides utilities
for building rule configurations in code.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as ModelValidationError

from src.core.models import ValidationRule

LAYERS = ("conformed", "dimensional")
DEFAULT_RULES_PATH = Path(__file__).resolve().parents[2] / "config" / "quality_rules.yaml"


class RuleConfigLoader:
    """
    Loads quality rules from YAML configuration files.

    Expected YAML format (layer -> dataset -> field -> rules):
    ```yaml
    conformed:
      customers:
        customer_id:
          - type: required_field
          - type: unique
        first_name:
          - type: trimmed

    dimensional:
      fact_sales:
        product_key:
          - type: reference
            name: fact_sales_product_resolves
            params:
              target: dim_products
            severity: advisory
    ```
    """

    def __init__(self, config_path: str | Path = DEFAULT_RULES_PATH):
        """
        Initialize the rule config loader.

        Args:
            config_path: Path to the YAML configuration file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Rule configuration file not found: {config_path}")

    def load_rules(self) -> list[ValidationRule]:
        """
        Load and parse quality rules from the YAML file.

        Returns:
            Rules in file order

        Raises:
            ValueError: If YAML is invalid or a rule definition is malformed
        """
        with open(self.config_path) as f:
            config = yaml.safe_load(f)

        if not isinstance(config, dict) or not any(layer in config for layer in LAYERS):
            raise ValueError(f"Configuration file must contain a '{LAYERS[0]}' or '{LAYERS[1]}' section")

        unknown = set(config) - set(LAYERS)
        if unknown:
            raise ValueError(f"Unknown layer section(s): {', '.join(sorted(unknown))}")

        rules = []
        for layer in LAYERS:
            for dataset, field_rules in (config.get(layer) or {}).items():
                if not isinstance(field_rules, dict):
                    raise ValueError(f"Rules for dataset '{layer}.{dataset}' must be a mapping of fields")

                for field_name, field_rule_list in field_rules.items():
                    if not isinstance(field_rule_list, list):
                        raise ValueError(f"Rules for field '{dataset}.{field_name}' must be a list")

                    for idx, rule_def in enumerate(field_rule_list):
                        rules.append(self._parse_rule(layer, dataset, field_name, rule_def, idx))

        names = [rule.rule_name for rule in rules]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Duplicate rule names: {', '.join(duplicates)}")

        return rules

    def _parse_rule(
        self,
        layer: str,
        dataset: str,
        field_name: str,
        rule_def: dict[str, Any],
        idx: int
    ) -> ValidationRule:
        """
        Parse a single rule definition.

        Args:
            layer: Layer section the rule was declared under
            dataset: Dataset the rule applies to
            field_name: The field this rule applies to
            rule_def: The rule definition from YAML
            idx: Index of this rule for the field (for naming)

        Raises:
            ValueError: If rule definition is invalid
        """
        if not isinstance(rule_def, dict) or "type" not in rule_def:
            raise ValueError(f"Rule for field '{dataset}.{field_name}' is missing 'type'")

        rule_type = rule_def["type"]
        rule_name = rule_def.get("name", f"{dataset}_{field_name}_{rule_type}_{idx}")

        try:
            return ValidationRule(
                rule_name=rule_name,
                layer=layer,
                dataset=dataset,
                field_name=field_name,
                rule_type=rule_type,
                parameters=rule_def.get("params", rule_def.get("parameters")) or {},
                severity=rule_def.get("severity", "blocking"),
                enabled=rule_def.get("enabled", True),
            )
        except ModelValidationError as e:
            raise ValueError(f"Invalid rule '{rule_name}': {e}") from e


class RuleConfigBuilder:
    """
    Programmatically build rule configurations (for testing or dynamic rules).

    Every add_* method targets the dataset selected with for_dataset().
    """

    def __init__(self):
        """Initialize empty rule configuration."""
        self.rules: list[ValidationRule] = []
        self._layer = "conformed"
        self._dataset: str | None = None

    def for_dataset(self, layer: str, dataset: str) -> "RuleConfigBuilder":
        """Select the layer and dataset subsequent rules apply to."""
        self._layer = layer
        self._dataset = dataset
        return self

    def _add(
        self,
        rule_type: str,
        field_name: str,
        parameters: dict[str, Any] | None = None,
        name: str | None = None,
        severity: str = "blocking",
    ) -> "RuleConfigBuilder":
        if self._dataset is None:
            raise ValueError("Call for_dataset() before adding rules")

        self.rules.append(ValidationRule(
            rule_name=name or f"{self._dataset}_{field_name}_{rule_type}",
            layer=self._layer,
            dataset=self._dataset,
            field_name=field_name,
            rule_type=rule_type,
            parameters=parameters or {},
            severity=severity,
        ))
        return self

    def add_required_field(self, field_name: str, allow_empty_string: bool = False, **kwargs) -> "RuleConfigBuilder":
        """Add a not-null rule."""
        return self._add("required_field", field_name, {"allow_empty_string": allow_empty_string}, **kwargs)

    def add_unique(self, field_name: str, **kwargs) -> "RuleConfigBuilder":
        return self._add("unique", field_name, **kwargs)

    def add_trimmed(self, field_name: str, **kwargs) -> "RuleConfigBuilder":
        return self._add("trimmed", field_name, **kwargs)

    def add_domain(
        self,
        field_name: str,
        allowed: list[str] | None = None,
        vocabulary: str | None = None,
        allow_sentinel: bool = True,
        **kwargs
    ) -> "RuleConfigBuilder":
        """Add a domain rule against explicit values or a normalizer vocabulary."""
        params: dict[str, Any] = {"allow_sentinel": allow_sentinel}
        if allowed is not None:
            params["allowed"] = list(allowed)
        if vocabulary is not None:
            params["vocabulary"] = vocabulary
        return self._add("domain", field_name, params, **kwargs)

    def add_range(
        self,
        field_name: str,
        min_value: Any = None,
        max_value: Any = None,
        min_exclusive: Any = None,
        max_exclusive: Any = None,
        **kwargs
    ) -> "RuleConfigBuilder":
        """Add a range validation rule."""
        bounds = {
            "min": min_value,
            "max": max_value,
            "min_exclusive": min_exclusive,
            "max_exclusive": max_exclusive,
        }
        params = {k: v for k, v in bounds.items() if v is not None}
        return self._add("range", field_name, params, **kwargs)

    def add_regex(self, field_name: str, pattern: str, ignore_case: bool = False, **kwargs) -> "RuleConfigBuilder":
        """Add a regex validation rule."""
        return self._add("regex", field_name, {"pattern": pattern, "ignore_case": ignore_case}, **kwargs)

    def add_product_equals(
        self,
        field_name: str,
        factors: tuple[str, str],
        skip_nulls: bool = False,
        **kwargs
    ) -> "RuleConfigBuilder":
        return self._add("product_equals", field_name, {"factors": list(factors), "skip_nulls": skip_nulls}, **kwargs)

    def add_not_after(self, field_name: str, other: str, **kwargs) -> "RuleConfigBuilder":
        return self._add("not_after", field_name, {"other": other}, **kwargs)

    def add_reference(
        self,
        field_name: str,
        target: str,
        target_field: str | None = None,
        **kwargs
    ) -> "RuleConfigBuilder":
        """Add a referential-integrity rule."""
        params = {"target": target, "target_field": target_field or field_name}
        return self._add("reference", field_name, params, **kwargs)

    def add_orphan(
        self,
        field_name: str,
        referenced_by: str,
        referencing_field: str | None = None,
        severity: str = "advisory",
        **kwargs
    ) -> "RuleConfigBuilder":
        """Add an orphan-detection rule (advisory unless told otherwise)."""
        params = {"referenced_by": referenced_by, "referencing_field": referencing_field or field_name}
        return self._add("orphan", field_name, params, severity=severity, **kwargs)

    def add_custom(self, field_name: str, predicate, description: str | None = None, **kwargs) -> "RuleConfigBuilder":
        params: dict[str, Any] = {"predicate": predicate}
        if description:
            params["description"] = description
        return self._add("custom", field_name, params, **kwargs)

    def build(self) -> list[ValidationRule]:
        """Build and return the rule configuration."""
        return list(self.rules)
