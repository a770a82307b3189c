"""
Quality rule engine and configuration management.
"""

from .rule_config import DEFAULT_RULES_PATH, RuleConfigBuilder, RuleConfigLoader
from .rule_engine import RuleEngine

__all__ = [
    "RuleEngine",
    "RuleConfigLoader",
    "RuleConfigBuilder",
    "DEFAULT_RULES_PATH",
]
