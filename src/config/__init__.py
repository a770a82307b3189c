"""
Pipeline configuration: runtime settings and the YAML vocabularies and rules.
"""

from .settings import CONFIG_DIR, PipelineConfig

__all__ = [
    "PipelineConfig",
    "CONFIG_DIR",
]
