"""
Conformance transformations: deduplication, normalization, numeric
reconciliation and derived validity ranges.
"""

from .conform import ConformResult, RecordConformer
from .deduplication import DeduplicationResult, deduplicate, select_latest
from .normalizer import FieldNormalizer, Vocabulary, VocabularyLoader
from .reconciliation import ReconciledLine, reconcile_line
from .temporal import assign_validity_ranges, derive_ranges

__all__ = [
    "RecordConformer",
    "ConformResult",
    "deduplicate",
    "select_latest",
    "DeduplicationResult",
    "FieldNormalizer",
    "Vocabulary",
    "VocabularyLoader",
    "reconcile_line",
    "ReconciledLine",
    "assign_validity_ranges",
    "derive_ranges",
]
