"""
Batch source readers.
"""

from .csv_reader import CSVReader
from .source_provider import (
    ENTITIES,
    SOURCE_FILES,
    InMemorySourceProvider,
    SourceProvider,
    SparkCSVSourceProvider,
)

__all__ = [
    "CSVReader",
    "SourceProvider",
    "InMemorySourceProvider",
    "SparkCSVSourceProvider",
    "SOURCE_FILES",
    "ENTITIES",
]
