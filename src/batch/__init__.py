"""
Batch processing: source readers and the warehouse pipeline.
"""

from .pipeline import WarehousePipeline
from .readers import CSVReader, InMemorySourceProvider, SourceProvider, SparkCSVSourceProvider

__all__ = [
    "WarehousePipeline",
    "CSVReader",
    "SourceProvider",
    "InMemorySourceProvider",
    "SparkCSVSourceProvider",
]
