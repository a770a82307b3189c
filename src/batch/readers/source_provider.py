"""
Source providers: where raw rows of each source entity come from.

The pipeline only depends on the SourceProvider protocol; extraction from
files is an outer concern kept behind it.
"""

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol

from pyspark.sql import SparkSession

from src.core.errors import SourceReadFailure
from src.observability.logger import get_logger

from .csv_reader import CORRUPT_RECORD_COLUMN, CSVReader

logger = get_logger(__name__)

SOURCE_FILES = {
    "customers": "source_crm/cust_info.csv",
    "products": "source_crm/prd_info.csv",
    "sales_lines": "source_crm/sales_details.csv",
    "erp_customers": "source_erp/cust_az12.csv",
    "erp_locations": "source_erp/loc_a101.csv",
    "erp_categories": "source_erp/px_cat_g1v2.csv",
}

ENTITIES = tuple(SOURCE_FILES)


class SourceProvider(Protocol):
    """Supplies the raw rows of a source entity as field -> value mappings."""

    def read_all(self, entity: str) -> list[dict[str, Any]]:
        ...


class InMemorySourceProvider:
    """
    Serves rows held in memory (tests and embedding applications).

    Entities that were not supplied read as empty.
    """

    def __init__(self, rows: Mapping[str, Sequence[Mapping[str, Any]]] | None = None):
        self.rows = {entity: [dict(r) for r in entity_rows] for entity, entity_rows in (rows or {}).items()}

    def read_all(self, entity: str) -> list[dict[str, Any]]:
        if entity not in SOURCE_FILES:
            raise SourceReadFailure(entity, "unknown source entity")
        return [dict(row) for row in self.rows.get(entity, [])]


class SparkCSVSourceProvider:
    """
    Reads source entities from the CRM and ERP CSV extracts with Spark.

    Column names are lower-cased and every value is delivered as a string
    (or None). Rows Spark could not parse are dropped and logged.
    """

    def __init__(
        self,
        spark: SparkSession,
        source_dir: str | Path,
        source_files: Mapping[str, str] | None = None
    ):
        """
        Args:
            spark: Active Spark session
            source_dir: Directory holding source_crm/ and source_erp/
            source_files: Entity -> path relative to source_dir (defaults to SOURCE_FILES)
        """
        self.reader = CSVReader(spark)
        self.source_dir = Path(source_dir)
        self.source_files = dict(source_files or SOURCE_FILES)

    def path_for(self, entity: str) -> Path:
        try:
            return self.source_dir / self.source_files[entity]
        except KeyError:
            raise SourceReadFailure(entity, "unknown source entity") from None

    def read_all(self, entity: str) -> list[dict[str, Any]]:
        """
        Read every row of a source entity.

        Raises:
            SourceReadFailure: If the file is missing or Spark cannot read it
        """
        path = self.path_for(entity)
        if not path.exists():
            raise SourceReadFailure(entity, f"file not found: {path}")

        try:
            df = self.reader.read(str(path))
            rows = [row.asDict() for row in df.collect()]
        except Exception as e:
            raise SourceReadFailure(entity, e) from e

        records = []
        corrupt = 0
        for row in rows:
            if row.pop(CORRUPT_RECORD_COLUMN, None) is not None:
                corrupt += 1
                continue
            records.append({key.strip().lower(): value for key, value in row.items()})

        if corrupt:
            logger.warning(
                f"Dropped {corrupt} unparseable row(s) from {path.name}",
                extra={"entity": entity, "dropped": corrupt}
            )
        return records
