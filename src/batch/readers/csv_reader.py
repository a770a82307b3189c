"""
CSV reader using Spark for batch extraction.
"""

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.types import StructType

CORRUPT_RECORD_COLUMN = "_corrupt_record"


class CSVReader:
    """
    Reads CSV files using Spark.

    Source extracts are read as strings by default: typing is the
    conformance stage's job, so nothing is coerced (or lost) on the way in.
    """

    def __init__(self, spark: SparkSession):
        """
        Initialize CSV reader.

        Args:
            spark: Active Spark session
        """
        self.spark = spark

    def read(
        self,
        file_path: str,
        schema: StructType | None = None,
        header: bool = True,
        delimiter: str = ",",
        infer_schema: bool = False
    ) -> DataFrame:
        """
        Read CSV file into Spark DataFrame.

        Args:
            file_path: Path to CSV file
            schema: Optional explicit schema
            header: Whether CSV has header row
            delimiter: Field delimiter
            infer_schema: Whether to infer column types if no schema is given

        Returns:
            Spark DataFrame
        """
        reader = self.spark.read

        if schema:
            reader = reader.schema(schema)
        else:
            reader = reader.option("inferSchema", str(infer_schema).lower())

        return reader \
            .option("header", str(header).lower()) \
            .option("delimiter", delimiter) \
            .option("mode", "PERMISSIVE") \
            .option("columnNameOfCorruptRecord", CORRUPT_RECORD_COLUMN) \
            .csv(file_path)
