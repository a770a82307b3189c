"""
Runtime configuration of the warehouse pipeline.

Values come from environment variables; a .env file is honoured when
present. Database settings (DB_HOST, DB_PORT, DB_NAME, DB_USER,
DB_PASSWORD) are read by DatabaseConnectionPool itself.
"""

import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

CONFIG_DIR = Path(__file__).resolve().parent


class PipelineConfig(BaseModel):
    """
    Settings of one pipeline deployment.

    Attributes:
        source_dir: Root directory holding source_crm/ and source_erp/
        quality_rules_path: YAML file with the quality rules
        vocabularies_path: YAML file with the normalizer vocabularies
        target_store: "memory" or "postgres"
        spark_master: Spark master URL for the CSV source provider
        log_level: Log level name
        log_format: "json" or "text"
        metrics_port: Port of the Prometheus endpoint (None: disabled)
    """

    source_dir: Path = Path("datasets")
    quality_rules_path: Path = CONFIG_DIR / "quality_rules.yaml"
    vocabularies_path: Path = CONFIG_DIR / "vocabularies.yaml"
    target_store: Literal["memory", "postgres"] = "memory"
    spark_master: str = "local[*]"
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"
    metrics_port: int | None = Field(None, ge=1, le=65535)

    class Config:
        frozen = True

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "PipelineConfig":
        """
        Build the configuration from environment variables.

        Args:
            env_file: Optional .env file loaded first (existing variables win)

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value
        """
        if env_file is not None:
            load_dotenv(env_file, override=False)
        else:
            load_dotenv(override=False)

        values = {
            "source_dir": os.getenv("SOURCE_DIR"),
            "quality_rules_path": os.getenv("QUALITY_RULES_PATH"),
            "vocabularies_path": os.getenv("VOCABULARIES_PATH"),
            "target_store": os.getenv("TARGET_STORE"),
            "spark_master": os.getenv("SPARK_MASTER"),
            "log_level": os.getenv("LOG_LEVEL"),
            "log_format": os.getenv("LOG_FORMAT"),
            "metrics_port": os.getenv("METRICS_PORT"),
        }
        return cls(**{k: v for k, v in values.items() if v})
