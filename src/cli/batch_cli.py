"""
Command-line interface for the warehouse pipeline.

Usage:
    python -m src.cli.batch_cli run [--source-dir DIR] [--store memory|postgres] [options]
    python -m src.cli.batch_cli check [--scope conformed|dimensional|all] [options]
"""

import argparse
import sys
from contextlib import ExitStack

from pyspark.sql import SparkSession

from src.batch.pipeline import WarehousePipeline
from src.batch.readers import InMemorySourceProvider, SparkCSVSourceProvider
from src.config import PipelineConfig
from src.observability.logger import get_logger, setup_logger
from src.observability.metrics import start_metrics_server
from src.warehouse import InMemoryTargetStore, PostgresTargetStore
from src.warehouse.connection import DatabaseConnectionPool

logger = get_logger(__name__)

EXIT_CODES = {
    "success": 0,
    "failed": 1,
    "quality_failed": 2,
}


def create_spark_session(master: str, app_name: str = "SalesWarehouse") -> SparkSession:
    """
    Create Spark session for reading the source extracts.

    Args:
        master: Spark master URL
        app_name: Application name
    """
    return SparkSession.builder \
        .appName(app_name) \
        .master(master) \
        .config("spark.sql.adaptive.enabled", "true") \
        .config("spark.sql.shuffle.partitions", "4") \
        .getOrCreate()


def load_config(args: argparse.Namespace) -> PipelineConfig:
    """Environment configuration, overridden by command-line options."""
    config = PipelineConfig.from_env(args.env_file)
    overrides = {
        "source_dir": getattr(args, "source_dir", None),
        "quality_rules_path": args.rules,
        "vocabularies_path": args.vocabularies,
        "target_store": args.store,
    }
    values = {**config.model_dump(), **{k: v for k, v in overrides.items() if v is not None}}
    return PipelineConfig(**values)


def create_store(config: PipelineConfig, stack: ExitStack, create_tables: bool = False):
    if config.target_store == "memory":
        return InMemoryTargetStore()

    pool = stack.enter_context(DatabaseConnectionPool())
    store = PostgresTargetStore(pool)
    if create_tables:
        store.create_tables()
    return store


def run_command(args: argparse.Namespace) -> int:
    """
    Execute one full-refresh run.

    Returns:
        Process exit code
    """
    config = load_config(args)
    setup_logger(level=config.log_level, format_type=config.log_format)
    if config.metrics_port:
        start_metrics_server(config.metrics_port)

    if not config.source_dir.is_dir():
        logger.error(f"Source directory not found: {config.source_dir}")
        return EXIT_CODES["failed"]

    with ExitStack() as stack:
        spark = create_spark_session(config.spark_master)
        stack.callback(spark.stop)

        store = create_store(config, stack, create_tables=args.create_tables)
        source = SparkCSVSourceProvider(spark, config.source_dir)
        pipeline = WarehousePipeline.from_config(config, source, store)

        result = pipeline.run_pipeline()

    if args.json:
        print(result.model_dump_json(indent=2))
    else:
        print(f"Run {result.run_id}: {result.status}")
        for target, count in result.rows_per_target.items():
            print(f"  {target:<16} {count:>8} rows")
        for stage, count in result.dropped_records.items():
            print(f"  dropped in {stage}: {count}")
        if result.quality_report is not None:
            for outcome in result.quality_report.violations:
                print(f"  [{outcome.severity}] {outcome.rule_name}: {outcome.count} record(s)")
        if result.error:
            print(f"  error in {result.failed_stage}: {result.error}")

    return EXIT_CODES[result.status]


def check_command(args: argparse.Namespace) -> int:
    """
    Evaluate quality rules against the committed tables.

    Returns:
        0 when no blocking rule is violated, 2 otherwise
    """
    config = load_config(args)
    setup_logger(level=config.log_level, format_type=config.log_format)

    with ExitStack() as stack:
        store = create_store(config, stack)
        pipeline = WarehousePipeline.from_config(config, InMemorySourceProvider(), store)
        report = pipeline.run_quality_checks(args.scope)

    if args.json:
        print(report.model_dump_json(indent=2))
    else:
        summary = report.summary()
        print(f"Quality checks ({report.scope}): {summary['rules_evaluated']} rules, "
              f"{summary['rules_violated']} violated")
        for outcome in report.violations:
            sample = ", ".join(outcome.violating_record_identifiers[:5])
            print(f"  [{outcome.severity}] {outcome.rule_name}: {outcome.count} record(s) ({sample})")

    return EXIT_CODES["quality_failed"] if report.has_blocking_violations else EXIT_CODES["success"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="CRM/ERP sales warehouse pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Full refresh from CSV extracts into memory (dry run of the whole flow)
  python -m src.cli.batch_cli run --source-dir datasets

  # Full refresh into PostgreSQL, creating tables on first use
  python -m src.cli.batch_cli run --source-dir datasets --store postgres --create-tables

  # Re-check the committed dimensional layer
  python -m src.cli.batch_cli check --scope dimensional
        """
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--env-file", help="Optional .env file with configuration variables")
    common.add_argument("--rules", help="Path to quality rules YAML file")
    common.add_argument("--vocabularies", help="Path to normalizer vocabularies YAML file")
    common.add_argument("--json", action="store_true", help="Print the result as JSON")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", parents=[common], help="Run a full refresh")
    run_parser.add_argument("--source-dir", help="Directory holding source_crm/ and source_erp/")
    run_parser.add_argument(
        "--store",
        choices=["memory", "postgres"],
        help="Target store (default: TARGET_STORE or memory)"
    )
    run_parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create PostgreSQL schemas and tables if missing"
    )

    check_parser = subparsers.add_parser("check", parents=[common], help="Check committed tables")
    check_parser.add_argument(
        "--scope",
        default="all",
        choices=["conformed", "dimensional", "all"],
        help="Layer(s) to check (default: all)"
    )
    check_parser.add_argument(
        "--store",
        default="postgres",
        choices=["memory", "postgres"],
        help="Target store (default: postgres)"
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "run":
        return run_command(args)
    if args.command == "check":
        return check_command(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
