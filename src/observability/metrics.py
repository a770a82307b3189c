"""
Prometheus metrics for the sales warehouse pipeline

Counters and histograms live on a private registry so tests and embedding
applications never collide with the default global one.
"""
import os

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

from src.core.models import RunResult, ValidationReport

REGISTRY = CollectorRegistry()


# =======================
# RUN METRICS
# =======================

pipeline_runs_total = Counter(
    name="warehouse_pipeline_runs_total",
    documentation="Total number of pipeline runs by final status",
    labelnames=["status"],  # success, quality_failed, failed
    registry=REGISTRY,
)

stage_duration_seconds = Histogram(
    name="warehouse_stage_duration_seconds",
    documentation="Time spent in each pipeline stage in seconds",
    labelnames=["stage"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 300.0],
    registry=REGISTRY,
)

# =======================
# DATA METRICS
# =======================

rows_loaded_total = Counter(
    name="warehouse_rows_loaded_total",
    documentation="Total number of rows committed per target table",
    labelnames=["target"],
    registry=REGISTRY,
)

records_dropped_total = Counter(
    name="warehouse_records_dropped_total",
    documentation="Records dropped during conformance (faults, null keys, duplicates)",
    labelnames=["stage"],
    registry=REGISTRY,
)

# =======================
# DATA QUALITY METRICS
# =======================

quality_violations_total = Counter(
    name="warehouse_quality_violations_total",
    documentation="Total number of records violating quality rules",
    labelnames=["rule_name", "severity"],
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    return CONTENT_TYPE_LATEST


def start_metrics_server(port: int | None = None) -> None:
    """
    Start HTTP server for Prometheus metrics

    Args:
        port: Port to listen on (defaults to env var METRICS_PORT or 8000)
    """
    # Imported lazily so importing this module never binds a port
    from prometheus_client import start_http_server

    metrics_port = port or int(os.getenv("METRICS_PORT", "8000"))
    start_http_server(metrics_port, registry=REGISTRY)


def record_quality_report(report: ValidationReport) -> None:
    """Count the violating records of every violated rule."""
    for outcome in report.violations:
        quality_violations_total.labels(
            rule_name=outcome.rule_name, severity=outcome.severity
        ).inc(outcome.count)


def record_run(result: RunResult) -> None:
    """
    Record the metrics of a finished run.

    Rows are only counted for committed runs; a failed run loads nothing.
    """
    pipeline_runs_total.labels(status=result.status).inc()

    for stage, seconds in result.duration_per_stage.items():
        stage_duration_seconds.labels(stage=stage).observe(seconds)

    for stage, count in result.dropped_records.items():
        if count:
            records_dropped_total.labels(stage=stage).inc(count)

    if result.status != "failed":
        for target, count in result.rows_per_target.items():
            rows_loaded_total.labels(target=target).inc(count)

    if result.quality_report is not None:
        record_quality_report(result.quality_report)
